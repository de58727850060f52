"""
Centralized AI Service Manager
Wraps the OpenAI chat completions API for the public chatbot, quote
estimates and the admin copywriting helpers.

Prompts are built by the module-level build_* functions so they can be
tested without a client. Calls are made once with the configured timeout;
failures surface as UpstreamConfigError / UpstreamUnavailable and the raw
provider error text stays in the log.
"""
import logging
from typing import Optional, Dict, Any, List

import openai

from errors import UpstreamConfigError, UpstreamUnavailable
from services.records import ChatMessage, QuoteRequest

logger = logging.getLogger(__name__)

SERVICE_NAME = 'openai'

CHAT_SYSTEM_PROMPT = """You are a helpful assistant for All Access Remodelers, a professional company offering construction, property management, and cleaning services.

Key information about the company:
- Services: Construction & Renovation, Property Management, Cleaning Services
- Areas of expertise: Kitchen remodels, bathroom renovations, home additions, commercial renovations, rental property management, deep cleaning, move-in/move-out cleaning
- Professional, reliable, and experienced team
- Free estimates available

Be friendly, professional, and helpful. Answer questions about services, provide general advice about home improvement projects, and encourage visitors to contact the company for detailed quotes. If asked about specific pricing, explain that prices vary based on project scope and recommend requesting a free estimate."""

ESTIMATOR_SYSTEM_PROMPT = (
    "You are a knowledgeable construction and remodeling expert providing helpful "
    "estimates and advice. Always emphasize that actual quotes require an on-site "
    "assessment. Be professional and helpful."
)

COPYWRITER_SYSTEM_PROMPT = (
    "You are a professional copywriter specializing in construction, remodeling, "
    "and property services. Write clear, compelling, and professional content."
)

CAPTION_SYSTEM_PROMPT = (
    "You are a professional copywriter for a construction and remodeling company. "
    "Write compelling, specific descriptions for project photos."
)

CONTENT_PROMPTS = {
    'project-description': (
        "Write a professional, compelling description for a completed project. "
        "Context: {context}. Keep it concise (2-3 sentences) and highlight the quality of work."
    ),
    'service-description': (
        "Write a professional service description for: {context}. "
        "Keep it informative and compelling, around 2-3 paragraphs."
    ),
    'testimonial-response': (
        "Write a professional, warm response to thank a customer for their testimonial. "
        "Context: {context}. Keep it brief and genuine."
    ),
    'marketing-copy': (
        "Write compelling marketing copy for: {context}. Make it engaging and "
        "professional, suitable for a construction/remodeling company."
    ),
}

FALLBACK_CHAT_RESPONSE = "I apologize, but I couldn't generate a response. Please try again."
FALLBACK_CONTENT = "Unable to generate content. Please try again."
FALLBACK_DESCRIPTION = "A quality project completed by our professional team."


def build_quote_prompt(request: QuoteRequest) -> str:
    """Render the estimate prompt; optional details are left out when absent"""
    lines = [
        f"Based on the following project details, provide a helpful estimate range and "
        f"recommendations for a {request.service_type} project. Be informative but make "
        f"clear these are rough estimates and a proper on-site assessment is needed for "
        f"accurate pricing.",
        "",
        "Project Details:",
        f"- Service Type: {request.service_type}",
        f"- Description: {request.project_description}",
    ]
    if request.square_footage:
        lines.append(f"- Approximate Size: {request.square_footage} sq ft")
    if request.timeline:
        lines.append(f"- Desired Timeline: {request.timeline}")
    if request.location:
        lines.append(f"- Location: {request.location}")

    lines.extend([
        "",
        "Provide:",
        "1. A rough estimate range (if applicable for this type of work)",
        "2. Key factors that affect pricing",
        "3. Recommendations for the project",
        "4. Next steps to get an accurate quote",
        "",
        "Format the response in a clear, professional manner.",
    ])
    return "\n".join(lines)


def build_content_prompt(content_type: str, context: str) -> str:
    template = CONTENT_PROMPTS.get(content_type)
    if template is None:
        return f"Generate professional content for: {context}"
    return template.format(context=context)


def build_description_prompt(title: str, category: str, existing_description: Optional[str] = None) -> str:
    lines = [
        "Generate a compelling, professional description for a gallery image of a completed project.",
        "",
        f"Title: {title}",
        f"Category: {category}",
    ]
    if existing_description:
        lines.append(f"Current Description: {existing_description}")
    lines.extend([
        "",
        "Write a concise but descriptive caption (2-3 sentences) that highlights the quality "
        "of work and appeals to potential customers. Do not use generic phrases - be specific "
        "and engaging.",
    ])
    return "\n".join(lines)


class AIService:
    """
    Centralized AI service manager with error mapping and configuration management
    """

    def __init__(self, config, client=None):
        """
        Initialize AI service with configuration

        Args:
            config: Flask app configuration object
            client: Pre-built OpenAI client (tests inject a mock here)
        """
        self.config = config
        self.client = client

        if self.client is None:
            self._initialize_client()

    def _initialize_client(self):
        """Initialize the OpenAI API client"""
        api_key = self.config.get('OPENAI_API_KEY')
        if not api_key:
            logger.warning("⚠️  OPENAI_API_KEY not set - AI chat and estimates are disabled")
            return

        self.client = openai.OpenAI(
            api_key=api_key,
            timeout=self.config.get('AI_TIMEOUT', 60),
            max_retries=0,
        )
        logger.info("OpenAI client initialized")

    @property
    def model_config(self) -> Dict[str, Any]:
        return self.config['AI_MODELS']['gpt']

    def is_available(self) -> bool:
        """Check if the OpenAI client is configured"""
        return self.client is not None

    def _complete(self, messages: List[Dict[str, str]], max_tokens: int) -> Optional[str]:
        """
        Run one chat completion and return the first choice's text

        Raises:
            UpstreamConfigError: If OpenAI is not configured or rejects the key
            UpstreamUnavailable: On timeouts, connection failures and API errors
        """
        if not self.client:
            raise UpstreamConfigError("OpenAI is not configured", service=SERVICE_NAME)

        model = self.model_config['model']

        try:
            logger.info(f"Calling OpenAI API: model={model}, max_tokens={max_tokens}")
            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                max_completion_tokens=max_tokens,
            )
        except openai.AuthenticationError as e:
            logger.error(f"OpenAI rejected the API key: {e}")
            raise UpstreamConfigError("OpenAI authentication failed", service=SERVICE_NAME)
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI API timeout: {e}")
            raise UpstreamUnavailable("OpenAI API timed out", service=SERVICE_NAME)
        except openai.APIConnectionError as e:
            logger.error(f"OpenAI connection error: {e}")
            raise UpstreamUnavailable("OpenAI API unreachable", service=SERVICE_NAME)
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise UpstreamUnavailable("OpenAI API error", service=SERVICE_NAME)

        if not response.choices:
            logger.warning("OpenAI returned no choices")
            return None

        content = response.choices[0].message.content
        logger.info("OpenAI API call successful")
        return content or None

    def get_chat_completion(self, messages: List[ChatMessage], system_prompt: Optional[str] = None) -> str:
        """
        Answer a chatbot conversation

        Args:
            messages: Conversation so far, oldest first
            system_prompt: Overrides the default company assistant prompt

        Returns:
            Assistant reply text (a fixed apology when the model returns nothing)
        """
        payload = [{'role': 'system', 'content': system_prompt or CHAT_SYSTEM_PROMPT}]
        payload.extend(message.to_dict() for message in messages)

        content = self._complete(payload, self.model_config['chat_max_tokens'])
        return content or FALLBACK_CHAT_RESPONSE

    def generate_quote_estimate(self, request: QuoteRequest) -> str:
        """
        Produce a rough estimate with pricing factors and next steps

        Raises:
            UpstreamUnavailable: Also when the model returns an empty estimate
        """
        payload = [
            {'role': 'system', 'content': ESTIMATOR_SYSTEM_PROMPT},
            {'role': 'user', 'content': build_quote_prompt(request)},
        ]

        content = self._complete(payload, self.model_config['estimate_max_tokens'])
        if not content:
            raise UpstreamUnavailable("No response from AI model", service=SERVICE_NAME)
        return content

    def generate_content(self, content_type: str, context: str) -> str:
        payload = [
            {'role': 'system', 'content': COPYWRITER_SYSTEM_PROMPT},
            {'role': 'user', 'content': build_content_prompt(content_type, context)},
        ]

        content = self._complete(payload, self.model_config['content_max_tokens'])
        return content or FALLBACK_CONTENT

    def enhance_image_description(self, title: str, category: str,
                                  existing_description: Optional[str] = None) -> str:
        """Write a 2-3 sentence gallery caption; falls back to the existing one"""
        payload = [
            {'role': 'system', 'content': CAPTION_SYSTEM_PROMPT},
            {'role': 'user', 'content': build_description_prompt(title, category, existing_description)},
        ]

        content = self._complete(payload, self.model_config['description_max_tokens'])
        return content or existing_description or FALLBACK_DESCRIPTION
