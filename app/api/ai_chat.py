"""
AI Routes Blueprint

Handles AI-powered features:
- /api/chat: website chatbot
- /api/quote-estimate: rough project estimate
- /api/admin/generate-content: admin copywriting helper
- /api/admin/enhance-description: admin gallery caption helper

Provider failures are answered with short, endpoint-specific messages; the
provider's own error text only goes to the log.
"""

import logging
from flask import Blueprint, jsonify, current_app

from auth import admin_required
from app.utils.helpers import get_request_data, validation_failed
from errors import UpstreamConfigError, UpstreamError
from validators import (
    ValidationError,
    parse_chat_request,
    parse_quote_request,
    parse_content_request,
    parse_description_request,
)

logger = logging.getLogger(__name__)

# Create blueprint
ai_chat_bp = Blueprint('ai_chat_bp', __name__)

CHAT_CONFIG_ERROR = "Our assistant is not available right now. Please contact us directly."
CHAT_FAILED = "Failed to get a response. Please try again."
QUOTE_CONFIG_ERROR = "AI service configuration error. Please contact us directly for a quote."
QUOTE_FAILED = "Failed to generate estimate. Please contact us directly for a quote."
CONTENT_FAILED = "Failed to generate content"
DESCRIPTION_FAILED = "Failed to enhance description"


def get_ai_service():
    return current_app.ai_service


def _upstream_failure(error: UpstreamError, config_message: str, failure_message: str):
    message = config_message if isinstance(error, UpstreamConfigError) else failure_message
    logger.error(f"AI request failed ({type(error).__name__}): {error.message}")
    return jsonify({'error': message}), 500


@ai_chat_bp.route('/api/chat', methods=['POST'])
def chat():
    """Website chatbot: {messages: [{role, content}]} -> {response}"""
    try:
        messages = parse_chat_request(get_request_data())
    except ValidationError as e:
        return validation_failed(e)

    try:
        response = get_ai_service().get_chat_completion(messages)
    except UpstreamError as e:
        return _upstream_failure(e, CHAT_CONFIG_ERROR, CHAT_FAILED)

    return jsonify({'response': response})


@ai_chat_bp.route('/api/quote-estimate', methods=['POST'])
def quote_estimate():
    try:
        quote_request = parse_quote_request(get_request_data())
    except ValidationError as e:
        return validation_failed(e)

    try:
        estimate = get_ai_service().generate_quote_estimate(quote_request)
    except UpstreamError as e:
        return _upstream_failure(e, QUOTE_CONFIG_ERROR, QUOTE_FAILED)

    logger.info(f"Generated estimate for {quote_request.service_type}")
    return jsonify({'estimate': estimate})


@ai_chat_bp.route('/api/admin/generate-content', methods=['POST'])
@admin_required
def generate_content():
    try:
        content_type, context = parse_content_request(get_request_data())
    except ValidationError as e:
        return validation_failed(e)

    try:
        content = get_ai_service().generate_content(content_type, context)
    except UpstreamError as e:
        return _upstream_failure(e, CONTENT_FAILED, CONTENT_FAILED)

    return jsonify({'content': content})


@ai_chat_bp.route('/api/admin/enhance-description', methods=['POST'])
@admin_required
def enhance_description():
    try:
        title, category, description = parse_description_request(get_request_data())
    except ValidationError as e:
        return validation_failed(e)

    try:
        enhanced = get_ai_service().enhance_image_description(title, category, description)
    except UpstreamError as e:
        return _upstream_failure(e, DESCRIPTION_FAILED, DESCRIPTION_FAILED)

    return jsonify({'description': enhanced})
