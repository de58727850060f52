"""
Input Validation & Sanitization Utilities
Provides secure validation for API requests, file uploads, and user input.

The parse_* functions are the request schemas: each one either returns a
frozen value object ready for the entity store or an adapter, or raises
ValidationError carrying one {field, message} entry per problem.
"""
import re
import os
from typing import Dict, Any, List, Optional, Tuple
from PIL import Image
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename
import logging

from services.records import (
    NewContact,
    NewTestimonial,
    NewGalleryItem,
    ChatMessage,
    QuoteRequest,
    MaintenanceRequest,
)

logger = logging.getLogger(__name__)

# Allowed image uploads
ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}
ALLOWED_IMAGE_MIMETYPES = {'image/png', 'image/jpeg', 'image/gif', 'image/webp'}
ALLOWED_IMAGE_FORMATS = {'PNG', 'JPEG', 'GIF', 'WEBP'}

# Maximum file sizes (in bytes)
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB

# Regex patterns
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PHONE_PATTERN = re.compile(r'^\+?1?\d{9,15}$')

CHAT_ROLES = {'user', 'assistant', 'system'}
MAX_CHAT_MESSAGES = 50
URGENCY_LEVELS = ('low', 'medium', 'high', 'emergency')


class ValidationError(Exception):
    """Raised when request input fails a schema; maps to HTTP 400"""
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[List[Dict[str, str]]] = None):
        self.message = message
        self.field = field
        if details is None and field:
            details = [{'field': field, 'message': message}]
        self.details = details or []
        super().__init__(self.message)


def field_error(field: str, message: str) -> Dict[str, str]:
    return {'field': field, 'message': message}


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """
    Validate email format

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not isinstance(email, str):
        return False, "Email must be a non-empty string"

    if len(email) > 254:  # RFC 5321
        return False, "Email address too long"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    return True, None


def validate_phone(phone: str) -> Tuple[bool, Optional[str]]:
    """
    Validate phone number format

    Args:
        phone: Phone number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone or not isinstance(phone, str):
        return False, "Phone must be a non-empty string"

    # Remove common separators
    cleaned_phone = re.sub(r'[\s\-\(\)\.]', '', phone)

    if not PHONE_PATTERN.match(cleaned_phone):
        return False, "Invalid phone number format"

    return True, None


def validate_string_length(value: str, min_length: int = 0, max_length: int = 1000) -> Tuple[bool, Optional[str]]:
    """
    Validate string length is within acceptable range

    Args:
        value: String to validate
        min_length: Minimum allowed length
        max_length: Maximum allowed length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, "Value must be a string"

    if len(value) < min_length:
        return False, f"Value too short (minimum {min_length} characters)"

    if len(value) > max_length:
        return False, f"Value too long (maximum {max_length} characters)"

    return True, None


def sanitize_string(value: str) -> str:
    """
    Sanitize string input by removing null bytes and surrounding whitespace

    Args:
        value: String to sanitize

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        return str(value)

    return value.replace('\x00', '').strip()


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent directory traversal attacks

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    # Use werkzeug's secure_filename
    safe_name = secure_filename(filename)

    # If secure_filename removes everything, generate a default name
    if not safe_name:
        safe_name = 'file'

    return safe_name


def validate_file_extension(filename: str, allowed_extensions: set) -> Tuple[bool, Optional[str]]:
    """
    Validate file has an allowed extension

    Args:
        filename: Filename to check
        allowed_extensions: Set of allowed extensions (without dots)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not filename or '.' not in filename:
        return False, "File must have an extension"

    extension = filename.rsplit('.', 1)[1].lower()

    if extension not in allowed_extensions:
        return False, f"File type not allowed. Allowed types: {', '.join(sorted(allowed_extensions))}"

    return True, None


def validate_file_upload(
    file: FileStorage,
    allowed_extensions: set,
    max_size: int,
    file_type: str = "file"
) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Comprehensive file upload validation

    Args:
        file: FileStorage object from request.files
        allowed_extensions: Set of allowed extensions
        max_size: Maximum file size in bytes
        file_type: Type of file for error messages

    Returns:
        Tuple of (is_valid, error_message, sanitized_filename)
    """
    # Check if file exists
    if not file or not file.filename:
        return False, f"No {file_type} provided", None

    # Sanitize filename
    safe_filename = sanitize_filename(file.filename)

    # Validate extension
    is_valid, error = validate_file_extension(safe_filename, allowed_extensions)
    if not is_valid:
        return False, error, None

    # Check file size (read file to check actual size)
    file.seek(0, os.SEEK_END)
    file_size = file.tell()
    file.seek(0)  # Reset to beginning

    if file_size > max_size:
        max_mb = max_size / (1024 * 1024)
        return False, f"{file_type.capitalize()} too large (maximum {max_mb:.1f}MB)", None

    if file_size == 0:
        return False, f"{file_type.capitalize()} is empty", None

    logger.info(f"File validation successful: {safe_filename} ({file_size} bytes)")
    return True, None, safe_filename


def validate_image_upload(file: FileStorage, max_size: int = MAX_IMAGE_SIZE) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Validate an image upload: extension, declared MIME type, size and the
    actual content, which must decode as JPEG, PNG, GIF or WebP.

    Returns:
        Tuple of (is_valid, error_message, sanitized_filename)
    """
    is_valid, error, safe_filename = validate_file_upload(file, ALLOWED_IMAGE_EXTENSIONS, max_size, "image")
    if not is_valid:
        return False, error, None

    if (file.mimetype or '').lower() not in ALLOWED_IMAGE_MIMETYPES:
        return False, "Only image files are allowed (jpeg, png, gif, webp)", None

    try:
        with Image.open(file.stream) as image:
            image_format = image.format
            image.verify()
    except Exception as e:
        logger.warning(f"Rejected unreadable image {safe_filename}: {e}")
        return False, "Image file is corrupt or unreadable", None
    finally:
        file.seek(0)

    if image_format not in ALLOWED_IMAGE_FORMATS:
        return False, "Only image files are allowed (jpeg, png, gif, webp)", None

    return True, None, safe_filename


def parse_id(value) -> Optional[int]:
    """Parse a path id; None when it is not an integer"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

def _require_object(data, message: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(message, details=[field_error('body', 'Request body must be an object')])
    return data


def _required_string(data: Dict[str, Any], field: str, errors: List[Dict[str, str]],
                     max_length: int = 1000) -> Optional[str]:
    value = data.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        errors.append(field_error(field, 'Required'))
        return None

    if not isinstance(value, str):
        errors.append(field_error(field, 'Must be a string'))
        return None

    value = sanitize_string(value)
    is_valid, error = validate_string_length(value, min_length=1, max_length=max_length)
    if not is_valid:
        errors.append(field_error(field, error))
        return None

    return value


def _optional_string(data: Dict[str, Any], field: str, errors: List[Dict[str, str]],
                     max_length: int = 1000) -> Optional[str]:
    value = data.get(field)
    if value is None:
        return None

    if not isinstance(value, str):
        errors.append(field_error(field, 'Must be a string'))
        return None

    value = sanitize_string(value)
    is_valid, error = validate_string_length(value, max_length=max_length)
    if not is_valid:
        errors.append(field_error(field, error))
        return None

    return value or None


def _check_email(email: Optional[str], errors: List[Dict[str, str]], field: str = 'email'):
    if email is None:
        return
    is_valid, error = validate_email(email)
    if not is_valid:
        errors.append(field_error(field, error))


def _check_phone(phone: Optional[str], errors: List[Dict[str, str]], field: str = 'phone'):
    if phone is None:
        return
    is_valid, error = validate_phone(phone)
    if not is_valid:
        errors.append(field_error(field, error))


def parse_contact(data) -> NewContact:
    """Contact form: name, email, service, message required; phone optional"""
    data = _require_object(data, 'Invalid form data')
    errors = []

    name = _required_string(data, 'name', errors, max_length=200)
    email = _required_string(data, 'email', errors, max_length=254)
    _check_email(email, errors)
    phone = _optional_string(data, 'phone', errors, max_length=50)
    service = _required_string(data, 'service', errors, max_length=200)
    message = _required_string(data, 'message', errors, max_length=5000)

    if errors:
        raise ValidationError('Invalid form data', details=errors)

    return NewContact(name=name, email=email, phone=phone, service=service, message=message)


def parse_testimonial(data) -> NewTestimonial:
    """Testimonial: name, text and an integer rating from 1 to 5"""
    data = _require_object(data, 'Invalid testimonial data')
    errors = []

    name = _required_string(data, 'name', errors, max_length=200)
    location = _optional_string(data, 'location', errors, max_length=200)
    text = _required_string(data, 'text', errors, max_length=2000)
    service = _optional_string(data, 'service', errors, max_length=200)

    rating = data.get('rating')
    if rating is None:
        errors.append(field_error('rating', 'Required'))
    elif isinstance(rating, bool) or not isinstance(rating, int):
        errors.append(field_error('rating', 'Must be an integer'))
    elif not 1 <= rating <= 5:
        errors.append(field_error('rating', 'Must be between 1 and 5'))

    if errors:
        raise ValidationError('Invalid testimonial data', details=errors)

    return NewTestimonial(name=name, location=location, rating=rating, text=text, service=service)


def parse_gallery_item(data, image_url: str) -> NewGalleryItem:
    """Gallery form fields; the image itself is validated by validate_image_upload"""
    data = _require_object(data, 'Invalid gallery item data')
    errors = []

    title = _required_string(data, 'title', errors, max_length=200)
    category = _required_string(data, 'category', errors, max_length=100)
    description = _optional_string(data, 'description', errors, max_length=2000)

    if errors:
        raise ValidationError('Invalid gallery item data', details=errors)

    return NewGalleryItem(title=title, category=category, description=description, image_url=image_url)


def parse_chat_request(data) -> List[ChatMessage]:
    """Chat: a non-empty list of {role, content} messages"""
    data = _require_object(data, 'Messages array is required')
    messages = data.get('messages')

    if not isinstance(messages, list) or not messages:
        raise ValidationError('Messages array is required', field='messages')

    if len(messages) > MAX_CHAT_MESSAGES:
        raise ValidationError(
            'Too many messages',
            details=[field_error('messages', f'At most {MAX_CHAT_MESSAGES} messages are allowed')]
        )

    errors = []
    parsed = []
    for idx, message in enumerate(messages):
        if not isinstance(message, dict):
            errors.append(field_error(f'messages[{idx}]', 'Must be an object'))
            continue

        role = message.get('role')
        if role not in CHAT_ROLES:
            errors.append(field_error(f'messages[{idx}].role', f"Must be one of: {', '.join(sorted(CHAT_ROLES))}"))

        content = _required_string(message, 'content', [], max_length=4000)
        if content is None:
            errors.append(field_error(f'messages[{idx}].content', 'Must be a non-empty string of at most 4000 characters'))

        if role in CHAT_ROLES and content is not None:
            parsed.append(ChatMessage(role=role, content=content))

    if errors:
        raise ValidationError('Invalid messages', details=errors)

    return parsed


def parse_quote_request(data) -> QuoteRequest:
    """Quote estimate: serviceType and projectDescription required"""
    data = _require_object(data, 'Service type and project description are required')
    errors = []

    service_type = _required_string(data, 'serviceType', errors, max_length=200)
    description = _required_string(data, 'projectDescription', errors, max_length=5000)
    square_footage = _optional_string(data, 'squareFootage', errors, max_length=50)
    timeline = _optional_string(data, 'timeline', errors, max_length=200)
    location = _optional_string(data, 'location', errors, max_length=200)

    if errors:
        raise ValidationError('Service type and project description are required', details=errors)

    return QuoteRequest(
        service_type=service_type,
        project_description=description,
        square_footage=square_footage,
        timeline=timeline,
        location=location,
    )


def parse_content_request(data) -> Tuple[str, str]:
    """Admin content generation: contentType and context required"""
    data = _require_object(data, 'Content type and context are required')
    errors = []

    content_type = _required_string(data, 'contentType', errors, max_length=100)
    context = _required_string(data, 'context', errors, max_length=5000)

    if errors:
        raise ValidationError('Content type and context are required', details=errors)

    return content_type, context


def parse_description_request(data) -> Tuple[str, str, Optional[str]]:
    """Gallery caption enhancement: title and category required"""
    data = _require_object(data, 'Title and category are required')
    errors = []

    title = _required_string(data, 'title', errors, max_length=200)
    category = _required_string(data, 'category', errors, max_length=100)
    description = _optional_string(data, 'description', errors, max_length=2000)

    if errors:
        raise ValidationError('Title and category are required', details=errors)

    return title, category, description


def parse_maintenance_request(data) -> MaintenanceRequest:
    """Maintenance request: every field required, urgency from a fixed list"""
    data = _require_object(data, 'Invalid maintenance request')
    errors = []

    name = _required_string(data, 'name', errors, max_length=200)
    email = _required_string(data, 'email', errors, max_length=254)
    _check_email(email, errors)
    phone = _required_string(data, 'phone', errors, max_length=50)
    _check_phone(phone, errors)
    address = _required_string(data, 'propertyAddress', errors, max_length=500)
    issue_type = _required_string(data, 'issueType', errors, max_length=100)
    description = _required_string(data, 'description', errors, max_length=5000)
    contact_time = _required_string(data, 'preferredContactTime', errors, max_length=100)

    urgency = _required_string(data, 'urgency', errors, max_length=20)
    if urgency is not None:
        urgency = urgency.lower()
        if urgency not in URGENCY_LEVELS:
            errors.append(field_error('urgency', f"Must be one of: {', '.join(URGENCY_LEVELS)}"))

    if errors:
        raise ValidationError('Invalid maintenance request', details=errors)

    return MaintenanceRequest(
        name=name,
        email=email,
        phone=phone,
        property_address=address,
        issue_type=issue_type,
        description=description,
        urgency=urgency,
        preferred_contact_time=contact_time,
    )


def parse_login(data) -> Tuple[str, str]:
    """Login: username and password required (password is not stripped)"""
    data = _require_object(data, 'Username and password are required')
    errors = []

    username = _required_string(data, 'username', errors, max_length=100)
    password = data.get('password')
    if not isinstance(password, str) or not password:
        errors.append(field_error('password', 'Required'))

    if errors:
        raise ValidationError('Username and password are required', details=errors)

    return username, password


def format_validation_error(error: ValidationError) -> Dict[str, Any]:
    """
    Format validation error for consistent API responses

    Args:
        error: ValidationError raised by a schema

    Returns:
        Error response dictionary
    """
    return {
        'error': error.message,
        'details': error.details
    }
