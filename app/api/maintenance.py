"""
Maintenance Request Routes Blueprint

Tenants and owners report property issues. Requests are not stored: they
are turned into an admin notification and a customer confirmation email,
both delivered best-effort through the email queue.
"""

from flask import Blueprint, request, jsonify, current_app
import logging

from app.utils.helpers import get_request_data, validation_failed
from app.utils.uploads import save_upload, upload_url
from services.email_service import build_maintenance_emails
from validators import ValidationError, field_error, parse_maintenance_request, validate_image_upload

logger = logging.getLogger(__name__)

maintenance_bp = Blueprint('maintenance_bp', __name__)

SUCCESS_MESSAGE = "Maintenance request submitted successfully. We'll contact you soon."


@maintenance_bp.route('/api/maintenance-requests', methods=['POST'])
def create_maintenance_request():
    """Accepts JSON or multipart form data with an optional 'image' file"""
    file = request.files.get('image')
    has_image = file is not None and bool(file.filename)

    if has_image:
        is_valid, error, safe_filename = validate_image_upload(file, current_app.config['MAX_IMAGE_SIZE'])
        if not is_valid:
            return jsonify({'error': error, 'details': [field_error('image', error)]}), 400

    try:
        maintenance_request = parse_maintenance_request(get_request_data())
    except ValidationError as e:
        return validation_failed(e)

    image_url = None
    if has_image:
        try:
            stored_filename, _ = save_upload(file, current_app.config['UPLOAD_FOLDER'], safe_filename)
        except OSError as e:
            logger.error(f"Error saving maintenance photo: {e}")
            return jsonify({'error': 'Failed to submit maintenance request'}), 500
        image_url = upload_url(stored_filename, current_app.config['UPLOAD_URL_PREFIX'])

    logger.info(
        f"🔧 Maintenance request: {maintenance_request.issue_type} "
        f"({maintenance_request.urgency}) at {maintenance_request.property_address}"
    )

    email_queue = current_app.email_queue
    if not current_app.email_service.is_configured():
        logger.warning("⚠️  Email not configured - maintenance request accepted without notifications")
    else:
        try:
            messages = build_maintenance_emails(maintenance_request, current_app.config, image_url)
        except Exception as e:
            logger.error(f"Failed to render maintenance emails: {e}", exc_info=True)
            messages = []
        for message in messages:
            email_queue.enqueue(message)

    return jsonify({'success': True, 'message': SUCCESS_MESSAGE}), 201
