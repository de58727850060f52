"""
Contact Form Routes Blueprint

Public contact form submission and the admin inbox.
"""

from flask import Blueprint, jsonify
import logging

from auth import admin_required
from app.utils.helpers import get_request_data, invalid_id, not_found, validation_failed
from services.storage import get_store
from validators import ValidationError, parse_contact, parse_id

logger = logging.getLogger(__name__)

contacts_bp = Blueprint('contacts_bp', __name__)


@contacts_bp.route('/api/contacts', methods=['POST'])
def create_contact():
    """Submit the public contact form"""
    try:
        data = parse_contact(get_request_data())
    except ValidationError as e:
        return validation_failed(e)

    try:
        contact = get_store().create_contact(data)
    except Exception as e:
        logger.error(f"Error creating contact: {e}")
        return jsonify({'error': 'Failed to submit contact form'}), 500

    logger.info(f"New contact #{contact.id} for {contact.service}")
    return jsonify(contact.to_dict()), 201


@contacts_bp.route('/api/contacts', methods=['GET'])
@admin_required
def list_contacts():
    """All contact submissions, newest first"""
    try:
        contacts = get_store().get_contacts()
        return jsonify([c.to_dict() for c in contacts])
    except Exception as e:
        logger.error(f"Error fetching contacts: {e}")
        return jsonify({'error': 'Failed to fetch contacts'}), 500


@contacts_bp.route('/api/contacts/<contact_id>/read', methods=['PATCH'])
@admin_required
def mark_contact_read(contact_id):
    contact_id = parse_id(contact_id)
    if contact_id is None:
        return invalid_id('contact')

    try:
        contact = get_store().mark_contact_as_read(contact_id)
    except Exception as e:
        logger.error(f"Error updating contact: {e}")
        return jsonify({'error': 'Failed to update contact'}), 500

    if contact is None:
        return not_found('Contact')
    return jsonify(contact.to_dict())
