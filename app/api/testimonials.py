"""
Testimonial Routes Blueprint

Public submission (held for moderation), the public approved list and the
admin moderation endpoints.
"""

from flask import Blueprint, jsonify
import logging

from auth import admin_required
from app.utils.helpers import get_request_data, invalid_id, not_found, validation_failed
from services.storage import get_store
from validators import ValidationError, parse_testimonial, parse_id

logger = logging.getLogger(__name__)

testimonials_bp = Blueprint('testimonials_bp', __name__)


@testimonials_bp.route('/api/testimonials', methods=['GET'])
def list_approved_testimonials():
    """Approved testimonials only (public)"""
    try:
        testimonials = get_store().get_approved_testimonials()
        return jsonify([t.to_dict() for t in testimonials])
    except Exception as e:
        logger.error(f"Error fetching testimonials: {e}")
        return jsonify({'error': 'Failed to fetch testimonials'}), 500


@testimonials_bp.route('/api/testimonials/all', methods=['GET'])
@admin_required
def list_all_testimonials():
    try:
        testimonials = get_store().get_all_testimonials()
        return jsonify([t.to_dict() for t in testimonials])
    except Exception as e:
        logger.error(f"Error fetching all testimonials: {e}")
        return jsonify({'error': 'Failed to fetch testimonials'}), 500


@testimonials_bp.route('/api/testimonials', methods=['POST'])
def create_testimonial():
    """Submit a testimonial; it stays hidden until an admin approves it"""
    try:
        data = parse_testimonial(get_request_data())
    except ValidationError as e:
        return validation_failed(e)

    try:
        testimonial = get_store().create_testimonial(data)
    except Exception as e:
        logger.error(f"Error creating testimonial: {e}")
        return jsonify({'error': 'Failed to submit testimonial'}), 500

    logger.info(f"New testimonial #{testimonial.id} awaiting approval")
    return jsonify(testimonial.to_dict()), 201


@testimonials_bp.route('/api/testimonials/<testimonial_id>/approve', methods=['PATCH'])
@admin_required
def approve_testimonial(testimonial_id):
    testimonial_id = parse_id(testimonial_id)
    if testimonial_id is None:
        return invalid_id('testimonial')

    try:
        testimonial = get_store().approve_testimonial(testimonial_id)
    except Exception as e:
        logger.error(f"Error approving testimonial: {e}")
        return jsonify({'error': 'Failed to approve testimonial'}), 500

    if testimonial is None:
        return not_found('Testimonial')

    logger.info(f"Approved testimonial #{testimonial.id}")
    return jsonify(testimonial.to_dict())
