"""
Gallery Routes Blueprint

Handles:
- GET /api/gallery[?category=]: public project gallery
- POST /api/gallery: admin image upload (multipart)
- DELETE /api/gallery/<id>: admin removal, including the stored image
"""

from flask import Blueprint, request, jsonify, current_app
import logging

from auth import admin_required
from app.utils.helpers import invalid_id, not_found, validation_failed
from app.utils.uploads import save_upload, upload_url, remove_upload, resolve_upload_path
from services.storage import get_store
from validators import ValidationError, field_error, parse_gallery_item, parse_id, validate_image_upload

logger = logging.getLogger(__name__)

gallery_bp = Blueprint('gallery_bp', __name__)


@gallery_bp.route('/api/gallery', methods=['GET'])
def list_gallery_items():
    """Gallery items, newest first, optionally for one category"""
    try:
        store = get_store()
        category = request.args.get('category')
        if category:
            items = store.get_gallery_items_by_category(category)
        else:
            items = store.get_gallery_items()
        return jsonify([i.to_dict() for i in items])
    except Exception as e:
        logger.error(f"Error fetching gallery items: {e}")
        return jsonify({'error': 'Failed to fetch gallery items'}), 500


@gallery_bp.route('/api/gallery', methods=['POST'])
@admin_required
def create_gallery_item():
    """
    Upload an image with its title/category/description.

    The image is checked before anything touches the disk. Once written,
    the file is removed again if the form fields are invalid or the store
    write fails, so a rejected request never leaves a file behind.
    """
    file = request.files.get('image')
    if file is None or not file.filename:
        return jsonify({
            'error': 'Image file is required',
            'details': [field_error('image', 'Required')]
        }), 400

    is_valid, error, safe_filename = validate_image_upload(file, current_app.config['MAX_IMAGE_SIZE'])
    if not is_valid:
        return jsonify({'error': error, 'details': [field_error('image', error)]}), 400

    upload_folder = current_app.config['UPLOAD_FOLDER']
    try:
        stored_filename, path = save_upload(file, upload_folder, safe_filename)
    except OSError as e:
        logger.error(f"Error saving gallery upload: {e}")
        return jsonify({'error': 'Failed to create gallery item'}), 500

    try:
        data = parse_gallery_item(
            request.form.to_dict(),
            upload_url(stored_filename, current_app.config['UPLOAD_URL_PREFIX'])
        )
    except ValidationError as e:
        remove_upload(path)
        return validation_failed(e)

    try:
        item = get_store().create_gallery_item(data)
    except Exception as e:
        logger.error(f"Error creating gallery item: {e}")
        remove_upload(path)
        return jsonify({'error': 'Failed to create gallery item'}), 500

    logger.info(f"New gallery item #{item.id} in '{item.category}'")
    return jsonify(item.to_dict()), 201


@gallery_bp.route('/api/gallery/<item_id>', methods=['DELETE'])
@admin_required
def delete_gallery_item(item_id):
    item_id = parse_id(item_id)
    if item_id is None:
        return invalid_id('gallery item')

    try:
        store = get_store()
        item = store.get_gallery_item(item_id)
        deleted = store.delete_gallery_item(item_id)
    except Exception as e:
        logger.error(f"Error deleting gallery item: {e}")
        return jsonify({'error': 'Failed to delete gallery item'}), 500

    if not deleted:
        return not_found('Gallery item')

    if item is not None:
        path = resolve_upload_path(
            item.image_url,
            current_app.config['UPLOAD_FOLDER'],
            current_app.config['UPLOAD_URL_PREFIX']
        )
        if path:
            remove_upload(path)

    logger.info(f"Deleted gallery item #{item_id}")
    return jsonify({'success': True})
