"""
Miscellaneous Routes Blueprint

Handles:
- /uploads/<filename>: Serve uploaded gallery and maintenance images
"""

from flask import Blueprint, send_from_directory, current_app
import logging

logger = logging.getLogger(__name__)

# Create blueprint
misc_bp = Blueprint('misc_bp', __name__)


# ============================================================================
# FILE SERVING
# ============================================================================

@misc_bp.route('/uploads/<path:filename>')
def serve_uploads(filename):
    """Serve uploaded files (404 for anything outside the upload folder)"""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
