"""
Authentication Routes Blueprint

Handles admin login/logout and session status.
"""

from flask import Blueprint, jsonify
import logging

import auth
from app.utils.helpers import get_request_data, validation_failed
from services.storage import get_store
from validators import ValidationError, parse_login

logger = logging.getLogger(__name__)

# Create blueprint
auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/api/auth/login', methods=['POST'])
def api_login():
    """API endpoint for admin login"""
    try:
        username, password = parse_login(get_request_data())
    except ValidationError as e:
        return validation_failed(e)

    try:
        user = auth.authenticate_admin(get_store(), username, password)
    except auth.AuthError as e:
        return jsonify({'error': e.message}), e.status_code
    except Exception as e:
        logger.error(f"Login error: {e}")
        return jsonify({'error': 'Login failed'}), 500

    auth.login_user(user)
    logger.info(f"Admin logged in: {user.username}")
    return jsonify({'success': True, 'user': user.to_dict()})


@auth_bp.route('/api/auth/logout', methods=['POST'])
def api_logout():
    """API endpoint for logout (safe to call without a session)"""
    auth.logout_user()
    return jsonify({'success': True})


@auth_bp.route('/api/auth/session', methods=['GET'])
def api_session():
    """Report whether the cookie belongs to a current admin"""
    try:
        return jsonify(auth.session_status(get_store()))
    except Exception as e:
        logger.error(f"Session check error: {e}")
        return jsonify({'error': 'Failed to check session'}), 500
