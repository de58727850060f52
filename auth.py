"""
User Authentication and Authorization Module
Handles admin login, session management, and the admin route guard.

The session is Flask's signed cookie and holds only {user_id, is_admin}.
Every check re-resolves the user through the entity store, so a user that
was removed or demoted stops being authenticated even with a valid cookie.
"""
from functools import wraps
from typing import Dict, Any, Optional

from flask import session, jsonify
from werkzeug.security import check_password_hash
import logging

from services.records import User
from services.storage import get_store

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base exception for login failures; carries the HTTP status"""
    status_code = 401

    def __init__(self, message: str = 'Unauthorized'):
        self.message = message
        super().__init__(message)


class InvalidCredentials(AuthError):
    """Unknown username or wrong password"""
    status_code = 401

    def __init__(self, message: str = 'Invalid username or password'):
        super().__init__(message)


class Forbidden(AuthError):
    """Valid credentials for a user that is not an admin"""
    status_code = 403

    def __init__(self, message: str = 'Admin access required'):
        super().__init__(message)


def authenticate_admin(store, username: str, password: str) -> User:
    """
    Check admin credentials against the stored salted hash

    Args:
        store: EntityStore
        username: Submitted username
        password: Submitted password

    Returns:
        The authenticated User

    Raises:
        InvalidCredentials: If the user is unknown or the password does not match
        Forbidden: If the user is not an admin
    """
    user = store.get_user_by_username(username)

    if not user or not check_password_hash(user.password_hash, password):
        logger.warning(f"Failed login attempt for username: {username}")
        raise InvalidCredentials()

    if not user.is_admin:
        logger.warning(f"Non-admin login attempt: {username}")
        raise Forbidden()

    logger.info(f"User authenticated: {username}")
    return user


def login_user(user: User):
    """Set user session"""
    session.clear()
    session['user_id'] = user.id
    session['is_admin'] = True
    session.permanent = True


def logout_user():
    """Clear user session"""
    session.clear()


def get_current_user(store) -> Optional[User]:
    """Get the admin the session refers to, if it still resolves to one"""
    user_id = session.get('user_id')
    if user_id is None or not session.get('is_admin'):
        return None

    user = store.get_user(user_id)
    if user is None or not user.is_admin:
        return None
    return user


def is_authenticated() -> bool:
    """Check if the session holds an admin that still exists"""
    return get_current_user(get_store()) is not None


def session_status(store) -> Dict[str, Any]:
    user = get_current_user(store)
    if user is None:
        return {'isAuthenticated': False}
    return {'isAuthenticated': True, 'user': user.to_dict()}


def admin_required(f):
    """Decorator to require an authenticated admin session"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_authenticated():
            return jsonify({'error': 'Unauthorized'}), 401
        return f(*args, **kwargs)
    return decorated_function
