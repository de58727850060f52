"""
All Access Remodelers API - Application Package

This package contains the modular backend structure:
- api/: HTTP route handlers (Flask Blueprints)
- utils/: Shared request and upload helpers

The app factory and core Flask setup remain in app_init.py at the project root.
This package provides the modular route organization.

STORAGE POLICY:
- STORAGE_BACKEND=database requires DATABASE_URL (fail fast at startup).
- STORAGE_BACKEND=memory keeps everything in process memory; allowed in
  production but logged as non-durable.
"""

import logging

logger = logging.getLogger(__name__)

# Import blueprints
from app.api.auth_routes import auth_bp
from app.api.contacts import contacts_bp
from app.api.testimonials import testimonials_bp
from app.api.gallery import gallery_bp
from app.api.ai_chat import ai_chat_bp
from app.api.maintenance import maintenance_bp
from app.api.misc import misc_bp


def validate_storage_policy(app):
    """
    Validate storage configuration at startup.

    Raises:
        RuntimeError: If the database backend is selected without DATABASE_URL
            or the backend name is unknown
    """
    from config import get_app_env, is_production
    from services.storage import STORAGE_BACKENDS

    env = get_app_env()
    backend = (app.config.get('STORAGE_BACKEND') or 'memory').lower()

    logger.info(f"🔧 Environment: {env.upper()}")
    logger.info(f"💾 Storage backend: {backend}")

    if backend not in STORAGE_BACKENDS:
        raise RuntimeError(f"Unknown STORAGE_BACKEND '{backend}'. Expected one of {STORAGE_BACKENDS}")

    if backend == 'database' and not app.config.get('DATABASE_URL'):
        raise RuntimeError("STORAGE_BACKEND=database requires DATABASE_URL to be set")

    if backend == 'memory' and is_production():
        logger.warning("⚠️  In-memory storage in production: all data is lost on restart "
                       "and is not shared between workers")

    return backend


def register_blueprints(app):
    """
    Register all API blueprints with the Flask app.
    Called from create_app() after the store and adapters are attached.

    Args:
        app: Flask application instance

    Raises:
        RuntimeError: If the storage configuration is invalid
    """
    # Validate storage policy FIRST
    app.config['STORAGE_MODE'] = validate_storage_policy(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(contacts_bp)
    app.register_blueprint(testimonials_bp)
    app.register_blueprint(gallery_bp)
    app.register_blueprint(ai_chat_bp)
    app.register_blueprint(maintenance_bp)
    app.register_blueprint(misc_bp)


__all__ = ['register_blueprints', 'validate_storage_policy', 'app', 'auth_bp', 'contacts_bp',
           'testimonials_bp', 'gallery_bp', 'ai_chat_bp', 'maintenance_bp', 'misc_bp']


# ==============================================================================
# WSGI APP EXPORT FOR GUNICORN
# ==============================================================================
# This allows gunicorn to run with: gunicorn app:app
# The Flask app is created in wsgi.py.
# We use __getattr__ for lazy loading to avoid circular import issues.
# ==============================================================================

_flask_app = None

def __getattr__(name):
    """Lazy load the Flask app to avoid circular imports."""
    global _flask_app
    if name == 'app':
        if _flask_app is None:
            from wsgi import app as flask_app
            _flask_app = flask_app
        return _flask_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
