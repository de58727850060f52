"""
Application Initialization Module
Initializes the Flask app with all infrastructure components
"""
import atexit
import os
from flask import Flask
from config import get_config
from logging_config import setup_logging
from ai_service import AIService
from security import setup_security
from health_checks import register_health_checks
from services.storage import create_store
from services.email_service import EmailService, EmailQueue
from database.seed import seed_database
import logging

logger = logging.getLogger(__name__)


def create_app(config_class=None, overrides=None):
    """
    Application factory that creates and configures Flask app with all infrastructure

    Args:
        config_class: Configuration class (defaults to the one selected by FLASK_ENV)
        overrides: Extra config values applied last (tests use this for temp folders)

    Returns:
        Configured Flask application instance
    """
    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class or get_config())
    if overrides:
        app.config.update(overrides)

    setup_logging(app)

    logger.info("=" * 60)
    logger.info(f"🚀 Initializing {app.config['COMPANY_NAME']} API")
    logger.info("=" * 60)
    logger.info(f"Environment: {os.environ.get('FLASK_ENV', 'development')}")
    logger.info(f"Debug mode: {app.debug}")

    # Setup security (CORS, headers, error handlers)
    setup_security(app, app.config)

    # Create required directories
    create_required_directories(app)

    # Entity store (memory or database)
    app.entity_store = create_store(app.config)

    # Outbound integrations
    app.ai_service = initialize_ai_service(app)
    app.email_service, app.email_queue = initialize_email(app)

    # Register health check endpoints
    register_health_checks(app)

    # Register API blueprints (validates the storage policy first)
    from app import register_blueprints
    register_blueprints(app)

    seed_database(app.entity_store, app.config)

    logger.info("✅ Application initialization complete")
    logger.info("=" * 60)

    return app


def create_required_directories(app):
    """
    Create all required application directories

    Args:
        app: Flask application instance
    """
    directories = [app.config['UPLOAD_FOLDER']]
    if app.config.get('LOG_TO_FILE'):
        directories.append(app.config.get('LOG_DIR', 'logs'))

    for directory in directories:
        os.makedirs(directory, exist_ok=True)
        logger.debug(f"Directory ensured: {directory}")

    logger.info(f"✅ Created {len(directories)} required directories")


def initialize_ai_service(app):
    """
    Initialize the OpenAI service wrapper

    Args:
        app: Flask application instance

    Returns:
        AIService instance (unavailable, not missing, when no key is set)
    """
    ai_service = AIService(app.config)

    if ai_service.is_available():
        logger.info(f"✅ AI service initialized: {app.config['AI_MODELS']['gpt']['model']}")
    else:
        logger.warning("⚠️  No AI service configured - chat and estimates will return errors")

    return ai_service


def initialize_email(app):
    """
    Initialize email delivery and its background queue

    Args:
        app: Flask application instance

    Returns:
        Tuple of (EmailService, EmailQueue)
    """
    email_service = EmailService(app.config)
    email_queue = EmailQueue(
        email_service,
        max_attempts=app.config['EMAIL_RETRY_ATTEMPTS'],
        delay=app.config['EMAIL_RETRY_DELAY'],
        run_async=app.config['EMAIL_ASYNC'],
    )

    if email_service.is_configured():
        email_queue.start()
        atexit.register(email_queue.stop)
        logger.info("✅ Email delivery configured (Resend)")

    return email_service, email_queue
