"""
Security Utilities & Middleware
Provides secret key handling, CORS, security headers, JSON error handlers
and request logging
"""
import os
import secrets
import time
from typing import Dict, Any, List
from flask import Flask, g, request, jsonify, Response
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
import logging

from auth import AuthError
from config import is_production
from errors import UpstreamError
from validators import ValidationError, format_validation_error

logger = logging.getLogger(__name__)

QUIET_PATHS = ('/api/health', '/api/ping')


class SecurityConfig:
    """Security configuration and validation"""

    @staticmethod
    def generate_secret_key() -> str:
        """
        Generate a cryptographically secure secret key

        Returns:
            Hex-encoded secret key
        """
        return secrets.token_hex(32)

    @staticmethod
    def validate_secret_key(secret_key: str) -> bool:
        """
        Validate that secret key is sufficiently secure

        Args:
            secret_key: Secret key to validate

        Returns:
            True if key is secure, False otherwise
        """
        if not secret_key:
            return False

        # Check minimum length (32 characters for 128-bit security)
        if len(secret_key) < 32:
            logger.warning("Secret key is too short (minimum 32 characters)")
            return False

        return True

    @staticmethod
    def ensure_secret_key(config: Dict[str, Any]) -> str:
        """
        Ensure a secure session signing key is configured

        Args:
            config: Application configuration dictionary

        Returns:
            Secure secret key
        """
        secret_key = config.get('SECRET_KEY')

        if isinstance(secret_key, bytes):
            secret_key = secret_key.hex()

        # If no key or invalid key, generate a secure one
        if not secret_key or not SecurityConfig.validate_secret_key(secret_key):
            if is_production():
                logger.error("No secure SESSION_SECRET in production! Generating one...")
                logger.error("Sessions will not survive a restart or span multiple workers!")

            secret_key = SecurityConfig.generate_secret_key()
            logger.warning(f"Generated new secret key (length: {len(secret_key)})")

        return secret_key


def setup_security_headers(app: Flask):
    """
    Add security headers to all responses

    Args:
        app: Flask application instance
    """
    @app.after_request
    def add_security_headers(response: Response) -> Response:
        """Add security headers to response"""
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['Permissions-Policy'] = 'geolocation=(), microphone=(), camera=()'

        # Strict Transport Security (HTTPS only in production)
        if app.config.get('SESSION_COOKIE_SECURE'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    logger.info("Security headers configured")


def setup_cors(app: Flask, config: Dict[str, Any]):
    """
    Configure CORS for the browser front end (cookies included)

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    cors_origins = config.get('CORS_ORIGINS', ['*'])
    cors_methods = config.get('CORS_METHODS', ['GET', 'POST', 'PATCH', 'DELETE', 'OPTIONS'])
    cors_headers = config.get('CORS_ALLOW_HEADERS', ['Content-Type', 'Authorization'])

    # Warn if using wildcard CORS in production
    if not app.debug and '*' in cors_origins:
        logger.warning("⚠️  Using wildcard CORS in production! Set CORS_ORIGINS environment variable.")

    CORS(
        app,
        origins=cors_origins,
        methods=cors_methods,
        allow_headers=cors_headers,
        supports_credentials=True,
        max_age=3600
    )

    logger.info(f"CORS configured: origins={cors_origins}")


def setup_error_handlers(app: Flask):
    """
    Register JSON error handlers that never expose stack traces or
    provider error text. Every error body is {error, details?}.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ValidationError)
    def validation_error(error: ValidationError):
        """Handle schema failures that escaped a route"""
        return jsonify(format_validation_error(error)), 400

    @app.errorhandler(AuthError)
    def auth_error(error: AuthError):
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(UpstreamError)
    def upstream_error(error: UpstreamError):
        logger.error(f"Unhandled upstream failure ({error.service}): {error.message}")
        return jsonify({'error': 'Service temporarily unavailable. Please try again later.'}), 500

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        """Handle 400/401/403/404/405/413 and friends raised by Werkzeug"""
        if error.code == 413:
            return jsonify({'error': 'Payload Too Large'}), 413
        return jsonify({'error': error.name}), error.code

    @app.errorhandler(Exception)
    def internal_server_error(error: Exception):
        """Handle anything else as a generic 500"""
        logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({'error': 'Internal Server Error'}), 500

    logger.info("Error handlers registered")


def setup_request_logging(app: Flask):
    """
    Log one line per finished request with status and duration.
    Health probes are skipped so load balancers do not flood the log.

    Args:
        app: Flask application instance
    """
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_response(response: Response) -> Response:
        if request.path in QUIET_PATHS:
            return response

        started = g.get('request_started')
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{response.status_code} in {elapsed_ms:.1f}ms "
            f"from {request.remote_addr} ({request.user_agent.string[:80]})"
        )
        return response

    logger.info("Request logging configured")


# Settings a production deployment should provide; the app still starts
# without them, with the related feature disabled.
RECOMMENDED_SETTINGS = {
    'SESSION_SECRET': 'sessions reset on every restart',
    'ADMIN_PASSWORD': 'no admin account, dashboard login disabled',
    'OPENAI_API_KEY': 'chatbot and estimates return errors',
    'RESEND_API_KEY': 'maintenance emails are not sent',
    'ADMIN_EMAIL': 'office is not notified of maintenance requests',
}


def find_missing_settings(config: Dict[str, Any]) -> List[str]:
    """
    Names from RECOMMENDED_SETTINGS that are not configured

    SESSION_SECRET is an environment variable only; the rest are read
    from the app configuration.
    """
    missing = []
    for name, impact in RECOMMENDED_SETTINGS.items():
        if name == 'SESSION_SECRET':
            value = os.environ.get('SESSION_SECRET') or os.environ.get('SECRET_KEY')
        else:
            value = config.get(name)
        if not value:
            missing.append(name)
            logger.warning(f"⚠️  {name} not set: {impact}")
    return missing


def setup_security(app: Flask, config: Dict[str, Any]):
    """
    Setup all security features for the application

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    logger.info("Configuring application security...")

    # Ensure secure secret key
    app.secret_key = SecurityConfig.ensure_secret_key(config)

    setup_cors(app, config)
    setup_security_headers(app)
    setup_error_handlers(app)
    setup_request_logging(app)

    if not app.debug and not app.testing:
        missing = find_missing_settings(config)
        if missing:
            logger.error(f"Production deployment is missing settings: {', '.join(missing)}")

    logger.info("✅ Security configuration complete")
