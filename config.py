"""
Centralized Configuration for the All Access Remodelers site API
Manages environment-specific settings, secrets, and service configurations.
"""
import os
from datetime import timedelta


def _env_flag(name, default='false'):
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Base configuration with defaults"""

    COMPANY_NAME = 'All Access Remodelers'

    # Flask Settings
    SECRET_KEY = os.environ.get('SESSION_SECRET') or os.environ.get('SECRET_KEY') or os.urandom(32).hex()
    MAX_CONTENT_LENGTH = 12 * 1024 * 1024  # image limit plus form fields

    # Session cookie (admin gate)
    SESSION_COOKIE_NAME = 'aar_session'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)

    # CORS Settings
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    CORS_METHODS = ['GET', 'POST', 'PATCH', 'DELETE', 'OPTIONS']
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization', 'X-Requested-With']

    # Entity store: 'memory' or 'database'
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'memory').lower()
    DATABASE_URL = os.environ.get('DATABASE_URL')
    PASSWORD_HASH_METHOD = 'pbkdf2:sha256'

    # File Storage Paths
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join(BASE_DIR, 'uploads'))
    UPLOAD_URL_PREFIX = '/uploads'
    MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB per image

    # AI Service
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    AI_MODELS = {
        'gpt': {
            'model': os.environ.get('OPENAI_MODEL', 'gpt-5'),
            'chat_max_tokens': 1024,
            'estimate_max_tokens': 2048,
            'content_max_tokens': 1024,
            'description_max_tokens': 256,
        },
    }
    AI_TIMEOUT = int(os.environ.get('AI_TIMEOUT', '60'))  # seconds

    # Email delivery (Resend)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY')
    EMAIL_FROM = os.environ.get('EMAIL_FROM', 'All Access Remodelers <noreply@allaccessremodelers.com>')
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL')
    SITE_URL = os.environ.get('SITE_URL', 'http://localhost:5000').rstrip('/')
    EMAIL_TIMEOUT = int(os.environ.get('EMAIL_TIMEOUT', '10'))
    EMAIL_RETRY_ATTEMPTS = int(os.environ.get('EMAIL_RETRY_ATTEMPTS', '3'))
    EMAIL_RETRY_DELAY = float(os.environ.get('EMAIL_RETRY_DELAY', '2'))  # seconds
    EMAIL_ASYNC = True

    # Seed data
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')
    SEED_SAMPLE_CONTENT = _env_flag('SEED_SAMPLE_CONTENT', 'true')

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(request_line)s] %(message)s'
    LOG_FILE = os.environ.get('LOG_FILE', 'app.log')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')
    LOG_TO_FILE = True


class DevelopmentConfig(Config):
    """Development-specific configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'
    # Allow all CORS in development
    CORS_ORIGINS = ['*']
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin123')


class ProductionConfig(Config):
    """Production-specific configuration"""
    DEBUG = False
    TESTING = False
    # Strict CORS in production
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'https://allaccessremodelers.com').split(',')
    # Force HTTPS
    PREFERRED_URL_SCHEME = 'https'
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing-specific configuration"""
    DEBUG = True
    TESTING = True
    STORAGE_BACKEND = 'memory'
    DATABASE_URL = None
    OPENAI_API_KEY = None
    RESEND_API_KEY = None
    ADMIN_EMAIL = 'office@example.com'
    SITE_URL = 'https://example.com'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'admin-test-password'
    SEED_SAMPLE_CONTENT = False
    # Cheap hashes keep login tests fast
    PASSWORD_HASH_METHOD = 'pbkdf2:sha256:1000'
    # Deliver email inline without backoff sleeps
    EMAIL_ASYNC = False
    EMAIL_RETRY_DELAY = 0
    LOG_TO_FILE = False


# Configuration selector
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config():
    """Get configuration based on FLASK_ENV environment variable"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)


def get_app_env():
    """Name of the active environment"""
    return os.environ.get('FLASK_ENV', 'development')


def is_production():
    return get_app_env() == 'production'
