"""
Health Check & Monitoring Endpoints
Provides endpoints for deployment health checks and monitoring
"""
import os
import sys
import time
import psutil
from datetime import datetime, timezone
from typing import Dict, Any
from flask import Blueprint, jsonify, current_app
import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = 'all-access-remodelers-api'
SERVICE_VERSION = '1.0.0'

# Create Blueprint for health check routes
health_bp = Blueprint('health', __name__)

# Track application start time
START_TIME = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_system_metrics() -> Dict[str, Any]:
    """
    Get basic process metrics

    Returns:
        Dictionary of system metrics (empty if psutil cannot read them)
    """
    try:
        process = psutil.Process()

        return {
            'cpu_percent': process.cpu_percent(interval=0.1),
            'memory_mb': process.memory_info().rss / 1024 / 1024,
            'memory_percent': process.memory_percent(),
            'threads': process.num_threads(),
            'open_files': len(process.open_files()),
        }
    except psutil.Error as e:
        logger.warning(f"Failed to get system metrics: {e}")
        return {}


def get_uptime() -> Dict[str, Any]:
    """
    Get application uptime

    Returns:
        Dictionary with uptime information
    """
    uptime_seconds = time.time() - START_TIME

    return {
        'uptime_seconds': round(uptime_seconds, 2),
        'uptime_minutes': round(uptime_seconds / 60, 2),
        'uptime_hours': round(uptime_seconds / 3600, 2),
        'started_at': datetime.fromtimestamp(START_TIME, timezone.utc).isoformat()
    }


def check_integrations(app) -> Dict[str, bool]:
    """
    Check which outbound integrations are configured

    Args:
        app: Flask application instance

    Returns:
        Dictionary of service availability
    """
    ai_service = getattr(app, 'ai_service', None)
    email_service = getattr(app, 'email_service', None)

    return {
        'openai': bool(ai_service and ai_service.is_available()),
        'email': bool(email_service and email_service.is_configured()),
    }


def check_filesystem(app) -> Dict[str, Dict[str, bool]]:
    """
    Check if the upload and log directories exist and are writable

    Returns:
        Dictionary of filesystem checks
    """
    required_dirs = {'uploads': app.config['UPLOAD_FOLDER']}
    if app.config.get('LOG_TO_FILE'):
        required_dirs['logs'] = app.config.get('LOG_DIR', 'logs')

    filesystem_status = {}

    for name, dir_path in required_dirs.items():
        exists = os.path.isdir(dir_path)
        writable = os.access(dir_path, os.W_OK) if exists else False

        filesystem_status[name] = {
            'exists': exists,
            'writable': writable,
            'healthy': exists and writable
        }

    return filesystem_status


def check_store(app) -> Dict[str, Any]:
    """
    Check that the entity store answers queries

    Returns:
        Dictionary with backend name, health flag and record counts
    """
    store = app.entity_store
    try:
        store.ping()
        counts = store.stats()
    except Exception as e:
        logger.error(f"Store health check failed: {e}")
        return {'backend': store.backend, 'healthy': False}

    return {'backend': store.backend, 'healthy': True, 'counts': counts}


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check endpoint
    Returns 200 if application is running

    Used by: platform health checks, monitoring tools
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': _now(),
        'service': SERVICE_NAME
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """
    Readiness probe endpoint
    Returns 200 if the store is reachable and uploads can be written.
    Missing AI/email keys are reported but do not make the app unready.
    """
    store = check_store(current_app)
    filesystem = check_filesystem(current_app)
    filesystem_healthy = all(status['healthy'] for status in filesystem.values())

    is_ready = store['healthy'] and filesystem_healthy

    response = {
        'status': 'ready' if is_ready else 'not_ready',
        'timestamp': _now(),
        'checks': {
            'store': store,
            'filesystem': filesystem,
            'filesystem_healthy': filesystem_healthy,
            'integrations': check_integrations(current_app)
        }
    }

    return jsonify(response), 200 if is_ready else 503


@health_bp.route('/metrics', methods=['GET'])
def metrics():
    """
    Basic metrics endpoint
    Returns process metrics and application statistics

    Used by: Monitoring dashboards, performance analysis
    """
    email_queue = getattr(current_app, 'email_queue', None)

    response = {
        'timestamp': _now(),
        'service': SERVICE_NAME,
        'version': SERVICE_VERSION,
        'environment': os.environ.get('FLASK_ENV', 'development'),
        'uptime': get_uptime(),
        'system': get_system_metrics(),
        'services': check_integrations(current_app),
        'store': check_store(current_app),
        'email_queue': email_queue.stats() if email_queue else None,
        'filesystem': check_filesystem(current_app),
        'python_version': sys.version.split()[0]
    }

    return jsonify(response), 200


@health_bp.route('/ping', methods=['GET'])
def ping():
    """
    Simple ping endpoint
    Returns immediate response for basic connectivity tests
    """
    return 'pong', 200


def register_health_checks(app):
    """
    Register health check blueprint with Flask app

    Args:
        app: Flask application instance
    """
    app.register_blueprint(health_bp, url_prefix='/api')
    logger.info("Health check endpoints registered")
    logger.info("Available endpoints: /api/health, /api/ready, /api/metrics, /api/ping")
