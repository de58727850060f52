"""
Logging setup for the site API.

One console handler always; a size-rotated file handler when LOG_TO_FILE is
on. Records logged while a request is active carry its method and path, so
a contact submission or a failed email can be traced back to the request
that produced it.
"""
import logging
import logging.handlers
from pathlib import Path

from flask import has_request_context, request

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ('werkzeug', 'urllib3', 'httpx', 'openai')

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_FILE_BACKUPS = 5


class RequestContextFilter(logging.Filter):
    """Adds `request_line` ("POST /api/contacts" or "-") to every record"""

    def filter(self, record):
        if has_request_context():
            record.request_line = f"{request.method} {request.path}"
        else:
            record.request_line = '-'
        return True


def _file_handler(app, formatter):
    log_dir = Path(app.config.get('LOG_DIR', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / app.config['LOG_FILE']

    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS
    )
    handler.setFormatter(formatter)
    return handler, log_path


def setup_logging(app):
    """
    Configure the root logger from LOG_LEVEL, LOG_FORMAT and LOG_TO_FILE.
    Replaces any handlers left by a previous call, so building several apps
    in one process (the test suite does) never duplicates output.

    Args:
        app: Flask application instance

    Returns:
        The root logger
    """
    log_level = getattr(logging, app.config['LOG_LEVEL'].upper(), logging.INFO)
    formatter = logging.Formatter(app.config['LOG_FORMAT'])
    context_filter = RequestContextFilter()

    handlers = [logging.StreamHandler()]
    log_path = None
    if app.config.get('LOG_TO_FILE', True):
        file_handler, log_path = _file_handler(app, formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app.logger.info(f"Logging initialized at {logging.getLevelName(log_level)} level")
    if log_path:
        app.logger.info(f"Log file: {log_path}")

    return root_logger
