"""
Utilities Package

Shared helper functions used across the application.
"""

from app.utils.helpers import (
    get_request_data,
    not_found,
    invalid_id,
    validation_failed,
)

from app.utils.uploads import (
    generate_upload_filename,
    save_upload,
    upload_url,
    remove_upload,
    resolve_upload_path,
)

__all__ = [
    'get_request_data',
    'not_found',
    'invalid_id',
    'validation_failed',
    'generate_upload_filename',
    'save_upload',
    'upload_url',
    'remove_upload',
    'resolve_upload_path',
]
