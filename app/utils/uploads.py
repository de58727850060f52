"""
Upload storage helpers.

Uploaded images are written to UPLOAD_FOLDER under a generated name
(<epoch-millis>-<9 random digits><ext>) and served back under
UPLOAD_URL_PREFIX. The client-supplied name is only used for its extension.
"""

import os
import secrets
import time
import logging
from typing import Optional, Tuple

from werkzeug.datastructures import FileStorage

logger = logging.getLogger(__name__)


def generate_upload_filename(original_filename: str) -> str:
    """Unique stored name keeping the (lower-cased) original extension"""
    extension = os.path.splitext(original_filename)[1].lower()
    millis = int(time.time() * 1000)
    suffix = 100_000_000 + secrets.randbelow(900_000_000)
    return f"{millis}-{suffix}{extension}"


def save_upload(file: FileStorage, upload_folder: str, safe_filename: str) -> Tuple[str, str]:
    """
    Write an already-validated upload to disk

    Args:
        file: FileStorage from request.files
        upload_folder: Destination directory
        safe_filename: Sanitized client filename (extension source)

    Returns:
        Tuple of (stored_filename, absolute_path)
    """
    os.makedirs(upload_folder, exist_ok=True)
    stored_filename = generate_upload_filename(safe_filename)
    path = os.path.join(upload_folder, stored_filename)

    file.seek(0)
    file.save(path)
    logger.info(f"Saved upload {stored_filename} ({os.path.getsize(path)} bytes)")
    return stored_filename, path


def upload_url(stored_filename: str, prefix: str = '/uploads') -> str:
    return f"{prefix.rstrip('/')}/{stored_filename}"


def remove_upload(path: str) -> bool:
    """Delete a stored upload; a missing file counts as removed"""
    try:
        os.remove(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.error(f"Failed to remove upload {path}: {e}")
        return False
    logger.info(f"Removed upload {os.path.basename(path)}")
    return True


def resolve_upload_path(image_url: str, upload_folder: str, prefix: str = '/uploads') -> Optional[str]:
    """
    Map an image URL back to a file inside the upload folder

    Returns:
        Absolute path, or None for URLs that do not point into the folder
        (seeded /assets images, external links, traversal attempts)
    """
    url_prefix = prefix.rstrip('/') + '/'
    if not image_url or not image_url.startswith(url_prefix):
        return None

    relative = image_url[len(url_prefix):]
    folder = os.path.realpath(upload_folder)
    path = os.path.realpath(os.path.join(folder, relative))

    if os.path.dirname(path) != folder:
        return None
    return path
