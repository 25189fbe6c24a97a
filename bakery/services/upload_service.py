"""
Local upload storage for gallery images and order reference photos.
Files are written to UPLOAD_DIR and served byte-for-byte under UPLOAD_URL_PREFIX.
"""
import logging
import re
import secrets
import time
from pathlib import Path
from typing import List

from bakery.config import Settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


class UploadError(ValueError):
    """Raised when an uploaded file is rejected (type or size)."""


def ensure_upload_dir(upload_dir: Path) -> Path:
    """
    Create the upload directory if it does not exist.

    Raises:
        OSError: If the directory cannot be created
    """
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Error creating uploads directory {upload_dir}: {str(e)}")
        raise
    return upload_dir


def build_storage_name(original_name: str) -> str:
    """
    Build a collision-resistant storage name for an upload.

    Example: "My Cake!.JPG" -> "1760000000000-123456789-My_Cake_.jpg"
    """
    path = Path(original_name or "upload")
    extension = path.suffix.lower()
    safe_name = _UNSAFE_CHARS.sub("_", path.stem) or "upload"
    timestamp = int(time.time() * 1000)
    random_part = secrets.randbelow(10 ** 9)
    return f"{timestamp}-{random_part}-{safe_name}{extension}"


def validate_upload(content_type: str, size: int, settings: Settings) -> None:
    """
    Check the declared mime type and size of an upload.

    Raises:
        UploadError: If the type is not allowed, the file is empty or too large
    """
    allowed: List[str] = [t.lower() for t in settings.ALLOWED_IMAGE_TYPES]
    if not content_type or content_type.lower() not in allowed:
        raise UploadError(f"Invalid file type: {content_type or 'unknown'}")
    if size == 0:
        raise UploadError("Uploaded file is empty")
    if size > settings.max_upload_bytes:
        raise UploadError(f"File too large: maximum size is {settings.MAX_UPLOAD_SIZE_MB}MB")


def save_upload(content: bytes, original_name: str, settings: Settings) -> str:
    """
    Write upload bytes to the upload directory.

    Returns:
        str: The storage filename

    Raises:
        OSError: If the directory or file cannot be written
    """
    upload_dir = ensure_upload_dir(Path(settings.UPLOAD_DIR))
    filename = build_storage_name(original_name)
    (upload_dir / filename).write_bytes(content)
    logger.info(f"Stored upload {original_name!r} as {filename} ({len(content):,} bytes)")
    return filename


def delete_upload(filename: str, settings: Settings) -> bool:
    """
    Remove a stored upload.

    Failures are logged and never raised: metadata deletion has already happened
    by the time this runs.

    Returns:
        bool: True if a file was removed
    """
    upload_dir = Path(settings.UPLOAD_DIR)
    filepath = upload_dir / Path(filename).name
    try:
        filepath.unlink()
        logger.info(f"Deleted upload file: {filepath}")
        return True
    except FileNotFoundError:
        logger.warning(f"Upload file already missing: {filepath}")
        return False
    except OSError as e:
        logger.error(f"Failed to delete upload file {filepath}: {str(e)}", exc_info=True)
        return False
