"""
Image inspection utility.
Reads format and pixel dimensions of uploaded images with Pillow.
"""
import io
import logging
from typing import Optional
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


def get_image_info(image_bytes: bytes) -> Optional[dict]:
    """
    Get basic information about an image.

    Args:
        image_bytes: Image file bytes

    Returns:
        dict: Image information (format, width, height, mode, bytes) or None if
        the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            width, height = image.size
            return {
                'format': image.format,
                'width': width,
                'height': height,
                'mode': image.mode,
                'bytes': len(image_bytes)
            }
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug(f"Error getting image info: {str(e)}")
        return None
