"""Image helpers shared by intake and the remote classifier.

All media type constants and preview helpers should be defined here.
"""
import base64
import io
from pathlib import Path

import structlog
from PIL import Image, UnidentifiedImageError

logger = structlog.get_logger()

# Canonical suffix -> media type map, used when a file arrives without one
SUPPORTED_FORMATS = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    ".heic": "image/heic",
}

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def is_image_media_type(media_type: str | None) -> bool:
    """Check if a declared media type names an image."""
    return bool(media_type) and media_type.lower().startswith("image/")


def guess_media_type(filename: str | None, declared: str | None = None) -> str:
    """Resolve the media type of an upload.

    The declared type wins; otherwise the filename suffix is looked up.
    """
    if declared:
        return declared
    if filename:
        return SUPPORTED_FORMATS.get(Path(filename).suffix.lower(), DEFAULT_MEDIA_TYPE)
    return DEFAULT_MEDIA_TYPE


def image_to_data_uri(content: bytes, media_type: str) -> str:
    """Encode image bytes as a base64 data URI for previews."""
    encoded = base64.b64encode(content).decode("utf-8")
    return f"data:{media_type};base64,{encoded}"


def get_image_dimensions(content: bytes) -> tuple[int, int] | None:
    """Read image dimensions from the header without decoding pixels.

    Returns:
        (width, height), or None if Pillow can't identify the data.
    """
    try:
        with Image.open(io.BytesIO(content)) as img:
            return img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.debug("image_dimensions_unavailable", error=str(e))
        return None
