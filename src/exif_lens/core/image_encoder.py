"""
image_encoder.py: Turn raw image bytes into the base64 payload sent for inference.

By default the bytes are passed through untouched together with their original
content type. When a maximum size is configured the image is downscaled with
Pillow so that its pixel count approximates `size`x`size` (keeping the aspect
ratio, the short side rounded to a multiple of 32) and re-encoded as JPEG.

Supports JPEG, PNG, GIF, WebP and HEIC (requires pillow-heif) for downscaling.
"""

import base64
import io
from dataclasses import dataclass
from math import sqrt
from typing import Optional, Tuple

try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
except ImportError:
    pass

from PIL import Image, UnidentifiedImageError

from ..utils.log_utils import get_logger
from .errors import EncodingError

logger = get_logger(__name__)


@dataclass(frozen=True)
class EncodedImage:
    """Base64 payload plus the content type it must be sent with."""
    data: str
    content_type: str


def target_dimensions(width: int, height: int, size: int) -> Tuple[int, int]:
    """Dimensions with roughly size**2 pixels, same aspect ratio, short side a multiple of 32."""
    aspect_ratio = width / height
    new_w, new_h = sqrt(size**2 * aspect_ratio), sqrt(size**2 / aspect_ratio)

    smaller_side = max(32, int(round(min(new_w, new_h) / 32) * 32))
    if new_w < new_h:
        return smaller_side, int(round(smaller_side / aspect_ratio))
    return int(round(smaller_side * aspect_ratio)), smaller_side


def downscale_to_jpeg(data: bytes, size: int) -> bytes:
    """Resize image bytes to approximately `size`x`size` pixels and return JPEG bytes."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as err:
        raise EncodingError(f"Could not decode image: {err}") from err

    w, h = img.size
    if w * h > size * size:
        img = img.resize(target_dimensions(w, h, size), resample=Image.Resampling.LANCZOS)
    if img.mode != "RGB":
        img = img.convert("RGB")
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG")
    return buffer.getvalue()


def encode_image(data: bytes, content_type: str, max_size: Optional[int] = None) -> EncodedImage:
    """Encode raw bytes for inference, optionally downscaling first."""
    if not data:
        raise EncodingError("Image is empty")
    if max_size:
        logger.debug("Downscaling %d bytes of %s to ~%dpx", len(data), content_type, max_size)
        data = downscale_to_jpeg(data, max_size)
        content_type = "image/jpeg"
    try:
        b64 = base64.b64encode(data).decode("ascii")
    except (TypeError, ValueError) as err:
        raise EncodingError(f"Could not encode image: {err}") from err
    return EncodedImage(data=b64, content_type=content_type)
