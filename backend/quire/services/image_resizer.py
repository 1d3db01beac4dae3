"""
Quire Backend: Image Resizer
=============================

What:  Aspect-preserving downscale and lossy JPEG re-encode of raster images.
How:   Pillow decodes the bytes, the longest edge is capped at `max_dimension`,
       transparency is flattened onto white and the result is saved as JPEG.
Who:   TransformPipeline, inside a worker thread (this is CPU-bound work).

Geometry rules (single pass, strict comparisons):
    width > height and width > max  → width = max, height scaled
    else height > max               → height = max, width scaled
    else                            → no geometric change

    3000×2000, max 1000 → 1000×667
    2000×3000, max 1000 → 667×1000
    1000×1000, max 1000 → unchanged

Why white:
    JPEG has no alpha channel. Left to the encoder, transparent pixels come
    out black; notes are displayed on a white page, so transparent areas are
    composited onto opaque white instead.
"""

import io
import logging
from typing import Optional, Tuple

from PIL import Image, ImageOps

from quire.exceptions import ImageDecodeError

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "JPEG"
BACKGROUND_COLOR = (255, 255, 255)


def target_size(width: int, height: int, max_dimension: int) -> Optional[Tuple[int, int]]:
    """New (width, height) for the geometry rules above, or None to keep the size."""
    if width > height and width > max_dimension:
        return max_dimension, max(1, round(height * max_dimension / width))
    if height > max_dimension:
        return max(1, round(width * max_dimension / height)), max_dimension
    return None


def flatten_on_white(image: Image.Image) -> Image.Image:
    """Return an RGB copy of `image` with any transparency composited onto white."""
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")

    if image.mode in ("RGBA", "LA", "PA"):
        image = image.convert("RGBA")
        background = Image.new("RGB", image.size, BACKGROUND_COLOR)
        background.paste(image, mask=image.getchannel("A"))
        return background

    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _decode(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(
            message=f"Could not decode image: {e}",
            context={"size": len(data), "error_type": type(e).__name__},
        ) from e
    # Camera uploads: the stored pixel grid is sideways until EXIF is applied
    return ImageOps.exif_transpose(image)


def resize(data: bytes, max_dimension: int, quality: int) -> bytes:
    """
    Downscale `data` and re-encode it as JPEG.

    Args:
        data: Raster image bytes (any format Pillow decodes)
        max_dimension: Longest allowed edge in pixels
        quality: JPEG quality, 0-100

    Returns:
        JPEG bytes. May be larger than the input; the caller decides
        whether to keep them.

    Raises:
        ImageDecodeError: the bytes are not a decodable raster image
    """
    image = _decode(data)
    width, height = image.size

    new_size = target_size(width, height, max_dimension)
    if new_size is not None:
        image = image.resize(new_size, Image.Resampling.LANCZOS)
        logger.debug("Resized %dx%d → %dx%d (max=%d)", width, height, *new_size, max_dimension)

    image = flatten_on_white(image)

    buf = io.BytesIO()
    image.save(buf, format=OUTPUT_FORMAT, quality=quality, optimize=True)
    return buf.getvalue()
