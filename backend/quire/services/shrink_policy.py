"""
Quire Backend: Shrink Policy
=============================

What:  Decides whether an upload may be recompressed.
How:   Any of these forces False, whatever the caller asked for:
           - format is webp, svg or gif
           - the bytes are an animated image (GIF / WEBP / APNG)
       Otherwise the caller's flag is returned unchanged.

Why these formats:
    The resizer always re-encodes to JPEG. SVG is vector and lossless already,
    WebP and GIF are skipped because the JPEG conversion loses what people
    pick them for (alpha, palette art), and recompressing anything animated
    collapses it to its first frame.
"""

import io
import logging

from PIL import Image

from quire.schemas.image import ImageFormat

logger = logging.getLogger(__name__)

NON_SHRINKABLE_EXTENSIONS = frozenset({"webp", "svg", "gif"})


def is_animated(data: bytes) -> bool:
    """True when Pillow reports more than one frame for `data`."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return bool(getattr(image, "is_animated", False))
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError):
        # Unidentifiable, or over Pillow's pixel limit: treated as static
        return False


def should_shrink(requested: bool, image_format: ImageFormat, data: bytes) -> bool:
    """Return whether the pipeline may run the resizer on `data`."""
    if image_format.extension in NON_SHRINKABLE_EXTENSIONS:
        logger.debug("Not shrinking: '%s' images are kept as uploaded", image_format.extension)
        return False

    if is_animated(data):
        logger.debug("Not shrinking: animated image would lose its frames")
        return False

    return requested
