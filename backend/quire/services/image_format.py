"""
Quire Backend: Image Format Detection
======================================

What:  Classifies raw bytes into an ImageFormat and derives the note mime.
How:   Strict order:
           1. SVG check on the text content (vector images are XML)
           2. python-magic reads the header bytes for a raster signature
           3. Nothing matched → optimistic 'jpg' default
Who:   TransformPipeline, before and after the shrink step.

Why an optimistic default:
    Detection must never fail an upload. A few exotic containers that libmagic
    does not know are still stored; they are just labelled image/jpg, and
    browsers sniff the real type when rendering.
"""

import logging
import re
from typing import Optional

import magic

from quire.schemas.image import ImageFormat

logger = logging.getLogger(__name__)

SVG_EXTENSION = "svg"

# Named fallback for byte streams with no recognised signature
DEFAULT_EXTENSION = "jpg"

# libmagic mime → extension of the raster formats we recognise
RASTER_MIME_EXTENSIONS = {
    "image/png": "png",
    "image/apng": "png",
    "image/jpeg": "jpg",
    "image/pjpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/x-ms-bmp": "bmp",
    "image/tiff": "tif",
    "image/x-icon": "ico",
    "image/vnd.microsoft.icon": "ico",
    "image/avif": "avif",
    "image/heic": "heic",
    "image/heif": "heic",
    "image/vnd.adobe.photoshop": "psd",
    "image/jp2": "jp2",
    "image/jpx": "jpx",
    "image/jpm": "jpm",
    "image/jxr": "jxr",
    "image/vnd.ms-photo": "jxr",
    "image/x-canon-cr2": "cr2",
    "image/flif": "flif",
    "image/bpg": "bpg",
}

# Only the head of the document is inspected for the SVG root element
_SVG_SNIFF_BYTES = 64 * 1024

_XML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_SVG_DOCUMENT_RE = re.compile(
    r"^\s*"
    r"(?:<\?xml[^>]*>\s*)?"
    r"(?:<!doctype\s+svg[^>\[]*(?:\[[^\]]*\])?\s*>\s*)?"
    r"<svg[\s>/]",
    re.IGNORECASE,
)

# A root element that closes itself: <svg ... />
_SVG_SELF_CLOSING_RE = re.compile(r"<svg\b[^<>]*/>$", re.IGNORECASE)


def is_svg(data: bytes) -> bool:
    """
    True when `data` is an SVG document.

    The document must be text (no NUL bytes), may start with an XML
    declaration, comments and an SVG doctype, and its root element must be
    <svg>. The closing tag is only required for documents small enough to be
    inspected completely.
    """
    head = data[:_SVG_SNIFF_BYTES]
    if not head or b"\x00" in head:
        return False

    text = head.decode("utf-8", errors="ignore").lstrip("\ufeff")
    text = _XML_COMMENT_RE.sub("", text)
    if not _SVG_DOCUMENT_RE.match(text):
        return False

    if len(data) <= _SVG_SNIFF_BYTES:
        stripped = text.rstrip()
        return stripped.lower().endswith("</svg>") or bool(_SVG_SELF_CLOSING_RE.search(stripped))
    return True


def detect_raster_extension(data: bytes) -> Optional[str]:
    """Extension for a known raster signature, or None."""
    mime_type = magic.from_buffer(data[:8192], mime=True)
    return RASTER_MIME_EXTENSIONS.get(mime_type)


def detect(data: bytes) -> ImageFormat:
    """
    Classify `data`. Never raises, never returns an empty extension.

    Returns:
        ImageFormat('svg'), ImageFormat(<raster ext>) or ImageFormat('jpg')
    """
    if is_svg(data):
        return ImageFormat(extension=SVG_EXTENSION)

    extension = detect_raster_extension(data)
    if extension is not None:
        return ImageFormat(extension=extension)

    return default_format()


def default_format() -> ImageFormat:
    """The optimistic fallback used when no signature matches."""
    logger.debug("No image signature matched, defaulting to '%s'", DEFAULT_EXTENSION)
    return ImageFormat(extension=DEFAULT_EXTENSION)


def derive_mime(extension: str) -> str:
    """
    Note mime for an image extension.

        derive_mime("svg") == "image/svg+xml"
        derive_mime("PNG") == "image/png"
    """
    extension = extension.lower()
    if extension == SVG_EXTENSION:
        return "image/svg+xml"
    return f"image/{extension}"
