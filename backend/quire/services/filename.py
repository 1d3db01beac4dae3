"""
Quire Backend: Upload Filename Sanitizer
=========================================

What:  Turns a client-supplied filename into one that is safe to use as a
       note title and inside the image URL (api/images/{note_id}/{file_name}).

Rules, applied in order:
    1. Path separators and characters reserved on common filesystems
       (/ ? < > \\ : * | ") are removed
    2. C0/C1 control characters are removed
    3. Names made only of dots ('.', '..') are rejected
    4. Windows device names (con, prn, aux, nul, com1, lpt1, ...) are rejected
    5. Trailing dots and spaces are removed
    6. The result is truncated to 255 UTF-8 bytes
    An empty result becomes FALLBACK_FILENAME.
"""

import re

FALLBACK_FILENAME = "image"
MAX_FILENAME_BYTES = 255

_ILLEGAL_RE = re.compile(r'[/?<>\\:*|"]')
_CONTROL_RE = re.compile(r"[\x00-\x1f\x80-\x9f]")
_RESERVED_RE = re.compile(r"^\.+$")
_WINDOWS_RESERVED_RE = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_TRAILING_RE = re.compile(r"[. ]+$")


def _truncate_utf8(value: str, max_bytes: int) -> str:
    encoded = value.encode("utf-8")
    if len(encoded) <= max_bytes:
        return value
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def sanitize_filename(name: str) -> str:
    """Return a filesystem and URL safe version of `name`."""
    cleaned = _ILLEGAL_RE.sub("", name)
    cleaned = _CONTROL_RE.sub("", cleaned)
    cleaned = _RESERVED_RE.sub("", cleaned)
    cleaned = _WINDOWS_RESERVED_RE.sub("", cleaned)
    cleaned = _WINDOWS_TRAILING_RE.sub("", cleaned)
    cleaned = _truncate_utf8(cleaned, MAX_FILENAME_BYTES)

    if not cleaned.strip():
        return FALLBACK_FILENAME
    return cleaned
