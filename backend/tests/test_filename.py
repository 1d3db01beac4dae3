"""
Quire Backend: Filename Sanitizer Tests
========================================
"""

import pytest

from quire.services.filename import FALLBACK_FILENAME, MAX_FILENAME_BYTES, sanitize_filename


@pytest.mark.parametrize(
    "name, expected",
    [
        ("photo.png", "photo.png"),
        ("my photo (1).jpg", "my photo (1).jpg"),
        ('a/b\\c:d*e?f"g<h>i|j.png', "abcdefghij.png"),
        ("tab\there.png", "tabhere.png"),
        ("trailing. . ", "trailing"),
        ("résumé.png", "résumé.png"),
    ],
)
def test_sanitize(name, expected):
    assert sanitize_filename(name) == expected


@pytest.mark.parametrize("name", ["", "   ", "..", ".", "con", "NUL.txt", "lpt1", "///"])
def test_unusable_names_fall_back(name):
    assert sanitize_filename(name) == FALLBACK_FILENAME


def test_long_names_are_truncated_on_utf8_boundary():
    name = "é" * 200 + ".png"
    cleaned = sanitize_filename(name)

    assert len(cleaned.encode("utf-8")) <= MAX_FILENAME_BYTES
    assert set(cleaned) == {"é"}
