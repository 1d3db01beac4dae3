"""
Quire Backend: Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Settings pointing at a temporary SQLite database
    ├── container: Fully wired services on a migrated, seeded database
    ├── tunables: Fixed resize settings for pipeline tests
    └── image factories: Pillow-generated PNG/JPEG/GIF/WEBP/SVG bytes
"""

import io
import os
import random

# Must happen before quire.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from PIL import Image

from quire.config import Settings
from quire.main import Container, shutdown, startup
from quire.schemas.image import ImageTunables


# ══════════════════════════════════════════════════════════════════════════
# Image Builders
# ══════════════════════════════════════════════════════════════════════════

def encode(image: Image.Image, fmt: str, **kwargs) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


def noise_image(width: int, height: int, mode: str = "RGB", seed: int = 1) -> Image.Image:
    """Random pixels: compresses badly as PNG, so JPEG re-encoding always wins."""
    channels = len(mode)
    rng = random.Random(seed)
    return Image.frombytes(mode, (width, height), rng.randbytes(width * height * channels))


def animated(fmt: str, size=(40, 40), **kwargs) -> bytes:
    frames = [
        Image.new("RGB", size, color)
        for color in ((255, 0, 0), (0, 255, 0), (0, 0, 255))
    ]
    return encode(frames[0], fmt, save_all=True, append_images=frames[1:], duration=100, loop=0, **kwargs)


SVG_DOCUMENT = (
    b'<?xml version="1.0" encoding="UTF-8"?>\n'
    b"<!-- drawn by hand -->\n"
    b'<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10">'
    b'<rect width="10" height="10" fill="red"/></svg>\n'
)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def large_png() -> bytes:
    """3000×2000 PNG of random noise."""
    return encode(noise_image(3000, 2000), "PNG", compress_level=1)


@pytest.fixture
def tiny_png() -> bytes:
    """50×50 flat PNG, a few hundred bytes: any JPEG of it is bigger."""
    return encode(Image.new("RGB", (50, 50), (30, 120, 200)), "PNG")


@pytest.fixture
def small_jpeg() -> bytes:
    return encode(noise_image(64, 48), "JPEG", quality=90)


@pytest.fixture
def animated_gif() -> bytes:
    return animated("GIF")


@pytest.fixture
def animated_png() -> bytes:
    """APNG: detected as 'png' but has three frames."""
    return animated("PNG")


@pytest.fixture
def static_gif() -> bytes:
    return encode(Image.new("P", (20, 20), 3), "GIF")


@pytest.fixture
def webp_image() -> bytes:
    return encode(noise_image(40, 40), "WEBP", quality=80)


@pytest.fixture
def bmp_image() -> bytes:
    return encode(Image.new("RGB", (16, 16), (1, 2, 3)), "BMP")


@pytest.fixture
def tiff_image() -> bytes:
    return encode(Image.new("RGB", (16, 16), (4, 5, 6)), "TIFF")


@pytest.fixture
def oversized_png() -> bytes:
    """20000×10000 bilevel PNG: small on disk, but past Pillow's pixel limit when opened."""
    return encode(Image.new("1", (20000, 10000)), "PNG")


@pytest.fixture
def svg_document() -> bytes:
    return SVG_DOCUMENT


@pytest.fixture
def tunables() -> ImageTunables:
    return ImageTunables(max_width_height=1000, jpeg_quality=75)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings for an isolated SQLite database in the test's tmp dir."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'quire.db'}",
        db_create_schema=True,
        image_max_width_height=1000,
        image_jpeg_quality=75,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def container(test_settings):
    """
    Wired services on a fresh database with the root note and default options.

    Teardown waits for detached image commits before disposing the engine.
    """
    c = Container(test_settings)
    await startup(c)
    yield c
    await shutdown(c)
