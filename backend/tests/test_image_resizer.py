"""
Quire Backend: Image Resizer Tests
===================================

What we test:
    ✅ Geometry: landscape, portrait, square, strict comparisons
    ✅ Output is always JPEG
    ✅ Transparent pixels become white
    ✅ Undecodable input raises ImageDecodeError
"""

import io

import pytest
from PIL import Image

from quire.exceptions import ImageDecodeError
from quire.services.image_resizer import resize, target_size

from conftest import encode, noise_image


class TestTargetSize:

    def test_landscape_binds_width(self):
        assert target_size(3000, 2000, 1000) == (1000, 667)

    def test_portrait_binds_height(self):
        assert target_size(2000, 3000, 1000) == (667, 1000)

    def test_square_over_limit_binds_height(self):
        assert target_size(1500, 1500, 1000) == (1000, 1000)

    def test_exactly_at_limit_is_unchanged(self):
        assert target_size(1000, 800, 1000) is None
        assert target_size(800, 1000, 1000) is None

    def test_small_image_is_unchanged(self):
        assert target_size(50, 50, 1000) is None

    def test_extreme_ratio_keeps_one_pixel(self):
        assert target_size(10000, 1, 100) == (100, 1)


class TestResize:

    def test_downscales_and_encodes_jpeg(self):
        data = encode(noise_image(1200, 600), "PNG")
        out = resize(data, 300, 80)

        assert out[:3] == b"\xff\xd8\xff"
        with Image.open(io.BytesIO(out)) as img:
            assert img.format == "JPEG"
            assert img.size == (300, 150)

    def test_small_image_is_only_reencoded(self, tiny_png):
        out = resize(tiny_png, 1000, 75)
        with Image.open(io.BytesIO(out)) as img:
            assert img.size == (50, 50)
            assert img.format == "JPEG"

    def test_transparency_becomes_white(self):
        data = encode(Image.new("RGBA", (20, 20), (0, 0, 0, 0)), "PNG")
        out = resize(data, 1000, 95)
        with Image.open(io.BytesIO(out)) as img:
            r, g, b = img.convert("RGB").getpixel((10, 10))
            assert min(r, g, b) >= 250

    def test_opaque_pixels_keep_their_color(self):
        data = encode(Image.new("RGBA", (20, 20), (200, 0, 0, 255)), "PNG")
        out = resize(data, 1000, 95)
        with Image.open(io.BytesIO(out)) as img:
            r, g, b = img.convert("RGB").getpixel((10, 10))
            assert r > 180 and g < 30 and b < 30

    def test_palette_with_transparency(self):
        img = Image.new("P", (10, 10), 0)
        img.putpalette([0, 0, 0] * 256)
        data = encode(img, "PNG", transparency=0)
        out = resize(data, 1000, 95)
        with Image.open(io.BytesIO(out)) as result:
            assert min(result.convert("RGB").getpixel((5, 5))) >= 250

    def test_grayscale_is_converted(self):
        data = encode(Image.new("L", (30, 30), 128), "PNG")
        with Image.open(io.BytesIO(resize(data, 10, 75))) as img:
            assert img.mode == "RGB"
            assert img.size == (10, 10)

    @pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n truncated"])
    def test_undecodable_raises(self, data):
        with pytest.raises(ImageDecodeError):
            resize(data, 1000, 75)
