"""
Quire Backend: Transform Pipeline Tests
========================================

What we test:
    ✅ Large PNG is downscaled to the max dimension and becomes jpg
    ✅ Animated GIF passes through untouched
    ✅ A resize that would grow the file is discarded
    ✅ No-shrink is the identity, and feeding output back in changes nothing
    ✅ Resize failures are logged and the upload is kept

How:
    The pipeline only needs a tunables loader, so it is tested without a
    database: an AsyncMock returns fixed tunables.
"""

import io
import logging
from unittest.mock import AsyncMock, patch

import pytest
from PIL import Image

from quire.schemas.image import ImageTunables
from quire.services.image_pipeline import TransformPipeline


@pytest.fixture
def loader(tunables):
    return AsyncMock(return_value=tunables)


@pytest.fixture
def pipeline(loader):
    return TransformPipeline(loader)


class TestShrinking:

    @pytest.mark.asyncio
    async def test_large_png_is_resized_to_jpg(self, pipeline, large_png):
        result = await pipeline.process(large_png, "photo.png", shrink_requested=True)

        assert result.format.extension == "jpg"
        assert len(result.content) < len(large_png)
        with Image.open(io.BytesIO(result.content)) as img:
            assert img.size == (1000, 667)

    @pytest.mark.asyncio
    async def test_tunables_are_read_per_shrink(self, large_png):
        loader = AsyncMock(return_value=ImageTunables(max_width_height=300, jpeg_quality=60))
        result = await TransformPipeline(loader).process(large_png, "photo.png", True)

        loader.assert_awaited_once()
        with Image.open(io.BytesIO(result.content)) as img:
            assert img.size == (300, 200)

    @pytest.mark.asyncio
    async def test_animated_gif_is_untouched(self, pipeline, loader, animated_gif):
        result = await pipeline.process(animated_gif, "cat.gif", shrink_requested=True)

        assert result.content == animated_gif
        assert result.format.extension == "gif"
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_growth_falls_back_to_original(self, pipeline, tiny_png):
        result = await pipeline.process(tiny_png, "icon.png", shrink_requested=True)

        assert result.content == tiny_png
        assert result.format.extension == "png"

    @pytest.mark.asyncio
    async def test_svg_is_never_resized(self, pipeline, loader, svg_document):
        result = await pipeline.process(svg_document, "drawing.svg", shrink_requested=True)

        assert result.content == svg_document
        assert result.format.extension == "svg"
        loader.assert_not_awaited()


class TestNoShrink:

    @pytest.mark.asyncio
    async def test_identity_when_not_requested(self, pipeline, loader, large_png):
        result = await pipeline.process(large_png, "photo.png", shrink_requested=False)

        assert result.content == large_png
        assert result.format.extension == "png"
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_output_fed_back_is_unchanged(self, pipeline, large_png):
        first = await pipeline.process(large_png, "photo.png", shrink_requested=True)
        second = await pipeline.process(first.content, "photo.png", shrink_requested=False)

        assert second.content == first.content
        assert second.format == first.format


class TestFailures:

    @pytest.mark.asyncio
    async def test_undecodable_bytes_keep_original(self, pipeline, caplog):
        garbage = b"\x00garbage that no decoder accepts" * 4
        caplog.set_level(logging.ERROR, logger="quire.services.image_pipeline")

        result = await pipeline.process(garbage, "broken.png", shrink_requested=True)

        assert result.content == garbage
        assert result.format.extension == "jpg"
        assert "Failed to resize image 'broken.png'" in caplog.text

    @pytest.mark.asyncio
    async def test_tunables_failure_keeps_original(self, large_png, caplog):
        loader = AsyncMock(side_effect=RuntimeError("options unavailable"))
        caplog.set_level(logging.ERROR, logger="quire.services.image_pipeline")

        result = await TransformPipeline(loader).process(large_png, "photo.png", True)

        assert result.content == large_png
        assert result.format.extension == "png"
        assert "Failed to resize image 'photo.png'" in caplog.text

    @pytest.mark.asyncio
    async def test_resizer_crash_keeps_original(self, pipeline, large_png):
        with patch(
            "quire.services.image_resizer.resize",
            side_effect=MemoryError("too big"),
        ):
            result = await pipeline.process(large_png, "photo.png", True)

        assert result.content == large_png
        assert result.format.extension == "png"

    @pytest.mark.asyncio
    async def test_image_past_pixel_limit_keeps_original(self, pipeline, oversized_png, caplog):
        caplog.set_level(logging.ERROR, logger="quire.services.image_pipeline")

        result = await pipeline.process(oversized_png, "huge.png", shrink_requested=True)

        assert result.content == oversized_png
        assert result.format.extension == "png"
        assert "Failed to resize image 'huge.png'" in caplog.text
