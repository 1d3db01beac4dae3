"""
Quire Backend: Image Transform Pipeline
========================================

What:  Turns uploaded bytes into the bytes that get stored, plus their format.
How:   detect → should_shrink → resize (worker thread) → re-detect.
Who:   ImageService, inside the detached process-and-commit task.

Pipeline:
    ┌──────────┐    ┌──────────────┐    ┌───────────┐    ┌───────────┐
    │  detect  │───▶│ should_shrink│───▶│  resize   │───▶│ re-detect │
    └──────────┘    └──────────────┘    └───────────┘    └───────────┘
                          │ False             │ failed / not smaller
                          └───────────────────┴──▶ keep uploaded bytes

Guarantees:
    - process() never raises because of the image itself: decode failures and
      any other resize failure are logged and the upload is kept.
    - A resized result is only kept when it is strictly smaller. PNG → JPEG
      can inflate small or flat images.
    - When shrinking is not allowed the output bytes are the input bytes.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from quire.schemas.image import ImageTunables, ProcessedAsset
from quire.services import image_format, image_resizer, shrink_policy

logger = logging.getLogger(__name__)

TunablesLoader = Callable[[], Awaitable[ImageTunables]]


class TransformPipeline:
    """
    Stateless apart from where it reads its tunables from.

    The loader is awaited on every shrink so option changes apply to the
    next upload without a restart.
    """

    def __init__(self, load_tunables: TunablesLoader):
        self._load_tunables = load_tunables

    async def process(
        self,
        content: bytes,
        original_name: str,
        shrink_requested: bool,
    ) -> ProcessedAsset:
        """
        Run the full pipeline on one upload.

        Args:
            content: Uploaded bytes
            original_name: Client filename, used for logging only
            shrink_requested: Caller's wish to recompress; the policy may veto it

        Returns:
            ProcessedAsset with the final bytes and their re-detected format
        """
        original_format = image_format.detect(content)
        shrink = shrink_policy.should_shrink(shrink_requested, original_format, content)

        final_content = await self._shrink(content, original_name) if shrink else content

        return ProcessedAsset(
            content=final_content,
            format=image_format.detect(final_content),
        )

    async def _shrink(self, content: bytes, original_name: str) -> bytes:
        try:
            tunables = await self._load_tunables()
            resized = await asyncio.to_thread(
                image_resizer.resize,
                content,
                tunables.max_width_height,
                tunables.jpeg_quality,
            )
        except Exception:
            logger.error("Failed to resize image '%s'", original_name, exc_info=True)
            return content

        if len(resized) >= len(content):
            logger.info(
                "Resizing '%s' did not reduce its size (%d → %d bytes), keeping original",
                original_name,
                len(content),
                len(resized),
            )
            return content

        logger.info(
            "Shrunk image '%s': %d → %d bytes",
            original_name,
            len(content),
            len(resized),
        )
        return resized
