"""
Quire Backend: Option Service
==============================

What:  Reads and writes runtime options stored in the `options` table.
Who:   ImageService (resize tunables) and the composition root (seeding).
How:   Stateless; every method receives the session it should run in.

Known options:
    imageMaxWidthHeight  → longest edge in pixels after shrinking
    imageJpegQuality     → JPEG quality (0-100) used when shrinking

Seeding:
    On startup the values from Settings are inserted for options that do not
    exist yet. Existing rows are never overwritten, so changes made at runtime
    survive restarts.
"""

import logging
from typing import Dict

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quire.config import Settings
from quire.exceptions import DatabaseError, NotFoundError, ValidationError
from quire.models.option import Option
from quire.schemas.image import ImageTunables

logger = logging.getLogger(__name__)

IMAGE_MAX_WIDTH_HEIGHT = "imageMaxWidthHeight"
IMAGE_JPEG_QUALITY = "imageJpegQuality"


class OptionService:

    async def get_option(self, session: AsyncSession, name: str) -> str:
        """
        Raw string value of an option.

        Raises:
            NotFoundError: no option with this name
            DatabaseError: the query failed
        """
        try:
            result = await session.execute(select(Option).where(Option.name == name))
            option = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error reading option %s: %s", name, str(e))
            raise DatabaseError(
                message="Could not read option.",
                context={"option": name, "error_type": type(e).__name__},
            ) from e

        if option is None:
            raise NotFoundError(resource="option", resource_id=name)
        return option.value

    async def get_option_int(self, session: AsyncSession, name: str) -> int:
        """
        Integer value of an option.

        Raises:
            ValidationError: the stored value is not an integer
        """
        value = await self.get_option(session, name)
        try:
            return int(value)
        except ValueError:
            raise ValidationError(
                message=f"Option '{name}' is not an integer: '{value}'",
                field=name,
                context={"value": value},
            )

    async def set_option(self, session: AsyncSession, name: str, value) -> None:
        """Create or update an option. Values are stored as text."""
        option = await session.get(Option, name)
        if option is None:
            session.add(Option(name=name, value=str(value)))
        else:
            option.value = str(value)
        await session.flush()
        logger.info("Option %s set to %s", name, value)

    async def seed_defaults(self, session: AsyncSession, settings: Settings) -> Dict[str, str]:
        """
        Insert missing options with their values from Settings.

        Returns:
            The options that were created, name → value
        """
        defaults = {
            IMAGE_MAX_WIDTH_HEIGHT: str(settings.image_max_width_height),
            IMAGE_JPEG_QUALITY: str(settings.image_jpeg_quality),
        }
        created: Dict[str, str] = {}
        for name, value in defaults.items():
            if await session.get(Option, name) is None:
                session.add(Option(name=name, value=value))
                created[name] = value
        await session.flush()

        if created:
            logger.info("Seeded default options: %s", ", ".join(sorted(created)))
        return created

    async def get_image_tunables(self, session: AsyncSession) -> ImageTunables:
        """Current resize settings for the image pipeline."""
        return ImageTunables(
            max_width_height=await self.get_option_int(session, IMAGE_MAX_WIDTH_HEIGHT),
            jpeg_quality=await self.get_option_int(session, IMAGE_JPEG_QUALITY),
        )
