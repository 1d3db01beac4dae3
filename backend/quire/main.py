"""
Quire Backend: Composition Root
================================

What:  Wires settings, database and services together and manages their
       lifecycle.
How:   build_container() creates every service with its collaborators
       injected; lifespan() wraps startup and shutdown around a container.
Who:   Whatever process hosts the image services (an ASGI app, a worker,
       the test suite).

Lifecycle:
    Startup:
    1. Initialize logging
    2. Create tables (only when DB_CREATE_SCHEMA is set)
    3. Ensure the root note exists and seed default options
    4. Log startup complete

    Shutdown:
    1. Wait for detached image commits to finish
    2. Dispose database engine (close all connections)
    3. Log shutdown complete

Example:
    async with lifespan() as container:
        saved = await container.image_service.save_image(
            "root", data, "photo.png", shrink_requested=True
        )
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from quire.config import Settings, settings as default_settings
from quire.database import Database
from quire.services.image_service import ImageService
from quire.services.note_service import NoteService
from quire.services.option_service import OptionService
from quire.services.protected_session_service import ProtectedSessionService
from quire.services.revision_service import NoteRevisionService

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # SQLAlchemy logs every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


class Container:
    """Every long-lived object of the backend, built once per process."""

    def __init__(self, settings: Settings, database: Optional[Database] = None):
        self.settings = settings
        self.database = database or Database(settings)
        self.note_service = NoteService()
        self.revision_service = NoteRevisionService()
        self.option_service = OptionService()
        self.protected_session = ProtectedSessionService(
            timeout_seconds=settings.protected_session_timeout,
        )
        self.image_service = ImageService(
            database=self.database,
            note_service=self.note_service,
            revision_service=self.revision_service,
            option_service=self.option_service,
            protected_session=self.protected_session,
        )


def build_container(settings: Optional[Settings] = None) -> Container:
    return Container(settings or default_settings)


async def startup(container: Container) -> None:
    """Prepare the database for use: schema (optional), root note, options."""
    settings = container.settings

    if settings.db_create_schema:
        await container.database.create_schema()
        logger.info("Database schema created")

    async with container.database.transaction() as session:
        await container.note_service.ensure_root_note(session)
        await container.option_service.seed_defaults(session, settings)


async def shutdown(container: Container) -> None:
    await container.image_service.wait_for_pending()
    await container.database.dispose()


@asynccontextmanager
async def lifespan(settings: Optional[Settings] = None) -> AsyncIterator[Container]:
    """Run startup, yield the container, run shutdown."""
    settings = settings or default_settings
    setup_logging(settings)
    logger.info("Quire backend starting up...")

    container = build_container(settings)
    await startup(container)
    logger.info("Quire backend ready")

    try:
        yield container
    finally:
        logger.info("Quire backend shutting down...")
        await shutdown(container)
        logger.info("Shutdown complete.")
