"""
Quire Backend: Database Session Management
===========================================

What:  Async SQLAlchemy engine, session factory and the transaction primitive.
Why:   Centralizes all database connection logic in one place.
How:   A `Database` handle owns one engine and one session factory. Services
       never create sessions themselves; they either receive a session per
       call or open one through `Database.transaction()`.
Who:   Created once by the composition root (quire.main) and injected into
       the services that need to open their own transactions.

Transaction primitive:
    `async with database.transaction() as session:` runs the enclosed block
    with all-or-nothing durability. The session is committed when the block
    exits normally and rolled back when anything inside raises; the exception
    is re-raised unchanged.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite URLs get SQLAlchemy's default pool because QueuePool arguments
    are not valid for the aiosqlite dialect.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from quire.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they register with a single
    metadata object, which Alembic reads for migrations and tests use for
    `create_all`.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    if settings.is_sqlite:
        return create_async_engine(
            settings.database_url,
            echo=settings.log_level == "DEBUG",
        )

    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


class Database:
    """
    Handle on the engine and session factory for one database.

    expire_on_commit=False: note objects returned from a committed
    transaction stay readable (note_id, title, mime) after the session closes.
    """

    def __init__(self, settings: Settings, engine: Optional[AsyncEngine] = None):
        self.engine = engine or build_engine(settings)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Run the enclosed block in one transaction.

        How it works:
            1. Creates a new session from the factory
            2. Yields it to the caller
            3. On success: commits
            4. On error: rolls back and re-raises
            5. Always: closes the session (returns connection to pool)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

    async def create_schema(self) -> None:
        """Create every table known to `Base.metadata` (dev and tests only)."""
        # Models must be imported so they register with the metadata
        import quire.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Gracefully close all connections in the pool."""
        await self.engine.dispose()
