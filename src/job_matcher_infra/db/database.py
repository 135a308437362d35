"""Engine, session factory and schema setup for the posting database."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from job_matcher_core.config.settings import Settings
from job_matcher_infra.db.models import Base

logger = structlog.get_logger()


def create_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine for the configured backend.

    The postgres pool is sized to the batch write concurrency so a full
    batch of concurrent saves never waits on a connection.
    """
    if settings.db_backend == "sqlite":
        return create_async_engine(
            settings.database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_size=settings.max_concurrent_writes,
        max_overflow=settings.max_concurrent_writes,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessions keep loaded rows usable after commit."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create the postings table if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def connect(
    settings: Settings, create_schema: bool | None = None
) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield a session factory for the configured database.

    The schema is created on sqlite unless create_schema says otherwise;
    postgres schemas are managed outside this project. The engine is
    disposed on exit.
    """
    engine = create_engine(settings)
    if create_schema is None:
        create_schema = settings.db_backend == "sqlite"
    try:
        if create_schema:
            await init_db(engine)
        logger.debug("database_connected", backend=settings.db_backend)
        yield create_session_factory(engine)
    finally:
        await engine.dispose()
