"""Tests for engine and session setup."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from job_matcher_infra.db.database import connect, create_engine
from job_matcher_infra.db.models import PostingModel
from job_matcher_infra.store import PostingStore, open_store
from tests.mocks.mock_factories import make_posting
from tests.mocks.mock_settings import make_real_settings


@pytest.mark.unit
class TestCreateEngine:
    """Test backend-specific engine options."""

    @pytest.mark.asyncio
    async def test_sqlite_engine(self, tmp_path: Path) -> None:
        """The sqlite backend uses the aiosqlite driver from the URL."""
        engine = create_engine(make_real_settings(tmp_path))
        try:
            assert engine.url.drivername == "sqlite+aiosqlite"
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_postgres_pool_follows_write_concurrency(self, tmp_path: Path) -> None:
        """The postgres pool holds as many connections as concurrent writes."""
        pytest.importorskip("asyncpg")
        settings = make_real_settings(tmp_path, db_backend="postgres", max_concurrent_writes=8)
        engine = create_engine(settings)
        try:
            assert engine.url.drivername == "postgresql+asyncpg"
            assert engine.pool.size() == 8  # type: ignore[attr-defined]
        finally:
            await engine.dispose()


@pytest.mark.unit
class TestConnect:
    """Test the connect context manager."""

    @pytest.mark.asyncio
    async def test_sqlite_schema_created_by_default(self, tmp_path: Path) -> None:
        """The postings table exists as soon as the connection is open."""
        async with connect(make_real_settings(tmp_path)) as session_factory:
            async with session_factory() as session:
                count = await session.scalar(select(func.count()).select_from(PostingModel))
        assert count == 0

    @pytest.mark.asyncio
    async def test_schema_creation_can_be_skipped(self, tmp_path: Path) -> None:
        """With create_schema=False an empty database has no postings table."""
        settings = make_real_settings(tmp_path)
        async with connect(settings, create_schema=False) as session_factory:
            async with session_factory() as session:
                with pytest.raises(OperationalError):
                    await session.scalar(select(func.count()).select_from(PostingModel))

    @pytest.mark.asyncio
    async def test_data_survives_reconnect(self, tmp_path: Path) -> None:
        """A second connection to the same file sees rows written by the first."""
        settings = make_real_settings(tmp_path)
        async with open_store(settings) as store:
            await store.save(make_posting())

        async with open_store(settings) as store:
            recent = await store.recent_postings()
        assert [p.company_name for p in recent] == ["한빛소프트"]


@pytest.mark.unit
class TestOpenStore:
    """Test building a store from settings."""

    @pytest.mark.asyncio
    async def test_store_uses_settings(self, tmp_path: Path) -> None:
        """Timeout, threshold and audit length come from settings."""
        settings = make_real_settings(
            tmp_path,
            store_timeout_seconds=3.0,
            recommend_threshold=80,
            audit_description_chars=12,
        )
        async with open_store(settings) as store:
            assert isinstance(store, PostingStore)
            assert store._timeout == 3.0
            assert store._min_recommended_score == 80
            assert store._truncate("x" * 20) == "x" * 12 + "..."
