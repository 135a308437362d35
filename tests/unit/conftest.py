"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from job_matcher_core.models.posting import Posting
from job_matcher_core.models.profile import CandidateProfile, default_profile
from job_matcher_engine.scoring.rubric import RubricEvaluator
from job_matcher_infra.db.database import connect
from job_matcher_infra.store import PostingStore
from tests.mocks.mock_factories import make_posting
from tests.mocks.mock_settings import make_real_settings, make_settings
from tests.mocks.mock_store import InMemoryPostingStore


@pytest.fixture
def mock_settings() -> MagicMock:
    """Return a MagicMock Settings with sensible defaults."""
    return make_settings()


@pytest.fixture
def profile() -> CandidateProfile:
    """Return the built-in candidate profile."""
    return default_profile()


@pytest.fixture
def evaluator(profile: CandidateProfile) -> RubricEvaluator:
    """Return an evaluator for the built-in profile."""
    return RubricEvaluator(profile)


@pytest.fixture
def sample_posting() -> Posting:
    """Return a complete, valid posting."""
    return make_posting()


@pytest.fixture
def memory_store() -> InMemoryPostingStore:
    """Return an empty in-memory posting store."""
    return InMemoryPostingStore()


@pytest.fixture
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Create a SQLite-backed session factory with the schema in place."""
    async with connect(make_real_settings(tmp_path)) as factory:
        yield factory


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> PostingStore:
    """Return a PostingStore over the test database."""
    return PostingStore(session_factory, timeout_seconds=5.0, audit_description_chars=20)
