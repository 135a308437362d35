"""Tests for PostingStore against SQLite."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog.testing import capture_logs

from job_matcher_core.constants import AUDIT_LOGGER
from job_matcher_core.exceptions import PersistenceError, StoreTimeoutError
from job_matcher_core.interfaces import PostingStoreProtocol
from job_matcher_core.models.posting import Posting
from job_matcher_infra import store as store_module
from job_matcher_infra.db.models import PostingModel
from job_matcher_infra.store import PostingStore
from tests.mocks.mock_factories import make_match_result, make_posting, utc


@pytest.mark.unit
class TestSave:
    """Test saving postings."""

    @pytest.mark.asyncio
    async def test_save_assigns_id(self, store: PostingStore) -> None:
        """Saved postings come back with a store id."""
        saved = await store.save(make_posting())
        assert saved.id is not None
        assert saved.company_name == "한빛소프트"

    @pytest.mark.asyncio
    async def test_duplicate_url_raises(self, store: PostingStore) -> None:
        """A second save of the same URL violates the unique constraint."""
        await store.save(make_posting())
        with pytest.raises(PersistenceError):
            await store.save(make_posting(job_title="다른 공고"))

    @pytest.mark.asyncio
    async def test_postings_without_url_do_not_conflict(self, store: PostingStore) -> None:
        """Empty URLs are stored as NULL and never collide."""
        first = await store.save(make_posting(url=""))
        second = await store.save(make_posting(url=""))
        assert first.id != second.id
        assert second.url == ""

    @pytest.mark.asyncio
    async def test_save_timeout(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A save slower than the timeout raises StoreTimeoutError."""
        store = PostingStore(session_factory, timeout_seconds=0.05)

        async def slow_save(posting: Posting) -> Posting:
            await asyncio.sleep(1)
            return posting

        monkeypatch.setattr(store, "_save", slow_save)
        with pytest.raises(StoreTimeoutError):
            await store.save(make_posting())


@pytest.mark.unit
class TestExistingUrls:
    """Test URL de-duplication lookups."""

    @pytest.mark.asyncio
    async def test_empty_input_skips_database(self) -> None:
        """No URLs means no session is opened."""
        factory = MagicMock()
        store = PostingStore(factory)
        assert await store.existing_urls([]) == set()
        assert await store.existing_urls(["", ""]) == set()
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_stored_subset(self, store: PostingStore) -> None:
        """Only URLs already stored are returned."""
        await store.save(make_posting(url="https://a/1"))
        await store.save(make_posting(url="https://a/2"))

        found = await store.existing_urls(["https://a/2", "https://a/3"])
        assert found == {"https://a/2"}
        assert await store.existing_urls(["https://a/2", "https://a/3"]) == found

    @pytest.mark.asyncio
    async def test_failure_returns_empty_set(self) -> None:
        """Store errors are logged and reported as no known URLs."""
        factory = MagicMock(side_effect=OSError("database is locked"))
        store = PostingStore(factory)
        assert await store.existing_urls(["https://a/1"]) == set()


@pytest.mark.unit
class TestQueries:
    """Test listing postings."""

    @pytest.mark.asyncio
    async def test_recent_postings_newest_first(self, store: PostingStore) -> None:
        """Recent postings are ordered by scraped_at descending."""
        for day, name in [(1, "A"), (3, "C"), (2, "B")]:
            posting = make_posting(
                url=f"https://a/{day}", company_name=name, scraped_at=utc(2024, 1, day)
            )
            await store.save(posting)

        recent = await store.recent_postings(2)
        assert [p.company_name for p in recent] == ["C", "B"]

    @pytest.mark.asyncio
    async def test_null_columns_read_as_empty(
        self, store: PostingStore, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        """Rows written by other tools with NULL text columns read back as ''."""
        async with session_factory() as session:
            session.add(PostingModel(company_name="Acme", job_title="Engineer"))
            await session.commit()

        [posting] = await store.recent_postings()
        assert posting.job_location == ""
        assert posting.job_salary == ""
        assert posting.url == ""

    @pytest.mark.asyncio
    async def test_pending_postings_excludes_scored(self, store: PostingStore) -> None:
        """Scored postings are no longer pending."""
        first = await store.save(make_posting(url="https://a/1"))
        second = await store.save(make_posting(url="https://a/2"))
        await store.record_match(make_match_result(id=first.id))

        pending = await store.pending_postings()
        assert [p.id for p in pending] == [second.id]


@pytest.mark.unit
class TestRecordMatch:
    """Test writing match results."""

    @pytest.mark.asyncio
    async def test_unknown_posting_returns_false(self, store: PostingStore) -> None:
        """Updating an id that does not exist reports failure."""
        assert await store.record_match_result(999, 80, "reason", True) is False

    @pytest.mark.asyncio
    async def test_result_without_id_returns_false(self, store: PostingStore) -> None:
        """Results that never had a stored posting cannot be recorded."""
        assert await store.record_match(make_match_result(id=None)) is False

    @pytest.mark.asyncio
    async def test_partial_update_keeps_strength(self, store: PostingStore) -> None:
        """Omitting strength and weakness leaves earlier values in place."""
        saved = await store.save(make_posting())
        assert saved.id is not None
        await store.record_match_result(
            saved.id, 75, "first", True, strength="uses PyTorch", weakness="none"
        )
        assert await store.record_match_result(saved.id, 90, "second", True) is True

        [row] = await store.recommended_postings()
        assert row.score == 90
        assert row.reason == "second"
        assert row.strength == "uses PyTorch"
        assert row.weakness == "none"

    @pytest.mark.asyncio
    async def test_recommended_filter_and_order(self, store: PostingStore) -> None:
        """Only recommended rows at or above the threshold, best first."""
        for url, score, recommended in [
            ("https://a/1", 75, True),
            ("https://a/2", 92, True),
            ("https://a/3", 60, False),
            ("https://a/4", 72, False),
        ]:
            saved = await store.save(make_posting(url=url))
            assert saved.id is not None
            await store.record_match_result(saved.id, score, "r", recommended)

        rows = await store.recommended_postings()
        assert [r.score for r in rows] == [92, 75]
        assert all(r.apply_yn for r in rows)
        assert rows[0].url == "https://a/2"

    @pytest.mark.asyncio
    async def test_recommended_limit(self, store: PostingStore) -> None:
        """The limit caps the number of rows returned."""
        for i in range(3):
            saved = await store.save(make_posting(url=f"https://a/{i}"))
            assert saved.id is not None
            await store.record_match_result(saved.id, 80 + i, "r", True)

        assert len(await store.recommended_postings(limit=2)) == 2


@pytest.mark.unit
class TestMarkApplied:
    """Test the applied flag."""

    @pytest.mark.asyncio
    async def test_mark_applied(
        self, store: PostingStore, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        """Marking an existing posting sets is_applied."""
        saved = await store.save(make_posting())
        assert saved.id is not None
        assert await store.mark_applied(saved.id) is True

        async with session_factory() as session:
            model = await session.get(PostingModel, saved.id)
            assert model is not None
            assert model.is_applied is True

    @pytest.mark.asyncio
    async def test_mark_unknown_returns_false(self, store: PostingStore) -> None:
        """Unknown ids are reported as not updated."""
        assert await store.mark_applied(404) is False


@pytest.fixture
def audit_events(monkeypatch: pytest.MonkeyPatch) -> Iterator[list[dict[str, Any]]]:
    """Capture entries written to the store's audit channel."""
    with capture_logs() as events:
        # a fresh proxy so an earlier cached logger does not bypass the capture
        monkeypatch.setattr(store_module, "audit_log", structlog.get_logger(AUDIT_LOGGER))
        yield events


@pytest.mark.unit
class TestAuditTrail:
    """Test that every write leaves an audit entry."""

    @pytest.mark.asyncio
    async def test_save_is_audited(
        self, store: PostingStore, audit_events: list[dict[str, Any]]
    ) -> None:
        """A save records the new id and a shortened description."""
        posting = make_posting()
        saved = await store.save(posting)

        entry = next(e for e in audit_events if e["event"] == "posting_saved")
        assert entry["log_level"] == "info"
        assert entry["posting_id"] == saved.id
        assert entry["url"] == posting.url
        assert entry["description"] == posting.job_description[:20] + "..."

    @pytest.mark.asyncio
    async def test_match_result_is_audited(
        self, store: PostingStore, audit_events: list[dict[str, Any]]
    ) -> None:
        """A recorded match result carries the score and recommendation."""
        saved = await store.save(make_posting())
        assert saved.id is not None
        await store.record_match_result(saved.id, 81, "matched", True)

        entry = next(e for e in audit_events if e["event"] == "match_result_recorded")
        assert entry["posting_id"] == saved.id
        assert entry["score"] == 81
        assert entry["recommended"] is True
        assert entry["description"].endswith("...")
        assert len(entry["description"]) == 23

    @pytest.mark.asyncio
    async def test_mark_applied_is_audited(
        self, store: PostingStore, audit_events: list[dict[str, Any]]
    ) -> None:
        """Marking a posting applied is audited with its company and title."""
        saved = await store.save(make_posting())
        assert saved.id is not None
        await store.mark_applied(saved.id)

        entry = next(e for e in audit_events if e["event"] == "posting_marked_applied")
        assert entry["posting_id"] == saved.id
        assert entry["company"] == "한빛소프트"
        assert entry["description"] == saved.job_description[:20] + "..."

    @pytest.mark.asyncio
    async def test_failed_writes_are_not_audited(
        self, store: PostingStore, audit_events: list[dict[str, Any]]
    ) -> None:
        """Updates of unknown postings leave no audit entry."""
        await store.record_match_result(404, 50, "missing", False)
        await store.mark_applied(404)

        audited = {"match_result_recorded", "posting_marked_applied"}
        assert not [e for e in audit_events if e["event"] in audited]


@pytest.mark.unit
def test_audit_description_truncated(store: PostingStore) -> None:
    """Audit entries keep only the configured number of description characters."""
    assert store._truncate("a" * 30) == "a" * 20 + "..."
    assert store._truncate("short") == "short"
    assert store._truncate(None) == ""


@pytest.mark.unit
def test_store_satisfies_protocol(store: PostingStore) -> None:
    """PostingStore implements the interface the pipeline depends on."""
    assert isinstance(store, PostingStoreProtocol)
