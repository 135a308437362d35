"""Posting store: persistence of postings and their match results.

Every call opens its own session and runs under a timeout. Failures are
logged and turned into a default return value, except ``save`` which
re-raises as ``PersistenceError`` so ingestion can react per item.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator, Awaitable, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TypeVar

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from job_matcher_core.config.settings import Settings
from job_matcher_core.constants import (
    APPLY_THRESHOLD,
    AUDIT_LOGGER,
    DEFAULT_RECENT_LIMIT,
    DEFAULT_RECOMMENDED_LIMIT,
    TOP_COMPANIES_LIMIT,
    UNSPECIFIED_BUCKET,
)
from job_matcher_core.exceptions import PersistenceError, StoreTimeoutError
from job_matcher_core.models.match import MatchResult
from job_matcher_core.models.posting import JobStatistics, Posting, RecommendedPosting
from job_matcher_infra.db.database import connect
from job_matcher_infra.db.models import PostingModel
from job_matcher_infra.db.repositories.posting_repo import PostingRepository

logger = structlog.get_logger()
audit_log = structlog.get_logger(AUDIT_LOGGER)

T = TypeVar("T")

# Errors a store call may surface; anything else is a programming error
_STORE_ERRORS = (SQLAlchemyError, OSError, PersistenceError)


class PostingStore:
    """Persists postings, answers URL lookups, and records match results."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float = 10.0,
        min_recommended_score: int = APPLY_THRESHOLD,
        audit_description_chars: int = 100,
    ) -> None:
        """Initialize with a session factory and per-call limits."""
        self._session_factory = session_factory
        self._timeout = timeout_seconds
        self._min_recommended_score = min_recommended_score
        self._audit_chars = audit_description_chars

    async def save(self, posting: Posting) -> Posting:
        """Insert a new posting with unscored, unapplied defaults.

        Raises PersistenceError on any failure, including duplicate URLs.
        Callers should filter with ``existing_urls`` first.
        """
        try:
            saved = await self._with_timeout(self._save(posting), "save")
        except StoreTimeoutError as e:
            logger.error("posting_save_timeout", url=posting.url, error=str(e))
            raise
        except IntegrityError as e:
            logger.error("posting_save_conflict", url=posting.url, error=str(e.orig))
            msg = f"Posting violates a store constraint: {posting.url or posting.job_title}"
            raise PersistenceError(msg) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("posting_save_failed", url=posting.url, error=str(e))
            msg = f"Failed to save posting {posting.url or posting.job_title}: {e}"
            raise PersistenceError(msg) from e

        audit_log.info(
            "posting_saved",
            posting_id=saved.id,
            company=saved.company_name,
            title=saved.job_title,
            url=saved.url,
            description=self._truncate(saved.job_description),
        )
        return saved

    async def existing_urls(self, urls: Iterable[str]) -> set[str]:
        """Return the subset of urls already stored.

        Empty input returns an empty set without touching the database.
        """
        wanted = {url for url in urls if url}
        if not wanted:
            return set()
        try:
            found = await self._with_timeout(self._find_urls(wanted), "existing_urls")
        except _STORE_ERRORS as e:
            logger.error("existing_urls_failed", count=len(wanted), error=str(e))
            return set()
        return set(found) & wanted

    async def recent_postings(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Posting]:
        """Return the newest postings by scraped_at."""
        try:
            models = await self._with_timeout(self._list_recent(limit), "recent_postings")
        except _STORE_ERRORS as e:
            logger.error("recent_postings_failed", limit=limit, error=str(e))
            return []
        return [to_posting(m) for m in models]

    async def pending_postings(self, limit: int = 50) -> list[Posting]:
        """Return postings that have not been scored yet, oldest first."""
        try:
            models = await self._with_timeout(self._list_unchecked(limit), "pending_postings")
        except _STORE_ERRORS as e:
            logger.error("pending_postings_failed", limit=limit, error=str(e))
            return []
        return [to_posting(m) for m in models]

    async def record_match_result(
        self,
        posting_id: int,
        score: int,
        reason: str,
        recommended: bool,
        strength: str | None = None,
        weakness: str | None = None,
    ) -> bool:
        """Overwrite the match fields of a posting.

        strength and weakness are only written when given, so a partial
        update keeps earlier values. Returns False if the posting does not
        exist or the update fails.
        """
        try:
            model = await self._with_timeout(
                self._update_match(posting_id, score, reason, recommended, strength, weakness),
                "record_match_result",
            )
        except _STORE_ERRORS as e:
            logger.error("match_result_update_failed", posting_id=posting_id, error=str(e))
            return False

        if model is None:
            logger.warning("posting_not_found", posting_id=posting_id)
            return False

        audit_log.info(
            "match_result_recorded",
            posting_id=posting_id,
            company=model.company_name,
            title=model.job_title,
            score=score,
            recommended=recommended,
            description=self._truncate(model.job_description),
        )
        return True

    async def record_match(self, result: MatchResult) -> bool:
        """Write a MatchResult onto its posting."""
        if result.id is None:
            logger.warning("match_result_without_id", score=result.score)
            return False
        return await self.record_match_result(
            result.id,
            result.score,
            result.reason,
            result.apply_yn,
            strength=result.strength or None,
            weakness=result.weakness or None,
        )

    async def mark_applied(self, posting_id: int) -> bool:
        """Flag a posting as applied to. Returns False for unknown ids."""
        try:
            model = await self._with_timeout(self._mark_applied(posting_id), "mark_applied")
        except _STORE_ERRORS as e:
            logger.error("mark_applied_failed", posting_id=posting_id, error=str(e))
            return False

        if model is None:
            logger.warning("posting_not_found", posting_id=posting_id)
            return False

        audit_log.info(
            "posting_marked_applied",
            posting_id=posting_id,
            company=model.company_name,
            title=model.job_title,
            description=self._truncate(model.job_description),
        )
        return True

    async def recommended_postings(
        self, limit: int = DEFAULT_RECOMMENDED_LIMIT
    ) -> list[RecommendedPosting]:
        """Return scored, recommended postings, highest score first."""
        try:
            models = await self._with_timeout(
                self._list_recommended(limit), "recommended_postings"
            )
        except _STORE_ERRORS as e:
            logger.error("recommended_postings_failed", limit=limit, error=str(e))
            return []
        return [to_recommended(m) for m in models]

    @staticmethod
    def statistics(postings: Iterable[Posting]) -> JobStatistics:
        """Aggregate postings by company, experience type and employment type."""
        return build_statistics(postings)

    # --- internals ---

    async def _with_timeout(self, coro: Awaitable[T], operation: str) -> T:
        """Await coro, converting a timeout into StoreTimeoutError."""
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except TimeoutError as e:
            msg = f"Store operation '{operation}' timed out after {self._timeout}s"
            raise StoreTimeoutError(msg) from e

    async def _save(self, posting: Posting) -> Posting:
        async with self._session_factory() as session:
            model = await PostingRepository(session).create(to_model(posting))
            await session.commit()
            return to_posting(model)

    async def _find_urls(self, urls: set[str]) -> list[str]:
        async with self._session_factory() as session:
            return await PostingRepository(session).find_urls(urls)

    async def _list_recent(self, limit: int) -> list[PostingModel]:
        async with self._session_factory() as session:
            return await PostingRepository(session).list_recent(limit)

    async def _list_unchecked(self, limit: int) -> list[PostingModel]:
        async with self._session_factory() as session:
            return await PostingRepository(session).list_unchecked(limit)

    async def _list_recommended(self, limit: int) -> list[PostingModel]:
        async with self._session_factory() as session:
            return await PostingRepository(session).list_recommended(
                self._min_recommended_score, limit
            )

    async def _update_match(
        self,
        posting_id: int,
        score: int,
        reason: str,
        recommended: bool,
        strength: str | None,
        weakness: str | None,
    ) -> PostingModel | None:
        async with self._session_factory() as session:
            model = await PostingRepository(session).get_by_id(posting_id)
            if model is None:
                return None
            model.match_score = score
            model.match_reason = reason
            model.is_recommended = recommended
            model.is_gpt_checked = True
            if strength:
                model.strength = strength
            if weakness:
                model.weakness = weakness
            await session.commit()
            return model

    async def _mark_applied(self, posting_id: int) -> PostingModel | None:
        async with self._session_factory() as session:
            model = await PostingRepository(session).get_by_id(posting_id)
            if model is None:
                return None
            model.is_applied = True
            await session.commit()
            return model

    def _truncate(self, text: str | None) -> str:
        """Shorten description text for audit entries."""
        text = text or ""
        if len(text) <= self._audit_chars:
            return text
        return text[: self._audit_chars] + "..."


@asynccontextmanager
async def open_store(settings: Settings) -> AsyncIterator[PostingStore]:
    """Yield a PostingStore configured from settings, closing the database on exit."""
    async with connect(settings) as session_factory:
        yield PostingStore(
            session_factory,
            timeout_seconds=settings.store_timeout_seconds,
            min_recommended_score=settings.recommend_threshold,
            audit_description_chars=settings.audit_description_chars,
        )


def to_model(posting: Posting) -> PostingModel:
    """Map a Posting onto a new ORM row (camelCase url -> job_url)."""
    return PostingModel(
        company_name=posting.company_name,
        job_title=posting.job_title,
        job_location=posting.job_location,
        job_type=posting.job_type,
        job_salary=posting.job_salary,
        deadline=posting.deadline,
        employment_type=posting.employment_type,
        job_url=posting.url or None,
        company_type=posting.company_type,
        job_description=posting.job_description,
        scraped_at=posting.scraped_at or datetime.now(UTC),
        is_applied=False,
        is_gpt_checked=False,
        is_recommended=False,
    )


def to_posting(model: PostingModel) -> Posting:
    """Map an ORM row back to a Posting; null columns become empty strings."""
    return Posting(
        id=model.id,
        company_name=model.company_name,
        job_title=model.job_title,
        job_location=model.job_location,
        job_type=model.job_type,
        job_salary=model.job_salary,
        deadline=model.deadline,
        employment_type=model.employment_type,
        url=model.job_url,
        company_type=model.company_type,
        job_description=model.job_description,
        scraped_at=model.scraped_at,
    )


def to_recommended(model: PostingModel) -> RecommendedPosting:
    """Map a scored ORM row to the recommended-posting shape."""
    return RecommendedPosting(
        id=model.id,
        score=model.match_score or 0,
        reason=model.match_reason or "",
        strength=model.strength or "",
        weakness=model.weakness or "",
        apply_yn=model.is_recommended,
        company_name=model.company_name,
        job_title=model.job_title,
        job_location=model.job_location or "",
        company_type=model.company_type or "",
        url=model.job_url or "",
    )


def build_statistics(postings: Iterable[Posting]) -> JobStatistics:
    """Count postings per company, experience type and employment type.

    Empty type fields fall into the unspecified bucket. top_companies keeps
    first-seen order among equal counts.
    """
    company_counts: Counter[str] = Counter()
    job_type_counts: Counter[str] = Counter()
    employment_type_counts: Counter[str] = Counter()

    for posting in postings:
        company_counts[posting.company_name] += 1
        job_type_counts[posting.job_type or UNSPECIFIED_BUCKET] += 1
        employment_type_counts[posting.employment_type or UNSPECIFIED_BUCKET] += 1

    # sorted() is stable and Counter preserves insertion order
    top = sorted(company_counts.items(), key=lambda item: item[1], reverse=True)
    return JobStatistics(
        company_counts=dict(company_counts),
        job_type_counts=dict(job_type_counts),
        employment_type_counts=dict(employment_type_counts),
        top_companies=top[:TOP_COMPANIES_LIMIT],
    )
