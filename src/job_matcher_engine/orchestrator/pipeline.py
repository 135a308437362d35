"""Ingest-and-score pipeline over a posting store.

New postings are validated, de-duplicated against the store, saved through
a bounded worker pool, scored by the rubric, and written back. Any single
posting failing is recorded and skipped; the batch always runs to the end.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal, TypeVar

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from job_matcher_core.exceptions import (
    PersistenceError,
    PostingValidationError,
    StoreTimeoutError,
)
from job_matcher_core.models.match import MatchResult
from job_matcher_core.models.posting import Posting
from job_matcher_core.models.profile import CandidateProfile
from job_matcher_core.models.run import IngestResult, ItemError, RunResult, ScoringResult
from job_matcher_engine.observability import bind_run_context, clear_run_context
from job_matcher_engine.scoring.rubric import RubricEvaluator
from job_matcher_infra.store import build_statistics

if TYPE_CHECKING:
    from job_matcher_core.config.settings import Settings
    from job_matcher_core.interfaces.store import PostingStoreProtocol

logger = structlog.get_logger()

T = TypeVar("T")
R = TypeVar("R")


class MatchPipeline:
    """Moves scraped postings through the store and the rubric evaluator."""

    def __init__(
        self,
        settings: Settings,
        store: PostingStoreProtocol,
        profile: CandidateProfile,
    ) -> None:
        """Initialize with settings, a posting store, and the candidate profile."""
        self.settings = settings
        self.store = store
        self.evaluator = RubricEvaluator(profile)

    async def run(self, postings: Iterable[Posting], run_id: str | None = None) -> RunResult:
        """Ingest a scraped batch and score the postings that were new."""
        start = time.monotonic()
        batch = list(postings)
        run_id = run_id or f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S')}"
        bind_run_context(run_id)

        try:
            logger.info("pipeline_start", postings=len(batch))
            ingest = await self.ingest(batch)
            scoring = await self.score(ingest.saved)

            valid = [p for p in batch if not p.missing_required_fields()]
            duration = time.monotonic() - start
            result = RunResult(
                run_id=run_id,
                status=_run_status(ingest, scoring),
                ingest=ingest,
                scoring=scoring,
                statistics=build_statistics(valid),
                duration_seconds=duration,
            )
            logger.info(
                "pipeline_summary",
                status=result.status,
                received=ingest.received,
                saved=len(ingest.saved),
                duplicates=ingest.duplicates,
                scored=scoring.evaluated,
                recommended=scoring.recommended,
                errors=len(result.errors),
                duration_seconds=round(duration, 2),
            )
            return result
        finally:
            clear_run_context()

    async def ingest(self, postings: Iterable[Posting]) -> IngestResult:
        """Store the postings that are valid and not already known."""
        batch = list(postings)
        result = IngestResult(received=len(batch))

        candidates: list[Posting] = []
        batch_urls: set[str] = set()
        for posting in batch:
            missing = posting.missing_required_fields()
            if missing:
                result.invalid += 1
                error = PostingValidationError(missing, url=posting.url)
                result.errors.append(_item_error("validate", error, posting))
                logger.warning("posting_invalid", url=posting.url, missing=missing)
                continue
            if posting.url:
                if posting.url in batch_urls:
                    result.duplicates += 1
                    continue
                batch_urls.add(posting.url)
            candidates.append(posting)

        known = await self.store.existing_urls(batch_urls)
        fresh = [p for p in candidates if not (p.url and p.url in known)]
        result.duplicates += len(candidates) - len(fresh)

        outcomes = await self._bounded(fresh, self._save_with_retry)
        for posting, outcome in zip(fresh, outcomes, strict=True):
            if isinstance(outcome, PersistenceError):
                result.failed += 1
                result.errors.append(_item_error("save", outcome, posting))
            else:
                result.saved.append(outcome)

        logger.info(
            "ingest_complete",
            received=result.received,
            invalid=result.invalid,
            duplicates=result.duplicates,
            saved=len(result.saved),
            failed=result.failed,
        )
        return result

    async def score(self, postings: Iterable[Posting]) -> ScoringResult:
        """Evaluate postings and write each result back to the store."""
        result = ScoringResult()
        scored: list[tuple[Posting, MatchResult]] = []
        for posting in postings:
            try:
                match = self.evaluator.evaluate(posting)
            except PostingValidationError as e:
                result.skipped += 1
                result.errors.append(_item_error("score", e, posting))
                logger.warning("posting_not_evaluated", posting_id=posting.id, missing=e.missing)
                continue
            scored.append((posting, match))

        result.evaluated = len(scored)
        result.results = [match for _, match in scored]
        result.recommended = sum(1 for match in result.results if match.apply_yn)

        recorded = await self._bounded(result.results, self.store.record_match)
        for (posting, match), ok in zip(scored, recorded, strict=True):
            if ok is True:
                result.recorded += 1
                continue
            error = (
                ok
                if isinstance(ok, PersistenceError)
                else PersistenceError(f"match result not recorded for posting {match.id}")
            )
            result.errors.append(_item_error("record", error, posting))

        logger.info(
            "scoring_complete",
            evaluated=result.evaluated,
            skipped=result.skipped,
            recorded=result.recorded,
            recommended=result.recommended,
        )
        return result

    async def score_pending(self, limit: int = 50) -> ScoringResult:
        """Score postings the store reports as not yet scored."""
        pending = await self.store.pending_postings(limit)
        logger.info("pending_postings_loaded", count=len(pending))
        return await self.score(pending)

    async def _save_with_retry(self, posting: Posting) -> Posting:
        """Save a posting, retrying only when the store times out."""

        @retry(
            stop=stop_after_attempt(self.settings.store_retry_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=self.settings.store_retry_wait_min,
                max=self.settings.store_retry_wait_max,
            ),
            retry=retry_if_exception_type(StoreTimeoutError),
            reraise=True,
        )
        async def _do_save() -> Posting:
            return await self.store.save(posting)

        return await _do_save()

    async def _bounded(
        self,
        items: list[T],
        func: Callable[[T], Awaitable[R]],
    ) -> list[R | PersistenceError]:
        """Apply func to every item with at most max_concurrent_writes in flight.

        PersistenceError is returned in place of a result; other exceptions
        propagate.
        """
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_writes)

        async def _one(item: T) -> R | PersistenceError:
            async with semaphore:
                try:
                    return await func(item)
                except PersistenceError as e:
                    return e

        return list(await asyncio.gather(*(_one(item) for item in items)))


def _item_error(stage: str, error: Exception, posting: Posting) -> ItemError:
    """Build an ItemError for a posting."""
    return ItemError(
        stage=stage,  # type: ignore[arg-type]
        error_type=type(error).__name__,
        error_message=str(error),
        url=posting.url,
        posting_id=posting.id,
    )


def _run_status(
    ingest: IngestResult, scoring: ScoringResult
) -> Literal["success", "partial", "failed"]:
    """Derive the overall run status from stage counters."""
    hard_failures = ingest.failed + len([e for e in scoring.errors if e.stage == "record"])
    if hard_failures == 0:
        return "success"
    if not ingest.saved and ingest.failed:
        return "failed"
    return "partial"
