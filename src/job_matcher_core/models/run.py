"""Ingestion and scoring run models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from job_matcher_core.models.match import MatchResult
from job_matcher_core.models.posting import JobStatistics, Posting


class ItemError(BaseModel):
    """Record of one posting that could not be processed."""

    stage: Literal["validate", "save", "score", "record"] = Field(
        description="Pipeline stage that failed"
    )
    error_type: str = Field(description="Exception class name")
    error_message: str = Field(description="Error description")
    url: str = Field(default="", description="Posting URL if known")
    posting_id: int | None = Field(default=None, description="Posting id if persisted")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the error occurred"
    )


class IngestResult(BaseModel):
    """Outcome of ingesting one batch of scraped postings."""

    received: int = Field(default=0, description="Postings handed to ingest")
    invalid: int = Field(default=0, description="Skipped for missing required fields")
    duplicates: int = Field(default=0, description="Already stored or repeated in the batch")
    saved: list[Posting] = Field(default_factory=list, description="Newly stored postings")
    failed: int = Field(default=0, description="Saves that raised PersistenceError")
    errors: list[ItemError] = Field(default_factory=list)


class ScoringResult(BaseModel):
    """Outcome of scoring a batch of stored postings."""

    evaluated: int = Field(default=0, description="Postings the rubric scored")
    skipped: int = Field(default=0, description="Postings excluded before scoring")
    recorded: int = Field(default=0, description="Results written back to the store")
    recommended: int = Field(default=0, description="Results with apply_yn true")
    results: list[MatchResult] = Field(default_factory=list, description="Results produced")
    errors: list[ItemError] = Field(default_factory=list)


class RunResult(BaseModel):
    """Summary of a full ingest-and-score run."""

    run_id: str = Field(
        default_factory=lambda: f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S')}",
        description="Unique run identifier",
    )
    status: Literal["success", "partial", "failed"] = Field(description="Overall run status")
    ingest: IngestResult = Field(description="Ingestion counters")
    scoring: ScoringResult = Field(description="Scoring counters")
    statistics: JobStatistics = Field(description="Aggregates over the received postings")
    duration_seconds: float = Field(default=0.0, description="Total run duration in seconds")
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the run completed"
    )

    @property
    def errors(self) -> list[ItemError]:
        """All item errors from both stages."""
        return [*self.ingest.errors, *self.scoring.errors]
