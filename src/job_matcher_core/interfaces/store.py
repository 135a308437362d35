"""Abstract posting store interface."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from job_matcher_core.models.match import MatchResult
from job_matcher_core.models.posting import Posting, RecommendedPosting


@runtime_checkable
class PostingStoreProtocol(Protocol):
    """Persistence operations the matching pipeline depends on."""

    async def save(self, posting: Posting) -> Posting:
        """Insert a new posting and return it with its id."""
        ...

    async def existing_urls(self, urls: Iterable[str]) -> set[str]:
        """Return the subset of urls already stored."""
        ...

    async def pending_postings(self, limit: int = 50) -> list[Posting]:
        """Return stored postings that have not been scored yet."""
        ...

    async def record_match(self, result: MatchResult) -> bool:
        """Write a match result onto its posting."""
        ...

    async def recommended_postings(self, limit: int = 5) -> list[RecommendedPosting]:
        """Return recommended postings, highest score first."""
        ...
