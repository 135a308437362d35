"""Map match results into the record shape downstream consumers read."""

from __future__ import annotations

import json
from collections.abc import Iterable

from job_matcher_core.models.match import MatchResult
from job_matcher_core.models.posting import Posting, RecommendedPosting

RECORD_FIELDS = ("id", "score", "reason", "strength", "weakness", "apply_yn")


def to_record(result: MatchResult) -> dict[str, object]:
    """Return the external record for one result, nothing more."""
    return {
        "id": result.id,
        "score": result.score,
        "reason": result.reason or "",
        "strength": result.strength or "",
        "weakness": result.weakness or "",
        "apply_yn": result.apply_yn,
    }


def to_json(results: Iterable[MatchResult], indent: int | None = 2) -> str:
    """Serialize results as a bare JSON array, Korean text left unescaped."""
    return json.dumps([to_record(r) for r in results], ensure_ascii=False, indent=indent)


def to_recommended(result: MatchResult, posting: Posting) -> RecommendedPosting:
    """Join a result with the posting fields reports show."""
    return RecommendedPosting(
        id=result.id if result.id is not None else posting.id,
        score=result.score,
        reason=result.reason or "",
        strength=result.strength or "",
        weakness=result.weakness or "",
        apply_yn=result.apply_yn,
        company_name=posting.company_name or "",
        job_title=posting.job_title or "",
        job_location=posting.job_location or "",
        company_type=posting.company_type or "",
        url=posting.url or "",
    )
