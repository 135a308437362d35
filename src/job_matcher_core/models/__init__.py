"""Domain models for job-matcher."""

from job_matcher_core.models.match import MatchResult, ScoreBreakdown, Tier
from job_matcher_core.models.posting import JobStatistics, Posting, RecommendedPosting
from job_matcher_core.models.profile import (
    CandidateProfile,
    SkillTier,
    default_profile,
    load_profile,
)
from job_matcher_core.models.run import IngestResult, ItemError, RunResult, ScoringResult

__all__ = [
    "CandidateProfile",
    "IngestResult",
    "ItemError",
    "JobStatistics",
    "MatchResult",
    "Posting",
    "RecommendedPosting",
    "RunResult",
    "ScoreBreakdown",
    "ScoringResult",
    "SkillTier",
    "Tier",
    "default_profile",
    "load_profile",
]
