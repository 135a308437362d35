"""Match result models: rubric breakdown and scored output."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from job_matcher_core.constants import (
    COMPANY_FIT_MAX,
    EXPERIENCE_FIT_MAX,
    LOCATION_FIT_MAX,
    ROLE_FIT_MAX,
    SCORE_CEILING,
    SKILL_FIT_MAX,
)

Tier = Literal["strongly_recommend", "recommend", "review", "not_recommended"]


class ScoreBreakdown(BaseModel):
    """Capped sub-scores and bonuses that make up a match score."""

    role_fit: int = Field(ge=0, le=ROLE_FIT_MAX, description="Role keyword fit")
    skill_fit: int = Field(ge=0, le=SKILL_FIT_MAX, description="Skill stack fit")
    experience_fit: int = Field(ge=0, le=EXPERIENCE_FIT_MAX, description="Experience fit")
    location_fit: int = Field(ge=0, le=LOCATION_FIT_MAX, description="Location fit")
    company_fit: int = Field(ge=0, le=COMPANY_FIT_MAX, description="Company size/industry fit")
    bonus: int = Field(ge=0, description="Bonus points added after the capped sum")
    role_keywords: list[str] = Field(default_factory=list, description="Role keywords matched")
    skill_keywords: list[str] = Field(default_factory=list, description="Skill keywords matched")
    experience_bucket: str = Field(default="unknown", description="Classified experience bucket")
    location_bucket: str = Field(default="absent", description="Classified location bucket")
    company_size: str | None = Field(default=None, description="Classified company size tier")
    industries: list[str] = Field(default_factory=list, description="Interest industries found")
    bonuses: list[str] = Field(default_factory=list, description="Names of bonuses applied")

    @property
    def subtotal(self) -> int:
        """Sum of the capped sub-scores, before bonuses."""
        return (
            self.role_fit
            + self.skill_fit
            + self.experience_fit
            + self.location_fit
            + self.company_fit
        )

    @property
    def raw_total(self) -> int:
        """Sub-scores plus bonuses, uncapped."""
        return self.subtotal + self.bonus


class MatchResult(BaseModel):
    """Scored evaluation of one posting against the candidate profile."""

    id: int | None = Field(default=None, description="Id of the scored posting")
    score: int = Field(ge=0, le=SCORE_CEILING, description="Final score 0-100")
    reason: str = Field(description="Which rubric rules drove the score")
    strength: str = Field(description="Where the candidate fits the posting")
    weakness: str = Field(description="Where the posting falls short for the candidate")
    apply_yn: bool = Field(description="Whether applying is recommended")
    tier: Tier = Field(description="Recommendation band")
    breakdown: ScoreBreakdown = Field(description="Sub-score detail")
