"""Deterministic rubric evaluator scoring a posting against the candidate profile.

The score is the sum of five independently capped sub-scores (role fit,
skill fit, experience, location, company) plus bonus points. Explanatory
text is assembled from whichever rules fired, so the same posting always
yields the same result.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from job_matcher_core.constants import (
    AI_KEYWORDS,
    APPLY_THRESHOLD,
    COMPANY_FIT_MAX,
    COMPANY_POINTS,
    COMPANY_UNKNOWN_POINTS,
    EXPERIENCE_FIT_MAX,
    EXPERIENCE_POINTS,
    INDUSTRY_BONUS,
    LOCATION_FIT_MAX,
    LOCATION_POINTS,
    MASTERS_KEYWORDS,
    RESEARCH_BONUS,
    RESEARCH_KEYWORDS,
    REVIEW_THRESHOLD,
    ROLE_FIT_MAX,
    ROLE_SECONDARY_POINTS,
    ROLE_TOP_TIER_POINTS,
    SALARY_BONUS,
    SALARY_BONUS_MIN_KRW,
    SCORE_CEILING,
    SKILL_FIT_MAX,
    STRONG_THRESHOLD,
)
from job_matcher_core.exceptions import PostingValidationError
from job_matcher_core.models.match import MatchResult, ScoreBreakdown, Tier
from job_matcher_core.models.posting import Posting
from job_matcher_core.models.profile import CandidateProfile
from job_matcher_engine.scoring.classifiers import (
    classify_company_size,
    classify_experience,
    classify_location,
    find_industries,
)
from job_matcher_engine.scoring.keywords import contains_any, find_keywords
from job_matcher_engine.scoring.salary import parse_annual_salary_krw

logger = structlog.get_logger()

_SIZE_RANK: dict[str, int] = {"startup": 0, "small": 0, "mid": 1, "public": 1, "large": 2}

_EXPERIENCE_LABELS: dict[str, str] = {
    "entry": "entry level",
    "masters": "master's graduates welcome",
    "junior": "1-2 years of experience",
    "three_years": "3 years of experience required",
    "mid": "4-5 years of experience required",
    "senior": "6+ years of experience required",
    "unknown": "experience requirement not stated",
}

_LOCATION_LABELS: dict[str, str] = {
    "remote": "remote or hybrid work",
    "home_area": "near home",
    "north_seoul": "northern Seoul",
    "seoul": "Seoul",
    "gyeonggi": "Gyeonggi",
    "incheon": "Incheon",
    "other": "outside the commutable area",
    "absent": "location not stated",
}


def tier_for(score: int) -> Tier:
    """Return the recommendation band for a final score."""
    if score >= STRONG_THRESHOLD:
        return "strongly_recommend"
    if score >= APPLY_THRESHOLD:
        return "recommend"
    if score >= REVIEW_THRESHOLD:
        return "review"
    return "not_recommended"


class RubricEvaluator:
    """Score postings against one candidate profile."""

    def __init__(self, profile: CandidateProfile) -> None:
        """Initialize with the profile every posting is compared to."""
        self.profile = profile

    def evaluate(self, posting: Posting) -> MatchResult:
        """Score one posting.

        Raises PostingValidationError if companyName or jobTitle is empty;
        such postings are excluded rather than scored as zero.
        """
        missing = posting.missing_required_fields()
        if missing:
            raise PostingValidationError(missing, url=posting.url)

        breakdown = self.breakdown(posting)
        score = min(breakdown.raw_total, SCORE_CEILING)
        return MatchResult(
            id=posting.id,
            score=score,
            reason=self._reason(breakdown),
            strength=self._strength(breakdown),
            weakness=self._weakness(breakdown),
            apply_yn=score >= APPLY_THRESHOLD,
            tier=tier_for(score),
            breakdown=breakdown,
        )

    def evaluate_batch(self, postings: Iterable[Posting]) -> list[MatchResult]:
        """Score every valid posting, skipping those missing required fields."""
        results: list[MatchResult] = []
        for posting in postings:
            try:
                results.append(self.evaluate(posting))
            except PostingValidationError as e:
                logger.warning(
                    "posting_not_evaluated",
                    posting_id=posting.id,
                    url=posting.url,
                    missing=e.missing,
                )
        return results

    def breakdown(self, posting: Posting) -> ScoreBreakdown:
        """Compute every sub-score and bonus for a posting."""
        profile = self.profile
        text = posting.scoring_text

        top_hits = find_keywords(text, profile.top_tier_keywords)
        secondary_hits = find_keywords(text, profile.secondary_keywords)
        role_fit = min(
            len(top_hits) * ROLE_TOP_TIER_POINTS + len(secondary_hits) * ROLE_SECONDARY_POINTS,
            ROLE_FIT_MAX,
        )

        skill_hits: list[str] = []
        skill_points = 0
        for tier in profile.skill_tiers.values():
            hits = find_keywords(text, tier.keywords)
            skill_hits.extend(hits)
            skill_points += len(hits) * tier.weight
        skill_fit = min(skill_points, SKILL_FIT_MAX)

        experience_bucket = classify_experience(posting.job_type)
        experience_fit = min(EXPERIENCE_POINTS[experience_bucket], EXPERIENCE_FIT_MAX)

        location_bucket = classify_location(posting.job_location, profile.home_area_keywords)
        location_fit = min(LOCATION_POINTS[location_bucket], LOCATION_FIT_MAX)

        industry_text = " ".join(
            (posting.company_name, posting.company_type, posting.job_title, posting.job_description)
        )
        industries = find_industries(industry_text, profile.interest_industries)
        company_size = classify_company_size(posting.company_type)
        if company_size is None:
            company_fit = COMPANY_UNKNOWN_POINTS
        else:
            company_fit = COMPANY_POINTS[(company_size, bool(industries))]
        company_fit = min(company_fit, COMPANY_FIT_MAX)

        bonuses = self._bonuses(posting, bool(industries))
        bonus_points = {
            "research_or_masters": RESEARCH_BONUS,
            "salary": SALARY_BONUS,
            "interest_industry": INDUSTRY_BONUS,
        }
        return ScoreBreakdown(
            role_fit=role_fit,
            skill_fit=skill_fit,
            experience_fit=experience_fit,
            location_fit=location_fit,
            company_fit=company_fit,
            bonus=sum(bonus_points[name] for name in bonuses),
            role_keywords=[*top_hits, *secondary_hits],
            skill_keywords=skill_hits,
            experience_bucket=experience_bucket,
            location_bucket=location_bucket,
            company_size=company_size,
            industries=industries,
            bonuses=bonuses,
        )

    def _bonuses(self, posting: Posting, industry_named: bool) -> list[str]:
        """Return the names of the bonus rules that apply."""
        bonuses: list[str] = []
        text = posting.scoring_text
        masters = contains_any(f"{text}\n{posting.job_type}", MASTERS_KEYWORDS)
        ai_research = contains_any(text, RESEARCH_KEYWORDS) and contains_any(text, AI_KEYWORDS)
        if masters or ai_research:
            bonuses.append("research_or_masters")

        salary = parse_annual_salary_krw(posting.job_salary)
        if salary is not None and salary >= SALARY_BONUS_MIN_KRW:
            bonuses.append("salary")

        if industry_named:
            bonuses.append("interest_industry")
        return bonuses

    def _reason(self, b: ScoreBreakdown) -> str:
        """Summarize the one to three strongest drivers of the score."""
        reasons: list[str] = []
        if b.role_keywords:
            reasons.append(
                f"matched {len(b.role_keywords)} role keywords ({', '.join(b.role_keywords[:3])})"
            )
        if b.skill_keywords:
            reasons.append(f"skill stack overlap: {', '.join(b.skill_keywords[:3])}")
        if b.company_size and b.industries:
            reasons.append(f"{b.company_size} company in {', '.join(b.industries)}")
        if b.experience_bucket in ("entry", "masters", "junior"):
            reasons.append(_EXPERIENCE_LABELS[b.experience_bucket])
        if b.location_fit >= LOCATION_POINTS["home_area"]:
            reasons.append(_LOCATION_LABELS[b.location_bucket])
        if not reasons:
            return "few rubric rules matched the candidate profile"
        return "; ".join(reasons[:3])

    def _strength(self, b: ScoreBreakdown) -> str:
        """Describe where the candidate fits the posting."""
        strengths: list[str] = []
        if b.role_keywords:
            strengths.append(f"role matches preferred domains ({', '.join(b.role_keywords)})")
        if b.skill_keywords:
            strengths.append(f"candidate already uses {', '.join(b.skill_keywords)}")
        if b.experience_bucket in ("entry", "masters", "junior"):
            strengths.append(f"experience fits ({_EXPERIENCE_LABELS[b.experience_bucket]})")
        if "research_or_masters" in b.bonuses:
            strengths.append("master's research background is valued")
        if "salary" in b.bonuses:
            strengths.append("salary meets the 40M KRW target")
        if b.industries:
            strengths.append(f"interest industry: {', '.join(b.industries)}")
        if not strengths:
            return "no specific strengths identified"
        return "; ".join(strengths)

    def _weakness(self, b: ScoreBreakdown) -> str:
        """Describe the gaps between the posting and the candidate."""
        weaknesses: list[str] = []
        if not b.role_keywords:
            weaknesses.append("role is outside the preferred domains")
        if not b.skill_keywords:
            weaknesses.append("no overlap with the candidate's skill stack")
        if b.experience_bucket in ("three_years", "mid", "senior"):
            weaknesses.append(_EXPERIENCE_LABELS[b.experience_bucket])
        if b.location_bucket in ("other", "incheon", "absent"):
            weaknesses.append(_LOCATION_LABELS[b.location_bucket])
        if b.company_size is None:
            weaknesses.append("company size unknown")
        elif _SIZE_RANK[b.company_size] < _SIZE_RANK[self.profile.minimum_size]:
            weaknesses.append(f"{b.company_size} company is below the preferred size")
        if not weaknesses:
            return "no notable gaps"
        return "; ".join(weaknesses)


def evaluate(posting: Posting, profile: CandidateProfile) -> MatchResult:
    """Score one posting against a profile."""
    return RubricEvaluator(profile).evaluate(posting)
