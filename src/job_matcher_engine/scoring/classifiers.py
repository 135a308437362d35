"""Classify free-text posting fields into rubric buckets."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from job_matcher_core.constants import (
    COMPANY_SIZE_KEYWORDS,
    GYEONGGI_KEYWORDS,
    INCHEON_KEYWORDS,
    MASTERS_KEYWORDS,
    NORTH_SEOUL_KEYWORDS,
    REMOTE_KEYWORDS,
    SEOUL_KEYWORDS,
)
from job_matcher_engine.scoring.keywords import contains_any

ENTRY_LEVEL_KEYWORDS = (
    "신입",
    "경력무관",
    "경력 무관",
    "entry",
    "new grad",
    "no experience",
    "any experience",
)
_MASTERS_TERMS = (*MASTERS_KEYWORDS, "master")
# A stated requirement of this many years outranks a master's mention
_MASTERS_YEARS_LIMIT = 3

# "1~3년" captures the lower bound
_YEARS_RE = re.compile(r"(\d+)\s*(?:[~\-]\s*\d+\s*)?(?:년|years?|yrs?)", re.IGNORECASE)


def classify_experience(job_type: str) -> str:
    """Map an experience requirement to a bucket.

    Entry-level signals win over year counts ("신입·경력 2년" is entry).
    A master's mention wins unless three or more years are required, so
    "경력 5년 이상, 석사 우대" is mid. Otherwise the smallest year count
    governs, so "경력 1~3년" is junior. Text without a usable signal is
    "unknown".
    """
    text = job_type.strip()
    if not text:
        return "unknown"
    if contains_any(text, ENTRY_LEVEL_KEYWORDS):
        return "entry"

    years = [int(y) for y in _YEARS_RE.findall(text)]
    least = min(years) if years else None
    if contains_any(text, _MASTERS_TERMS) and (least is None or least < _MASTERS_YEARS_LIMIT):
        return "masters"
    if least is None:
        return "unknown"
    if least == 0:
        return "entry"
    if least <= 2:
        return "junior"
    if least == 3:
        return "three_years"
    if least <= 5:
        return "mid"
    return "senior"


def classify_location(location: str, home_area_keywords: Sequence[str]) -> str:
    """Map a work location to a region bucket.

    Sub-regions are checked before the province or city containing them.
    """
    text = location.strip()
    if not text:
        return "absent"
    if contains_any(text, REMOTE_KEYWORDS):
        return "remote"
    if contains_any(text, home_area_keywords):
        return "home_area"
    if contains_any(text, NORTH_SEOUL_KEYWORDS):
        return "north_seoul"
    if contains_any(text, SEOUL_KEYWORDS):
        return "seoul"
    if contains_any(text, GYEONGGI_KEYWORDS):
        return "gyeonggi"
    if contains_any(text, INCHEON_KEYWORDS):
        return "incheon"
    return "other"


def classify_company_size(company_type: str) -> str | None:
    """Map a company type label to a size tier, or None if unrecognised."""
    text = company_type.strip()
    if not text:
        return None
    for tier, keywords in COMPANY_SIZE_KEYWORDS:
        if contains_any(text, keywords):
            return tier
    return None


def find_industries(text: str, industries: Mapping[str, Sequence[str]]) -> list[str]:
    """Return the names of interest industries mentioned in text."""
    return [name for name, keywords in industries.items() if contains_any(text, keywords)]
