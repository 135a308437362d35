"""Shared constants for the scoring rubric and the posting store."""

from __future__ import annotations

# Sub-score caps
ROLE_FIT_MAX = 40
SKILL_FIT_MAX = 20
EXPERIENCE_FIT_MAX = 15
LOCATION_FIT_MAX = 10
COMPANY_FIT_MAX = 15

# Role-fit points per keyword hit
ROLE_TOP_TIER_POINTS = 10
ROLE_SECONDARY_POINTS = 8

# Experience fit by bucket
EXPERIENCE_POINTS: dict[str, int] = {
    "entry": 15,
    "masters": 15,
    "junior": 12,  # 1-2 years
    "three_years": 0,
    "mid": 0,  # 4-5 years
    "senior": 0,  # 6+ years
    "unknown": 10,
}

# Location fit by region bucket
LOCATION_POINTS: dict[str, int] = {
    "remote": 10,
    "seoul": 10,
    "gyeonggi": 10,
    "home_area": 7,
    "north_seoul": 7,
    "incheon": 5,
    "other": 2,
    "absent": 0,
}

REMOTE_KEYWORDS = ("재택", "원격", "하이브리드", "remote", "hybrid", "work from home", "wfh")
NORTH_SEOUL_KEYWORDS = ("노원", "도봉")
SEOUL_KEYWORDS = ("서울", "seoul")
GYEONGGI_KEYWORDS = ("경기", "gyeonggi")
INCHEON_KEYWORDS = ("인천", "incheon")

# Company size tiers, checked in order (more specific labels first)
COMPANY_SIZE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("public", ("공기업", "공공기관", "공사", "public", "government")),
    ("mid", ("중견", "mid-size", "midsize", "mid")),
    ("large", ("대기업", "large", "enterprise", "conglomerate")),
    ("startup", ("스타트업", "startup", "start-up")),
    ("small", ("중소", "small", "sme")),
)

# Company fit: (size tier, interest industry matched) -> points
COMPANY_POINTS: dict[tuple[str, bool], int] = {
    ("large", True): 15,
    ("large", False): 12,
    ("mid", True): 13,
    ("mid", False): 10,
    ("public", True): 12,
    ("public", False): 12,
    ("startup", True): 8,
    ("startup", False): 3,
    ("small", True): 3,
    ("small", False): 3,
}
COMPANY_UNKNOWN_POINTS = 8

# Bonus adjustments
RESEARCH_BONUS = 5
SALARY_BONUS = 3
INDUSTRY_BONUS = 3
SALARY_BONUS_MIN_KRW = 40_000_000

RESEARCH_KEYWORDS = ("연구", "research", "researcher")
MASTERS_KEYWORDS = ("석사", "master's", "masters", "master degree", "m.s.")
AI_KEYWORDS = ("AI", "인공지능", "머신러닝", "딥러닝", "machine learning", "deep learning")

# Recommendation bands
SCORE_CEILING = 100
APPLY_THRESHOLD = 70
STRONG_THRESHOLD = 85
REVIEW_THRESHOLD = 55

# Store defaults
UNSPECIFIED_BUCKET = "명시되지 않음"
TOP_COMPANIES_LIMIT = 5
DEFAULT_RECENT_LIMIT = 10
DEFAULT_RECOMMENDED_LIMIT = 5

# Logger name for the store's record of every write
AUDIT_LOGGER = "job_matcher.audit"
