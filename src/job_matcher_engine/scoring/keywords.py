"""Case-insensitive keyword matching over mixed Korean/English text."""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

_HANGUL_RE = re.compile(r"[가-힣ㄱ-ㆎ]")

# Upper-case acronyms up to this length must stand alone ("AI", "ML", "CNN")
_ACRONYM_MAX_LEN = 4


def has_hangul(text: str) -> bool:
    """Return True if text contains any Hangul syllable or jamo."""
    return bool(_HANGUL_RE.search(text))


def is_acronym(keyword: str) -> bool:
    """Return True for short all-capital keywords such as AI, ETL, YOLO."""
    return keyword.isalpha() and keyword.isupper() and len(keyword) <= _ACRONYM_MAX_LEN


@lru_cache(maxsize=1024)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Compile the pattern for one keyword.

    Hangul keywords match as plain substrings since particles attach
    directly to nouns (인공지능을, 개발자). Latin keywords match as
    substrings that start a word, so "Infra" finds "Infrastructure" and
    "Research" finds "Researcher". Acronyms must also end the word, so
    "AI" does not match inside "email" or "ML" inside "HTML".
    """
    keyword = keyword.strip()
    escaped = re.escape(keyword)
    if has_hangul(keyword):
        return re.compile(escaped, re.IGNORECASE)
    if is_acronym(keyword):
        return re.compile(rf"(?<![a-z0-9]){escaped}(?![a-z])", re.IGNORECASE)
    return re.compile(rf"(?<![a-z0-9]){escaped}", re.IGNORECASE)


def contains_keyword(text: str, keyword: str) -> bool:
    """Return True if keyword occurs in text."""
    if not text or not keyword.strip():
        return False
    return _keyword_pattern(keyword).search(text) is not None


def find_keywords(text: str, keywords: Iterable[str]) -> list[str]:
    """Return the distinct keywords found in text, in keyword order.

    Each keyword counts once no matter how often it appears.
    """
    found: list[str] = []
    seen: set[str] = set()
    for keyword in keywords:
        key = keyword.strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        if contains_keyword(text, keyword):
            found.append(keyword)
    return found


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """Return True if any keyword occurs in text."""
    return any(contains_keyword(text, k) for k in keywords)
