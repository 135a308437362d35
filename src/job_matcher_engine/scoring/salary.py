"""Parse annual KRW salary figures out of free-text salary fields."""

from __future__ import annotations

import re

_UNITS: dict[str, int] = {
    "억": 100_000_000,
    "만": 10_000,
    "원": 1,
}

# "4천5백만" -> "4500만"; plain "4,500만" is left alone
_SPELLED_MAN_RE = re.compile(r"(?:(\d+)\s*천)?\s*(?:(\d+)\s*백)?\s*(?:(\d+)\s*십)?\s*만")

# "3,000~4,000만원": the unit after a range applies to both ends
_RANGE_RE = re.compile(
    r"(\d[\d,]*(?:\.\d+)?)\s*[~\-～–]\s*"
    r"(\d[\d,]*(?:\.\d+)?)\s*(억|만)"
)
_AMOUNT_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*(억|만|원)?")

# Period markers written before an amount; they carry over to later amounts
_PERIOD_RE = re.compile(
    r"(?P<monthly>월\s*(?:급|봉)|월(?=\s*[:：]?\s*\d)|monthly|per\s+month)"
    r"|(?P<annual>연봉|연(?=\s*[:：]?\s*\d)|annual|yearly|per\s+year)",
    re.IGNORECASE,
)
# Period markers written right after an amount ("300만원/월", "$4,000 a month")
_PERIOD_SUFFIX_RE = re.compile(
    r"\s*원?\s*(?:(?P<monthly>/\s*(?:월|month)|per\s+month|a\s+month)"
    r"|(?P<annual>/\s*(?:년|year)|per\s+year|a\s+year))",
    re.IGNORECASE,
)

# A bare number counts as won only when it is at least this large
_MIN_BARE_WON = 1_000_000


def parse_annual_salary_krw(text: str) -> int | None:
    """Return the lowest annual salary in KRW mentioned in text.

    Understands unit suffixes (억, 만, 원), spelled multipliers such as
    "4천5백만원", compound amounts such as "1억 2천만원", comma grouping and
    ranges. Each monthly amount is annualized on its own, so
    "연봉 4,800만원 (월 400만원)" is 48,000,000. Returns None when no
    amount is stated ("면접 후 결정", "회사 내규에 따름").
    """
    if not text:
        return None

    text = _SPELLED_MAN_RE.sub(_spelled_to_digits, text)
    text = _RANGE_RE.sub(r"\1\3~\2\3", text)
    markers = list(_PERIOD_RE.finditer(text))

    annual = [
        amount * 12 if _is_monthly(text, start, end, markers) else amount
        for amount, start, end in _extract_amounts(text)
    ]
    return min(annual) if annual else None


def _spelled_to_digits(match: re.Match[str]) -> str:
    """Rewrite a 천/백/십 multiplier amount as a plain number of 만."""
    thousands, hundreds, tens = match.groups()
    if thousands is None and hundreds is None and tens is None:
        return match.group(0)
    value = int(thousands or 0) * 1000 + int(hundreds or 0) * 100 + int(tens or 0) * 10
    return f"{value}만"


def _is_monthly(text: str, start: int, end: int, markers: list[re.Match[str]]) -> bool:
    """Decide whether the amount at text[start:end] is a monthly figure.

    A marker right after the amount wins. Otherwise the closest marker
    before it applies, and amounts with no marker at all are annual.
    """
    suffix = _PERIOD_SUFFIX_RE.match(text, end)
    if suffix:
        return suffix.group("monthly") is not None
    preceding = [m for m in markers if m.end() <= start]
    return bool(preceding) and preceding[-1].group("monthly") is not None


def _extract_amounts(text: str) -> list[tuple[int, int, int]]:
    """Collect (won, start, end) amounts, joining 억 with a following smaller unit."""
    amounts: list[tuple[int, int, int]] = []
    pending_eok: tuple[int, int, int] | None = None

    for match in _AMOUNT_RE.finditer(text):
        number = float(match.group(1).replace(",", ""))
        unit = match.group(2)

        if pending_eok is not None:
            eok, eok_start, eok_end = pending_eok
            pending_eok = None
            if unit in ("만", "원") and not text[eok_end : match.start()].strip():
                amounts.append((eok + int(number * _UNITS[unit]), eok_start, match.end()))
                continue
            amounts.append((eok, eok_start, eok_end))

        if unit == "억":
            pending_eok = (int(number * _UNITS["억"]), match.start(), match.end())
        elif unit is not None:
            amounts.append((int(number * _UNITS[unit]), match.start(), match.end()))
        elif number >= _MIN_BARE_WON:
            amounts.append((int(number), match.start(), match.end()))

    if pending_eok is not None:
        amounts.append(pending_eok)
    return amounts
