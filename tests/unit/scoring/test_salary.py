"""Tests for annual salary extraction."""

from __future__ import annotations

import pytest

from job_matcher_engine.scoring.salary import parse_annual_salary_krw


@pytest.mark.unit
class TestParseAnnualSalary:
    """Test salary text parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("연봉 4,500만원", 45_000_000),
            ("4000만원 이상", 40_000_000),
            ("3,000~4,000만원", 30_000_000),
            ("연봉 3000만원 ~ 4000만원", 30_000_000),
            ("1억 2천만원", 120_000_000),
            ("2억", 200_000_000),
            ("45,000,000원", 45_000_000),
            ("40000000", 40_000_000),
        ],
    )
    def test_annual_amounts(self, text: str, expected: int) -> None:
        """Unit suffixes, ranges and compound amounts parse to won."""
        assert parse_annual_salary_krw(text) == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("월 400만원", 48_000_000),
            ("월급 300만원", 36_000_000),
        ],
    )
    def test_monthly_amounts_are_annualized(self, text: str, expected: int) -> None:
        """Monthly figures are multiplied by twelve."""
        assert parse_annual_salary_krw(text) == expected

    @pytest.mark.parametrize("text", ["", "면접 후 결정", "회사내규에 따름", "경력 2년"])
    def test_no_amount(self, text: str) -> None:
        """Text without a usable amount returns None."""
        assert parse_annual_salary_krw(text) is None

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("연봉 4천5백만원", 45_000_000),
            ("연봉 3천만원", 30_000_000),
            ("2억 5천만원", 250_000_000),
        ],
    )
    def test_spelled_multipliers(self, text: str, expected: int) -> None:
        """천 and 백 multipliers in front of 만 are read as one amount."""
        assert parse_annual_salary_krw(text) == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("연봉 4,800만원 (월 400만원)", 48_000_000),
            ("월 250만원 (연 3000만원)", 30_000_000),
            ("3,000,000원/월", 36_000_000),
            ("연봉 3,600만원, 월 350만원 이상", 36_000_000),
        ],
    )
    def test_mixed_periods_annualize_each_amount(self, text: str, expected: int) -> None:
        """Each amount follows the period marker nearest to it."""
        assert parse_annual_salary_krw(text) == expected
