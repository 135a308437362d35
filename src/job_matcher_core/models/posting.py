"""Job posting models: scraped postings, recommendations, statistics."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)

REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("company_name", "companyName"),
    ("job_title", "jobTitle"),
)


class Posting(BaseModel):
    """One scraped job listing.

    Attributes are snake_case; the scraper's camelCase keys are accepted as
    aliases and used when serializing with ``by_alias=True``.
    """

    model_config = _CAMEL_CONFIG

    id: int | None = Field(default=None, description="Store-assigned primary key")
    company_name: str = Field(default="", description="Company name (required for scoring)")
    job_title: str = Field(default="", description="Posting title (required for scoring)")
    company_type: str = Field(
        default="", description="Company size label, e.g. 대기업, 중견기업, 스타트업"
    )
    job_location: str = Field(default="", description="Work location free text")
    job_type: str = Field(default="", description="Experience requirement, e.g. 신입, 경력 3년")
    job_salary: str = Field(default="", description="Salary free text")
    deadline: str = Field(default="", description="Deadline date or 상시채용")
    employment_type: str = Field(default="", description="정규직, 계약직, 인턴 ...")
    job_description: str = Field(default="", description="Full description text")
    url: str = Field(default="", description="Original posting URL, used for deduplication")
    scraped_at: datetime | None = Field(default=None, description="When the posting was scraped")

    @field_validator(
        "company_name",
        "job_title",
        "company_type",
        "job_location",
        "job_type",
        "job_salary",
        "deadline",
        "employment_type",
        "job_description",
        "url",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        """Treat null text fields as empty strings."""
        return "" if value is None else value

    def missing_required_fields(self) -> list[str]:
        """Return the camelCase names of empty required fields."""
        return [alias for attr, alias in REQUIRED_FIELDS if not getattr(self, attr).strip()]

    @property
    def scoring_text(self) -> str:
        """Title and description joined, the text role and skill fit read from."""
        return f"{self.job_title}\n{self.job_description}"


class RecommendedPosting(BaseModel):
    """A scored posting joined with the fields reporting needs."""

    model_config = _CAMEL_CONFIG

    id: int | None = Field(default=None, description="Posting id")
    score: int = Field(description="Stored match score")
    reason: str = Field(default="", description="Short summary of why it matched")
    strength: str = Field(default="", description="Candidate strengths for the role")
    weakness: str = Field(default="", description="Gaps between candidate and role")
    apply_yn: bool = Field(alias="apply_yn", description="Whether applying is recommended")
    company_name: str = Field(description="Company name")
    job_title: str = Field(description="Posting title")
    job_location: str = Field(default="", description="Work location")
    company_type: str = Field(default="", description="Company size label")
    url: str = Field(default="", description="Original posting URL")


class JobStatistics(BaseModel):
    """Frequency aggregates over a set of postings."""

    model_config = _CAMEL_CONFIG

    company_counts: dict[str, int] = Field(default_factory=dict)
    job_type_counts: dict[str, int] = Field(default_factory=dict)
    employment_type_counts: dict[str, int] = Field(default_factory=dict)
    top_companies: list[tuple[str, int]] = Field(
        default_factory=list, description="Up to five (company, count) pairs, most frequent first"
    )
