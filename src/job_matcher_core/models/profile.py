"""Candidate profile model and the built-in profile."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from job_matcher_core.exceptions import ProfileLoadError

SizeTier = Literal["large", "mid", "public", "small", "startup"]


class SkillTier(BaseModel):
    """A group of skill keywords worth the same points per hit."""

    model_config = ConfigDict(frozen=True)

    weight: int = Field(ge=0, description="Points per keyword hit")
    keywords: tuple[str, ...] = Field(description="Keywords in this tier")


class CandidateProfile(BaseModel):
    """Fixed description of the candidate postings are scored against.

    Immutable; passed explicitly to the evaluator.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Candidate name")
    preferred_domains: tuple[str, ...] = Field(
        default=(), description="Job domains the candidate wants"
    )
    top_tier_keywords: tuple[str, ...] = Field(
        description="Role keywords worth the most role-fit points"
    )
    secondary_keywords: tuple[str, ...] = Field(
        description="Role keywords worth fewer role-fit points"
    )
    skill_tiers: dict[str, SkillTier] = Field(description="Skill keyword tiers by category")
    preferred_size: SizeTier = Field(default="mid", description="Preferred company size tier")
    minimum_size: SizeTier = Field(default="mid", description="Smallest acceptable size tier")
    interest_industries: dict[str, tuple[str, ...]] = Field(
        description="Interest industry name -> detection keywords"
    )
    home_location: str = Field(description="Where the candidate lives")
    home_area_keywords: tuple[str, ...] = Field(
        default=(), description="Place names counted as the candidate's home area"
    )


def default_profile() -> CandidateProfile:
    """Return the built-in profile: a CS master's graduate living in Yangju."""
    return CandidateProfile(
        name="최연우",
        preferred_domains=(
            "AI/ML 개발",
            "컴퓨터 비전",
            "보안",
            "웹 서비스 개발",
            "게임 이상탐지",
            "게임 보안 기술 지원",
            "IDC 서버 운영",
            "인프라 운영 관리",
        ),
        top_tier_keywords=(
            "AI",
            "Machine Learning",
            "Deep Learning",
            "Computer Vision",
            "Infra",
            "인공지능",
            "머신러닝",
            "딥러닝",
            "컴퓨터 비전",
            "인프라",
        ),
        secondary_keywords=(
            "Blockchain",
            "Data Analysis",
            "Data Science",
            "Research",
            "Development",
            "블록체인",
            "데이터 분석",
            "데이터 사이언스",
            "연구",
            "개발",
        ),
        skill_tiers={
            "ml_framework": SkillTier(
                weight=5,
                keywords=(
                    "PyTorch",
                    "TensorFlow",
                    "Keras",
                    "YOLO",
                    "CNN",
                    "GCN",
                    "Deep Learning",
                    "AI",
                    "ML",
                    "Transformer",
                    "Vision Transformer",
                    "GAN",
                    "ST-GCN",
                    "파이토치",
                    "텐서플로우",
                    "트랜스포머",
                    "비전 트랜스포머",
                ),
            ),
            "data_analysis": SkillTier(
                weight=5,
                keywords=(
                    "Python",
                    "Pandas",
                    "NumPy",
                    "ETL",
                    "Data Analysis",
                    "Visualization",
                    "파이썬",
                    "판다스",
                    "넘파이",
                    "데이터 분석",
                    "시각화",
                ),
            ),
            "web_dev": SkillTier(
                weight=2,
                keywords=(
                    "HTML",
                    "CSS",
                    "Vue.js",
                    "Node.js",
                    "Flask",
                    "React",
                    "NextJS",
                    "JavaScript",
                ),
            ),
            "tooling": SkillTier(
                weight=2,
                keywords=(
                    "Unreal Engine",
                    "Docker",
                    "Git",
                    "GitHub",
                    "언리얼 엔진",
                    "도커",
                    "깃허브",
                ),
            ),
        },
        preferred_size="mid",
        minimum_size="mid",
        interest_industries={
            "finance": ("금융", "은행", "증권", "보험", "핀테크", "finance", "fintech", "bank"),
            "defense": ("방산", "방위", "국방", "defense", "defence"),
            "gaming": ("게임", "game", "gaming"),
            "ai": ("인공지능", "AI", "artificial intelligence"),
        },
        home_location="경기도 양주시",
        home_area_keywords=("양주", "의정부", "동두천"),
    )


def load_profile(path: Path) -> CandidateProfile:
    """Load a candidate profile from a JSON file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return CandidateProfile.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        msg = f"Failed to load candidate profile from {path}: {e}"
        raise ProfileLoadError(msg) from e
