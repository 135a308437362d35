"""Posting repository for database operations."""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from job_matcher_infra.db.models import PostingModel


class PostingRepository:
    """CRUD operations for the company_recruitment table."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with an async session."""
        self._session = session

    async def create(self, model: PostingModel) -> PostingModel:
        """Create a posting record."""
        self._session.add(model)
        await self._session.flush()
        return model

    async def get_by_id(self, posting_id: int) -> PostingModel | None:
        """Retrieve a posting by primary key."""
        return await self._session.get(PostingModel, posting_id)

    async def find_urls(self, urls: Collection[str]) -> list[str]:
        """Return the stored job_url values among urls."""
        stmt = select(PostingModel.job_url).where(PostingModel.job_url.in_(list(urls)))
        result = await self._session.execute(stmt)
        return [url for url in result.scalars().all() if url is not None]

    async def list_recent(self, limit: int = 10) -> list[PostingModel]:
        """List postings, newest scraped_at first."""
        stmt = (
            select(PostingModel)
            .order_by(PostingModel.scraped_at.desc(), PostingModel.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_unchecked(self, limit: int = 50) -> list[PostingModel]:
        """List postings not yet scored, oldest first."""
        stmt = (
            select(PostingModel)
            .where(PostingModel.is_gpt_checked.is_(False))
            .order_by(PostingModel.scraped_at.asc(), PostingModel.id.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_recommended(
        self, min_score: int, limit: int = 5
    ) -> list[PostingModel]:
        """List scored, recommended postings at or above min_score, best first."""
        stmt = (
            select(PostingModel)
            .where(
                PostingModel.is_gpt_checked.is_(True),
                PostingModel.is_recommended.is_(True),
                PostingModel.match_score >= min_score,
            )
            .order_by(PostingModel.match_score.desc(), PostingModel.id.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
