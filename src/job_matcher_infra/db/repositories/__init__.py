"""Table repositories."""

from job_matcher_infra.db.repositories.posting_repo import PostingRepository

__all__ = ["PostingRepository"]
