"""Public interface re-exports for job_matcher_core."""

from job_matcher_core.interfaces.store import PostingStoreProtocol

__all__ = ["PostingStoreProtocol"]
