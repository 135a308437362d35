"""Custom exception hierarchy for job-matcher."""

from __future__ import annotations


class JobMatcherError(Exception):
    """Base exception for all job-matcher errors."""


class PostingValidationError(JobMatcherError):
    """Raised when a posting lacks a required field and cannot be scored."""

    def __init__(self, missing: list[str], url: str = "") -> None:
        self.missing = missing
        self.url = url
        super().__init__(f"posting missing required fields: {', '.join(missing)}")


class PersistenceError(JobMatcherError):
    """Raised when a backing-store operation fails."""


class StoreTimeoutError(PersistenceError):
    """Raised when a store call exceeds its timeout. Safe to retry."""


class ProfileLoadError(JobMatcherError):
    """Raised when a candidate profile file cannot be read or validated."""
