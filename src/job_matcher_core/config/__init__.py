"""Application configuration."""

from job_matcher_core.config.settings import Settings

__all__ = ["Settings"]
