"""Domain models, configuration, and shared constants for job-matcher."""
