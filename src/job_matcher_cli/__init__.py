"""Command-line interface for job-matcher."""
