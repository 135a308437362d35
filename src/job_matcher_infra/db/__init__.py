"""Async database access."""
