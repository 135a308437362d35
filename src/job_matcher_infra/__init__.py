"""Persistence layer: SQLAlchemy models, repositories, and the posting store."""
