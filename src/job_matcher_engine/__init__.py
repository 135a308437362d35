"""Scoring engine: rubric evaluation, result formatting, and the match pipeline."""
