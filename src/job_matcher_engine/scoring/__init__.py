"""Rubric scoring: keyword matching, field classifiers, and the evaluator."""

from job_matcher_engine.scoring.rubric import RubricEvaluator, evaluate, tier_for

__all__ = ["RubricEvaluator", "evaluate", "tier_for"]
