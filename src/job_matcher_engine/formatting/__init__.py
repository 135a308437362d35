"""Shape match results for external consumers."""

from job_matcher_engine.formatting.result_formatter import (
    RECORD_FIELDS,
    to_json,
    to_record,
    to_recommended,
)

__all__ = ["RECORD_FIELDS", "to_json", "to_record", "to_recommended"]
