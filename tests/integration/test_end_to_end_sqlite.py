"""End-to-end run against a SQLite database file."""

from __future__ import annotations

from pathlib import Path

import pytest

from job_matcher_core.models.profile import default_profile
from job_matcher_engine.formatting import to_record
from job_matcher_engine.orchestrator.pipeline import MatchPipeline
from job_matcher_infra.store import open_store
from tests.mocks.mock_factories import make_acme_posting, make_posting
from tests.mocks.mock_settings import make_real_settings


@pytest.mark.integration
class TestEndToEndSqlite:
    """Ingest, score, and report through the real store."""

    @pytest.mark.asyncio
    async def test_full_run(self, tmp_path: Path) -> None:
        """Two runs over overlapping batches store and score each posting once."""
        settings = make_real_settings(tmp_path)
        async with open_store(settings) as store:
            pipeline = MatchPipeline(settings, store, default_profile())

            first = await pipeline.run(
                [
                    make_posting(url="https://a/1"),
                    make_posting(url="https://a/2", job_type="경력 7년 이상"),
                    make_posting(url="https://a/3", job_title=""),
                ]
            )
            second = await pipeline.run([make_posting(url="https://a/1"), make_acme_posting()])

            assert first.status == "success"
            assert len(first.ingest.saved) == 2
            assert first.ingest.invalid == 1
            assert second.ingest.duplicates == 1
            assert len(second.ingest.saved) == 1

            recommended = await store.recommended_postings()
            assert [r.score for r in recommended] == [98, 81]

            pending = await store.pending_postings()
            assert pending == []

            records = [to_record(r) for r in second.scoring.results]
            assert records[0]["apply_yn"] is True
            assert records[0]["id"] == second.ingest.saved[0].id

            recent = await store.recent_postings()
            stats = store.statistics(recent)
            assert stats.company_counts == {"한빛소프트": 2, "Acme Defense": 1}
