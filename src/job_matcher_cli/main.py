"""CLI entrypoint using typer."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from job_matcher_core.config.settings import Settings
from job_matcher_core.exceptions import ProfileLoadError
from job_matcher_core.models.posting import JobStatistics, Posting, RecommendedPosting
from job_matcher_core.models.profile import CandidateProfile, default_profile, load_profile
from job_matcher_core.models.run import RunResult, ScoringResult
from job_matcher_engine.formatting import to_json
from job_matcher_engine.observability import configure_logging
from job_matcher_engine.orchestrator.pipeline import MatchPipeline
from job_matcher_engine.scoring import RubricEvaluator
from job_matcher_infra.db.database import connect
from job_matcher_infra.store import open_store

app = typer.Typer(
    name="job-matcher",
    help="Score scraped job postings against the candidate profile",
)
console = Console()


def _settings(verbose: bool) -> Settings:
    """Load settings and configure logging."""
    settings = Settings()
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)
    return settings


def _profile(settings: Settings) -> CandidateProfile:
    """Return the configured profile, or the built-in one."""
    if settings.profile_path is None:
        return default_profile()
    try:
        return load_profile(settings.profile_path)
    except ProfileLoadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e


def _load_postings(path: Path) -> list[Posting]:
    """Read scraper output: a JSON array of postings, or {"postings": [...]}."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error:[/red] cannot read {path}: {e}")
        raise typer.Exit(code=1) from e

    if isinstance(data, dict):
        data = data.get("postings", [])
    if not isinstance(data, list):
        console.print(f"[red]Error:[/red] {path} does not contain a list of postings")
        raise typer.Exit(code=1)

    try:
        return [Posting.model_validate(item) for item in data]
    except ValidationError as e:
        console.print(f"[red]Error:[/red] invalid posting in {path}: {e}")
        raise typer.Exit(code=1) from e


@app.command("init-db")
def init_db_command(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Create the postings table."""
    settings = _settings(verbose)

    async def _init() -> None:
        async with connect(settings, create_schema=True):
            pass

    asyncio.run(_init())
    console.print(f"[bold green]Database ready:[/bold green] {settings.db_backend}")


@app.command()
def ingest(
    postings_file: Path = typer.Argument(..., help="JSON file of scraped postings", exists=True),
    score: bool = typer.Option(True, "--score/--no-score", help="Score new postings"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Store new postings from a scraper run and score them."""
    settings = _settings(verbose)
    profile = _profile(settings)
    postings = _load_postings(postings_file)

    async def _ingest() -> RunResult | None:
        async with open_store(settings) as store:
            pipeline = MatchPipeline(settings, store, profile)
            if score:
                return await pipeline.run(postings)
            result = await pipeline.ingest(postings)
            console.print(
                f"Saved {len(result.saved)} of {result.received} "
                f"({result.duplicates} duplicates, {result.invalid} invalid, "
                f"{result.failed} failed)"
            )
            return None

    result = asyncio.run(_ingest())
    if result is None:
        return

    console.print(f"\n[bold]Run complete:[/bold] {result.status}")
    console.print(f"  Received: {result.ingest.received}")
    console.print(f"  New: {len(result.ingest.saved)}")
    console.print(f"  Duplicates: {result.ingest.duplicates}")
    console.print(f"  Scored: {result.scoring.evaluated}")
    console.print(f"  Recommended: {result.scoring.recommended}")
    console.print(f"  Duration: {result.duration_seconds:.1f}s")

    if result.errors:
        console.print(f"\n[yellow]Warnings/Errors: {len(result.errors)}[/yellow]")

    if result.status == "failed":
        raise typer.Exit(code=1)


@app.command()
def score(
    limit: int = typer.Option(50, "--limit", help="Maximum postings to score"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Score stored postings that have not been scored yet."""
    settings = _settings(verbose)
    profile = _profile(settings)

    async def _score() -> ScoringResult:
        async with open_store(settings) as store:
            return await MatchPipeline(settings, store, profile).score_pending(limit)

    result = asyncio.run(_score())
    console.print(
        f"Scored {result.evaluated} postings, recorded {result.recorded}, "
        f"recommended {result.recommended}"
    )
    if result.errors:
        console.print(f"[yellow]Warnings/Errors: {len(result.errors)}[/yellow]")


@app.command()
def evaluate(
    postings_file: Path = typer.Argument(..., help="JSON file of postings", exists=True),
) -> None:
    """Score postings without a database and print the JSON result array."""
    settings = Settings()
    configure_logging(settings)
    evaluator = RubricEvaluator(_profile(settings))
    results = evaluator.evaluate_batch(_load_postings(postings_file))
    typer.echo(to_json(results))


@app.command()
def recommended(
    limit: int | None = typer.Option(None, "--limit", help="Number of postings"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Show the best-scoring recommended postings."""
    settings = _settings(verbose)

    async def _recommended() -> list[RecommendedPosting]:
        async with open_store(settings) as store:
            return await store.recommended_postings(limit or settings.recommended_limit)

    rows = asyncio.run(_recommended())
    if as_json:
        payload = [row.model_dump(by_alias=True) for row in rows]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    table = Table(title="Recommended postings")
    for column in ("ID", "Score", "Company", "Title", "Location", "Reason"):
        table.add_column(column)
    for row in rows:
        table.add_row(
            str(row.id),
            str(row.score),
            row.company_name,
            row.job_title,
            row.job_location,
            row.reason,
        )
    console.print(table)


@app.command()
def recent(
    limit: int | None = typer.Option(None, "--limit", help="Number of postings"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Show the most recently scraped postings."""
    settings = _settings(verbose)

    async def _recent() -> list[Posting]:
        async with open_store(settings) as store:
            return await store.recent_postings(limit or settings.recent_limit)

    postings = asyncio.run(_recent())
    table = Table(title="Recent postings")
    for column in ("ID", "Company", "Title", "Experience", "Deadline", "Scraped"):
        table.add_column(column)
    for posting in postings:
        table.add_row(
            str(posting.id),
            posting.company_name,
            posting.job_title,
            posting.job_type,
            posting.deadline,
            posting.scraped_at.isoformat(timespec="minutes") if posting.scraped_at else "",
        )
    console.print(table)


@app.command()
def stats(
    limit: int = typer.Option(100, "--limit", help="Number of recent postings to aggregate"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Show company, experience, and employment-type counts for recent postings."""
    settings = _settings(verbose)

    async def _stats() -> JobStatistics:
        async with open_store(settings) as store:
            return store.statistics(await store.recent_postings(limit))

    statistics = asyncio.run(_stats())
    _print_counts("Top companies", dict(statistics.top_companies))
    _print_counts("Experience", statistics.job_type_counts)
    _print_counts("Employment type", statistics.employment_type_counts)


@app.command("mark-applied")
def mark_applied(
    posting_id: int = typer.Argument(..., help="Posting id"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Record that the candidate applied to a posting."""
    settings = _settings(verbose)

    async def _mark() -> bool:
        async with open_store(settings) as store:
            return await store.mark_applied(posting_id)

    if not asyncio.run(_mark()):
        console.print(f"[red]Error:[/red] posting {posting_id} not updated")
        raise typer.Exit(code=1)
    console.print(f"[green]Marked posting {posting_id} as applied[/green]")


@app.command()
def version() -> None:
    """Show version."""
    console.print("job-matcher v0.1.0")


def _print_counts(title: str, counts: dict[str, int]) -> None:
    """Print a two-column count table."""
    table = Table(title=title)
    table.add_column("Value")
    table.add_column("Count", justify="right")
    for value, count in counts.items():
        table.add_row(value, str(count))
    console.print(table)


if __name__ == "__main__":
    app()
