"""CLI entry point for Gmail Usage Report."""

from __future__ import annotations

from datetime import timedelta

import click

from .auth import check_auth, get_gmail_service
from .checkpoint import CheckpointStore
from .constants import MAX_PAGE_SIZE, MAX_THREADS_PER_RUN, PACING_DELAY_MS, PAGE_SIZE
from .display import ConsoleSink, console, display_run_summary
from .errors import UsageReportError
from .export import CsvSink, JsonSink
from .gmail_client import GmailThreadSource, build_query
from .models import RunConfig
from .report import render_report, write_report
from .scanner import scan_threads


@click.group()
@click.version_option(version="0.1.0", prog_name="gmail-usage-report")
def cli() -> None:
    """Gmail Usage Report - thread, sender, domain and label metrics for your Gmail."""


@cli.command()
@click.option("-q", "--query", default="", help="Gmail search query (e.g. 'in:inbox').")
@click.option("--before", type=click.DateTime(["%Y-%m-%d"]), default=None, help="Only threads before this date.")
@click.option("--after", type=click.DateTime(["%Y-%m-%d"]), default=None, help="Only threads after this date.")
@click.option("--resume", is_flag=True, help="Continue before the oldest date reached by earlier runs.")
@click.option(
    "--page-size",
    default=PAGE_SIZE,
    type=click.IntRange(1, MAX_PAGE_SIZE),
    show_default=True,
    help="Threads per page.",
)
@click.option(
    "--max-threads",
    default=MAX_THREADS_PER_RUN,
    type=click.IntRange(min=1),
    show_default=True,
    help="Maximum threads to process in this run.",
)
@click.option(
    "--pacing-ms",
    default=PACING_DELAY_MS,
    type=click.IntRange(min=0),
    show_default=True,
    help="Pause between page fetches, in milliseconds.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["console", "csv", "json"]),
    default="console",
    help="Output format.",
)
@click.option("-o", "--output", default=None, help="Output directory (csv) or file (json).")
@click.option("--no-checkpoint", is_flag=True, help="Do not record this run's oldest date.")
def report(
    query: str,
    before,
    after,
    resume: bool,
    page_size: int,
    max_threads: int,
    pacing_ms: int,
    fmt: str,
    output: str | None,
    no_checkpoint: bool,
) -> None:
    """Scan threads and report usage by sender, domain and label."""
    if fmt != "console" and not output:
        raise click.UsageError(f"--output is required for --format {fmt}.")

    base_query = query.strip()
    before_date = before.date() if before else None
    if resume:
        with CheckpointStore() as store:
            oldest = store.oldest_date(base_query)
        if oldest is None:
            console.print("[yellow]No checkpoint found for this query, scanning from the newest thread.[/yellow]")
        else:
            # before: excludes its own day; keep the checkpoint day in range
            resume_before = oldest.date() + timedelta(days=1)
            before_date = min(filter(None, [before_date, resume_before]))
            console.print(f"[dim]Resuming before {before_date.isoformat()}[/dim]")

    config = RunConfig(
        query=build_query(base_query, before=before_date, after=after.date() if after else None),
        page_size=page_size,
        max_threads_per_run=max_threads,
        pacing_delay_ms=pacing_ms,
    )

    try:
        service = get_gmail_service()
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e

    try:
        run = scan_threads(GmailThreadSource(service), config)
        tables = render_report(run)
        if fmt == "csv":
            sink = CsvSink(output)
            write_report(sink, tables)
            console.print(f"Results saved to {sink.directory}")
        elif fmt == "json":
            with JsonSink(output) as sink:
                write_report(sink, tables)
            console.print(f"Results saved to {output}")
        else:
            write_report(ConsoleSink(), tables)
    except UsageReportError as e:
        raise click.ClickException(str(e)) from e

    run.base_query = base_query
    display_run_summary(run)

    if not no_checkpoint:
        with CheckpointStore() as store:
            store.save_run(run)


@cli.command()
def auth() -> None:
    """Test or reset Gmail authentication."""
    check_auth()


@cli.group(name="checkpoint")
def checkpoint_group() -> None:
    """Manage the oldest-date checkpoint."""


@checkpoint_group.command(name="info")
def checkpoint_info() -> None:
    """Show checkpoint statistics."""
    with CheckpointStore() as store:
        info = store.get_info()

    if info["last_run_date"] is None:
        console.print("[dim]No runs recorded.[/dim]")
        return

    console.print(f"[bold]Database size:[/bold] {info['db_file_size'] / 1024:.1f} KB")
    console.print(f"[bold]Runs:[/bold] {info['run_count']}")
    console.print(f"[bold]Last run:[/bold] {info['last_run_date']}")
    console.print(f"[bold]Last query:[/bold] {info['last_query'] or '(all mail)'}")
    console.print(f"[bold]Oldest date reached:[/bold] {info['oldest_date'] or '-'}")


@checkpoint_group.command(name="clear")
def checkpoint_clear() -> None:
    """Forget all recorded runs."""
    with CheckpointStore() as store:
        store.clear()
    console.print("[green]Checkpoint cleared.[/green]")
