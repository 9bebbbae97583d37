"""Scan orchestration - pages threads from a source into the run aggregates."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable, Protocol, Sequence

from .aggregator import apply_thread
from .display import console, create_progress
from .errors import SourceUnavailable
from .models import Aggregates, RunConfig, ScanRun, Thread


class ThreadSource(Protocol):
    """Supplies pages of threads; an empty page means the query is exhausted."""

    def fetch_page(self, query: str, offset: int, page_size: int) -> Sequence[Thread]:
        ...


def thread_date(thread: Thread) -> datetime | None:
    """Date of the thread's latest message, the date Gmail orders threads by."""
    dates = [m.date for m in thread.messages if m.date is not None]
    return max(dates) if dates else None


def _oldest(current: datetime | None, thread: Thread) -> datetime | None:
    latest = thread_date(thread)
    if latest is None or (current is not None and current <= latest):
        return current
    return latest


def drive(
    source: ThreadSource,
    config: RunConfig,
    aggregates: Aggregates | None = None,
    sleep: Callable[[float], None] = time.sleep,
    on_page: Callable[[int, int], None] | None = None,
) -> ScanRun:
    """Fetch pages until the source runs dry or the thread cap is hit.

    Pages are fetched one at a time with ``config.pacing_delay_ms`` of
    blocking sleep between fetches.  Threads past the cap in the last page
    are dropped.  Source errors are not retried; they surface as
    SourceUnavailable and the partially filled aggregates are abandoned.

    ``on_page`` is called with (pages fetched, threads processed) after each
    non-empty page.
    """
    run = ScanRun(query=config.query, aggregates=aggregates or Aggregates())
    offset = 0

    while True:
        if run.pages_fetched and config.pacing_delay_ms:
            sleep(config.pacing_delay_ms / 1000)

        try:
            page = source.fetch_page(config.query, offset, config.page_size)
        except Exception as e:
            raise SourceUnavailable(config.query, offset, str(e)) from e
        run.pages_fetched += 1

        if not page:
            run.stop_reason = "exhausted"
            return run

        for thread in page:
            if run.threads_scanned >= config.max_threads_per_run:
                break
            apply_thread(run.aggregates, thread)
            run.oldest_date = _oldest(run.oldest_date, thread)
            run.threads_scanned += 1

        if on_page:
            on_page(run.pages_fetched, run.threads_scanned)

        if run.threads_scanned >= config.max_threads_per_run:
            run.stop_reason = "cap"
            return run

        offset += len(page)


def scan_threads(source: ThreadSource, config: RunConfig) -> ScanRun:
    """Run drive() with a live progress line on the console."""
    console.print(f"[bold]Scanning threads[/bold] for query [cyan]{config.query or '(all mail)'}[/cyan]")
    with create_progress("Aggregating threads") as progress:
        task = progress.add_task("scanning", total=None, status="")

        def on_page(pages: int, threads: int) -> None:
            progress.update(task, status=f"{threads} threads / {pages} pages")

        run = drive(source, config, on_page=on_page)

    console.print(
        f"  Aggregated [bold]{run.threads_scanned}[/bold] threads "
        f"[dim]({run.pages_fetched} pages, stopped: {run.stop_reason})[/dim]"
    )
    return run
