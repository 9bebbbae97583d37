"""Rich-based display functions for Gmail Usage Report."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from .models import ScanRun

console = Console()


def _is_number(value) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _cell(value) -> str | Text:
    if isinstance(value, Decimal):
        return Text(f"{value:.2f}", justify="right")
    if _is_number(value):
        return Text(str(value), justify="right")
    return str(value)


class ConsoleSink:
    """Report sink printing each table as a Rich table.

    Numbers are right-aligned cell by cell, so a mixed column such as the
    Overview's Value keeps its counts aligned.
    """

    def __init__(self, out: Console | None = None) -> None:
        self.console = out or console

    def write_table(self, title: str, rows: Sequence[Sequence]) -> None:
        table = Table(title=title)
        if not rows:
            self.console.print(table)
            return

        header, *body = rows
        for idx, name in enumerate(header):
            column = [row[idx] for row in body]
            numeric = bool(column) and all(_is_number(v) for v in column)
            table.add_column(str(name), justify="right" if numeric else "left")
        for row in body:
            table.add_row(*(_cell(v) for v in row))

        self.console.print(table)


def create_progress(description: str) -> Progress:
    """Create a configured Rich Progress spinner (page totals are unknown upfront)."""
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{description}"),
        TextColumn("{task.fields[status]}"),
        TimeElapsedColumn(),
        console=console,
    )


def display_run_summary(run: ScanRun) -> None:
    """Display a one-panel summary of a finished scan."""
    stop = "thread cap reached" if run.stop_reason == "cap" else "no more threads"
    oldest = run.oldest_date.date().isoformat() if run.oldest_date else "-"
    console.print(
        Panel(
            f"Threads scanned: {run.threads_scanned}  |  "
            f"Pages fetched: {run.pages_fetched}  |  "
            f"Oldest message: {oldest}  |  "
            f"Stopped: {stop}",
            title="Summary",
        )
    )
