"""Turn run aggregates into report tables and hand them to a sink."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, Sequence

from .constants import (
    BYTES_PER_MB,
    TITLE_BY_DOMAIN,
    TITLE_BY_LABEL,
    TITLE_BY_SENDER,
    TITLE_OVERVIEW,
)
from .errors import SinkWriteFailed
from .models import ParticipantStats, ReportTable, ScanRun

_CENT = Decimal("0.01")

PARTICIPANT_COLUMNS = ["threads", "messages", "unread", "with_attachments", "size_mb"]


class ReportSink(Protocol):
    """Renders or persists named tables, one call per table."""

    def write_table(self, title: str, rows: Sequence[Sequence]) -> None:
        ...


def bytes_to_mb(size_bytes: int) -> Decimal:
    """Convert bytes to MB rounded to 2 places, ties away from zero.

    >>> bytes_to_mb(1048576)
    Decimal('1.00')
    """
    return (Decimal(size_bytes) / BYTES_PER_MB).quantize(_CENT, rounding=ROUND_HALF_UP)


def _participant_table(
    title: str, key_column: str, stats: dict[str, ParticipantStats]
) -> ReportTable:
    # sorted() is stable, so equal counts keep first-seen order
    ordered = sorted(stats.items(), key=lambda item: item[1].messages, reverse=True)
    return ReportTable(
        title=title,
        header=[key_column, *PARTICIPANT_COLUMNS],
        rows=[
            [
                key,
                s.threads,
                s.messages,
                s.unread,
                s.with_attachments,
                bytes_to_mb(s.approx_size_bytes),
            ]
            for key, s in ordered
        ],
    )


def render_overview(run: ScanRun) -> ReportTable:
    totals = run.aggregates.totals
    return ReportTable(
        title=TITLE_OVERVIEW,
        header=["Metric", "Value"],
        rows=[
            ["Query", run.query],
            ["Threads scanned (this run)", run.threads_scanned],
            ["Threads", totals.threads],
            ["Messages", totals.messages],
            ["Unread threads", totals.unread_threads],
            ["Unread messages", totals.unread_messages],
            ["Threads with attachments", totals.threads_with_attachments],
            ["Approx size (bytes)", totals.approx_size_bytes],
            ["Approx size (MB)", bytes_to_mb(totals.approx_size_bytes)],
        ],
    )


def render_report(run: ScanRun) -> list[ReportTable]:
    """Build the Overview, By Sender, By Domain and By Label tables."""
    aggregates = run.aggregates
    labels = sorted(aggregates.by_label.items(), key=lambda item: item[1].threads, reverse=True)
    return [
        render_overview(run),
        _participant_table(TITLE_BY_SENDER, "email", aggregates.by_sender),
        _participant_table(TITLE_BY_DOMAIN, "domain", aggregates.by_domain),
        ReportTable(
            title=TITLE_BY_LABEL,
            header=["label", "threads", "unread_threads"],
            rows=[[name, s.threads, s.unread_threads] for name, s in labels],
        ),
    ]


def write_report(sink: ReportSink, tables: list[ReportTable]) -> None:
    """Write tables to ``sink`` in order.

    The first failing table aborts the write with SinkWriteFailed; tables
    already written stay written.
    """
    for table in tables:
        try:
            sink.write_table(table.title, table.as_rows())
        except Exception as e:
            raise SinkWriteFailed(table.title, str(e)) from e
