"""Data models for Gmail Usage Report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, NamedTuple, Union

from .constants import MAX_THREADS_PER_RUN, PACING_DELAY_MS, PAGE_SIZE


# --- Thread source records ---


@dataclass
class Attachment:
    """A single attachment of a message."""

    size: int  # bytes
    filename: str = ""
    is_inline_image: bool = False


@dataclass
class Message:
    """A single email within a thread."""

    sender: str  # Full From header value
    is_unread: bool = False
    body: str = ""
    attachments: list[Attachment] = field(default_factory=list)
    date: datetime | None = None


@dataclass
class Thread:
    """A conversation as supplied by a thread source."""

    messages: list[Message] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    is_unread: bool = False
    thread_id: str = ""


class Address(NamedTuple):
    """Canonical parts of a From header."""

    email: str
    domain: str
    name: str


# --- Aggregates ---


@dataclass
class Totals:
    threads: int = 0
    messages: int = 0
    unread_threads: int = 0
    unread_messages: int = 0
    threads_with_attachments: int = 0
    approx_size_bytes: int = 0


@dataclass
class ParticipantStats:
    """Rollup for one sender or one domain."""

    threads: int = 0
    messages: int = 0
    unread: int = 0
    with_attachments: int = 0
    approx_size_bytes: int = 0


@dataclass
class LabelStats:
    threads: int = 0
    unread_threads: int = 0


@dataclass
class Aggregates:
    """Mutable metric state for exactly one report run."""

    totals: Totals = field(default_factory=Totals)
    by_sender: dict[str, ParticipantStats] = field(default_factory=dict)
    by_domain: dict[str, ParticipantStats] = field(default_factory=dict)
    by_label: dict[str, LabelStats] = field(default_factory=dict)


# --- Typed accumulator updates ---


@dataclass(frozen=True)
class MessageUpdate:
    """One message seen for a sender or domain."""

    record_type: ClassVar[type] = ParticipantStats

    unread: bool = False
    has_attachment: bool = False

    def apply(self, stats: ParticipantStats) -> None:
        stats.messages += 1
        stats.unread += int(self.unread)
        stats.with_attachments += int(self.has_attachment)


@dataclass(frozen=True)
class ThreadUpdate:
    """One thread in which a sender or domain took part."""

    record_type: ClassVar[type] = ParticipantStats

    def apply(self, stats: ParticipantStats) -> None:
        stats.threads += 1


@dataclass(frozen=True)
class SizeUpdate:
    """Approximate size of one message, attributed to its sender or domain."""

    record_type: ClassVar[type] = ParticipantStats

    size_bytes: int = 0

    def apply(self, stats: ParticipantStats) -> None:
        stats.approx_size_bytes += self.size_bytes


@dataclass(frozen=True)
class LabelUpdate:
    """One thread carrying a label."""

    record_type: ClassVar[type] = LabelStats

    unread: bool = False

    def apply(self, stats: LabelStats) -> None:
        stats.threads += 1
        stats.unread_threads += int(self.unread)


Update = Union[MessageUpdate, ThreadUpdate, SizeUpdate, LabelUpdate]


# --- Run configuration and result ---


@dataclass(frozen=True)
class RunConfig:
    """Settings consumed by the pagination driver."""

    query: str = ""
    page_size: int = PAGE_SIZE
    max_threads_per_run: int = MAX_THREADS_PER_RUN
    pacing_delay_ms: int = PACING_DELAY_MS

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {self.page_size}")
        if self.max_threads_per_run <= 0:
            raise ValueError(
                f"max_threads_per_run must be > 0, got {self.max_threads_per_run}"
            )
        if self.pacing_delay_ms < 0:
            raise ValueError(f"pacing_delay_ms must be >= 0, got {self.pacing_delay_ms}")


@dataclass
class ScanRun:
    """Result of one pagination pass."""

    query: str
    aggregates: Aggregates = field(default_factory=Aggregates)
    threads_scanned: int = 0
    pages_fetched: int = 0
    stop_reason: str = ""  # "exhausted" or "cap"
    oldest_date: datetime | None = None  # oldest latest-message date over processed threads
    base_query: str = ""  # query before date terms were added, the checkpoint key
    run_date: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass
class ReportTable:
    """A named table handed to a report sink."""

    title: str
    header: list[str]
    rows: list[list] = field(default_factory=list)

    def as_rows(self) -> list[list]:
        return [list(self.header), *self.rows]
