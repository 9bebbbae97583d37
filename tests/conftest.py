"""Shared fixtures for tests."""

from __future__ import annotations

import pytest

from gmail_usage_report.models import Attachment, Message, Thread


class FakeSource:
    """In-memory thread source serving fixed pages of a thread list."""

    def __init__(self, threads: list[Thread], fail_at_offset: int | None = None) -> None:
        self.threads = threads
        self.fail_at_offset = fail_at_offset
        self.calls: list[tuple[str, int, int]] = []

    def fetch_page(self, query: str, offset: int, page_size: int) -> list[Thread]:
        self.calls.append((query, offset, page_size))
        if self.fail_at_offset is not None and offset >= self.fail_at_offset:
            raise ConnectionError("backend down")
        return self.threads[offset:offset + page_size]


class RecordingSink:
    """Report sink keeping every table it is given."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.tables: list[tuple[str, list[list]]] = []

    def write_table(self, title, rows) -> None:
        if title == self.fail_on:
            raise OSError("disk full")
        self.tables.append((title, [list(r) for r in rows]))


def make_thread(*senders: str, labels=None, unread=False, body="hello") -> Thread:
    return Thread(
        messages=[Message(sender=s, is_unread=unread, body=body) for s in senders],
        labels=list(labels or []),
        is_unread=unread,
    )


@pytest.fixture
def promo_thread() -> Thread:
    """Unread, labelled Promo, one message with a 100-byte attachment."""
    return Thread(
        messages=[
            Message(
                sender="X Sender <x@a.com>",
                is_unread=True,
                body="ignored because of the attachment",
                attachments=[Attachment(size=100, filename="offer.pdf")],
            )
        ],
        labels=["Promo"],
        is_unread=True,
    )


@pytest.fixture
def plain_thread() -> Thread:
    """Read, unlabelled, two plain messages from the same sender."""
    return Thread(
        messages=[
            Message(sender="x@a.com", body="a" * 50),
            Message(sender="X <X@A.com>", body="b" * 70),
        ],
    )


@pytest.fixture
def mixed_threads() -> list[Thread]:
    return [
        make_thread("Alice <alice@example.com>", "Bob <bob@example.com>", labels=["Work"]),
        make_thread("noreply@shop.io", "noreply@shop.io", "noreply@shop.io", labels=["Promo"], unread=True),
        Thread(
            messages=[
                Message(
                    sender="Carol <carol@example.com>",
                    attachments=[
                        Attachment(size=2048, filename="report.xlsx"),
                        Attachment(size=500, filename="logo.png", is_inline_image=True),
                    ],
                ),
                Message(sender="Mailer Daemon", body="bounced"),
            ],
            labels=["Work", "Promo"],
        ),
    ]


@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
def recording_sink():
    return RecordingSink


@pytest.fixture
def thread_factory():
    return make_thread
