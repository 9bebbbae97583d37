"""Tests for keyed metric accumulation."""

from gmail_usage_report.accumulator import bump
from gmail_usage_report.models import (
    LabelStats,
    LabelUpdate,
    MessageUpdate,
    ParticipantStats,
    SizeUpdate,
    ThreadUpdate,
)


def test_creates_record_on_first_use():
    stats: dict = {}
    bump(stats, "a@x.com", MessageUpdate(unread=True))
    assert stats == {"a@x.com": ParticipantStats(messages=1, unread=1)}


def test_repeated_bumps_add_up():
    stats: dict = {}
    bump(stats, "a@x.com", MessageUpdate(has_attachment=True))
    bump(stats, "a@x.com", MessageUpdate())
    bump(stats, "a@x.com", SizeUpdate(40))
    bump(stats, "a@x.com", SizeUpdate(2))
    bump(stats, "a@x.com", ThreadUpdate())

    record = stats["a@x.com"]
    assert record.messages == 2
    assert record.unread == 0
    assert record.with_attachments == 1
    assert record.approx_size_bytes == 42
    assert record.threads == 1


def test_label_update_uses_label_record():
    labels: dict = {}
    bump(labels, "Promo", LabelUpdate(unread=True))
    bump(labels, "Promo", LabelUpdate(unread=False))
    assert labels["Promo"] == LabelStats(threads=2, unread_threads=1)


def test_first_seen_order_is_kept():
    stats: dict = {}
    for key in ["c", "a", "b", "a", "c"]:
        bump(stats, key, ThreadUpdate())
    assert list(stats) == ["c", "a", "b"]
