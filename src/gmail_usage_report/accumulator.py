"""Keyed metric accumulation."""

from __future__ import annotations

from typing import MutableMapping

from .models import Update


def bump(mapping: MutableMapping[str, object], key: str, update: Update) -> None:
    """Apply ``update`` to ``mapping[key]``, creating an empty record on first use.

    Every counter the updates touch is additive, so calling this repeatedly
    with the same key only ever grows the record.  New keys are appended, so
    iteration follows first-seen order.
    """
    record = mapping.get(key)
    if record is None:
        record = update.record_type()
        mapping[key] = record
    update.apply(record)
