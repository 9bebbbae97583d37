"""Apply threads to the run aggregates."""

from __future__ import annotations

from .accumulator import bump
from .address import normalize_address
from .models import (
    Aggregates,
    LabelUpdate,
    Message,
    MessageUpdate,
    SizeUpdate,
    Thread,
    ThreadUpdate,
)


def countable_attachments(message: Message) -> list:
    """Attachments that count towards size; inline images are skipped."""
    return [a for a in message.attachments if not a.is_inline_image]


def message_size(message: Message) -> int:
    """Approximate size of a message.

    Sum of attachment bytes when the message has any attachment, otherwise the
    body length in characters.  Never both, and never the real wire size.
    """
    attachments = countable_attachments(message)
    if attachments:
        return sum(a.size for a in attachments)
    return len(message.body or "")


def apply_thread(aggregates: Aggregates, thread: Thread) -> None:
    """Fold one thread into ``aggregates``.

    Message counters are bumped once per message; ``threads`` counters once
    per unique sender and unique domain in the thread.
    """
    totals = aggregates.totals
    totals.threads += 1
    if thread.is_unread:
        totals.unread_threads += 1

    sized: list[tuple[str, str, int]] = []
    has_attachment = False
    unread_messages = 0

    for message in thread.messages:
        address = normalize_address(message.sender)
        with_attachment = bool(countable_attachments(message))
        update = MessageUpdate(unread=message.is_unread, has_attachment=with_attachment)
        bump(aggregates.by_sender, address.email, update)
        bump(aggregates.by_domain, address.domain, update)

        sized.append((address.email, address.domain, message_size(message)))
        has_attachment = has_attachment or with_attachment
        if message.is_unread:
            unread_messages += 1

    totals.messages += len(thread.messages)
    totals.unread_messages += unread_messages
    if has_attachment:
        totals.threads_with_attachments += 1

    # Size goes in exactly once per message, here and nowhere else.
    totals.approx_size_bytes += sum(size for _, _, size in sized)
    for email, domain, size in sized:
        bump(aggregates.by_sender, email, SizeUpdate(size))
        bump(aggregates.by_domain, domain, SizeUpdate(size))

    senders = dict.fromkeys((email, domain) for email, domain, _ in sized)
    for email, _ in senders:
        bump(aggregates.by_sender, email, ThreadUpdate())
    for domain in dict.fromkeys(domain for _, domain in senders):
        bump(aggregates.by_domain, domain, ThreadUpdate())

    for label in dict.fromkeys(thread.labels):
        bump(aggregates.by_label, label, LabelUpdate(unread=thread.is_unread))
