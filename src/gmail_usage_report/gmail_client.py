"""Gmail API thread source."""

from __future__ import annotations

import base64
from datetime import date, datetime, timezone

from googleapiclient.errors import HttpError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from gmail_usage_report.constants import BATCH_SIZE, MAX_PAGE_SIZE, UNREAD_LABEL
from gmail_usage_report.models import Attachment, Message, Thread


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in (429, 500, 503)


_retry_transient = retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    reraise=True,
)


def build_query(base: str | None = None, before: date | None = None, after: date | None = None) -> str:
    """Combine a Gmail search query with before:/after: date terms."""
    terms = [base.strip()] if base and base.strip() else []
    if after:
        terms.append(f"after:{after:%Y/%m/%d}")
    if before:
        terms.append(f"before:{before:%Y/%m/%d}")
    return " ".join(terms)


# --- payload parsing ---


def _headers(part: dict) -> dict[str, str]:
    return {h["name"].lower(): h["value"] for h in part.get("headers", [])}


def _decode(data: str) -> str:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def _walk(part: dict):
    yield part
    for child in part.get("parts", []):
        yield from _walk(child)


def _attachment(part: dict) -> Attachment | None:
    body = part.get("body", {})
    filename = part.get("filename", "")
    if not filename or not ("attachmentId" in body or "size" in body):
        return None

    headers = _headers(part)
    disposition = headers.get("content-disposition", "").lower()
    inline = disposition.startswith("inline") or (not disposition and "content-id" in headers)
    return Attachment(
        size=int(body.get("size", 0)),
        filename=filename,
        is_inline_image=inline and part.get("mimeType", "").startswith("image/"),
    )


def _body_text(parts: list[dict]) -> str:
    """First text/plain body, else first text/html body, else empty."""
    for mime in ("text/plain", "text/html"):
        for part in parts:
            data = part.get("body", {}).get("data")
            if part.get("mimeType") == mime and data and not part.get("filename"):
                return _decode(data)
    return ""


def parse_message(raw: dict) -> Message:
    """Build a Message from a users.messages resource in 'full' format."""
    payload = raw.get("payload", {})
    parts = list(_walk(payload))
    attachments = [a for a in (_attachment(p) for p in parts) if a is not None]

    internal = raw.get("internalDate")
    sent = datetime.fromtimestamp(int(internal) / 1000, tz=timezone.utc) if internal else None

    return Message(
        sender=_headers(payload).get("from", ""),
        is_unread=UNREAD_LABEL in raw.get("labelIds", []),
        body=_body_text(parts),
        attachments=attachments,
        date=sent,
    )


def parse_thread(raw: dict, label_names: dict[str, str] | None = None) -> Thread:
    """Build a Thread from a users.threads resource in 'full' format.

    ``label_names`` maps user label ids to names; label ids not in it
    (system labels such as INBOX or UNREAD) are not reported.
    """
    label_names = label_names or {}
    messages = [parse_message(m) for m in raw.get("messages", [])]

    label_ids: dict[str, None] = {}
    for m in raw.get("messages", []):
        label_ids.update(dict.fromkeys(m.get("labelIds", [])))

    return Thread(
        messages=messages,
        labels=[label_names[i] for i in label_ids if i in label_names],
        is_unread=any(m.is_unread for m in messages),
        thread_id=raw.get("id", ""),
    )


# --- API calls ---


@_retry_transient
def _execute(request) -> dict:
    return request.execute()


class GmailThreadSource:
    """Thread source backed by the Gmail API.

    Gmail pages with opaque tokens, so offsets are served by remembering the
    token that follows each page.  Pages must be requested in order.
    """

    def __init__(self, service) -> None:
        self.service = service
        self._tokens: dict[tuple[str, int], str | None] = {}
        self._label_names: dict[str, str] | None = None

    def label_names(self) -> dict[str, str]:
        """User label id -> name, fetched once."""
        if self._label_names is None:
            resp = _execute(self.service.users().labels().list(userId="me"))
            self._label_names = {
                lbl["id"]: lbl["name"]
                for lbl in resp.get("labels", [])
                if lbl.get("type") == "user"
            }
        return self._label_names

    def list_thread_ids(self, query: str, offset: int, page_size: int) -> list[str]:
        if offset == 0:
            token = None
        elif (query, offset) in self._tokens:
            token = self._tokens[(query, offset)]
            if token is None:
                return []
        else:
            raise ValueError(f"No page token for offset {offset}; pages must be fetched in order")

        kwargs: dict = {
            "userId": "me",
            "maxResults": min(page_size, MAX_PAGE_SIZE),
            "fields": "threads/id,nextPageToken",
        }
        if query:
            kwargs["q"] = query
        if token:
            kwargs["pageToken"] = token

        resp = _execute(self.service.users().threads().list(**kwargs))
        ids = [t["id"] for t in resp.get("threads", [])]
        self._tokens[(query, offset + len(ids))] = resp.get("nextPageToken")
        return ids

    @_retry_transient
    def _fetch_batch(self, thread_ids: list[str], raw: dict[str, dict]) -> None:
        """Fetch the ids of ``thread_ids`` not yet in ``raw`` in one batch.

        Per-request errors arrive through the batch callback rather than from
        execute(), so they are re-raised here where the retry policy sees them.
        A retry only re-requests the threads still missing.
        """
        errors: list[Exception] = []

        def _cb(request_id, response, exception):
            if exception is not None:
                errors.append(exception)
                return
            raw[response["id"]] = response

        batch = self.service.new_batch_http_request(callback=_cb)
        for thread_id in thread_ids:
            if thread_id not in raw:
                batch.add(self.service.users().threads().get(userId="me", id=thread_id, format="full"))
        batch.execute()

        if errors:
            # a non-retryable error wins over transient ones
            errors.sort(key=_is_retryable_http_error)
            raise errors[0]

    def fetch_threads(self, thread_ids: list[str]) -> list[Thread]:
        """Fetch full threads in batches, keeping the order of ``thread_ids``."""
        label_names = self.label_names()
        raw: dict[str, dict] = {}

        for start in range(0, len(thread_ids), BATCH_SIZE):
            self._fetch_batch(thread_ids[start:start + BATCH_SIZE], raw)

        return [parse_thread(raw[t], label_names) for t in thread_ids if t in raw]

    def fetch_page(self, query: str, offset: int, page_size: int) -> list[Thread]:
        ids = self.list_thread_ids(query, offset, page_size)
        if not ids:
            return []
        return self.fetch_threads(ids)
