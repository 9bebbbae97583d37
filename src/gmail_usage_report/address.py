"""From-header normalization."""

from __future__ import annotations

import re

from .constants import UNKNOWN_DOMAIN, UNKNOWN_EMAIL
from .models import Address

_EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@([A-Z0-9.-]+\.[A-Z]{2,})", re.IGNORECASE)
_ANGLE_RE = re.compile(r"<[^>]*>")


def normalize_address(raw: str | None) -> Address:
    """Extract (email, domain, display name) from a raw From header.

    The first ``local@domain`` substring wins and is lower-cased.  Headers
    without one map to UNKNOWN_EMAIL / UNKNOWN_DOMAIN instead of raising:

      "John Doe <John@Example.com>" -> ("john@example.com", "example.com", "John Doe")
      "john@example.com"            -> ("john@example.com", "example.com", "john@example.com")
      "Mailer Daemon"               -> ("unknown@unknown", "unknown", "Mailer Daemon")
    """
    raw = raw or ""
    name = _ANGLE_RE.sub("", raw).strip()

    m = _EMAIL_RE.search(raw)
    if not m:
        return Address(UNKNOWN_EMAIL, UNKNOWN_DOMAIN, name)
    return Address(m.group(0).lower(), m.group(1).lower(), name)
