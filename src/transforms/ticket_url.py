"""Ticket URL cleaning.

Producers paste ticket links straight out of notification emails, so the
raw value often carries tracking parameters and trailing mail headers.
"""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

from core.constants import TICKET_URL_JUNK_MARKER


def clean_ticket_url(raw_url: object) -> str | None:
    """Strip junk and query parameters from a raw ticket URL.

    Args:
        raw_url: Raw URL value; non-string values are stringified.

    Returns:
        Cleaned URL, the trimmed text when it is not an absolute URL,
        or None when nothing remains.
    """
    if raw_url is None:
        return None
    base = str(raw_url).split(TICKET_URL_JUNK_MARKER, 1)[0].strip()
    if not base:
        return None
    try:
        parts = urlsplit(base)
    except ValueError:
        return base
    if not parts.scheme or not parts.netloc:
        return base
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", parts.fragment))
