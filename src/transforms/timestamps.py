"""Escalation timestamp coercion helpers."""

from __future__ import annotations

from datetime import date, datetime, time, timezone


def coerce_timestamp(value: object, now: datetime | None = None) -> tuple[datetime, bool]:
    """Coerce a raw timestamp value into an aware UTC datetime.

    Accepts datetimes (naive values are read as UTC), dates, objects that
    expose ``to_datetime()``, and ISO-8601 strings. Anything else falls back
    to ``now``. The fallback only handles malformed values; absent values are
    rejected later by required-field validation.

    Args:
        value: Raw timestamp value.
        now: Processing time used for the fallback; defaults to current UTC.

    Returns:
        Pair of coerced instant and whether the fallback was used.
    """
    parsed = _parse_timestamp(value)
    if parsed is not None:
        return parsed, False
    return (as_utc(now) if now else datetime.now(timezone.utc)), True


def month_bucket(timestamp: datetime) -> str:
    """Return the ``YYYY-MM`` bucket of a timestamp in UTC."""
    utc_timestamp = as_utc(timestamp)
    return f"{utc_timestamp.year:04d}-{utc_timestamp.month:02d}"


def isoformat_utc(timestamp: datetime) -> str:
    """Render a timestamp as ISO-8601 in UTC with millisecond precision."""
    utc_timestamp = as_utc(timestamp)
    return utc_timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return _as_utc_or_none(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    to_datetime = getattr(value, "to_datetime", None)
    if callable(to_datetime):
        try:
            converted = to_datetime()
        except (TypeError, ValueError, OverflowError):
            return None
        if isinstance(converted, datetime):
            return _as_utc_or_none(converted)
        return None
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
        return _as_utc_or_none(parsed)
    return None


def _as_utc_or_none(value: datetime) -> datetime | None:
    """Convert to UTC; instants that fall outside the datetime range become None."""
    try:
        return as_utc(value)
    except OverflowError:
        return None


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
