"""Write-time field value sentinels.

Sentinels let writers request values the store computes against the
document it is about to replace, such as counters and write timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping


@dataclass(frozen=True)
class Increment:
    """Add ``amount`` to the stored numeric value, treating absent as zero."""

    amount: int = 1


class _ServerTimestamp:
    """Marker replaced by the store's write time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def resolve_field_values(
    updates: Mapping[str, Any],
    existing: Mapping[str, Any] | None,
    written_at: datetime | None = None,
) -> dict[str, Any]:
    """Replace sentinels in an update payload with concrete values.

    Args:
        updates: Payload possibly holding sentinels at top level.
        existing: Stored document the update applies to, if any.
        written_at: Write time; defaults to current UTC.

    Returns:
        Payload with every sentinel resolved.
    """
    timestamp = written_at or datetime.now(timezone.utc)
    resolved: dict[str, Any] = {}
    for field_name, value in updates.items():
        if isinstance(value, Increment):
            current = existing.get(field_name) if existing else None
            if isinstance(current, bool) or not isinstance(current, (int, float)):
                current = 0
            resolved[field_name] = current + value.amount
        elif value is SERVER_TIMESTAMP:
            resolved[field_name] = timestamp
        else:
            resolved[field_name] = value
    return resolved
