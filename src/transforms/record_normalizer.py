"""Raw escalation record normalization.

This module extracts and cleans raw producer fields into the canonical
shape consumed by the ingest pipeline. Every step is total: malformed
values degrade to fallbacks instead of raising.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from core.logging_config import get_logger
from core.types import NormalizedFields
from transforms.canonical_vocabulary import CanonicalVocabulary
from transforms.entity_resolver import resolve_building, resolve_team
from transforms.ticket_url import clean_ticket_url
from transforms.timestamps import coerce_timestamp, month_bucket

_LOGGER = get_logger(__name__)

BUILDING_FIELDS = ("building", "buildingName")
TEAM_FIELDS = ("escalatedTo", "team")
DATE_FIELDS = ("escalationDate", "receivedDateTime")


def normalize_record(
    raw_record: Mapping[str, Any],
    vocabulary: CanonicalVocabulary,
    now: datetime | None = None,
) -> NormalizedFields:
    """Normalize one raw escalation record.

    Args:
        raw_record: Raw document payload.
        vocabulary: Read-only canonical vocabulary.
        now: Processing time used for malformed timestamps.

    Returns:
        Cleaned and canonicalized fields.
    """
    raw_building = _first_present(raw_record, BUILDING_FIELDS)
    raw_team = _first_present(raw_record, TEAM_FIELDS)
    raw_date = _first_present(raw_record, DATE_FIELDS)
    escalation_date, date_was_coerced = coerce_timestamp(raw_date, now)
    if date_was_coerced and raw_date is not None:
        _LOGGER.warning(
            "escalation_timestamp_coerced",
            raw_value=str(raw_date),
            coerced_to=escalation_date.isoformat(),
        )
    subject = raw_record.get("subject")
    return NormalizedFields(
        ticket_url=clean_ticket_url(raw_record.get("ticketURL")),
        subject="" if subject is None else str(subject),
        building=(
            resolve_building(vocabulary, str(raw_building)) if raw_building is not None else None
        ),
        team_code=resolve_team(vocabulary, str(raw_team)).code if raw_team is not None else None,
        escalation_date=escalation_date,
        has_raw_date=raw_date is not None,
        date_was_coerced=date_was_coerced,
        yyyymm=month_bucket(escalation_date),
    )


def _first_present(raw_record: Mapping[str, Any], field_names: Sequence[str]) -> Any:
    """Return the first non-empty value among alias fields."""
    for field_name in field_names:
        value = raw_record.get(field_name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None
