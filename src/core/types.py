"""Shared typed models.

This module defines immutable data models used by the transforms,
ingest pipeline, store, and SDK layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Mapping

PipelineState = Literal["deleted", "unchanged", "quarantined", "persisted"]
QuarantineReason = Literal[
    "missing_required_fields",
    "duplicate_ticketURL",
    "duplicate_hash",
]


@dataclass(frozen=True)
class CanonicalEntity:
    """Reference data entry from a canonical dictionary.

    Attributes:
        code: Short canonical code, e.g. ``CN``.
        name: Display name, e.g. ``Chinn Elementary``.
    """

    code: str
    name: str


@dataclass(frozen=True)
class RawEscalationRecord:
    """Raw producer record before it is written to the store.

    Attributes:
        source_uri: Source path or URI the record was loaded from.
        record_id: Producer-supplied id, or None for a store-assigned id.
        fields: Raw record fields.
    """

    source_uri: str
    record_id: str | None
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class NormalizedFields:
    """Cleaned and canonicalized fields derived from a raw record.

    Attributes:
        ticket_url: Cleaned ticket URL, or None when absent.
        subject: Raw subject text, empty when absent.
        building: Canonical building, or None when no building was supplied.
        team_code: Canonical team code, or None when no team was supplied.
        escalation_date: Coerced UTC escalation instant.
        has_raw_date: Whether any raw date value was supplied.
        date_was_coerced: Whether the instant fell back to processing time.
        yyyymm: ``YYYY-MM`` month bucket of the escalation instant.
    """

    ticket_url: str | None
    subject: str
    building: CanonicalEntity | None
    team_code: str | None
    escalation_date: datetime
    has_raw_date: bool
    date_was_coerced: bool
    yyyymm: str


@dataclass(frozen=True)
class WriteEvent:
    """Change notification for one document write.

    Attributes:
        record_id: Document id.
        data: Document payload after the write, or None for deletions.
    """

    record_id: str
    data: Mapping[str, Any] | None


@dataclass(frozen=True)
class PipelineOutcome:
    """Terminal result of one pipeline invocation.

    Attributes:
        record_id: Processed document id.
        state: Terminal pipeline state.
        reason: Quarantine reason code when quarantined.
        fingerprint: Computed content hash when normalization ran.
    """

    record_id: str
    state: PipelineState
    reason: QuarantineReason | None = None
    fingerprint: str | None = None


@dataclass(frozen=True)
class EscalationFilter:
    """Read-side filter over normalized escalation records.

    Attributes:
        start: Inclusive lower bound on escalation date.
        end: Exclusive upper bound on escalation date.
        building_code: Optional exact building code match.
        team: Optional exact canonical team code match.
        escalator: Optional exact escalator match.
        search_text: Optional case-insensitive subject/description search.
    """

    start: datetime | None = None
    end: datetime | None = None
    building_code: str | None = None
    team: str | None = None
    escalator: str | None = None
    search_text: str | None = None


@dataclass(frozen=True)
class EscalationPage:
    """One page of escalation records.

    Attributes:
        records: Records as ``(id, payload)`` pairs, newest first.
        next_cursor: Cursor for the next page, or None on the last page.
    """

    records: tuple[tuple[str, Mapping[str, Any]], ...]
    next_cursor: str | None
