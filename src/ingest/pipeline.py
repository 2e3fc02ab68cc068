"""Escalation write handler.

This module runs normalize, validate, dedupe-check, and persist-or-quarantine
for one escalation record whenever it is created or updated. The handler is
a single-record function with no shared in-process state, so the hosting
trigger may invoke it concurrently for different ids.

The duplicate check and the following write are not transactional across
ids: two near-simultaneous duplicates can both pass the check before either
is persisted. The store offers no transactions and no lock is taken.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from core.constants import (
    ESCALATIONS_COLLECTION,
    QUARANTINE_COLLECTION,
    REASON_DUPLICATE_HASH,
    REASON_DUPLICATE_TICKET_URL,
    REASON_MISSING_REQUIRED_FIELDS,
    SCHEMA_VERSION,
)
from core.logging_config import get_logger
from core.types import NormalizedFields, PipelineOutcome, QuarantineReason, WriteEvent
from store.document_store import DocumentStore
from store.field_values import SERVER_TIMESTAMP, Increment
from transforms.canonical_vocabulary import CanonicalVocabulary
from transforms.fingerprint import build_fingerprint, build_raw_digest
from transforms.record_normalizer import normalize_record

_LOGGER = get_logger(__name__)

_PIPELINE_FIELDS = frozenset(
    {
        "ticketURL",
        "buildingCode",
        "buildingName",
        "escalatedTo",
        "escalationDate",
        "yyyymm",
        "hash",
        "rawDigest",
        "schemaVersion",
        "ingestVersion",
        "updatedAt",
    }
)


def handle_escalation_write(
    event: WriteEvent,
    store: DocumentStore,
    vocabulary: CanonicalVocabulary,
    now: datetime | None = None,
) -> PipelineOutcome:
    """Process one escalation write notification.

    Args:
        event: Change notification for the written record.
        store: Document store holding escalation and quarantine collections.
        vocabulary: Read-only canonical vocabulary.
        now: Processing time used for malformed timestamps.

    Returns:
        Terminal outcome of this invocation.

    Raises:
        EscalationStoreError: If a store read or write fails.
    """
    if event.data is None:
        _LOGGER.debug("escalation_deleted_event", record_id=event.record_id)
        return PipelineOutcome(record_id=event.record_id, state="deleted")
    record = event.data
    fields = normalize_record(record, vocabulary, now)
    fingerprint = build_fingerprint(
        fields.ticket_url,
        fields.subject,
        fields.building.code if fields.building else None,
        fields.escalation_date,
    )
    if _missing_required_fields(fields):
        return _quarantine(
            store, event.record_id, record, REASON_MISSING_REQUIRED_FIELDS, fingerprint
        )
    raw_digest = build_raw_digest(record, _PIPELINE_FIELDS)
    derived_fields = _build_derived_fields(fields, fingerprint, raw_digest)
    if _is_already_normalized(record, derived_fields):
        _LOGGER.debug("escalation_unchanged", record_id=event.record_id)
        return PipelineOutcome(
            record_id=event.record_id, state="unchanged", fingerprint=fingerprint
        )
    duplicate_reason = _find_duplicate_reason(
        store, event.record_id, fields.ticket_url, fingerprint
    )
    if duplicate_reason is not None:
        return _quarantine(store, event.record_id, record, duplicate_reason, fingerprint)
    store.set(
        ESCALATIONS_COLLECTION,
        event.record_id,
        {
            **derived_fields,
            "ingestVersion": Increment(1),
            "updatedAt": SERVER_TIMESTAMP,
        },
        merge=True,
    )
    _LOGGER.info(
        "escalation_persisted",
        record_id=event.record_id,
        building_code=derived_fields["buildingCode"],
        team_code=derived_fields["escalatedTo"],
        yyyymm=fields.yyyymm,
        date_was_coerced=fields.date_was_coerced,
    )
    return PipelineOutcome(record_id=event.record_id, state="persisted", fingerprint=fingerprint)


def _missing_required_fields(fields: NormalizedFields) -> bool:
    """Return whether subject, building, team, or date is absent."""
    return (
        not fields.subject.strip()
        or fields.building is None
        or not fields.building.code
        or not fields.team_code
        or not fields.has_raw_date
    )


def _build_derived_fields(
    fields: NormalizedFields,
    fingerprint: str,
    raw_digest: str,
) -> dict[str, Any]:
    """Build the canonical fields merged onto a persisted record."""
    building = fields.building
    return {
        "ticketURL": fields.ticket_url,
        "buildingCode": building.code if building else None,
        "buildingName": building.name if building else None,
        "escalatedTo": fields.team_code,
        "escalationDate": fields.escalation_date,
        "yyyymm": fields.yyyymm,
        "hash": fingerprint,
        "rawDigest": raw_digest,
        "schemaVersion": SCHEMA_VERSION,
    }


def _is_already_normalized(record: Mapping[str, Any], derived_fields: Mapping[str, Any]) -> bool:
    """Return whether the record already carries every current derived value.

    This is what the pipeline's own persist write looks like when it
    re-triggers the handler, so such writes end without another merge.
    ``rawDigest`` is among the derived values, so an edit to any raw field
    that feeds no other derived value still counts as a change.
    """
    if record.get("schemaVersion") != SCHEMA_VERSION:
        return False
    return all(
        field_name in record and record[field_name] == value
        for field_name, value in derived_fields.items()
    )


def _find_duplicate_reason(
    store: DocumentStore,
    record_id: str,
    ticket_url: str | None,
    fingerprint: str,
) -> QuarantineReason | None:
    """Return a duplicate reason when another record shares the dedup key.

    Only records already persisted by the pipeline (those carrying a hash)
    count, so during a backfill over raw records the later one is rejected.
    """
    if ticket_url:
        matches = store.find_by_field(ESCALATIONS_COLLECTION, "ticketURL", ticket_url)
        reason: QuarantineReason = REASON_DUPLICATE_TICKET_URL
    else:
        matches = store.find_by_field(ESCALATIONS_COLLECTION, "hash", fingerprint)
        reason = REASON_DUPLICATE_HASH
    if any(match_id != record_id and "hash" in match for match_id, match in matches):
        return reason
    return None


def _quarantine(
    store: DocumentStore,
    record_id: str,
    record: Mapping[str, Any],
    reason: QuarantineReason,
    fingerprint: str,
) -> PipelineOutcome:
    """Copy the raw record into quarantine, then delete the original."""
    store.set(
        QUARANTINE_COLLECTION,
        record_id,
        {**record, "reason": reason, "checkedAt": SERVER_TIMESTAMP},
    )
    store.delete(ESCALATIONS_COLLECTION, record_id)
    _LOGGER.info("escalation_quarantined", record_id=record_id, reason=reason)
    return PipelineOutcome(
        record_id=record_id, state="quarantined", reason=reason, fingerprint=fingerprint
    )
