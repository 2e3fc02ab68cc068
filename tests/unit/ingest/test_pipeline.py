"""Unit tests for the escalation write handler."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from core.config import EscalationConfig
from core.errors import EscalationStoreError
from core.types import WriteEvent
from ingest.pipeline import handle_escalation_write
from store.document_store import DocumentStore
from transforms.canonical_vocabulary import default_vocabulary

_NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)


def _store(tmp_path: Path) -> DocumentStore:
    config = replace(EscalationConfig.from_env(), data_root=tmp_path)
    return DocumentStore(config)


def _raw_record(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "subject": "Printer down",
        "description": "Front office printer offline.",
        "escalator": "jdoe",
        "building": "chinn",
        "escalatedTo": "infra",
        "escalationDate": "2024-03-01T10:00:00Z",
        "ticketURL": "https://t.example/x?utm=1Subject: hi",
    }
    record.update(overrides)
    return {key: value for key, value in record.items() if value is not None}


def _write_and_handle(store: DocumentStore, record_id: str, record: dict[str, Any]):
    store.set("escalations", record_id, record)
    event = WriteEvent(record_id=record_id, data=store.get("escalations", record_id))
    return handle_escalation_write(event, store, default_vocabulary(), _NOW)


def test_handle_write_ignores_deletions(tmp_path: Path) -> None:
    """Deletion events should end without touching the store."""
    store = _store(tmp_path)

    outcome = handle_escalation_write(
        WriteEvent(record_id="gone", data=None), store, default_vocabulary()
    )

    assert outcome.state == "deleted" and store.list_documents("quarantine_escalations") == []


def test_handle_write_persists_canonical_fields(tmp_path: Path) -> None:
    """Valid records should be merged with canonical derived fields."""
    store = _store(tmp_path)

    _write_and_handle(store, "esc-1", _raw_record())
    stored = store.get("escalations", "esc-1") or {}

    assert (
        stored["buildingCode"],
        stored["buildingName"],
        stored["escalatedTo"],
        stored["ticketURL"],
        stored["yyyymm"],
        stored["ingestVersion"],
    ) == ("CN", "Chinn Elementary", "INFRA", "https://t.example/x", "2024-03", 1)


def test_handle_write_stores_typed_escalation_date(tmp_path: Path) -> None:
    """Persisted escalation dates should be datetimes, never strings."""
    store = _store(tmp_path)

    _write_and_handle(store, "esc-1", _raw_record())
    stored = store.get("escalations", "esc-1") or {}

    assert stored["escalationDate"] == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)


def test_handle_write_preserves_raw_fields(tmp_path: Path) -> None:
    """Untargeted raw fields should survive the merge unchanged."""
    store = _store(tmp_path)
    record = _raw_record(customField={"nested": [1, 2]})

    _write_and_handle(store, "esc-1", record)
    stored = store.get("escalations", "esc-1") or {}

    assert all(
        stored[key] == record[key]
        for key in ("subject", "description", "escalator", "building", "customField")
    )


def test_handle_write_quarantines_missing_subject(tmp_path: Path) -> None:
    """Records without a subject should be quarantined and deleted."""
    store = _store(tmp_path)

    outcome = _write_and_handle(store, "esc-2", _raw_record(subject=None))

    assert (
        outcome.reason,
        store.get("escalations", "esc-2"),
        (store.get("quarantine_escalations", "esc-2") or {}).get("reason"),
    ) == ("missing_required_fields", None, "missing_required_fields")


@pytest.mark.parametrize("missing_field", ["building", "escalatedTo", "escalationDate"])
def test_handle_write_quarantines_missing_required_field(
    tmp_path: Path, missing_field: str
) -> None:
    """Absent building, team, or date should fail required-field validation."""
    store = _store(tmp_path)

    outcome = _write_and_handle(store, "esc-3", _raw_record(**{missing_field: None}))

    assert outcome.reason == "missing_required_fields"


def test_handle_write_quarantine_copies_raw_fields(tmp_path: Path) -> None:
    """Quarantine records should hold the original fields plus a check time."""
    store = _store(tmp_path)
    record = _raw_record(subject="")

    _write_and_handle(store, "esc-4", record)
    quarantined = store.get("quarantine_escalations", "esc-4") or {}

    assert {key: quarantined[key] for key in record} == record and isinstance(
        quarantined["checkedAt"], datetime
    )


def test_handle_write_accepts_malformed_date(tmp_path: Path) -> None:
    """Malformed-but-present dates should be coerced to processing time."""
    store = _store(tmp_path)

    outcome = _write_and_handle(store, "esc-5", _raw_record(escalationDate="not-a-date"))
    stored = store.get("escalations", "esc-5") or {}

    assert (outcome.state, stored["escalationDate"]) == ("persisted", _NOW)


def test_handle_write_quarantines_duplicate_ticket_url(tmp_path: Path) -> None:
    """A second record with the same cleaned URL should be quarantined."""
    store = _store(tmp_path)
    _write_and_handle(store, "first", _raw_record(ticketURL="https://t.example/y"))

    outcome = _write_and_handle(
        store, "second", _raw_record(subject="Other", ticketURL="https://t.example/y?ref=2")
    )

    assert (outcome.reason, store.get("escalations", "second")) == ("duplicate_ticketURL", None)


def test_handle_write_quarantines_duplicate_hash_without_url(tmp_path: Path) -> None:
    """Without URLs, identical subject, building, and date should collide."""
    store = _store(tmp_path)
    _write_and_handle(store, "first", _raw_record(ticketURL=None))

    outcome = _write_and_handle(store, "second", _raw_record(ticketURL=None, building="CN"))

    assert outcome.reason == "duplicate_hash"


def test_handle_write_ignores_unprocessed_records_in_duplicate_check(tmp_path: Path) -> None:
    """Raw records not yet processed should not count as duplicates."""
    store = _store(tmp_path)
    store.set("escalations", "raw", _raw_record(ticketURL="https://t.example/y"))

    outcome = _write_and_handle(store, "first", _raw_record(ticketURL="https://t.example/y"))

    assert outcome.state == "persisted"


def test_handle_write_short_circuits_already_normalized_record(tmp_path: Path) -> None:
    """Re-running on the persisted shape should not write again."""
    store = _store(tmp_path)
    _write_and_handle(store, "esc-1", _raw_record())
    persisted = store.get("escalations", "esc-1")

    outcome = handle_escalation_write(
        WriteEvent(record_id="esc-1", data=persisted), store, default_vocabulary(), _NOW
    )

    assert (outcome.state, (store.get("escalations", "esc-1") or {})["ingestVersion"]) == (
        "unchanged",
        1,
    )


def test_handle_write_reprocesses_edited_record(tmp_path: Path) -> None:
    """Editing a raw field should trigger a fresh merge and bump the version."""
    store = _store(tmp_path)
    _write_and_handle(store, "esc-1", _raw_record())
    edited = {**(store.get("escalations", "esc-1") or {}), "subject": "Printer still down"}

    store.set("escalations", "esc-1", edited)
    outcome = handle_escalation_write(
        WriteEvent(record_id="esc-1", data=edited), store, default_vocabulary(), _NOW
    )

    assert (outcome.state, (store.get("escalations", "esc-1") or {})["ingestVersion"]) == (
        "persisted",
        2,
    )


@pytest.mark.parametrize(
    "edited_fields",
    [
        {"description": "Printer now jams on every job."},
        {"escalator": "asmith"},
        {"customField": "added later"},
    ],
)
def test_handle_write_reprocesses_edit_to_non_derived_field(
    tmp_path: Path, edited_fields: dict[str, Any]
) -> None:
    """Edits to raw fields that feed no derived value should still persist."""
    store = _store(tmp_path)
    _write_and_handle(store, "esc-1", _raw_record())
    edited = {**(store.get("escalations", "esc-1") or {}), **edited_fields}

    store.set("escalations", "esc-1", edited)
    outcome = handle_escalation_write(
        WriteEvent(record_id="esc-1", data=edited), store, default_vocabulary(), _NOW
    )

    assert (outcome.state, (store.get("escalations", "esc-1") or {})["ingestVersion"]) == (
        "persisted",
        2,
    )


def test_handle_write_propagates_store_failures(tmp_path: Path) -> None:
    """Store errors should propagate to the hosting trigger."""
    store = _store(tmp_path)

    def _failing_listener(collection: str, event: WriteEvent) -> None:
        raise EscalationStoreError("store unavailable")

    store.add_listener(_failing_listener)

    with pytest.raises(EscalationStoreError):
        handle_escalation_write(
            WriteEvent(record_id="esc-1", data=_raw_record()), store, default_vocabulary(), _NOW
        )
