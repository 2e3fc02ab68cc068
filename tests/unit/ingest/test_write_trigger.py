"""Unit tests for the store write trigger."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.config import EscalationConfig
from ingest.write_trigger import WriteTrigger
from store.document_store import DocumentStore
from transforms.canonical_vocabulary import default_vocabulary

_RAW_RECORD = {
    "subject": "Printer down",
    "building": "chinn",
    "escalatedTo": "infra",
    "escalationDate": "2024-03-01T10:00:00Z",
    "ticketURL": "https://t.example/x",
}


def _triggered_store(tmp_path: Path) -> tuple[DocumentStore, WriteTrigger]:
    config = replace(EscalationConfig.from_env(), data_root=tmp_path)
    store = DocumentStore(config)
    trigger = WriteTrigger(store, default_vocabulary()).attach()
    return store, trigger


def test_trigger_persists_once_despite_self_triggered_write(tmp_path: Path) -> None:
    """The handler's own merge should not bump the version a second time."""
    store, _ = _triggered_store(tmp_path)

    store.set("escalations", "esc-1", _RAW_RECORD)

    assert (store.get("escalations", "esc-1") or {})["ingestVersion"] == 1


def test_trigger_outcome_for_reports_outer_persist(tmp_path: Path) -> None:
    """The self-triggered unchanged pass should not replace the persist outcome."""
    store, trigger = _triggered_store(tmp_path)

    store.set("escalations", "esc-1", _RAW_RECORD)
    outcome = trigger.outcome_for("esc-1")

    assert outcome is not None and outcome.state == "persisted"


def test_trigger_outcome_for_reflects_latest_write(tmp_path: Path) -> None:
    """A later write should replace the outcome recorded for an earlier one."""
    store, trigger = _triggered_store(tmp_path)
    store.set("escalations", "esc-1", _RAW_RECORD)

    store.set("escalations", "esc-1", store.get("escalations", "esc-1") or {})
    outcome = trigger.outcome_for("esc-1")

    assert outcome is not None and outcome.state == "unchanged"


def test_trigger_outcome_for_prefers_quarantine_over_delete_pass(tmp_path: Path) -> None:
    """Quarantine deletes re-trigger as deleted but the quarantine wins."""
    store, trigger = _triggered_store(tmp_path)

    store.set("escalations", "esc-2", {**_RAW_RECORD, "subject": " "})
    outcome = trigger.outcome_for("esc-2")

    assert outcome is not None and outcome.reason == "missing_required_fields"


def test_trigger_ignores_other_collections(tmp_path: Path) -> None:
    """Writes outside the primary collection should not run the handler."""
    store, trigger = _triggered_store(tmp_path)

    store.set("quarantine_escalations", "esc-3", _RAW_RECORD)

    assert trigger.outcome_for("esc-3") is None


def test_trigger_outcome_for_unknown_record_is_none(tmp_path: Path) -> None:
    """Records never written should have no outcome."""
    _, trigger = _triggered_store(tmp_path)

    assert trigger.outcome_for("missing") is None
