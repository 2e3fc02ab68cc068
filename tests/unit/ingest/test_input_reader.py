"""Unit tests for input reader module."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import EscalationConfig
from core.errors import EscalationIngestError
from ingest.input_reader import read_raw_records
from tests.fixture_paths import fixture_path


def test_read_raw_records_reads_directory_files() -> None:
    """Reader should collect supported files from a directory."""
    config = EscalationConfig.from_env()
    records = read_raw_records(str(fixture_path("raw")), config)

    assert len(records) == 6


def test_read_raw_records_splits_off_record_ids() -> None:
    """JSONL ids should become record ids and leave the field set."""
    config = EscalationConfig.from_env()
    records = read_raw_records(str(fixture_path("raw/escalations.jsonl")), config)

    assert (records[0].record_id, "id" in records[0].fields) == ("esc-1", False)


def test_read_raw_records_reads_single_object_file() -> None:
    """A JSON object file should produce one record without an id."""
    config = EscalationConfig.from_env()
    records = read_raw_records(str(fixture_path("raw/single.json")), config)

    assert [(record.record_id, record.fields["subject"]) for record in records] == [
        (None, "Wifi outage")
    ]


def test_read_raw_records_raises_for_missing_path(tmp_path: Path) -> None:
    """Reader should fail when source path is missing."""
    config = EscalationConfig.from_env()
    missing_path = tmp_path / "does-not-exist"

    with pytest.raises(EscalationIngestError):
        read_raw_records(str(missing_path), config)

    assert missing_path.exists() is False


def test_read_raw_records_raises_for_invalid_jsonl() -> None:
    """Reader should fail for malformed JSONL payloads."""
    config = EscalationConfig.from_env()

    with pytest.raises(EscalationIngestError):
        read_raw_records(str(fixture_path("invalid/bad_records.jsonl")), config)


def test_read_raw_records_raises_for_non_object_items() -> None:
    """Every record in a JSON list must be an object."""
    config = EscalationConfig.from_env()

    with pytest.raises(EscalationIngestError):
        read_raw_records(str(fixture_path("invalid/not_objects.json")), config)


def test_read_raw_records_raises_for_directory_without_records(tmp_path: Path) -> None:
    """Directories without supported files should fail loudly."""
    config = EscalationConfig.from_env()
    (tmp_path / "notes.txt").write_text("not a record", encoding="utf-8")

    with pytest.raises(EscalationIngestError):
        read_raw_records(str(tmp_path), config)
