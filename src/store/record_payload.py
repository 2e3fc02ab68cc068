"""Shared JSON serialization for stored documents.

This module centralizes document JSON encoding for the document store.
Datetimes are written as tagged values so a typed instant and a raw date string remain distinguishable after reload.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from core.constants import DATETIME_PAYLOAD_TAG
from core.errors import EscalationStoreError


def document_to_payload(value: Any) -> Any:
    """Encode a document value into a JSON-safe payload.

    Args:
        value: Document or nested value.

    Returns:
        JSON-safe payload with tagged datetimes.
    """
    if isinstance(value, datetime):
        return {DATETIME_PAYLOAD_TAG: value.isoformat()}
    if isinstance(value, Mapping):
        return {str(key): document_to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [document_to_payload(item) for item in value]
    return value


def document_from_payload(payload: Any) -> Any:
    """Decode a JSON payload back into document values.

    Args:
        payload: Parsed JSON payload.

    Returns:
        Document value with tagged datetimes restored.
    """
    if isinstance(payload, dict):
        if set(payload) == {DATETIME_PAYLOAD_TAG}:
            return datetime.fromisoformat(str(payload[DATETIME_PAYLOAD_TAG]))
        return {key: document_from_payload(item) for key, item in payload.items()}
    if isinstance(payload, list):
        return [document_from_payload(item) for item in payload]
    return payload


def write_document_file(document_path: Path, document: Mapping[str, Any]) -> None:
    """Write one document to a JSON file.

    Args:
        document_path: Output JSON file path.
        document: Document to serialize.

    Raises:
        EscalationStoreError: If the document cannot be encoded or written.
    """
    try:
        serialized = json.dumps(document_to_payload(document), sort_keys=True, indent=2)
    except (TypeError, ValueError) as error:
        raise EscalationStoreError(
            f"Failed to encode document for {document_path}: {error}. "
            "Store only JSON-compatible values and datetimes."
        ) from error
    try:
        document_path.write_text(serialized + "\n", encoding="utf-8")
    except OSError as error:
        raise EscalationStoreError(
            f"Failed to persist document at {document_path}: {error}. "
            "Check write permissions and available disk space."
        ) from error


def read_document_file(document_path: Path) -> dict[str, Any]:
    """Read one document from a JSON file.

    Args:
        document_path: Input JSON file path.

    Returns:
        Decoded document.

    Raises:
        EscalationStoreError: If the file is unreadable or not a JSON object.
    """
    try:
        payload = json.loads(document_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise EscalationStoreError(
            f"Failed to read document at {document_path}: {error}. Check file permissions."
        ) from error
    except json.JSONDecodeError as error:
        raise EscalationStoreError(
            f"Failed to parse document at {document_path}: {error.msg}. "
            "Remove or repair the corrupted document file."
        ) from error
    if not isinstance(payload, dict):
        raise EscalationStoreError(
            f"Failed to parse document at {document_path}: expected JSON object at top level."
        )
    return document_from_payload(payload)
