"""Raw escalation record readers.

This module loads producer records from local JSON/JSONL files or S3
prefixes. It stands in for the external ingestion producer that writes
raw escalations into the primary collection.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from core.config import EscalationConfig
from core.constants import SUPPORTED_RECORD_EXTENSIONS
from core.errors import EscalationDependencyError, EscalationIngestError
from core.s3_uri import S3Location, parse_s3_uri
from core.types import RawEscalationRecord


def read_raw_records(source_uri: str, config: EscalationConfig) -> list[RawEscalationRecord]:
    """Load raw escalation records from local files or S3.

    Args:
        source_uri: Local file, local directory, or ``s3://`` URI.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Ordered list of raw records.

    Raises:
        EscalationIngestError: If the source cannot be read or parsed.
    """
    if source_uri.startswith("s3://"):
        return _read_s3_records(source_uri, config)
    return _read_local_records(Path(source_uri).expanduser())


def _read_local_records(source_path: Path) -> list[RawEscalationRecord]:
    """Read records from the local file system.

    Raises:
        EscalationIngestError: If path is missing or holds no records.
    """
    if not source_path.exists():
        raise EscalationIngestError(
            f"Failed to read source at {source_path}: path does not exist. "
            "Provide an existing file or directory."
        )
    if source_path.is_file():
        return _records_from_text_body(str(source_path), source_path.name, _read_text(source_path))
    records: list[RawEscalationRecord] = []
    for file_path in sorted(source_path.rglob("*")):
        if file_path.is_file() and _is_supported_key(file_path.name):
            records.extend(
                _records_from_text_body(str(file_path), file_path.name, _read_text(file_path))
            )
    if not records:
        raise EscalationIngestError(
            f"No escalation records found under {source_path}. "
            f"Supported extensions: {SUPPORTED_RECORD_EXTENSIONS}."
        )
    return records


def _read_text(file_path: Path) -> str:
    try:
        return file_path.read_text(encoding="utf-8")
    except OSError as error:
        raise EscalationIngestError(
            f"Failed to read source file {file_path}: {error}. Check file permissions."
        ) from error


def _records_from_text_body(source_uri: str, key: str, body: str) -> list[RawEscalationRecord]:
    """Parse a file body into records based on its extension.

    Args:
        source_uri: Fully-qualified source URI.
        key: File name or object key for extension detection.
        body: File contents.

    Returns:
        Parsed records.

    Raises:
        EscalationIngestError: If JSON content is invalid.
    """
    if Path(key).suffix.lower() == ".jsonl":
        records: list[RawEscalationRecord] = []
        for line_number, line in enumerate(body.splitlines(), 1):
            if not line.strip():
                continue
            payload = _parse_json(source_uri, line, line_number)
            records.append(_build_record(f"{source_uri}:{line_number}", payload))
        return records
    payload = _parse_json(source_uri, body, None)
    if isinstance(payload, list):
        return [
            _build_record(f"{source_uri}:{index}", item) for index, item in enumerate(payload, 1)
        ]
    return [_build_record(source_uri, payload)]


def _parse_json(source_uri: str, text: str, line_number: int | None) -> Any:
    location = f"{source_uri}:{line_number}" if line_number else source_uri
    try:
        return json.loads(text)
    except json.JSONDecodeError as error:
        raise EscalationIngestError(
            f"Failed to parse escalation JSON at {location}: {error.msg}. "
            "Fix the JSON syntax and retry the load."
        ) from error


def _build_record(source_uri: str, payload: Any) -> RawEscalationRecord:
    """Validate one JSON object and split off its optional id.

    Raises:
        EscalationIngestError: If payload is not an object.
    """
    if not isinstance(payload, dict):
        raise EscalationIngestError(
            f"Invalid escalation record at {source_uri}: expected a JSON object."
        )
    fields = dict(payload)
    raw_id = fields.pop("id", None)
    return RawEscalationRecord(
        source_uri=source_uri,
        record_id=str(raw_id) if raw_id not in (None, "") else None,
        fields=fields,
    )


def _read_s3_records(source_uri: str, config: EscalationConfig) -> list[RawEscalationRecord]:
    """Read records from S3 objects under a prefix.

    Raises:
        EscalationIngestError: If S3 read fails or no records are found.
    """
    location = parse_s3_uri(source_uri)
    s3_client = _create_s3_client(config)
    object_keys = _list_s3_keys(s3_client, location)
    records = _download_s3_records(s3_client, location.bucket, object_keys)
    if not records:
        raise EscalationIngestError(
            f"No escalation objects found for {source_uri}. "
            "Upload .json/.jsonl files and retry the load."
        )
    return records


def _create_s3_client(config: EscalationConfig) -> Any:
    """Create a boto3 S3 client.

    Raises:
        EscalationDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise EscalationDependencyError(
            "S3 support requires boto3, but it is not installed. "
            "Install boto3 to load records from s3:// sources."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _list_s3_keys(s3_client: Any, location: S3Location) -> list[str]:
    """List supported object keys under an S3 prefix."""
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=location.bucket, Prefix=location.prefix)
    keys: list[str] = []
    for page in pages:
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if _is_supported_key(key):
                keys.append(key)
    return sorted(keys)


def _download_s3_records(
    s3_client: Any,
    bucket: str,
    object_keys: Iterable[str],
) -> list[RawEscalationRecord]:
    """Download and parse records from object keys.

    Raises:
        EscalationIngestError: If an object cannot be fetched.
    """
    records: list[RawEscalationRecord] = []
    for key in object_keys:
        source_uri = f"s3://{bucket}/{key}"
        try:
            body = s3_client.get_object(Bucket=bucket, Key=key)["Body"].read().decode("utf-8")
        except Exception as error:
            raise EscalationIngestError(
                f"Failed to download {source_uri}: {error}. "
                "Check AWS credentials and retry the load."
            ) from error
        records.extend(_records_from_text_body(source_uri, key, body))
    return records


def _is_supported_key(key: str) -> bool:
    """Return whether a file name or object key extension is supported."""
    return Path(key).suffix.lower() in SUPPORTED_RECORD_EXTENSIONS
