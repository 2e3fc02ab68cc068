"""Content fingerprint for duplicate detection.

This module derives the stable hash used to detect duplicate escalations
when a record carries no ticket URL, and the digest of raw fields used to
tell a real edit from the pipeline's own write.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from typing import Any, Collection, Mapping

from core.constants import FINGERPRINT_SEPARATOR, HASH_ALGORITHM
from transforms.timestamps import isoformat_utc


def build_fingerprint(
    cleaned_url: str | None,
    subject: str,
    building_code: str | None,
    timestamp: datetime,
) -> str:
    """Build a deterministic fingerprint from normalized fields.

    Args:
        cleaned_url: Cleaned ticket URL, or None.
        subject: Raw subject text.
        building_code: Canonical building code, or None.
        timestamp: Coerced escalation instant.

    Returns:
        Hex digest string.
    """
    fingerprint_seed = FINGERPRINT_SEPARATOR.join(
        (cleaned_url or "", subject, building_code or "", isoformat_utc(timestamp))
    )
    return _hash_text(fingerprint_seed)


def _hash_text(text: str) -> str:
    """Hash a string using configured digest algorithm.

    Args:
        text: Input text.

    Returns:
        Hex digest string.
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(text.encode("utf-8"))
    return hasher.hexdigest()


def build_raw_digest(record: Mapping[str, Any], excluded_fields: Collection[str]) -> str:
    """Hash the raw fields of a record, ignoring pipeline-owned fields.

    Values are serialized as sorted-key JSON; non-JSON values such as
    datetimes use their string form.

    Args:
        record: Stored record payload.
        excluded_fields: Field names written by the pipeline.

    Returns:
        Hex digest string.
    """
    raw_fields = {key: value for key, value in record.items() if key not in excluded_fields}
    return _hash_text(json.dumps(raw_fields, sort_keys=True, default=str))
