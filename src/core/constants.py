"""Core constants used across escalation modules.

This module centralizes collection names, reason codes, and limits.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".escalations")
COLLECTIONS_DIR_NAME = "collections"
DOCUMENT_FILE_SUFFIX = ".json"
ESCALATIONS_COLLECTION = "escalations"
QUARANTINE_COLLECTION = "quarantine_escalations"
HASH_ALGORITHM = "sha256"
FINGERPRINT_SEPARATOR = "|"
TICKET_URL_JUNK_MARKER = "Subject"
TEAM_DOMAIN = "team"
BUILDING_DOMAIN = "building"
TEAM_CODE_MAX_LENGTH = 12
BUILDING_CODE_MAX_LENGTH = 8
UNKNOWN_ENTITY_CODE = "UNKNOWN"
UNKNOWN_ENTITY_NAME = "Unknown"
SCHEMA_VERSION = 1
REASON_MISSING_REQUIRED_FIELDS = "missing_required_fields"
REASON_DUPLICATE_TICKET_URL = "duplicate_ticketURL"
REASON_DUPLICATE_HASH = "duplicate_hash"
DEFAULT_PAGE_SIZE = 25
SUPPORTED_RECORD_EXTENSIONS = (".json", ".jsonl")
DATETIME_PAYLOAD_TAG = "__datetime__"
