"""Public SDK surface for the escalation pipeline.

This module provides a stable import path for pipeline users.
It re-exports the client, the write handler, and typed models.
"""

from __future__ import annotations

from core.config import EscalationConfig
from core.types import (
    CanonicalEntity,
    EscalationFilter,
    EscalationPage,
    NormalizedFields,
    PipelineOutcome,
    WriteEvent,
)
from ingest.pipeline import handle_escalation_write
from store.escalation_sdk import EscalationClient
from transforms.canonical_vocabulary import CanonicalVocabulary, default_vocabulary, load_vocabulary
from transforms.entity_resolver import resolve_entity
from transforms.fingerprint import build_fingerprint
from transforms.record_normalizer import normalize_record

__all__ = [
    "CanonicalEntity",
    "CanonicalVocabulary",
    "EscalationClient",
    "EscalationConfig",
    "EscalationFilter",
    "EscalationPage",
    "NormalizedFields",
    "PipelineOutcome",
    "WriteEvent",
    "build_fingerprint",
    "default_vocabulary",
    "handle_escalation_write",
    "load_vocabulary",
    "normalize_record",
    "resolve_entity",
]
