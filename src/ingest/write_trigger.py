"""Store write trigger for the escalation pipeline.

This module wires document store change notifications on the primary
collection to the write handler. The handler's own writes re-trigger it
from inside the outer pass; those nested passes end as ``unchanged`` or
``deleted`` and complete before the pass that caused them.
"""

from __future__ import annotations

from core.constants import ESCALATIONS_COLLECTION
from core.types import PipelineOutcome, WriteEvent
from ingest.pipeline import handle_escalation_write
from store.document_store import DocumentStore
from transforms.canonical_vocabulary import CanonicalVocabulary


class WriteTrigger:
    """Runs the write handler for every escalation write."""

    def __init__(self, store: DocumentStore, vocabulary: CanonicalVocabulary) -> None:
        self._store = store
        self._vocabulary = vocabulary
        self._depth = 0
        self._latest: dict[str, PipelineOutcome] = {}

    def attach(self) -> "WriteTrigger":
        """Subscribe to store change notifications and return self."""
        self._store.add_listener(self.on_write)
        return self

    def on_write(self, collection: str, event: WriteEvent) -> None:
        """Handle one change notification; other collections are ignored."""
        if collection != ESCALATIONS_COLLECTION:
            return
        self._depth += 1
        try:
            outcome = handle_escalation_write(event, self._store, self._vocabulary)
        finally:
            self._depth -= 1
        if self._depth == 0:
            self._latest[outcome.record_id] = outcome

    def outcome_for(self, record_id: str) -> PipelineOutcome | None:
        """Return the outcome of the latest externally caused write to a record.

        Only outermost passes are recorded, so the ``unchanged`` and
        ``deleted`` passes caused by the handler's own writes never replace
        the ``persisted`` or ``quarantined`` outcome around them.
        """
        return self._latest.get(record_id)
