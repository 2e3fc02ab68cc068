"""Python SDK for escalation ingest and reads.

This module exposes high-level APIs for loading raw records through the
write trigger, reprocessing stored records, and reading normalized and
quarantined escalations.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping

from core.config import EscalationConfig
from core.constants import ESCALATIONS_COLLECTION, QUARANTINE_COLLECTION
from core.logging_config import get_logger
from core.types import (
    CanonicalEntity,
    EscalationFilter,
    EscalationPage,
    PipelineOutcome,
    WriteEvent,
)
from ingest.input_reader import read_raw_records
from ingest.pipeline import handle_escalation_write
from ingest.write_trigger import WriteTrigger
from store.document_store import DocumentStore
from store.escalation_query import query_escalations
from transforms.canonical_vocabulary import CanonicalVocabulary, load_vocabulary
from transforms.entity_resolver import resolve_entity

_LOGGER = get_logger(__name__)


class EscalationClient:
    """Primary SDK entry point for escalation workflows."""

    def __init__(
        self,
        config: EscalationConfig | None = None,
        vocabulary: CanonicalVocabulary | None = None,
    ) -> None:
        """Create SDK client with an attached write trigger.

        Args:
            config: Optional runtime configuration.
            vocabulary: Optional vocabulary; loaded from config when omitted.
        """
        self._config = config or EscalationConfig.from_env()
        self._vocabulary = vocabulary or load_vocabulary(self._config.vocabulary_path)
        self._store = DocumentStore(self._config)
        self._trigger = WriteTrigger(self._store, self._vocabulary).attach()

    @property
    def store(self) -> DocumentStore:
        """Underlying document store with the trigger attached."""
        return self._store

    def load(self, source_uri: str) -> tuple[PipelineOutcome, ...]:
        """Write raw records from a source into the primary collection.

        Each write fires the pipeline through the attached trigger.

        Args:
            source_uri: Local path or ``s3://`` prefix.

        Returns:
            Decisive pipeline outcome per loaded record, in load order.

        Raises:
            EscalationIngestError: If the source cannot be read.
            EscalationStoreError: If a store write fails.
        """
        raw_records = read_raw_records(source_uri, self._config)
        outcomes: list[PipelineOutcome] = []
        for raw_record in raw_records:
            record_id = self.submit(raw_record.fields, raw_record.record_id)
            outcome = self._trigger.outcome_for(record_id)
            if outcome is not None:
                outcomes.append(outcome)
        _LOGGER.info(
            "raw_escalations_loaded",
            source_uri=source_uri,
            record_count=len(raw_records),
            persisted=sum(1 for outcome in outcomes if outcome.state == "persisted"),
            quarantined=sum(1 for outcome in outcomes if outcome.state == "quarantined"),
        )
        return tuple(outcomes)

    def submit(self, fields: Mapping[str, Any], record_id: str | None = None) -> str:
        """Write one raw record, firing the pipeline.

        Args:
            fields: Raw record fields.
            record_id: Optional producer id; store-assigned when omitted.

        Returns:
            Record id.
        """
        if record_id is None:
            return self._store.create(ESCALATIONS_COLLECTION, fields)
        self._store.set(ESCALATIONS_COLLECTION, record_id, fields)
        return record_id

    def process(self, record_id: str) -> PipelineOutcome:
        """Run the pipeline on the current stored state of one record.

        Args:
            record_id: Primary collection id.

        Returns:
            Pipeline outcome; ``deleted`` when the record does not exist.
        """
        data = self._store.get(ESCALATIONS_COLLECTION, record_id)
        event = WriteEvent(record_id=record_id, data=data)
        return handle_escalation_write(event, self._store, self._vocabulary)

    def reprocess_all(self) -> tuple[PipelineOutcome, ...]:
        """Backfill the pipeline over every stored primary record.

        Returns:
            Outcome per record, ordered by id.
        """
        record_ids = [
            document_id for document_id, _ in self._store.list_documents(ESCALATIONS_COLLECTION)
        ]
        return tuple(self.process(record_id) for record_id in record_ids)

    def query(self, filter_spec: EscalationFilter, cursor: str | None = None) -> EscalationPage:
        """Return one page of normalized escalations.

        Args:
            filter_spec: Filter constraints.
            cursor: Cursor from the previous page.

        Returns:
            Page of records, newest first.
        """
        return query_escalations(self._store, filter_spec, self._config.page_size, cursor)

    def quarantined(self) -> list[tuple[str, dict[str, Any]]]:
        """Return every quarantined record ordered by id."""
        return self._store.list_documents(QUARANTINE_COLLECTION)

    def resolve(self, domain: str, raw_text: str) -> CanonicalEntity:
        """Resolve free text against the client's vocabulary."""
        return resolve_entity(self._vocabulary, domain, raw_text)

    def with_data_root(self, data_root: str) -> "EscalationClient":
        """Clone the client with a different local data root.

        Args:
            data_root: New data root path.

        Returns:
            New SDK client instance sharing the vocabulary.
        """
        resolved_root = Path(data_root).expanduser().resolve()
        updated_config = replace(self._config, data_root=resolved_root)
        return EscalationClient(updated_config, self._vocabulary)
