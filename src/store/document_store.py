"""File-backed document store with change notifications.

This module persists documents as one JSON file per id under named
collections. Every write and delete notifies registered listeners, which
is how the ingest pipeline is triggered on record writes.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, Callable, Mapping

from core.config import EscalationConfig
from core.constants import COLLECTIONS_DIR_NAME, DOCUMENT_FILE_SUFFIX
from core.errors import EscalationStoreError
from core.logging_config import get_logger
from core.types import WriteEvent
from store.field_values import resolve_field_values
from store.record_payload import read_document_file, write_document_file

_LOGGER = get_logger(__name__)

WriteListener = Callable[[str, WriteEvent], None]


class DocumentStore:
    """JSON document collections rooted at ``data_root/collections``.

    Reads and writes are sequential and blocking. The store offers no
    multi-document transactions.
    """

    def __init__(self, config: EscalationConfig) -> None:
        """Initialize the store from config.

        Args:
            config: Runtime configuration.
        """
        self._collections_root = config.data_root / COLLECTIONS_DIR_NAME
        self._collections_root.mkdir(parents=True, exist_ok=True)
        self._listeners: list[WriteListener] = []

    def add_listener(self, listener: WriteListener) -> None:
        """Register a callback invoked after every write and delete.

        Args:
            listener: Callable receiving collection name and write event.
        """
        self._listeners.append(listener)

    def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        """Load one document.

        Args:
            collection: Collection name.
            document_id: Document id.

        Returns:
            Stored document, or None when it does not exist.

        Raises:
            EscalationStoreError: If the document file is unreadable.
        """
        document_path = self._document_path(collection, document_id)
        if not document_path.exists():
            return None
        return read_document_file(document_path)

    def set(
        self,
        collection: str,
        document_id: str,
        data: Mapping[str, Any],
        merge: bool = False,
    ) -> dict[str, Any]:
        """Write one document, optionally merging onto the stored fields.

        Field value sentinels in ``data`` are resolved against the stored
        document before the write.

        Args:
            collection: Collection name.
            document_id: Document id.
            data: Fields to write.
            merge: Keep stored fields absent from ``data`` when True.

        Returns:
            Document as written.

        Raises:
            EscalationStoreError: If persistence fails.
        """
        existing = self.get(collection, document_id)
        resolved = resolve_field_values(data, existing)
        document = {**existing, **resolved} if merge and existing else resolved
        write_document_file(self._document_path(collection, document_id), document)
        _LOGGER.debug(
            "document_written",
            collection=collection,
            document_id=document_id,
            merge=merge,
        )
        self._notify(collection, WriteEvent(record_id=document_id, data=document))
        return document

    def create(self, collection: str, data: Mapping[str, Any]) -> str:
        """Write a new document under a store-assigned id.

        Args:
            collection: Collection name.
            data: Document fields.

        Returns:
            Assigned document id.
        """
        document_id = uuid.uuid4().hex
        self.set(collection, document_id, data)
        return document_id

    def delete(self, collection: str, document_id: str) -> None:
        """Delete one document; deleting a missing document is a no-op.

        Args:
            collection: Collection name.
            document_id: Document id.

        Raises:
            EscalationStoreError: If the file cannot be removed.
        """
        document_path = self._document_path(collection, document_id)
        try:
            document_path.unlink(missing_ok=True)
        except OSError as error:
            raise EscalationStoreError(
                f"Failed to delete document at {document_path}: {error}. "
                "Check write permissions and retry."
            ) from error
        _LOGGER.debug("document_deleted", collection=collection, document_id=document_id)
        self._notify(collection, WriteEvent(record_id=document_id, data=None))

    def find_by_field(
        self,
        collection: str,
        field_name: str,
        value: Any,
    ) -> list[tuple[str, dict[str, Any]]]:
        """Return documents whose field equals ``value`` exactly.

        Args:
            collection: Collection name.
            field_name: Top-level field name.
            value: Value to match.

        Returns:
            Matching ``(id, document)`` pairs ordered by id.
        """
        return [
            (document_id, document)
            for document_id, document in self.list_documents(collection)
            if field_name in document and document[field_name] == value
        ]

    def list_documents(self, collection: str) -> list[tuple[str, dict[str, Any]]]:
        """Return every document in a collection ordered by id.

        Args:
            collection: Collection name.

        Returns:
            ``(id, document)`` pairs.
        """
        collection_dir = self._collection_dir(collection)
        documents: list[tuple[str, dict[str, Any]]] = []
        for document_path in sorted(collection_dir.glob(f"*{DOCUMENT_FILE_SUFFIX}")):
            document_id = document_path.name.removesuffix(DOCUMENT_FILE_SUFFIX)
            documents.append((document_id, read_document_file(document_path)))
        return documents

    def _notify(self, collection: str, event: WriteEvent) -> None:
        for listener in list(self._listeners):
            listener(collection, event)

    def _collection_dir(self, collection: str) -> Path:
        _validate_name(collection, "collection name")
        collection_dir = self._collections_root / collection
        collection_dir.mkdir(parents=True, exist_ok=True)
        return collection_dir

    def _document_path(self, collection: str, document_id: str) -> Path:
        _validate_name(document_id, "document id")
        return self._collection_dir(collection) / f"{document_id}{DOCUMENT_FILE_SUFFIX}"


def _validate_name(value: str, label: str) -> None:
    """Reject names that cannot map onto a single file system entry.

    Raises:
        EscalationStoreError: If the name is empty or contains path parts.
    """
    if not value or value in {".", ".."} or "/" in value or "\\" in value:
        raise EscalationStoreError(
            f"Invalid {label} '{value}': use a non-empty name without path separators."
        )
