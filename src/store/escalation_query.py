"""Read-side queries over normalized escalation records.

This module is the single read contract for downstream consumers such as
dashboards: filtered, newest-first, cursor-paginated views of the primary
collection. Records written before normalization still hold string dates,
so date bounds fall back to ISO string comparison for them.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Mapping

from core.constants import ESCALATIONS_COLLECTION
from core.errors import EscalationStoreError
from core.types import EscalationFilter, EscalationPage
from store.document_store import DocumentStore
from transforms.timestamps import as_utc, isoformat_utc


def query_escalations(
    store: DocumentStore,
    filter_spec: EscalationFilter,
    page_size: int,
    cursor: str | None = None,
) -> EscalationPage:
    """Return one page of escalations ordered by date, newest first.

    Args:
        store: Document store holding the primary collection.
        filter_spec: Filter constraints.
        page_size: Maximum records per page.
        cursor: Id of the last record of the previous page.

    Returns:
        Page of records with the cursor for the next page.

    Raises:
        EscalationStoreError: If the cursor does not name a matching record.
    """
    documents = [
        (document_id, document)
        for document_id, document in store.list_documents(ESCALATIONS_COLLECTION)
        if _matches(document, filter_spec)
    ]
    documents.sort(key=lambda item: (_date_sort_key(item[1]), item[0]), reverse=True)
    start_index = _cursor_start_index(documents, cursor)
    page = documents[start_index : start_index + page_size]
    has_more = start_index + page_size < len(documents)
    return EscalationPage(
        records=tuple(page),
        next_cursor=page[-1][0] if page and has_more else None,
    )


def todays_escalations(
    store: DocumentStore,
    day: date | None = None,
) -> list[tuple[str, Mapping[str, Any]]]:
    """Return every escalation dated on one UTC calendar day.

    Args:
        store: Document store holding the primary collection.
        day: UTC day; defaults to today.

    Returns:
        Matching ``(id, record)`` pairs, newest first.
    """
    target_day = day or datetime.now(timezone.utc).date()
    start = datetime.combine(target_day, time.min, tzinfo=timezone.utc)
    filter_spec = EscalationFilter(start=start, end=start + timedelta(days=1))
    records: list[tuple[str, Mapping[str, Any]]] = []
    cursor: str | None = None
    while True:
        page = query_escalations(store, filter_spec, page_size=100, cursor=cursor)
        records.extend(page.records)
        if page.next_cursor is None:
            return records
        cursor = page.next_cursor


def _matches(document: Mapping[str, Any], filter_spec: EscalationFilter) -> bool:
    """Return whether a record satisfies every filter constraint."""
    if not _within_date_range(document.get("escalationDate"), filter_spec):
        return False
    if filter_spec.building_code and document.get("buildingCode") != filter_spec.building_code:
        return False
    if filter_spec.team and document.get("escalatedTo") != filter_spec.team:
        return False
    if filter_spec.escalator and document.get("escalator") != filter_spec.escalator:
        return False
    if filter_spec.search_text:
        needle = filter_spec.search_text.lower()
        haystack = f"{document.get('subject') or ''}\n{document.get('description') or ''}"
        if needle not in haystack.lower():
            return False
    return True


def _within_date_range(value: Any, filter_spec: EscalationFilter) -> bool:
    """Check date bounds on typed instants, or on ISO strings for legacy rows."""
    start, end = filter_spec.start, filter_spec.end
    if start is None and end is None:
        return True
    if isinstance(value, datetime):
        instant = as_utc(value)
        if start is not None and instant < as_utc(start):
            return False
        return end is None or instant < as_utc(end)
    if isinstance(value, str):
        if start is not None and value < isoformat_utc(start):
            return False
        return end is None or value < isoformat_utc(end)
    return False


def _date_sort_key(document: Mapping[str, Any]) -> str:
    value = document.get("escalationDate")
    if isinstance(value, datetime):
        return isoformat_utc(value)
    if isinstance(value, str):
        return value
    return ""


def _cursor_start_index(
    documents: list[tuple[str, dict[str, Any]]],
    cursor: str | None,
) -> int:
    if cursor is None:
        return 0
    for index, (document_id, _) in enumerate(documents):
        if document_id == cursor:
            return index + 1
    raise EscalationStoreError(
        f"Unknown page cursor '{cursor}': no matching escalation record. "
        "Restart pagination without a cursor."
    )
