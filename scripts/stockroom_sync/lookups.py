"""
lookups.py – Read-only projections over the cached dataset (id → display name).

These never raise: a missing snapshot, a missing or malformed partition, or
an unknown id all fall back to ``NOT_FOUND_LABEL``.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

NOT_FOUND_LABEL = "Not found"
INVALID_ID_LABEL = "Invalid ID"


def index_by_id(records) -> dict[str, dict]:
    """Map ``str(record['id'])`` → record; records without an id are skipped."""
    if not isinstance(records, list):
        return {}
    return {
        str(record["id"]): record
        for record in records
        if isinstance(record, dict) and record.get("id") is not None
    }


def partition_records(snapshot, partition: str) -> list[dict]:
    """The object records of one cached partition; anything malformed reads as empty."""
    records = snapshot.partition(partition)
    if not isinstance(records, list):
        logger.warning("Cached partition %s is not a list (%s)", partition, type(records).__name__)
        return []
    return [record for record in records if isinstance(record, dict)]


def _display_name(store, partition: str, record_id: Optional[str]) -> str:
    if record_id is None or str(record_id).strip() == "":
        return INVALID_ID_LABEL

    snapshot = store.get_snapshot()
    if snapshot is None:
        return NOT_FOUND_LABEL
    wanted = str(record_id)
    for record in partition_records(snapshot, partition):
        if record.get("id") is not None and str(record["id"]) == wanted:
            name = record.get("name")
            return str(name) if name else NOT_FOUND_LABEL
    return NOT_FOUND_LABEL


def product_name(store, product_id: Optional[str]) -> str:
    return _display_name(store, "products", product_id)


def supplier_name(store, supplier_id: Optional[str]) -> str:
    return _display_name(store, "suppliers", supplier_id)
