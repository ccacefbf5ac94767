"""
refresh.py – Dataset refresh coordinator.

Loads all six partitions concurrently and replaces the cached snapshot only
when every read succeeded.  A stale but consistent snapshot is kept in
preference to a mix of old and new partitions.
"""

import asyncio
import logging

from .errors import InvalidResponseError, RefreshError, SyncError
from .models import PARTITION_ENDPOINTS, DatasetSnapshot

logger = logging.getLogger(__name__)


def _check_records(partition: str, records: list) -> list:
    """Every record must be an object with an ``id``; nothing else is validated."""
    for index, record in enumerate(records):
        if not isinstance(record, dict) or "id" not in record:
            raise InvalidResponseError(
                "The server returned a record without an id.",
                {"partition": partition, "index": index},
            )
    return records


class RefreshCoordinator:
    """Stateless between calls; each ``refresh_all`` stands on its own."""

    def __init__(self, gateway, store):
        self.gateway = gateway
        self.store = store

    async def _load(self, partition: str) -> list:
        records = await self.gateway.read(PARTITION_ENDPOINTS[partition])
        return _check_records(partition, records)

    async def refresh_all(self) -> DatasetSnapshot:
        """
        Fan out one read per partition and wait for all of them, failing on
        the first error.  Raises ``RefreshError`` (chained to the cause) and
        leaves the stored snapshot untouched if any read fails.
        """
        tasks = {
            asyncio.ensure_future(self._load(partition)): partition
            for partition in PARTITION_ENDPOINTS
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)

        failed = [task for task in done if task.exception() is not None]
        if failed:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

            first = failed[0]
            partition = tasks[first]
            cause = first.exception()
            logger.error("Refresh failed on partition %s: %r", partition, cause)
            detail = cause.display_message if isinstance(cause, SyncError) else str(cause)
            raise RefreshError(
                f"Could not refresh data: {detail}",
                partition=partition,
                diagnostic={"partition": partition, **getattr(cause, "diagnostic", {})},
            ) from cause

        results = {partition: task.result() for task, partition in tasks.items()}
        snapshot = DatasetSnapshot(**results)
        self.store.save_snapshot(snapshot)
        logger.info(
            "Dataset refreshed: %s",
            ", ".join(f"{name}={len(records)}" for name, records in results.items()),
        )
        return snapshot
