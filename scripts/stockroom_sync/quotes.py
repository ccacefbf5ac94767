"""
quotes.py – Quote mutations handed to the action executor by the front ends.

Each write is followed by a full dataset refresh; the local cache is never
patched partition by partition.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

FINALIZED_STATUS = "finalizada"


async def create_quote(gateway, refresher, body: Optional[dict] = None) -> dict:
    result = await gateway.write("create-quote", body or {})
    logger.info("Quote created: %s", result.get("id", "<no id returned>"))
    await refresher.refresh_all()
    return result


async def update_quote_item(gateway, refresher, item_id: str, price, status: str) -> dict:
    """Set the price and status of one quote item."""
    result = await gateway.write("update-quote-item", {"id": item_id, "price": price, "status": status})
    logger.info("Quote item %s updated (price=%s, status=%s)", item_id, price, status)
    await refresher.refresh_all()
    return result


async def finalize_quote(gateway, refresher, quote_id: str, status: str = FINALIZED_STATUS) -> dict:
    result = await gateway.write("finalize-quote", {"id": quote_id, "status": status})
    logger.info("Quote %s finalized (status=%s)", quote_id, status)
    await refresher.refresh_all()
    return result
