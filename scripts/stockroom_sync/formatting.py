"""
formatting.py – Display helpers shared by the front ends.
"""

import logging
import re
from datetime import date

logger = logging.getLogger(__name__)

EMPTY_DATE_LABEL = "N/A"
INVALID_DATE_LABEL = "Invalid date"

_ISO_DATE = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})")


def format_iso_date(value) -> str:
    """
    Format an ISO timestamp as dd/mm/yyyy using the calendar date as written.
    '2025-10-27T16:58:00.000Z' → '27/10/2025'
    """
    if not value:
        return EMPTY_DATE_LABEL
    m = _ISO_DATE.match(str(value))
    if not m:
        logger.debug("Not an ISO date: %r", value)
        return INVALID_DATE_LABEL
    try:
        day = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        logger.debug("Invalid calendar date: %r", value)
        return INVALID_DATE_LABEL
    return day.strftime("%d/%m/%Y")
