"""
notifications.py – Transient, timed, stacked feedback messages.

Items never coalesce; each one expires ``ttl`` seconds after its own
creation.  Expiry is evaluated against an injectable clock, so a front end
simply polls ``active()`` (or listens for new items via ``subscribe``).
"""

import itertools
import logging
import time
from typing import Callable, Optional

from .config import NOTIFICATION_TTL
from .models import Notification

logger = logging.getLogger(__name__)

ERROR = "error"
SUCCESS = "success"
INFO = "info"
WARNING = "warning"

# kind → (label, style category)
KINDS: dict[str, tuple[str, str]] = {
    ERROR: ("Error", "danger"),
    SUCCESS: ("Success", "success"),
    INFO: ("Info", "info"),
    WARNING: ("Warning", "warning"),
}


class NotificationQueue:

    def __init__(self, ttl: float = NOTIFICATION_TTL, clock: Optional[Callable[[], float]] = None):
        self.ttl = ttl
        self.clock = clock or time.monotonic
        self._items: list[Notification] = []
        self._ids = itertools.count(1)
        self._listeners: list[Callable[[Notification], None]] = []

    def notify(self, kind: str, message: str) -> Notification:
        """Append a new item; unknown kinds are treated as errors."""
        if kind not in KINDS:
            logger.debug("Unknown notification kind %r, using %r", kind, ERROR)
            kind = ERROR
        label, style = KINDS[kind]
        now = self.clock()
        item = Notification(
            kind=kind,
            message=message,
            created_at=now,
            expires_at=now + self.ttl,
            label=label,
            style=style,
            id=next(self._ids),
        )
        self._items.append(item)
        logger.debug("Notification #%d %s: %s", item.id, kind, message)
        for listener in list(self._listeners):
            listener(item)
        return item

    def error(self, message: str) -> Notification:
        return self.notify(ERROR, message)

    def success(self, message: str) -> Notification:
        return self.notify(SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.notify(INFO, message)

    def warning(self, message: str) -> Notification:
        return self.notify(WARNING, message)

    def active(self) -> list[Notification]:
        """Drop expired items and return the rest, oldest first."""
        now = self.clock()
        self._items = [item for item in self._items if not item.expired(now)]
        return list(self._items)

    def dismiss(self, notification_id: int) -> None:
        self._items = [item for item in self._items if item.id != notification_id]

    def subscribe(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        """Call *listener* for every new item; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)
