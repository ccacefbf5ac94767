"""
actions.py – Confirm / execute / rollback flow for user-confirmed mutations.

    IDLE ──request──▶ CONFIRMING ──confirm──▶ EXECUTING ──ok──▶ CLOSED
                         │  ▲                     │
                      cancel└──── REVERTED ◀──raise┘
                         ▼
                       CLOSED

After a failure the prompt stays open with the same operation, so the user
may confirm again or cancel.  Rendering code observes transitions through
``subscribe`` or polls ``state`` / ``busy`` / ``controls_enabled``.
"""

import enum
import logging
from typing import Awaitable, Callable, Optional

from .errors import ActionInProgressError, SyncError
from .models import PendingAction

logger = logging.getLogger(__name__)


class ActionState(str, enum.Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    EXECUTING = "executing"
    CLOSED = "closed"
    REVERTED = "reverted"


_AWAITING_INPUT = (ActionState.CONFIRMING, ActionState.REVERTED)


def display_message(exc: BaseException) -> str:
    if isinstance(exc, SyncError):
        return exc.display_message
    return str(exc) or exc.__class__.__name__


class ActionExecutor:
    """Runs one pending action at a time; callers must not overlap prompts."""

    def __init__(self, notifications):
        self.notifications = notifications
        self.state = ActionState.IDLE
        self.pending: Optional[PendingAction] = None
        self._listeners: list[Callable] = []

    @property
    def busy(self) -> bool:
        return self.state is ActionState.EXECUTING

    @property
    def controls_enabled(self) -> bool:
        return self.state in _AWAITING_INPUT

    @property
    def last_error(self) -> Optional[BaseException]:
        return self.pending.last_error if self.pending else None

    def subscribe(self, listener: Callable) -> Callable[[], None]:
        """*listener(previous, current, pending)* is called on every transition."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def request(
        self,
        title: str,
        message: str,
        operation: Callable[[], Awaitable],
        success_message: Optional[str] = None,
    ) -> PendingAction:
        """Open a confirmation prompt for *operation*, replacing any idle prompt."""
        if self.state is ActionState.EXECUTING:
            raise ActionInProgressError("Another action is still running.")
        self.pending = PendingAction(title, message, operation, success_message)
        self._transition(ActionState.CONFIRMING)
        return self.pending

    def cancel(self) -> None:
        if self.state not in _AWAITING_INPUT:
            return
        logger.debug("Action %r cancelled", self.pending.title)
        self._transition(ActionState.CLOSED)
        self.pending = None

    async def confirm(self) -> bool:
        """
        Run the pending operation.  Returns True when it completed and the
        prompt closed, False when it raised (or input was ignored).
        """
        if self.state not in _AWAITING_INPUT:
            logger.debug("Ignoring confirm while %s", self.state.value)
            return False

        action = self.pending
        action.last_error = None
        self._transition(ActionState.EXECUTING)
        try:
            await action.operation()
        except Exception as exc:
            logger.warning("Action %r failed: %r", action.title, exc)
            action.last_error = exc
            self._transition(ActionState.REVERTED)
            self.notifications.error(display_message(exc))
            return False

        logger.info("Action %r completed", action.title)
        self._transition(ActionState.CLOSED)
        self.pending = None
        if action.success_message:
            self.notifications.success(action.success_message)
        return True

    def _transition(self, new_state: ActionState) -> None:
        previous, self.state = self.state, new_state
        for listener in list(self._listeners):
            listener(previous, new_state, self.pending)
