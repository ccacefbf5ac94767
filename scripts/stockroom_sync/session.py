"""
session.py – Login, logout and the authentication gate.
"""

import logging

from .errors import NotAuthenticatedError
from .models import Session

logger = logging.getLogger(__name__)


async def login(gateway, store, refresher, username: str, password: str) -> Session:
    """
    Authenticate, persist the session, then load the full dataset.

    A refresh failure is re-raised but leaves the new session in place, so
    the caller can retry the refresh without logging in again.
    """
    result = await gateway.authenticate(username, password)
    session = result.to_session()
    store.save_session(session)
    logger.info("Session saved for %s; loading dataset", username)
    await refresher.refresh_all()
    return session


def logout(store) -> None:
    store.clear_all()


def require_auth(store) -> Session:
    """Return the active session or raise ``NotAuthenticatedError``."""
    session = store.get_session()
    if session is None:
        raise NotAuthenticatedError("You are not logged in. Run 'login' first.")
    return session
