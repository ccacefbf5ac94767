"""
errors.py – Exception hierarchy for the sync layer.

Every error carries a short ``display_message`` that is safe to show to a
user and a ``diagnostic`` dict (URLs, raw bodies, …) that is only ever
logged.  ``str(err)`` returns the display message.
"""

from typing import Optional


class SyncError(Exception):
    """Root of all errors raised by stockroom_sync."""

    def __init__(self, display_message: str, diagnostic: Optional[dict] = None):
        super().__init__(display_message)
        self.display_message = display_message
        self.diagnostic = dict(diagnostic or {})

    def __str__(self) -> str:
        return self.display_message


# ---------------------------------------------------------------------------
# Remote gateway
# ---------------------------------------------------------------------------

class RemoteError(SyncError):
    """A remote call failed at the transport or HTTP level."""

    def __init__(self, display_message: str, status: Optional[int] = None,
                 diagnostic: Optional[dict] = None):
        super().__init__(display_message, diagnostic)
        self.status = status


class TransportError(RemoteError):
    """The endpoint could not be reached (connection refused, DNS, timeout)."""


class HttpStatusError(RemoteError):
    """The endpoint answered with a non-2xx status."""


class InvalidResponseError(SyncError):
    """A successful response carried a body that could not be understood."""


class UnknownEndpointError(SyncError):
    """An endpoint id has no entry in the endpoint map."""


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class LoginError(SyncError):
    """Login failed for a reason other than bad credentials."""

    def __init__(self, display_message: str, status: Optional[int] = None,
                 diagnostic: Optional[dict] = None):
        super().__init__(display_message, diagnostic)
        self.status = status


class InvalidCredentialsError(LoginError):
    """The server refused the username/password (HTTP 401/403)."""


class AuthenticationRejectedError(LoginError):
    """HTTP succeeded but the body did not confirm ``authenticated: true``."""


class NotAuthenticatedError(SyncError):
    """An operation needs a logged-in session and there is none."""


# ---------------------------------------------------------------------------
# Refresh / storage / actions
# ---------------------------------------------------------------------------

class RefreshError(SyncError):
    """At least one partition read failed; the cached snapshot was kept."""

    def __init__(self, display_message: str, partition: Optional[str] = None,
                 diagnostic: Optional[dict] = None):
        super().__init__(display_message, diagnostic)
        self.partition = partition


class StorageCorruptionError(SyncError):
    """A persisted value could not be decoded."""


class ActionInProgressError(SyncError):
    """A new action was requested while another one is executing."""
