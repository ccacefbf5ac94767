"""
gateway.py – Remote gateway for the webhook endpoints.

Every call is a JSON POST.  Reads and writes carry the current session token
in the body; ``authenticate`` carries the credentials instead.  Blocking
``requests`` calls are pushed to a worker thread so callers can await them.
"""

import asyncio
import json
import logging
import threading
from typing import Any, Callable, Optional

import requests

from .config import DEFAULT_TIMEOUT
from .errors import (
    AuthenticationRejectedError,
    HttpStatusError,
    InvalidCredentialsError,
    InvalidResponseError,
    LoginError,
    TransportError,
    UnknownEndpointError,
)
from .models import SessionResult

logger = logging.getLogger(__name__)

_EMPTY = object()

# Longest server message shown to a user; the full body stays in the diagnostic.
MAX_MESSAGE_LENGTH = 200


def _is_success(status: int) -> bool:
    return 200 <= status < 300


def _shorten(message: str) -> str:
    if len(message) <= MAX_MESSAGE_LENGTH:
        return message
    return message[: MAX_MESSAGE_LENGTH - 1].rstrip() + "…"


def server_message(resp) -> str:
    """
    Best-effort human message for a failed response: the JSON ``message``
    field, else the raw text, else the status line.  Capped at
    ``MAX_MESSAGE_LENGTH`` characters.
    """
    text = (resp.text or "").strip()
    if text:
        try:
            body = json.loads(text)
        except ValueError:
            return _shorten(text)
        if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"].strip():
            return _shorten(body["message"].strip())
        return _shorten(text)
    return f"{resp.status_code} {resp.reason or ''}".strip()


class RemoteGateway:
    """Talks to the fixed set of webhook endpoints."""

    def __init__(
        self,
        base_url: str,
        endpoints: dict[str, str],
        token_source: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.endpoints = dict(endpoints)
        self.token_source = token_source
        self.timeout = timeout
        # requests.Session is not documented as thread-safe, so each worker
        # thread gets its own unless one is injected.
        self.session = session
        self._local = threading.local()
        if session is not None:
            session.headers.update({"Accept": "application/json"})

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def read(self, endpoint_id: str) -> list:
        """Load one dataset partition; an empty body is an empty list."""
        body = await self._call(endpoint_id, self._with_token({}))
        if body is _EMPTY:
            return []
        if isinstance(body, list):
            return body
        if isinstance(body, dict) and isinstance(body.get("data"), list):
            return body["data"]
        logger.error("Unexpected %s payload from %s: %r", type(body).__name__, endpoint_id, body)
        raise InvalidResponseError(
            "The server returned data in an unexpected format.",
            {"endpoint": endpoint_id, "url": self.url_for(endpoint_id), "type": type(body).__name__},
        )

    async def write(self, endpoint_id: str, body: Optional[dict] = None) -> dict:
        """Send a mutation; an empty body on success is an empty result."""
        payload = self._with_token(dict(body or {}))
        result = await self._call(endpoint_id, payload)
        if result is _EMPTY:
            return {}
        if isinstance(result, dict):
            return result
        return {"data": result}

    async def authenticate(self, username: str, password: str) -> SessionResult:
        """Log in; 401/403 are bad credentials, anything else non-2xx is a login error."""
        url = self.url_for("login")
        resp = await asyncio.to_thread(
            self._post, "login", {"username": username, "password": password}
        )
        if not _is_success(resp.status_code):
            message = server_message(resp)
            diagnostic = {"endpoint": "login", "url": url, "status": resp.status_code, "body": resp.text}
            logger.error("Login failed: HTTP %s from %s – %s", resp.status_code, url, message)
            if resp.status_code in (401, 403):
                raise InvalidCredentialsError(
                    "Invalid username or password.", status=resp.status_code, diagnostic=diagnostic
                )
            raise LoginError(
                f"Login failed ({resp.status_code}): {message}",
                status=resp.status_code,
                diagnostic=diagnostic,
            )

        body = self._decode(resp, "login")
        if body is _EMPTY:
            body = {}
        if not isinstance(body, dict) or body.get("authenticated") is not True:
            logger.warning("Login response from %s did not confirm authentication", url)
            raise AuthenticationRejectedError(
                "Login was not accepted by the server.",
                status=resp.status_code,
                diagnostic={"endpoint": "login", "url": url},
            )

        logger.info("Authenticated as %s", username)
        return SessionResult(token=str(body.get("token") or ""), user=body.get("user"), raw=body)

    def url_for(self, endpoint_id: str) -> str:
        try:
            path = self.endpoints[endpoint_id]
        except KeyError:
            raise UnknownEndpointError(
                "This operation is not available.", {"endpoint": endpoint_id}
            ) from None
        return f"{self.base_url}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _http(self) -> requests.Session:
        """The injected session, or one ``requests.Session`` per worker thread."""
        if self.session is not None:
            return self.session
        http = getattr(self._local, "session", None)
        if http is None:
            http = requests.Session()
            http.headers.update({"Accept": "application/json"})
            self._local.session = http
        return http

    def _with_token(self, payload: dict) -> dict:
        token = self.token_source() if self.token_source else None
        payload["token"] = token
        return payload

    async def _call(self, endpoint_id: str, payload: dict) -> Any:
        resp = await asyncio.to_thread(self._post, endpoint_id, payload)
        if not _is_success(resp.status_code):
            message = server_message(resp)
            url = self.url_for(endpoint_id)
            logger.error("POST %s failed: HTTP %s – %s", url, resp.status_code, message)
            raise HttpStatusError(
                f"Request failed ({resp.status_code}): {message}",
                status=resp.status_code,
                diagnostic={"endpoint": endpoint_id, "url": url, "body": resp.text},
            )
        return self._decode(resp, endpoint_id)

    def _post(self, endpoint_id: str, payload: dict):
        url = self.url_for(endpoint_id)
        logger.debug("POST %s", url)
        try:
            return self._http().post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("POST %s failed: %s", url, exc)
            raise TransportError(
                "Could not reach the server. Check your connection and try again.",
                diagnostic={"endpoint": endpoint_id, "url": url, "error": str(exc)},
            ) from exc

    def _decode(self, resp, endpoint_id: str) -> Any:
        """Parse a 2xx body; blank text yields the ``_EMPTY`` sentinel."""
        text = resp.text or ""
        if not text.strip():
            return _EMPTY
        try:
            return json.loads(text)
        except ValueError as exc:
            url = self.url_for(endpoint_id)
            logger.error("Malformed JSON from %s: %s (body=%r)", url, exc, text[:200])
            raise InvalidResponseError(
                "The server returned an invalid response.",
                {"endpoint": endpoint_id, "url": url, "error": str(exc)},
            ) from exc
