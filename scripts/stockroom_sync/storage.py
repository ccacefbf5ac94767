"""
storage.py – Session & cache store on top of an origin-scoped key/value storage.

Four keys are kept per origin: the dataset snapshot, the auth token, the
active user and an authenticated flag.  They share one lifecycle: the only
way to remove any of them is ``SessionStore.clear_all()``.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from .errors import StorageCorruptionError
from .models import DatasetSnapshot, Session

logger = logging.getLogger(__name__)

KEY_SNAPSHOT = "appData"
KEY_TOKEN = "authToken"
KEY_USER = "currentUser"
KEY_AUTH_FLAG = "isAuthenticated"

ALL_KEYS = (KEY_SNAPSHOT, KEY_TOKEN, KEY_USER, KEY_AUTH_FLAG)


# ---------------------------------------------------------------------------
# Key/value backends
# ---------------------------------------------------------------------------

class MemoryStorage:
    """Dict-backed storage; string keys to string values."""

    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)


def origin_slug(base_url: str) -> str:
    """'https://work.example.com/webhook' → 'https_work.example.com'"""
    parts = urlsplit(base_url)
    origin = f"{parts.scheme}_{parts.netloc}" if parts.netloc else base_url
    return re.sub(r"[^A-Za-z0-9._-]+", "_", origin).strip("_") or "default"


class FileStorage:
    """
    One JSON object per origin on disk.  Every mutation rewrites the file via
    a temp file + ``os.replace`` so a reader never sees a half-written file.
    """

    def __init__(self, data_dir: Path, origin: str):
        self.path = Path(data_dir) / f"{origin_slug(origin)}.json"

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            raise StorageCorruptionError(
                "Saved data could not be read.", {"path": str(self.path), "error": str(exc)}
            ) from exc
        if not isinstance(data, dict):
            raise StorageCorruptionError(
                "Saved data could not be read.", {"path": str(self.path), "type": type(data).__name__}
            )
        return data

    def _dump(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".stockroom-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if value is None or isinstance(value, str) else json.dumps(value)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._load()
        except StorageCorruptionError:
            logger.warning("Overwriting unreadable storage file %s", self.path)
            data = {}
        data[key] = value
        self._dump(data)

    def remove(self, *keys: str) -> None:
        try:
            data = self._load()
        except StorageCorruptionError:
            logger.warning("Discarding unreadable storage file %s", self.path)
            data = {}
        for key in keys:
            data.pop(key, None)
        self._dump(data)


# ---------------------------------------------------------------------------
# Session & cache store
# ---------------------------------------------------------------------------

class SessionStore:
    """Authoritative local cache of the session and the dataset snapshot."""

    def __init__(self, storage):
        self.storage = storage

    def save_session(self, session: Session) -> None:
        self.storage.set(KEY_TOKEN, session.token)
        self.storage.set(KEY_USER, json.dumps(session.user))
        self.storage.set(KEY_AUTH_FLAG, "true")

    def get_session(self) -> Optional[Session]:
        try:
            if self.storage.get(KEY_AUTH_FLAG) != "true":
                return None
            token = self.storage.get(KEY_TOKEN)
            if not token:
                return None
            raw_user = self.storage.get(KEY_USER)
            try:
                user = json.loads(raw_user) if raw_user else None
            except ValueError as exc:
                raise StorageCorruptionError(
                    "Saved session could not be read.", {"key": KEY_USER, "error": str(exc)}
                ) from exc
        except StorageCorruptionError as exc:
            self._recover(exc)
            return None
        return Session(token=token, user=user)

    def get_token(self) -> Optional[str]:
        session = self.get_session()
        return session.token if session else None

    def is_authenticated(self) -> bool:
        return self.get_session() is not None

    def save_snapshot(self, snapshot: DatasetSnapshot) -> None:
        """Replace the whole cached dataset in a single write."""
        self.storage.set(KEY_SNAPSHOT, json.dumps(snapshot.to_dict()))

    def get_snapshot(self) -> Optional[DatasetSnapshot]:
        try:
            raw = self.storage.get(KEY_SNAPSHOT)
            if raw is None:
                return None
            try:
                data = json.loads(raw)
            except ValueError as exc:
                raise StorageCorruptionError(
                    "Cached data could not be read.", {"key": KEY_SNAPSHOT, "error": str(exc)}
                ) from exc
            if not isinstance(data, dict):
                raise StorageCorruptionError(
                    "Cached data could not be read.", {"key": KEY_SNAPSHOT, "type": type(data).__name__}
                )
        except StorageCorruptionError as exc:
            self._recover(exc)
            return None
        return DatasetSnapshot.from_dict(data)

    def clear_all(self) -> None:
        """Remove session, token and snapshot together (the logout path)."""
        self.storage.remove(*ALL_KEYS)
        logger.info("Session and cached data cleared")

    def _recover(self, exc: StorageCorruptionError) -> None:
        # A corrupted value next to a live token is an inconsistent state.
        logger.error("Storage corruption (%s): %s; clearing session", exc.diagnostic, exc)
        self.clear_all()
