"""
config.py – Runtime settings and the endpoint map.

Settings are read from environment variables:

    STOCKROOM_BASE_URL        – webhook base URL
    STOCKROOM_ENDPOINTS_FILE  – YAML file mapping endpoint ids to paths
    STOCKROOM_DATA_DIR        – where the session/cache file lives
    STOCKROOM_TIMEOUT         – per-request timeout in seconds
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://work.produ-cloud.com/webhook"
DEFAULT_TIMEOUT = 30.0

# Notifications auto-dismiss this many seconds after creation.
NOTIFICATION_TTL = 5.0

# Path to the built-in endpoint map shipped with the package.
_DEFAULT_ENDPOINTS_FILE = Path(__file__).parent / "default_endpoints.yaml"

REQUIRED_ENDPOINTS = (
    "load-products",
    "load-suppliers",
    "load-product-suppliers",
    "load-quotes",
    "load-quote-items",
    "load-stock-history",
    "login",
    "create-quote",
    "update-quote-item",
    "finalize-quote",
)


# ---------------------------------------------------------------------------
# Endpoint map loading
# ---------------------------------------------------------------------------

def load_endpoint_map(path: Optional[str] = None) -> dict[str, str]:
    """Load an endpoint id → webhook path map from a YAML file.

    If *path* is None the built-in ``default_endpoints.yaml`` is used.

    Example YAML entry::

        load-products: curral-burguer_carrega_produtos

    Raises ``SystemExit`` with a descriptive message when the file cannot be
    read, contains a non-string entry, or misses a required endpoint.
    """
    file_path = Path(path) if path else _DEFAULT_ENDPOINTS_FILE
    try:
        with open(file_path) as fh:
            raw = yaml.safe_load(fh) or {}
    except FileNotFoundError:
        logger.error("Endpoint map file not found: %s", file_path)
        raise SystemExit(f"ERROR: endpoint map file not found: {file_path}")
    except yaml.YAMLError as exc:
        logger.error("Failed to parse endpoint map %s: %s", file_path, exc)
        raise SystemExit(f"ERROR: failed to parse YAML in {file_path}: {exc}")

    if not isinstance(raw, dict):
        raise SystemExit(f"ERROR: {file_path} must contain a mapping of endpoint ids to paths")

    result: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(value, str) or not value.strip():
            raise SystemExit(
                f"ERROR: invalid entry in {file_path}: key '{key}' must map to "
                f"a non-empty string, got {type(value).__name__!r}"
            )
        result[str(key)] = value.strip()

    missing = [name for name in REQUIRED_ENDPOINTS if name not in result]
    if missing:
        raise SystemExit(f"ERROR: {file_path} is missing endpoints: {', '.join(missing)}")
    return result


def default_data_dir() -> Path:
    """
    Resolve the directory for the session/cache file. Prefer the per-user app
    data dir on Windows; otherwise follow XDG_DATA_HOME.
    """
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "Stockroom Sync"
    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / "stockroom-sync"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    endpoints: dict = field(default_factory=load_endpoint_map)
    data_dir: Path = field(default_factory=default_data_dir)
    timeout: float = DEFAULT_TIMEOUT
    notification_ttl: float = NOTIFICATION_TTL

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        env = os.environ if environ is None else environ

        timeout_raw = env.get("STOCKROOM_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
        except ValueError:
            raise SystemExit(f"ERROR: STOCKROOM_TIMEOUT must be a number, got {timeout_raw!r}")

        data_dir = env.get("STOCKROOM_DATA_DIR")
        return cls(
            base_url=(env.get("STOCKROOM_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            endpoints=load_endpoint_map(env.get("STOCKROOM_ENDPOINTS_FILE") or None),
            data_dir=Path(data_dir) if data_dir else default_data_dir(),
            timeout=timeout,
        )
