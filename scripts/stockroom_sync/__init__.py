"""
stockroom_sync – Data synchronization and action layer for the stock console.

Public API
----------
RemoteGateway        – token-bearing POST calls to the webhook endpoints
SessionStore         – session + dataset snapshot cache (FileStorage / MemoryStorage)
RefreshCoordinator   – all-or-nothing reload of the six dataset partitions
ActionExecutor       – confirm / execute / rollback flow for mutations
NotificationQueue    – transient, timed feedback messages
product_name         – id → product display name from the cached snapshot
supplier_name        – id → supplier display name from the cached snapshot
Settings             – configuration from the environment
"""

from .actions import ActionExecutor, ActionState
from .config import Settings, load_endpoint_map
from .gateway import RemoteGateway
from .lookups import product_name, supplier_name
from .models import DatasetSnapshot, Notification, Session, SessionResult
from .notifications import NotificationQueue
from .refresh import RefreshCoordinator
from .session import login, logout, require_auth
from .storage import FileStorage, MemoryStorage, SessionStore

__all__ = [
    "ActionExecutor",
    "ActionState",
    "DatasetSnapshot",
    "FileStorage",
    "load_endpoint_map",
    "login",
    "logout",
    "MemoryStorage",
    "Notification",
    "NotificationQueue",
    "product_name",
    "RefreshCoordinator",
    "RemoteGateway",
    "require_auth",
    "Session",
    "SessionResult",
    "SessionStore",
    "Settings",
    "supplier_name",
]
