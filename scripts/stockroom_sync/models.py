"""
models.py – Shared data-model dataclasses used by the sync layer.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Partition attribute name → key used in the persisted ``appData`` JSON.
PARTITION_KEYS: dict[str, str] = {
    "products": "products",
    "suppliers": "suppliers",
    "product_suppliers": "productSuppliers",
    "quotes": "quotes",
    "quote_items": "quoteItems",
    "stock_history": "stockHistory",
}

# Partition attribute name → endpoint id that loads it.
PARTITION_ENDPOINTS: dict[str, str] = {
    "products": "load-products",
    "suppliers": "load-suppliers",
    "product_suppliers": "load-product-suppliers",
    "quotes": "load-quotes",
    "quote_items": "load-quote-items",
    "stock_history": "load-stock-history",
}


@dataclass
class DatasetSnapshot:
    """The complete application dataset; always replaced as one unit."""

    products: list = field(default_factory=list)
    suppliers: list = field(default_factory=list)
    product_suppliers: list = field(default_factory=list)
    quotes: list = field(default_factory=list)
    quote_items: list = field(default_factory=list)
    stock_history: list = field(default_factory=list)

    def partition(self, name: str) -> list:
        return getattr(self, name)

    def to_dict(self) -> dict[str, list]:
        return {key: list(getattr(self, attr)) for attr, key in PARTITION_KEYS.items()}

    @classmethod
    def from_dict(cls, raw: dict) -> "DatasetSnapshot":
        """Build a snapshot from the persisted form.

        Missing partitions become empty lists; a partition that is present but
        not a list is kept as-is so lookups can fall back instead of guessing.
        """
        kwargs = {}
        for attr, key in PARTITION_KEYS.items():
            value = raw.get(key)
            kwargs[attr] = [] if value is None else value
        return cls(**kwargs)


@dataclass(frozen=True)
class Session:
    """An authenticated session: opaque bearer token plus the active user."""

    token: str
    user: Any = None


@dataclass(frozen=True)
class SessionResult:
    """What a successful ``authenticate`` call returns."""

    token: str
    user: Any = None
    raw: dict = field(default_factory=dict, compare=False)

    def to_session(self) -> Session:
        return Session(token=self.token, user=self.user)


@dataclass(slots=True)
class Notification:
    """One transient feedback message."""

    kind: str
    message: str
    created_at: float
    expires_at: float
    label: str = ""
    style: str = ""
    id: int = 0

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class PendingAction:
    """The prompt and operation held by the action executor for one cycle."""

    title: str
    message: str
    operation: Any  # zero-argument callable returning an awaitable
    success_message: Optional[str] = None
    last_error: Optional[BaseException] = None
