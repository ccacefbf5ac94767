"""
Pytest fixtures for stockroom_sync tests.

No network: the gateway is handed a FakeSession that answers POSTs from a
route table keyed by endpoint id.
"""
import json
import threading

import pytest
import requests

from stockroom_sync.config import load_endpoint_map
from stockroom_sync.gateway import RemoteGateway
from stockroom_sync.models import DatasetSnapshot, Session
from stockroom_sync.refresh import RefreshCoordinator
from stockroom_sync.storage import MemoryStorage, SessionStore

BASE_URL = "https://hooks.example.test/webhook"


class FakeResponse:
    def __init__(self, status_code=200, text="", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason


def ok_json(body, status_code=200):
    return FakeResponse(status_code, json.dumps(body))


class FakeSession:
    """Stands in for requests.Session; records every POST."""

    def __init__(self, endpoints):
        self.headers = {}
        self.endpoints = endpoints
        self.routes = {}
        self.calls = []
        self._lock = threading.Lock()

    def route(self, endpoint_id, response):
        """*response* is a FakeResponse, an exception instance, or a callable(payload)."""
        self.routes[f"{BASE_URL}/{self.endpoints[endpoint_id]}"] = response

    def payloads_for(self, endpoint_id):
        url = f"{BASE_URL}/{self.endpoints[endpoint_id]}"
        return [payload for called, payload in self.calls if called == url]

    def post(self, url, json=None, timeout=None):
        with self._lock:
            self.calls.append((url, json))
        response = self.routes.get(url, FakeResponse(404, "", "Not Found"))
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(json)
        return response


@pytest.fixture
def endpoints():
    return load_endpoint_map()


@pytest.fixture
def fake_session(endpoints):
    return FakeSession(endpoints)


@pytest.fixture
def store():
    return SessionStore(MemoryStorage())


@pytest.fixture
def logged_in_store(store):
    store.save_session(Session(token="tok-123", user={"name": "Maria"}))
    return store


@pytest.fixture
def gateway(endpoints, fake_session, logged_in_store):
    return RemoteGateway(
        BASE_URL, endpoints, token_source=logged_in_store.get_token, session=fake_session, timeout=5
    )


@pytest.fixture
def refresher(gateway, logged_in_store):
    return RefreshCoordinator(gateway, logged_in_store)


SAMPLE_DATA = {
    "load-products": [{"id": "p1", "name": "Burger bun"}, {"id": "p2", "name": "Cheddar"}],
    "load-suppliers": [{"id": "s1", "name": "Padaria Central"}],
    "load-product-suppliers": [{"id": "ps1", "product_id": "p1", "supplier_id": "s1"}],
    "load-quotes": [{"id": "q1", "status": "aberta"}],
    "load-quote-items": [
        {"id": "qi1", "quote_id": "q1", "product_id": "p1", "supplier_id": "s1", "price": 2.5, "status": "pendente"}
    ],
    "load-stock-history": [{"id": "h1", "product_id": "p1", "quantity": 40}],
}


@pytest.fixture
def route_dataset(fake_session):
    """Route every partition read to SAMPLE_DATA (object-with-data shape for quotes)."""
    def _route(data=None):
        data = data or SAMPLE_DATA
        for endpoint_id, records in data.items():
            if endpoint_id == "load-quotes":
                fake_session.route(endpoint_id, ok_json({"data": records}))
            else:
                fake_session.route(endpoint_id, ok_json(records))
    return _route


@pytest.fixture
def old_snapshot(logged_in_store):
    snapshot = DatasetSnapshot(products=[{"id": "old", "name": "Old product"}])
    logged_in_store.save_snapshot(snapshot)
    return snapshot


@pytest.fixture
def connection_error():
    return requests.ConnectionError("Connection refused")
