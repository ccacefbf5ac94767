"""
Unit tests for the session & cache store and its storage backends.
"""
import json

from stockroom_sync.models import DatasetSnapshot, Session
from stockroom_sync.storage import (
    ALL_KEYS,
    KEY_AUTH_FLAG,
    KEY_SNAPSHOT,
    KEY_TOKEN,
    KEY_USER,
    FileStorage,
    MemoryStorage,
    SessionStore,
    origin_slug,
)


def test_session_round_trip(store):
    store.save_session(Session(token="abc", user={"name": "Maria", "role": "admin"}))

    session = store.get_session()
    assert session == Session(token="abc", user={"name": "Maria", "role": "admin"})
    assert store.get_token() == "abc"
    assert store.is_authenticated()


def test_no_session_without_flag():
    store = SessionStore(MemoryStorage({KEY_TOKEN: "abc"}))

    assert store.get_session() is None
    assert store.get_token() is None


def test_snapshot_persisted_with_partition_keys(store):
    store.save_snapshot(DatasetSnapshot(products=[{"id": "p1"}], quote_items=[{"id": "qi1"}]))

    raw = json.loads(store.storage.get(KEY_SNAPSHOT))
    assert raw["products"] == [{"id": "p1"}]
    assert raw["quoteItems"] == [{"id": "qi1"}]
    assert store.get_snapshot().quote_items == [{"id": "qi1"}]


def test_clear_all_removes_everything(logged_in_store, old_snapshot):
    logged_in_store.clear_all()

    assert logged_in_store.get_session() is None
    assert logged_in_store.get_snapshot() is None
    assert all(logged_in_store.storage.get(key) is None for key in ALL_KEYS)


def test_corrupted_snapshot_clears_session(logged_in_store):
    logged_in_store.storage.set(KEY_SNAPSHOT, "{not json")

    assert logged_in_store.get_snapshot() is None
    assert logged_in_store.get_session() is None
    assert logged_in_store.storage.get(KEY_TOKEN) is None


def test_snapshot_of_wrong_shape_is_corruption(logged_in_store):
    logged_in_store.storage.set(KEY_SNAPSHOT, "[1, 2, 3]")

    assert logged_in_store.get_snapshot() is None
    assert logged_in_store.get_session() is None


def test_corrupted_user_clears_snapshot(logged_in_store, old_snapshot):
    logged_in_store.storage.set(KEY_USER, "{broken")

    assert logged_in_store.get_session() is None
    assert logged_in_store.storage.get(KEY_SNAPSHOT) is None
    assert logged_in_store.storage.get(KEY_AUTH_FLAG) is None


def test_file_storage_persists_across_instances(tmp_path):
    first = SessionStore(FileStorage(tmp_path, "https://hooks.example.test/webhook"))
    first.save_session(Session(token="abc", user="maria"))
    first.save_snapshot(DatasetSnapshot(suppliers=[{"id": "s1", "name": "Padaria"}]))

    second = SessionStore(FileStorage(tmp_path, "https://hooks.example.test/other-path"))
    assert second.get_token() == "abc"
    assert second.get_snapshot().suppliers == [{"id": "s1", "name": "Padaria"}]
    assert [p.name for p in tmp_path.iterdir()] == ["https_hooks.example.test.json"]


def test_file_storage_is_origin_scoped(tmp_path):
    SessionStore(FileStorage(tmp_path, "https://a.example.test")).save_session(Session(token="a"))

    assert SessionStore(FileStorage(tmp_path, "https://b.example.test")).get_session() is None


def test_unreadable_file_recovers_by_clearing(tmp_path):
    storage = FileStorage(tmp_path, "https://hooks.example.test")
    storage.path.write_text("garbage{", encoding="utf-8")
    store = SessionStore(storage)

    assert store.get_snapshot() is None
    assert json.loads(storage.path.read_text(encoding="utf-8")) == {}


def test_origin_slug():
    assert origin_slug("https://work.produ-cloud.com/webhook") == "https_work.produ-cloud.com"
    assert origin_slug("http://localhost:5678/hooks") == "http_localhost_5678"
