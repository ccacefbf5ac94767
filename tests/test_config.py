"""
Unit tests for settings and the endpoint map.
"""
import pytest

from stockroom_sync.config import DEFAULT_BASE_URL, REQUIRED_ENDPOINTS, Settings, load_endpoint_map


def test_default_map_has_every_endpoint():
    endpoints = load_endpoint_map()

    assert set(REQUIRED_ENDPOINTS) <= set(endpoints)
    assert endpoints["load-products"] == "curral-burguer_carrega_produtos"


def test_custom_map(tmp_path):
    path = tmp_path / "endpoints.yaml"
    path.write_text("\n".join(f"{name}: hooks/{name}" for name in REQUIRED_ENDPOINTS))

    assert load_endpoint_map(str(path))["login"] == "hooks/login"


def test_missing_file_exits(tmp_path):
    with pytest.raises(SystemExit, match="not found"):
        load_endpoint_map(str(tmp_path / "nope.yaml"))


def test_missing_endpoint_exits(tmp_path):
    path = tmp_path / "endpoints.yaml"
    path.write_text("login: hooks/login\n")

    with pytest.raises(SystemExit, match="missing endpoints"):
        load_endpoint_map(str(path))


def test_non_string_entry_exits(tmp_path):
    path = tmp_path / "endpoints.yaml"
    path.write_text("login: [a, b]\n")

    with pytest.raises(SystemExit, match="invalid entry"):
        load_endpoint_map(str(path))


def test_settings_from_env(tmp_path):
    settings = Settings.from_env({
        "STOCKROOM_BASE_URL": "http://localhost:5678/webhook/",
        "STOCKROOM_DATA_DIR": str(tmp_path),
        "STOCKROOM_TIMEOUT": "7.5",
    })

    assert settings.base_url == "http://localhost:5678/webhook"
    assert settings.data_dir == tmp_path
    assert settings.timeout == 7.5
    assert settings.notification_ttl == 5


def test_settings_defaults():
    settings = Settings.from_env({})

    assert settings.base_url == DEFAULT_BASE_URL
    assert "login" in settings.endpoints


def test_bad_timeout_exits():
    with pytest.raises(SystemExit):
        Settings.from_env({"STOCKROOM_TIMEOUT": "soon"})
