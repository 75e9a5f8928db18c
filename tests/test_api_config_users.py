from __future__ import annotations

import pytest
import uvicorn
from fastapi.testclient import TestClient

from conftest import make_config, write_config, write_users
from journal import app_state, main
from journal.config.service import ConfigService
from journal.storage.store import JournalStore, StorageScope


@pytest.fixture
def client(tmp_path, config_dir, monkeypatch) -> TestClient:
    store = JournalStore(tmp_path / "data")
    write_users(store.users_file(), {"u1": {"name": "Alex", "created": "2024-01-01T00:00:00Z"}})
    write_users(store.users_file(StorageScope.tenant("recovery")), {"r1": {"name": "Robin"}})
    monkeypatch.setattr(app_state, "STORE", store)
    monkeypatch.setattr(app_state, "CONFIG_SERVICE", ConfigService(config_dir))
    return TestClient(main.app)


def test_get_config_returns_resolved_document(client):
    resp = client.get("/api/config/social")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["appId"] == "social"
    assert data["ui"]["submitButton"] == "Save Entry"
    assert data["ai"] == {"promptTemplate": "general", "enabled": True}
    assert data["version"] == "1.0.0"


def test_get_config_by_hostname_falls_back_to_default(client):
    resp = client.get("/api/config/unknown.example.com")

    assert resp.status_code == 200
    assert resp.json()["data"]["appId"] == "social"


def test_get_config_validation_failure_is_400_with_details(client, config_dir):
    write_config(config_dir, make_config("broken", comfortLevels=[]))

    resp = client.get("/api/config/broken")

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["details"][0]["field"] == "comfortLevels"


def test_get_config_without_any_tenant_is_404(client, tmp_path, monkeypatch):
    monkeypatch.setattr(app_state, "CONFIG_SERVICE", ConfigService(tmp_path / "none"))

    resp = client.get("/api/config/anything")

    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_list_configs(client, config_dir):
    write_config(config_dir, make_config("addiction-recovery"))

    resp = client.get("/api/config")

    assert resp.json() == {"success": True, "data": ["addiction-recovery", "social"]}


def test_clear_cache_reloads_documents(client, config_dir):
    client.get("/api/config/social")
    write_config(config_dir, make_config("social", appName="Fresh Name"))

    stale = client.get("/api/config/social").json()["data"]["appName"]
    cleared = client.post("/api/config/cache/clear")
    fresh = client.get("/api/config/social").json()["data"]["appName"]

    assert stale == "Social Journal"
    assert cleared.json() == {"success": True, "message": "Configuration cache cleared"}
    assert fresh == "Fresh Name"


def test_config_health_check(client, tmp_path, monkeypatch):
    healthy = client.get("/api/config/health/check")
    monkeypatch.setattr(app_state, "CONFIG_SERVICE", ConfigService(tmp_path / "none"))
    unhealthy = client.get("/api/config/health/check")

    assert healthy.status_code == 200
    assert healthy.json()["success"] is True
    assert unhealthy.status_code == 503
    assert unhealthy.json()["error"] == "Configuration service is unhealthy"


def test_get_user(client):
    resp = client.get("/api/users/u1")

    assert resp.json() == {
        "success": True,
        "data": {"userKey": "u1", "name": "Alex", "created": "2024-01-01T00:00:00Z"},
    }


def test_get_tenant_user_requires_app_id(client):
    assert client.get("/api/users/r1").status_code == 404
    assert client.get("/api/users/r1", params={"appId": "recovery"}).json()["data"]["name"] == "Robin"


def test_list_users(client):
    resp = client.get("/api/users")

    assert resp.json()["data"] == {"u1": {"name": "Alex", "created": "2024-01-01T00:00:00Z"}}


def test_health_and_unknown_route(client):
    health = client.get("/api/health")
    missing = client.get("/api/nope")

    assert health.json()["success"] is True
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Endpoint not found"}


def test_unexpected_errors_are_generic_500(tmp_path, monkeypatch):
    class ExplodingStore(JournalStore):
        def find_user(self, user_key, scope):
            raise RuntimeError("disk on fire")

    monkeypatch.setattr(app_state, "STORE", ExplodingStore(tmp_path))
    client = TestClient(main.app, raise_server_exceptions=False)

    resp = client.get("/api/users/u1")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Internal server error"}


def test_run_serves_app_on_configured_port(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
    monkeypatch.setenv("JOURNAL_HOST", "127.0.0.1")
    monkeypatch.setenv("JOURNAL_PORT", "4100")

    main.run()

    assert calls == [("journal.main:app", {"host": "127.0.0.1", "port": 4100})]
