from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from taskflow.core.config import settings
from taskflow.db import session as db_session
from taskflow.main import app
from taskflow.services.task_repository import TaskRepository


def test_root_lists_endpoints(client):
    res = client.get("/")

    assert res.status_code == 200
    body = res.json()
    assert body["error"] is False
    assert body["data"]["version"] == settings.app_version
    assert body["data"]["endpoints"]["tasks"] == "/api/tasks"


def test_health(client):
    res = client.get("/api/health")

    assert res.status_code == 200
    assert res.json()["message"] == "server is running"
    assert res.json()["data"]["status"] == "OK"
    assert res.json()["data"]["timestamp"]


def test_health_db(client):
    res = client.get("/api/health/db")

    assert res.status_code == 200
    assert res.json()["data"] == {"status": "OK"}


def test_health_db_failure(client, monkeypatch):
    class _BrokenEngine:
        def connect(self):
            raise RuntimeError("connection refused")

    monkeypatch.setattr(db_session, "engine", _BrokenEngine())

    res = client.get("/api/health/db")

    assert res.status_code == 500
    assert res.json() == {"error": True, "message": "database connection failed"}


def test_unknown_route_envelope(client):
    res = client.get("/api/nothing-here")

    assert res.status_code == 404
    assert res.json() == {"error": True, "message": "route not found: /api/nothing-here"}


def test_malformed_json_is_400(client, auth_headers):
    headers = dict(auth_headers, **{"Content-Type": "application/json"})

    res = client.post("/api/tasks", content="{not json", headers=headers)

    assert res.status_code == 400
    assert res.json()["error"] is True


def test_auth_error_carries_bearer_challenge(client):
    res = client.get("/api/auth/me")

    assert res.status_code == 401
    assert res.headers["www-authenticate"] == "Bearer"


def test_integrity_error_is_duplicate_data(client, auth_headers, monkeypatch):
    def _boom(self, owner_id, fields):
        raise IntegrityError("INSERT INTO task ...", {}, Exception("unique"))

    monkeypatch.setattr(TaskRepository, "create", _boom)

    res = client.post("/api/tasks", json={"title": "x"}, headers=auth_headers)

    assert res.status_code == 400
    assert res.json() == {"error": True, "message": "duplicate data"}


def _break_stats(monkeypatch):
    def _boom(self, owner_id):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(TaskRepository, "stats", _boom)


def test_unexpected_error_hides_stack_outside_dev(auth_headers, monkeypatch):
    _break_stats(monkeypatch)
    client = TestClient(app, raise_server_exceptions=False)

    res = client.get("/api/tasks/stats", headers=auth_headers)

    assert res.status_code == 500
    assert res.json() == {"error": True, "message": "internal server error"}


def test_unexpected_error_includes_stack_in_dev(auth_headers, monkeypatch):
    _break_stats(monkeypatch)
    monkeypatch.setattr(settings, "env", "dev")
    client = TestClient(app, raise_server_exceptions=False)

    res = client.get("/api/tasks/stats", headers=auth_headers)

    assert res.status_code == 500
    body = res.json()
    assert body["message"] == "internal server error"
    assert "kaboom" in body["stack"]
