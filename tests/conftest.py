from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# taskflow 모듈 import 전에 테스트 환경 고정 (in-memory sqlite, 빠른 bcrypt)
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["BCRYPT_ROUNDS"] = "4"

from fastapi.testclient import TestClient  # noqa: E402

from taskflow.db.session import create_all_tables, drop_all_tables, session_scope  # noqa: E402
from taskflow.main import app  # noqa: E402
from taskflow.services import auth_service  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_db():
    create_all_tables()
    yield
    drop_all_tables()


@pytest.fixture
def db():
    with session_scope() as s:
        yield s


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register through the API and return the response's ``data``."""

    def _register(email: str = "a@x.com", password: str = "secret1", name: str = "Alice") -> dict:
        res = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _register


@pytest.fixture
def auth_headers(register):
    data = register()
    return {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def other_headers(register):
    data = register(email="b@x.com", name="Bob")
    return {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def owner(db):
    user, _ = auth_service.register(db, name="Owner", email="owner@x.com", password="secret1")
    return user
