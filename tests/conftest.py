import pytest
from fastapi.testclient import TestClient

from saveup_api.app.core.security import create_access_token
from saveup_api.app.main import create_app
from saveup_api.app.schemas.auth import Principal
from saveup_api.app.store import MemoryStore, SQLiteStore


class CountingStore(MemoryStore):
    """Memory store that counts every storage access."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def _insert(self, entity, values):
        self.calls += 1
        return super()._insert(entity, values)

    def _select(self, entity, filters, order_by, limit):
        self.calls += 1
        return super()._select(entity, filters, order_by, limit)

    def _update_row(self, entity, record_id, values):
        self.calls += 1
        return super()._update_row(entity, record_id, values)


def token_for(user_id, email=None, username=None, **kwargs):
    principal = Principal(
        user_id=user_id,
        email=email or f"user{user_id}@example.com",
        username=username or f"user{user_id}",
    )
    return create_access_token(principal, **kwargs)


def auth_headers(user_id, **kwargs):
    return {"Authorization": f"Bearer {token_for(user_id, **kwargs)}"}


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture
def sqlite_store(tmp_path):
    sqlite = SQLiteStore(str(tmp_path / "saveup-test.db"))
    sqlite.initialize()
    assert sqlite.available
    return sqlite


@pytest.fixture
def app(store):
    return create_app(store=store)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user through the API and return ``(user, headers)``."""

    def _register(name="asha", password="pw"):
        response = client.post(
            "/api/users",
            json={"email": f"{name}@example.com", "username": name, "name": name.title(), "password": password},
        )
        assert response.status_code == 201, response.text
        user = response.json()
        login = client.post("/api/users/login", json={"email": user["email"], "password": password})
        assert login.status_code == 200, login.text
        return user, {"Authorization": f"Bearer {login.json()['token']}"}

    return _register
