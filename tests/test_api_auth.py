import pytest
from fastapi.testclient import TestClient

from saveup_api.app.main import create_app
from saveup_api.app.store import MemoryStore

from .conftest import auth_headers


class _ExplodingStore(MemoryStore):
    def _select(self, entity, filters, order_by, limit):
        raise RuntimeError("disk quota exceeded on /var/lib/saveup")


def test_register_login_and_read_profile(client):
    response = client.post(
        "/api/users",
        json={"email": "a@x.com", "username": "a", "name": "A", "password": "pw"},
    )
    assert response.status_code == 201
    user = response.json()
    assert "passwordHash" not in user
    assert "password" not in user

    login = client.post("/api/users/login", json={"email": "a@x.com", "password": "pw"})
    assert login.status_code == 200
    body = login.json()
    assert body["user"]["id"] == user["id"]
    assert "passwordHash" not in body["user"]
    headers = {"Authorization": f"Bearer {body['token']}"}

    profile = client.get(f"/api/users/{user['id']}", headers=headers)
    assert profile.status_code == 200
    assert profile.json() == user

    other = client.get(f"/api/users/{user['id'] + 1}", headers=headers)
    assert other.status_code == 403
    assert other.json()["code"] == "AUTHORIZATION_ERROR"


def test_duplicate_registration_is_rejected(client, register):
    register("asha")

    response = client.post(
        "/api/users",
        json={"email": "asha@example.com", "username": "other", "name": "Other", "password": "pw"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Email already registered"


def test_login_failures(client, register):
    register("asha")

    missing = client.post("/api/users/login", json={"email": "asha@example.com"})
    wrong = client.post("/api/users/login", json={"email": "asha@example.com", "password": "nope"})

    assert missing.status_code == 400
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid credentials", "code": "AUTHENTICATION_ERROR"}


def test_profile_update_changes_password(client, register):
    user, headers = register("asha", password="old")

    response = client.put(f"/api/users/{user['id']}", json={"name": "Asha K", "password": "new"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["name"] == "Asha K"
    assert "passwordHash" not in response.json()
    relogin = client.post("/api/users/login", json={"email": user["email"], "password": "new"})
    assert relogin.status_code == 200


@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/api/users/5/transactions"),
        ("POST", "/api/portfolios"),
        ("PUT", "/api/portfolios/1"),
        ("GET", "/api/no-such-endpoint"),
        ("GET", "/api/achievements/1"),
    ],
)
def test_missing_token_is_rejected_before_store_access(client, store, method, path):
    response = client.request(method, path, json={})

    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_ERROR"
    assert store.calls == 0


def test_invalid_token_is_rejected(client, store):
    response = client.get("/api/users/5/transactions", headers={"Authorization": "Bearer not.a.token"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token. Please login again."
    assert store.calls == 0


def test_expired_token_is_rejected(client):
    response = client.get("/api/users/5/transactions", headers=auth_headers(5, expires_delta=-1))

    assert response.status_code == 401


def test_path_identity_is_enforced(client, store):
    store.create("transactions", {"userId": 5, "type": "roundup", "amount": "4.20"})

    denied = client.get("/api/users/5/transactions", headers=auth_headers(7))
    allowed = client.get("/api/users/5/transactions", headers=auth_headers(5))

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert [tx["amount"] for tx in allowed.json()] == ["4.20"]


def test_non_numeric_path_user_is_a_bad_request(client):
    response = client.get("/api/users/abc/transactions", headers=auth_headers(5))

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_ownership_is_enforced_on_update(client, store):
    portfolio = store.create("portfolios", {"userId": 3, "name": "Growth", "type": "equity"})

    response = client.put(f"/api/portfolios/{portfolio['id']}", json={"name": "Mine now"}, headers=auth_headers(9))

    assert response.status_code == 403
    assert store.get("portfolios", portfolio["id"]) == portfolio


def test_owner_update_is_idempotent(client, store):
    portfolio = store.create("portfolios", {"userId": 3, "name": "Growth", "type": "equity"})
    changes = {"currentValue": "1500.00", "returns": "300.00"}

    first = client.put(f"/api/portfolios/{portfolio['id']}", json=changes, headers=auth_headers(3)).json()
    second = client.put(f"/api/portfolios/{portfolio['id']}", json=changes, headers=auth_headers(3)).json()

    first.pop("updatedAt")
    second.pop("updatedAt")
    assert first == second
    assert second["currentValue"] == "1500.00"


def test_owner_cannot_be_reassigned(client, store):
    portfolio = store.create("portfolios", {"userId": 3, "name": "Growth", "type": "equity"})

    response = client.put(f"/api/portfolios/{portfolio['id']}", json={"userId": 9}, headers=auth_headers(3))

    assert response.status_code == 200
    assert response.json()["userId"] == 3


def test_created_resources_belong_to_the_caller(client):
    response = client.post(
        "/api/transactions",
        json={"userId": 99, "type": "roundup", "amount": "2.30"},
        headers=auth_headers(4),
    )

    assert response.status_code == 201
    assert response.json()["userId"] == 4


@pytest.mark.parametrize(
    "path",
    [
        "/api/achievements",
        "/api/rewards",
        "/api/education/modules",
        "/api/seasonal-challenges",
        "/api/teams",
        "/api/communities",
        "/api/group-goals",
        "/health",
    ],
)
def test_public_endpoints_need_no_token(client, path):
    response = client.get(path)

    assert response.status_code == 200


def test_health_reports_storage(client):
    assert client.get("/health").json() == {"status": "ok", "storage": "memory"}


def test_malformed_json_is_a_bad_request(client):
    response = client.post(
        "/api/transactions",
        content=b"{not json",
        headers={**auth_headers(1), "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_non_object_json_is_a_bad_request(client):
    response = client.post("/api/transactions", json=[1, 2], headers=auth_headers(1))

    assert response.status_code == 400


def test_unknown_endpoint_with_token(client):
    response = client.get("/api/no-such-endpoint", headers=auth_headers(1))

    assert response.status_code == 404
    assert response.json() == {"error": "Endpoint not found", "code": "NOT_FOUND"}


def test_unsupported_method_is_not_found(client):
    response = client.delete("/api/transactions", headers=auth_headers(1))

    assert response.status_code == 404
    assert response.json()["error"] == "Endpoint not found"


def test_missing_resource_is_not_found(client):
    response = client.get("/api/portfolios/4242", headers=auth_headers(1))

    assert response.status_code == 404
    assert response.json() == {"error": "Portfolio not found", "code": "NOT_FOUND"}


def test_unhandled_errors_do_not_leak_details():
    client = TestClient(create_app(store=_ExplodingStore()), raise_server_exceptions=False)

    response = client.get("/api/users/1/transactions", headers=auth_headers(1))

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "code": "INTERNAL_ERROR"}
    assert "quota" not in response.text


def test_cors_preflight_for_allowed_origin(client):
    response = client.options(
        "/api/transactions",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"
    assert "PUT" in response.headers["access-control-allow-methods"]


def test_cors_preflight_for_unknown_origin_succeeds_without_allow_origin(client, store):
    response = client.options(
        "/api/transactions",
        headers={
            "Origin": "https://evil.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers
    assert store.calls == 0


def test_cors_preflight_for_unlisted_header_still_succeeds(client):
    response = client.options(
        "/api/transactions",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Custom",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_plain_options_request_succeeds_without_token(client):
    assert client.options("/api/users/1/transactions").status_code == 200


def test_cors_headers_only_for_allowed_origins(client):
    allowed = client.get("/health", headers={"Origin": "http://localhost:3000"})
    blocked = client.get("/health", headers={"Origin": "https://evil.example"})

    assert allowed.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert "access-control-allow-origin" not in blocked.headers
