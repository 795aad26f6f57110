"""
Contract tests for the authentication API.

Tests verify the API contract for authentication endpoints:
- Request validation and HTTP status codes
- Response bodies (camelCase keys, ``_id``, no password hash)
- Session cookie handling
- Error responses, including the fallback admin while MongoDB is down
"""

import pytest

from plannora.database import DatabaseUnavailableError
from plannora.repositories.user_repo import UserRepository
from tests.helpers import PASSWORD, PLANNER_PROFILE, auth_headers, register


async def _database_down(*args, **kwargs):
    raise DatabaseUnavailableError("Database connection failed")


# ============================================================================
# REGISTER
# ============================================================================


class TestRegister:
    """Test POST /api/auth/register"""

    def test_register_client(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Casey", "email": "Casey@Example.com", "password": PASSWORD},
        )

        assert response.status_code == 201
        body = response.json()
        assert set(body) >= {"_id", "name", "email", "accountType", "token", "fallback"}
        assert body["email"] == "casey@example.com"
        assert body["accountType"] == "client"
        assert body["fallback"] is False
        assert "password" not in body

        cookie = response.headers["set-cookie"]
        assert cookie.startswith("token=")
        assert "httponly" in cookie.lower()

    def test_register_planner(self, client):
        body = register(
            client, "pat@example.com", account_type="planner", planner_profile=PLANNER_PROFILE
        )

        profile = body["plannerProfile"]
        assert profile["businessName"] == "Bright Day Events"
        assert profile["isAvailable"] is True
        assert profile["reviewCount"] == 0

    def test_planner_requires_profile(self, client):
        response = client.post(
            "/api/auth/register",
            json={
                "name": "Pat",
                "email": "pat@example.com",
                "password": PASSWORD,
                "accountType": "planner",
            },
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Planner profile")

    def test_duplicate_email(self, client):
        register(client, "casey@example.com")

        response = client.post(
            "/api/auth/register",
            json={"name": "Again", "email": "casey@example.com", "password": PASSWORD},
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "User already exists"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "A", "email": "not-an-email", "password": PASSWORD},
            {"name": "A", "email": "a@example.com", "password": "123"},
            {"name": "", "email": "a@example.com", "password": PASSWORD},
            {"name": "A", "email": "a@example.com", "password": PASSWORD, "accountType": "admin"},
            {"email": "a@example.com", "password": PASSWORD},
        ],
    )
    def test_validation_errors(self, client, payload):
        response = client.post("/api/auth/register", json=payload)

        assert response.status_code == 422
        assert isinstance(response.json()["detail"], list)


# ============================================================================
# LOGIN / LOGOUT
# ============================================================================


class TestLogin:
    """Test POST /api/auth/login and /api/auth/logout"""

    def test_login_success(self, client):
        register(client, "casey@example.com", name="Casey")

        response = client.post(
            "/api/auth/login", json={"email": "CASEY@example.com", "password": PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Casey"
        assert body["token"]
        assert "password" not in body
        assert "token=" in response.headers["set-cookie"]

    def test_wrong_password(self, client):
        register(client, "casey@example.com")

        response = client.post(
            "/api/auth/login", json={"email": "casey@example.com", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid credentials"}

    def test_unknown_user(self, client):
        response = client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": PASSWORD}
        )
        assert response.status_code == 401

    def test_missing_password(self, client):
        response = client.post("/api/auth/login", json={"email": "casey@example.com"})
        assert response.status_code == 422

    def test_cookie_session_and_logout(self, client):
        register(client, "casey@example.com")
        client.post("/api/auth/login", json={"email": "casey@example.com", "password": PASSWORD})

        assert client.get("/api/auth/profile").status_code == 200

        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}
        assert client.get("/api/auth/profile").status_code == 401


class TestFallbackAdmin:
    """Test logins while MongoDB is unreachable"""

    def test_fallback_admin_login(self, client, monkeypatch):
        monkeypatch.setattr(UserRepository, "find_by_email", _database_down)

        response = client.post(
            "/api/auth/login",
            json={"email": "admin@example.com", "password": "fallback-secret"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["_id"] == "admin-id"
        assert body["accountType"] == "admin"
        assert body["fallback"] is True

        client.cookies.clear()
        profile = client.get("/api/auth/profile", headers=auth_headers(body["token"]))
        assert profile.status_code == 200
        assert profile.json()["name"] == "Admin User"

        update = client.put(
            "/api/auth/profile", json={"name": "Root"}, headers=auth_headers(body["token"])
        )
        assert update.status_code == 400

    def test_regular_login_reports_database_failure(self, client, monkeypatch):
        monkeypatch.setattr(UserRepository, "find_by_email", _database_down)

        response = client.post(
            "/api/auth/login", json={"email": "casey@example.com", "password": PASSWORD}
        )

        assert response.status_code == 503
        assert response.json() == {"detail": "Database connection failed"}


# ============================================================================
# PROFILE
# ============================================================================


class TestProfile:
    """Test GET/PUT /api/auth/profile"""

    def test_requires_token(self, client):
        response = client.get("/api/auth/profile")

        assert response.status_code == 401
        assert response.json() == {"detail": "Authentication required"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_rejects_bad_token(self, client):
        response = client.get("/api/auth/profile", headers=auth_headers("garbage"))

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid token"}

    def test_get_profile(self, client, planner_account):
        response = client.get("/api/auth/profile", headers=auth_headers(planner_account["token"]))

        assert response.status_code == 200
        body = response.json()
        assert body["_id"] == planner_account["_id"]
        assert body["plannerProfile"]["businessName"] == "Bright Day Events"
        assert "token" not in body

    def test_update_planner_profile(self, client, planner_account):
        response = client.put(
            "/api/auth/profile",
            json={"name": "Pat P.", "plannerProfile": {"pricing": "From $3,000", "isAvailable": False}},
            headers=auth_headers(planner_account["token"]),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Pat P."
        assert body["plannerProfile"]["pricing"] == "From $3,000"
        assert body["plannerProfile"]["isAvailable"] is False
        assert body["plannerProfile"]["businessName"] == "Bright Day Events"

    def test_client_planner_profile_ignored(self, client, client_account):
        response = client.put(
            "/api/auth/profile",
            json={"plannerProfile": {"businessName": "Sneaky"}},
            headers=auth_headers(client_account["token"]),
        )

        assert response.status_code == 200
        assert response.json()["plannerProfile"] is None
