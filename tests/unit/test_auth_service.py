"""
Unit tests for the authentication service.

Tests cover:
- bcrypt password hashing and verification
- JWT creation, decoding, expiry and tampering
- Registration rules for client and planner accounts
- Login, including the fallback admin while the database is down
- Resolving tokens into the current user
"""

from datetime import timedelta

import pytest
from bson import ObjectId
from jose import jwt

from plannora.config import Settings
from plannora.database import DatabaseUnavailableError
from plannora.models.auth import AccountType, LoginRequest, RegisterRequest
from plannora.repositories.user_repo import UserRepository
from plannora.services.auth_service import (
    FALLBACK_ADMIN_ID,
    AuthenticationError,
    AuthService,
)


@pytest.fixture
def auth_service(mongo_db):
    return AuthService(UserRepository(mongo_db))


def _planner_request(email: str = "planner@example.com", with_profile: bool = True) -> RegisterRequest:
    payload = {
        "name": "Pat Planner",
        "email": email,
        "password": "secret123",
        "accountType": "planner",
    }
    if with_profile:
        payload["plannerProfile"] = {
            "businessName": "Pat Plans",
            "services": ["Weddings"],
            "experience": "4 years",
        }
    return RegisterRequest.model_validate(payload)


async def _raise_unavailable(*args, **kwargs):
    raise DatabaseUnavailableError("Database connection failed")


# ============================================================================
# PASSWORDS
# ============================================================================


class TestPasswordHashing:
    """Test bcrypt hashing"""

    def test_hash_and_verify(self, auth_service):
        hashed = auth_service.hash_password("secret123")

        assert hashed != "secret123"
        assert hashed.startswith("$2")
        assert auth_service.verify_password("secret123", hashed) is True

    def test_wrong_password(self, auth_service):
        hashed = auth_service.hash_password("secret123")
        assert auth_service.verify_password("secret124", hashed) is False

    def test_missing_hash(self, auth_service):
        assert auth_service.verify_password("secret123", None) is False

    def test_malformed_hash(self, auth_service):
        assert auth_service.verify_password("secret123", "not-a-bcrypt-hash") is False


# ============================================================================
# TOKENS
# ============================================================================


class TestTokens:
    """Test JWT creation and validation"""

    def test_round_trip(self, auth_service):
        user_id = str(ObjectId())
        token = auth_service.create_access_token(user_id, "a@example.com", "planner")

        payload = auth_service.decode_token(token)

        assert payload.sub == user_id
        assert payload.email == "a@example.com"
        assert payload.account_type == "planner"
        assert payload.exp - payload.iat == 30 * 24 * 60 * 60

    def test_claim_names(self, auth_service):
        token = auth_service.create_access_token(str(ObjectId()), "a@example.com", "client")

        claims = jwt.get_unverified_claims(token)

        assert set(claims) == {"sub", "email", "accountType", "iat", "exp"}
        assert claims["accountType"] == "client"

    def test_expired_token(self, auth_service):
        token = auth_service.create_access_token(
            str(ObjectId()), "a@example.com", "client", expires_delta=timedelta(seconds=-10)
        )

        with pytest.raises(AuthenticationError) as exc_info:
            auth_service.decode_token(token)
        assert exc_info.value.detail == "Token expired"

    def test_garbage_token(self, auth_service):
        with pytest.raises(AuthenticationError) as exc_info:
            auth_service.decode_token("not.a.token")
        assert exc_info.value.detail == "Invalid token"

    def test_wrong_secret(self, auth_service):
        token = jwt.encode(
            {"sub": "x", "email": "a@example.com", "exp": 9999999999, "iat": 0},
            "another-secret-key-that-is-long-enough-000",
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError) as exc_info:
            auth_service.decode_token(token)
        assert exc_info.value.detail == "Invalid token"

    def test_missing_claims(self, auth_service):
        token = jwt.encode(
            {"sub": "x", "exp": 9999999999, "iat": 0},
            auth_service.settings.jwt_secret_key,
            algorithm=auth_service.settings.jwt_algorithm,
        )

        with pytest.raises(AuthenticationError) as exc_info:
            auth_service.decode_token(token)
        assert exc_info.value.detail == "Invalid token"


# ============================================================================
# REGISTER / LOGIN
# ============================================================================


class TestRegister:
    """Test account registration"""

    @pytest.mark.asyncio
    async def test_register_client(self, auth_service):
        result = await auth_service.register(
            RegisterRequest(name="Casey", email="casey@example.com", password="secret123")
        )

        assert result.fallback is False
        assert "password" not in result.user
        assert result.user["accountType"] == "client"
        assert "plannerProfile" not in result.user
        assert auth_service.decode_token(result.token).sub == str(result.user["_id"])

    @pytest.mark.asyncio
    async def test_register_planner_gets_profile_defaults(self, auth_service):
        result = await auth_service.register(_planner_request())

        profile = result.user["plannerProfile"]
        assert profile["businessName"] == "Pat Plans"
        assert profile["isAvailable"] is True
        assert profile["rating"] == 0
        assert profile["portfolio"] == []

    @pytest.mark.asyncio
    async def test_planner_without_profile_rejected(self, auth_service):
        with pytest.raises(ValueError, match="Planner profile"):
            await auth_service.register(_planner_request(with_profile=False))

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, auth_service):
        request = RegisterRequest(name="Casey", email="casey@example.com", password="secret123")
        await auth_service.register(request)

        with pytest.raises(ValueError, match="User already exists"):
            await auth_service.register(request)


class TestLogin:
    """Test credential checks"""

    @pytest.mark.asyncio
    async def test_login_success(self, auth_service):
        await auth_service.register(
            RegisterRequest(name="Casey", email="casey@example.com", password="secret123")
        )

        result = await auth_service.login(LoginRequest(email="Casey@example.com", password="secret123"))

        assert result is not None
        assert result.user["email"] == "casey@example.com"
        assert "password" not in result.user

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service):
        await auth_service.register(
            RegisterRequest(name="Casey", email="casey@example.com", password="secret123")
        )

        assert await auth_service.login(LoginRequest(email="casey@example.com", password="nope")) is None

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service):
        assert await auth_service.login(LoginRequest(email="ghost@example.com", password="x")) is None

    @pytest.mark.asyncio
    async def test_fallback_admin_when_database_down(self, auth_service, monkeypatch):
        monkeypatch.setattr(auth_service.user_repo, "find_by_email", _raise_unavailable)

        result = await auth_service.login(
            LoginRequest(email="admin@example.com", password="fallback-secret")
        )

        assert result.fallback is True
        assert result.user["_id"] == FALLBACK_ADMIN_ID
        assert result.user["accountType"] == "admin"
        assert auth_service.decode_token(result.token).sub == FALLBACK_ADMIN_ID

    @pytest.mark.asyncio
    async def test_other_logins_fail_when_database_down(self, auth_service, monkeypatch):
        monkeypatch.setattr(auth_service.user_repo, "find_by_email", _raise_unavailable)

        with pytest.raises(DatabaseUnavailableError):
            await auth_service.login(LoginRequest(email="admin@example.com", password="wrong"))

    @pytest.mark.asyncio
    async def test_fallback_disabled_without_password(self, auth_service, monkeypatch):
        auth_service.settings = Settings(fallback_admin_password=None)
        monkeypatch.setattr(auth_service.user_repo, "find_by_email", _raise_unavailable)

        with pytest.raises(DatabaseUnavailableError):
            await auth_service.login(
                LoginRequest(email="admin@example.com", password="fallback-secret")
            )


# ============================================================================
# CURRENT USER
# ============================================================================


class TestGetCurrentUser:
    """Test token to principal resolution"""

    @pytest.mark.asyncio
    async def test_resolves_registered_user(self, auth_service):
        result = await auth_service.register(_planner_request())

        user = await auth_service.get_current_user(result.token)

        assert user.id == str(result.user["_id"])
        assert user.account_type == AccountType.PLANNER
        assert user.planner_profile["businessName"] == "Pat Plans"
        assert user.is_fallback is False

    @pytest.mark.asyncio
    async def test_deleted_user(self, auth_service, mongo_db):
        result = await auth_service.register(_planner_request())
        mongo_db.users.delete_many({})

        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.get_current_user(result.token)
        assert exc_info.value.detail == "User not found"

    @pytest.mark.asyncio
    async def test_non_object_id_subject(self, auth_service):
        token = auth_service.create_access_token("someone", "a@example.com", "client")

        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.get_current_user(token)
        assert exc_info.value.detail == "Invalid token"

    @pytest.mark.asyncio
    async def test_fallback_admin_token(self, auth_service):
        token = auth_service.create_access_token(FALLBACK_ADMIN_ID, "admin@example.com", "admin")

        user = await auth_service.get_current_user(token)

        assert user.is_fallback is True
        assert user.name == "Admin User"
        assert user.is_admin is True

    @pytest.mark.asyncio
    async def test_fallback_admin_token_rejected_when_disabled(self, auth_service):
        token = auth_service.create_access_token(FALLBACK_ADMIN_ID, "admin@example.com", "admin")
        auth_service.settings = Settings(fallback_admin_password=None)

        with pytest.raises(AuthenticationError):
            await auth_service.get_current_user(token)
