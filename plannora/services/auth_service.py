"""
Authentication service for user accounts and JWT session tokens.

Provides:
- Password hashing and verification (bcrypt)
- JWT token creation and validation (python-jose)
- Registration and login, including the fallback admin login used while
  the database is unreachable
- Resolution of a token into the authenticated principal
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import structlog
from bson import ObjectId
from jose import ExpiredSignatureError, JWTError, jwt
from starlette.concurrency import run_in_threadpool

from plannora.config import get_settings
from plannora.database import DatabaseUnavailableError
from plannora.models.auth import (
    AccountType,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenPayload,
)
from plannora.repositories.user_repo import UserRepository

logger = structlog.get_logger(__name__)

FALLBACK_ADMIN_ID = "admin-id"


class AuthenticationError(Exception):
    """Raised when a token cannot be turned into a user."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


@dataclass
class AuthResult:
    """Outcome of a successful register or login."""

    user: Dict[str, Any]
    token: str
    fallback: bool = False


class AuthService:
    """Service for authentication operations."""

    def __init__(self, user_repo: UserRepository):
        """
        Initialize auth service.

        Args:
            user_repo: User repository
        """
        self.user_repo = user_repo
        self.settings = get_settings()

    # ========================================================================
    # Passwords
    # ========================================================================

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password
        """
        salt = bcrypt.gensalt(rounds=self.settings.password_bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Stored bcrypt hash

        Returns:
            True if password matches, False otherwise
        """
        if not hashed_password:
            return False
        try:
            return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.error("password_verify_failed", error=str(e))
            return False

    # ========================================================================
    # Tokens
    # ========================================================================

    def create_access_token(
        self,
        user_id: str,
        email: str,
        account_type: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a JWT session token.

        Args:
            user_id: User ID
            email: User email
            account_type: client, planner or admin
            expires_delta: Custom lifetime (defaults to the configured days)

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(days=self.settings.jwt_expire_days)

        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "accountType": account_type,
            "exp": int((now + expires_delta).timestamp()),
            "iat": int(now.timestamp()),
        }

        token = jwt.encode(payload, self.settings.jwt_secret_key, algorithm=self.settings.jwt_algorithm)
        logger.info(
            "access_token_created",
            user_id=str(user_id),
            expires_in=expires_delta.total_seconds(),
        )
        return token

    def decode_token(self, token: str) -> TokenPayload:
        """
        Decode and validate a JWT token.

        Args:
            token: JWT token string

        Returns:
            Token payload

        Raises:
            AuthenticationError: "Token expired" or "Invalid token"
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
            )
        except ExpiredSignatureError as e:
            logger.info("token_expired")
            raise AuthenticationError("Token expired") from e
        except JWTError as e:
            logger.warning("token_decode_failed", error=str(e))
            raise AuthenticationError("Invalid token") from e

        try:
            return TokenPayload(**payload)
        except (TypeError, ValueError) as e:
            logger.warning("token_payload_invalid", error=str(e))
            raise AuthenticationError("Invalid token") from e

    # ========================================================================
    # Fallback Admin
    # ========================================================================

    def fallback_admin_user(self) -> CurrentUser:
        """Principal used while logged in through the fallback admin path."""
        return CurrentUser(
            id=FALLBACK_ADMIN_ID,
            name="Admin User",
            email=self.settings.fallback_admin_email,
            account_type=AccountType.ADMIN,
            is_fallback=True,
        )

    def matches_fallback_admin(self, email: str, password: str) -> bool:
        return (
            self.settings.fallback_admin_enabled
            and email == self.settings.fallback_admin_email.lower()
            and password == self.settings.fallback_admin_password
        )

    # ========================================================================
    # Register / Login
    # ========================================================================

    async def register(self, request: RegisterRequest) -> AuthResult:
        """
        Create an account and issue a session token.

        Args:
            request: Registration data

        Returns:
            AuthResult with the new user

        Raises:
            ValueError: If the email is taken or a planner has no profile
        """
        if request.account_type == AccountType.PLANNER and request.planner_profile is None:
            raise ValueError(
                "Planner profile with business name, services, and experience is required for planner accounts"
            )

        password_hash = await run_in_threadpool(self.hash_password, request.password)
        profile = (
            request.planner_profile.model_dump(by_alias=True)
            if request.planner_profile is not None
            else None
        )
        user = await self.user_repo.create_user(
            name=request.name,
            email=request.email,
            password_hash=password_hash,
            account_type=request.account_type,
            planner_profile=profile,
        )

        token = self.create_access_token(str(user["_id"]), user["email"], user["accountType"])
        logger.info("user_registered", user_id=str(user["_id"]))
        return AuthResult(user=user, token=token)

    async def login(self, request: LoginRequest) -> Optional[AuthResult]:
        """
        Check credentials and issue a session token.

        When the database is unreachable, the configured fallback admin
        credentials still log in.

        Args:
            request: Login credentials

        Returns:
            AuthResult, or None when the credentials are wrong

        Raises:
            DatabaseUnavailableError: Database down and not the fallback admin
        """
        try:
            user = await self.user_repo.find_by_email(request.email)
        except DatabaseUnavailableError:
            if not self.matches_fallback_admin(request.email, request.password):
                raise
            admin = self.fallback_admin_user()
            token = self.create_access_token(admin.id, admin.email, admin.account_type.value)
            logger.warning("fallback_admin_login", email=admin.email)
            return AuthResult(
                user={
                    "_id": admin.id,
                    "name": admin.name,
                    "email": admin.email,
                    "accountType": admin.account_type.value,
                },
                token=token,
                fallback=True,
            )

        if not user:
            logger.warning("authentication_failed_user_not_found", email=request.email)
            return None

        verified = await run_in_threadpool(self.verify_password, request.password, user.get("password"))
        if not verified:
            logger.warning("authentication_failed_invalid_password", email=request.email)
            return None

        user.pop("password", None)
        token = self.create_access_token(
            str(user["_id"]), user["email"], user.get("accountType", AccountType.CLIENT.value)
        )
        logger.info("login_success", user_id=str(user["_id"]))
        return AuthResult(user=user, token=token)

    # ========================================================================
    # Principal Resolution
    # ========================================================================

    async def get_current_user(self, token: str) -> CurrentUser:
        """
        Resolve a session token into the authenticated user.

        Args:
            token: JWT token string

        Returns:
            Current user

        Raises:
            AuthenticationError: If the token is invalid, expired or the user is gone
        """
        payload = self.decode_token(token)

        if payload.sub == FALLBACK_ADMIN_ID:
            if not self.settings.fallback_admin_enabled:
                logger.warning("fallback_admin_token_rejected")
                raise AuthenticationError("Invalid token")
            return self.fallback_admin_user()

        if not ObjectId.is_valid(payload.sub):
            logger.warning("get_current_user_failed_invalid_user_id", user_id=payload.sub)
            raise AuthenticationError("Invalid token")

        user = await self.user_repo.get_public(ObjectId(payload.sub))
        if not user:
            logger.warning("get_current_user_failed_user_not_found", user_id=payload.sub)
            raise AuthenticationError("User not found")

        return CurrentUser.from_document(user)
