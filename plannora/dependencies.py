"""
FastAPI dependency injection for database, authentication and request helpers.

Provides injectable dependencies for:
- The MongoDB database handle
- Repository and service instances
- User authentication (Bearer header or session cookie)
- ObjectId path validation, pagination and client details
- The slowapi rate limiter shared by the auth routes

Tests replace ``get_db`` through ``app.dependency_overrides`` and every
repository and service follows.
"""

from typing import Optional

import structlog
from bson import ObjectId
from fastapi import Depends, HTTPException, Query, Request, status
from pymongo.database import Database
from slowapi import Limiter
from slowapi.util import get_remote_address

from plannora.config import get_settings
from plannora.database import get_database
from plannora.middleware.auth import create_auth_error, extract_token, handle_missing_token_error
from plannora.models.auth import CurrentUser
from plannora.repositories import (
    EventRepository,
    MatchRequestRepository,
    UserRepository,
    VendorRepository,
)
from plannora.services.auth_service import AuthenticationError, AuthService
from plannora.services.collaboration_service import CollaborationService
from shared.logging import bind_context

logger = structlog.get_logger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)


def auth_rate_limit() -> str:
    """Limit applied to login and registration."""
    return get_settings().rate_limit


# ============================================================================
# DATABASE
# ============================================================================


def get_db() -> Database:
    """
    Get the configured MongoDB database.

    Returns:
        pymongo Database backed by the cached client
    """
    return get_database()


# ============================================================================
# REPOSITORY AND SERVICE DEPENDENCIES
# ============================================================================


def get_user_repository(db: Database = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_event_repository(db: Database = Depends(get_db)) -> EventRepository:
    return EventRepository(db)


def get_match_repository(db: Database = Depends(get_db)) -> MatchRequestRepository:
    return MatchRequestRepository(db)


def get_vendor_repository(db: Database = Depends(get_db)) -> VendorRepository:
    return VendorRepository(db)

def get_auth_service(user_repo: UserRepository = Depends(get_user_repository)) -> AuthService:
    """
    Get authentication service.

    Args:
        user_repo: User repository

    Returns:
        AuthService instance
    """
    return AuthService(user_repo)


def get_collaboration_service(db: Database = Depends(get_db)) -> CollaborationService:
    return CollaborationService(db)

# ============================================================================
# AUTHENTICATION DEPENDENCIES
# ============================================================================


async def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> CurrentUser:
    """
    Get current authenticated user from the session token.

    The token is taken from the Authorization header, then from the
    session cookie.

    Args:
        request: HTTP request
        auth_service: Authentication service

    Returns:
        Current authenticated user

    Raises:
        HTTPException: 401 when the token is missing, invalid or expired,
            or the user no longer exists

    Example:
        @router.get("/profile")
        async def get_profile(user: CurrentUser = Depends(get_current_user)):
            return {"name": user.name}
    """
    token = extract_token(request)
    if not token:
        logger.warning("auth_missing_token", path=request.url.path)
        raise handle_missing_token_error()

    try:
        current_user = await auth_service.get_current_user(token)
    except AuthenticationError as e:
        logger.warning("auth_invalid_token", path=request.url.path, reason=e.detail)
        raise create_auth_error(e.detail) from e

    request.state.user = current_user
    bind_context(user_id=current_user.id)
    logger.debug(
        "user_authenticated",
        user_id=current_user.id,
        account_type=current_user.account_type.value,
    )
    return current_user


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def parse_object_id(value: str, label: str) -> ObjectId:
    """
    Convert a path or body identifier to ObjectId.

    Args:
        value: Raw identifier
        label: Name used in the error message, e.g. "event"

    Returns:
        ObjectId

    Raises:
        HTTPException: 400 "Invalid <label> ID format"
    """
    if not value or not ObjectId.is_valid(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label} ID format",
        )
    return ObjectId(value)


async def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.

    Checks X-Forwarded-For header first (for proxies),
    then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"

# ============================================================================
# PAGINATION DEPENDENCIES
# ============================================================================


class PaginationParams:
    """Pagination parameters for chat history."""

    def __init__(self, limit: Optional[int] = None, offset: int = 0):
        """
        Initialize pagination parameters.

        Args:
            limit: Maximum number of items (clamped to the configured maximum)
            offset: Number of items to skip
        """
        settings = get_settings()

        if limit is None:
            limit = settings.messages_default_limit
        elif limit < 1:
            limit = 1
        elif limit > settings.messages_max_limit:
            limit = settings.messages_max_limit

        self.limit = limit
        self.offset = max(offset, 0)


async def get_pagination_params(
    limit: Optional[int] = Query(None, description="Messages per page"),
    offset: int = Query(0, description="Messages to skip, counted from the newest"),
) -> PaginationParams:
    return PaginationParams(limit=limit, offset=offset)
