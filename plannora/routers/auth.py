"""
Authentication router.

Provides REST API endpoints for:
- Registration of client and planner accounts
- Login (including the fallback admin path) and logout
- Reading and updating the caller's profile

Successful register and login calls return the token in the body and also
set it as an httponly cookie.
"""

import structlog
from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from plannora.config import get_settings
from plannora.database import DatabaseUnavailableError
from plannora.dependencies import (
    auth_rate_limit,
    get_auth_service,
    get_client_ip,
    get_current_user,
    get_user_repository,
    limiter,
)
from plannora.models.auth import (
    AuthResponse,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserResponse,
)
from plannora.models.common import ErrorResponse, MessageResponse
from plannora.repositories.user_repo import UserRepository
from plannora.services.auth_service import AuthResult, AuthService
from shared.metrics import setup_metrics

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        422: {"description": "Validation Error"},
    },
)


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.jwt_expire_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse.model_validate(
        {**result.user, "token": result.token, "fallback": result.fallback}
    )


# ============================================================================
# REGISTER / LOGIN / LOGOUT
# ============================================================================


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="""
    Create a client or planner account and start a session.

    **Authentication:** Not required

    **Error Responses:**
    - 400: Email already registered, or planner without a planner profile
    - 422: Validation error
    """,
    responses={400: {"model": ErrorResponse, "description": "Registration rejected"}},
)
@limiter.limit(auth_rate_limit)
async def register(
    request: Request,
    response: Response,
    register_request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
    client_ip: str = Depends(get_client_ip),
) -> AuthResponse:
    """Register a new account."""
    _, planning = setup_metrics()
    logger.info(
        "register_attempt",
        email=register_request.email,
        account_type=register_request.account_type.value,
        ip_address=client_ip,
    )

    try:
        result = await auth_service.register(register_request)
    except ValueError as e:
        planning.auth_attempts.labels(operation="register", outcome="rejected").inc()
        logger.warning("register_rejected", email=register_request.email, reason=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    planning.auth_attempts.labels(operation="register", outcome="success").inc()
    _set_session_cookie(response, result.token)
    return _auth_response(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="""
    Authenticate with email and password.

    While the database is unreachable only the configured fallback admin
    credentials are accepted; the response then carries `fallback: true`.

    **Error Responses:**
    - 401: Invalid credentials
    - 422: Missing or malformed fields
    - 503: Database unreachable
    """,
)
@limiter.limit(auth_rate_limit)
async def login(
    request: Request,
    response: Response,
    login_request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    client_ip: str = Depends(get_client_ip),
) -> AuthResponse:
    """Authenticate user and start a session."""
    _, planning = setup_metrics()
    logger.info("login_attempt", email=login_request.email, ip_address=client_ip)

    try:
        result = await auth_service.login(login_request)
    except DatabaseUnavailableError:
        planning.auth_attempts.labels(operation="login", outcome="unavailable").inc()
        raise

    if result is None:
        planning.auth_attempts.labels(operation="login", outcome="failure").inc()
        logger.warning("login_failed", email=login_request.email, ip_address=client_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    outcome = "fallback" if result.fallback else "success"
    planning.auth_attempts.labels(operation="login", outcome=outcome).inc()
    _set_session_cookie(response, result.token)
    return _auth_response(result)


@router.post("/logout", response_model=MessageResponse, summary="Logout")
async def logout(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    return MessageResponse(message="Logged out successfully")


# ============================================================================
# PROFILE
# ============================================================================


@router.get("/profile", response_model=UserResponse, summary="Current user")
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
) -> UserResponse:
    """Return the caller's account without the password hash."""
    if current_user.is_fallback:
        return UserResponse.model_validate(
            {
                "_id": current_user.id,
                "name": current_user.name,
                "email": current_user.email,
                "accountType": current_user.account_type,
            }
        )

    user = await user_repo.get_public(ObjectId(current_user.id))
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)


@router.put("/profile", response_model=UserResponse, summary="Update profile")
async def update_profile(
    update_request: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
) -> UserResponse:
    """
    Update the caller's name and planner profile.

    Planner profile fields are merged into the stored profile, and are
    ignored for client accounts.
    """
    if current_user.is_fallback:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The fallback admin profile cannot be updated",
        )

    profile = None
    if update_request.planner_profile is not None and current_user.is_planner:
        profile = update_request.planner_profile.model_dump(by_alias=True, exclude_none=True)

    user = await user_repo.update_profile(
        ObjectId(current_user.id),
        name=update_request.name,
        planner_profile=profile,
    )
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)
