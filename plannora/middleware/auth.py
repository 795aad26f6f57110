"""
Session token extraction and authentication error helpers.

The session token is read from the ``Authorization: Bearer`` header first
and from the session cookie second, so browser clients and API clients
share one code path.
"""

from typing import Mapping, Optional

import structlog
from fastapi import HTTPException, Request, status

from plannora.config import get_settings

logger = structlog.get_logger(__name__)


def token_from_header(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an Authorization header value.

    Args:
        authorization: Raw header value

    Returns:
        Token, or None when the header is absent or not a Bearer credential
    """
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("auth_malformed_header")
        return None

    return parts[1].strip() or None


def token_from_cookies(cookies: Mapping[str, str]) -> Optional[str]:
    return cookies.get(get_settings().cookie_name) or None


def extract_token(request: Request) -> Optional[str]:
    """
    Extract the session token from a request.

    Args:
        request: HTTP request

    Returns:
        JWT token or None if not found
    """
    return token_from_header(request.headers.get("Authorization")) or token_from_cookies(request.cookies)


# ============================================================================
# AUTHENTICATION ERROR HANDLERS
# ============================================================================


def create_auth_error(detail: str = "Authentication required") -> HTTPException:
    """
    Create standardized authentication error (401).

    Args:
        detail: Error detail message

    Returns:
        HTTPException with 401 status
    """
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def handle_missing_token_error() -> HTTPException:
    return create_auth_error("Authentication required")
