"""HTTP middleware and token extraction."""

from plannora.middleware.auth import extract_token
from plannora.middleware.logging import RequestLoggingMiddleware, SecurityHeadersMiddleware

__all__ = ["RequestLoggingMiddleware", "SecurityHeadersMiddleware", "extract_token"]
