"""
Request logging, metrics and security header middleware.
"""

import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from plannora.config import get_settings
from shared.logging import bind_context, clear_context
from shared.metrics import setup_metrics

logger = structlog.get_logger(__name__)

# Paths excluded from per-request info logs
QUIET_PATHS = ("/health", "/metrics")


def _endpoint_label(request: Request) -> str:
    """Route template when matched, raw path otherwise."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Correlation id, request_started/request_completed logs and HTTP metrics."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        clear_context()
        bind_context(correlation_id=correlation_id)

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        quiet = path.startswith(QUIET_PATHS)

        http_metrics, _ = setup_metrics()
        http_metrics.requests_in_progress.labels(method=method, endpoint=path).inc()
        start_time = time.time()

        if not quiet:
            logger.info("request_started", method=method, path=path, client_ip=client_ip)

        try:
            response = await call_next(request)
            duration = time.time() - start_time
            endpoint = _endpoint_label(request)

            http_metrics.requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=response.status_code,
            ).inc()
            http_metrics.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

            if not quiet:
                logger.info(
                    "request_completed",
                    method=method,
                    path=path,
                    status_code=response.status_code,
                    duration=f"{duration:.3f}s",
                )

            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True,
            )
            raise

        finally:
            http_metrics.requests_in_progress.labels(method=method, endpoint=path).dec()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """nosniff, DENY framing and a referrer policy; HSTS when HTTPS is required."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        settings = get_settings()

        if settings.security_headers_enabled:
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

            if settings.security_require_https:
                response.headers["Strict-Transport-Security"] = (
                    f"max-age={settings.security_hsts_max_age}; includeSubDomains"
                )

        return response
