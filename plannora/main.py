"""
FastAPI application entry point for the Plannora API.

Builds the `app` served by uvicorn:
- Health, readiness and API status endpoints
- Authentication, events, providers, planners, match requests,
  collaborations, vendors and WebSocket chat routers
- Request logging with correlation IDs and Prometheus metrics
- CORS, GZip, security headers and rate limiting
- MongoDB index creation and vendor seeding at startup
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST
from pymongo.database import Database
from pymongo.errors import PyMongoError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from plannora import __version__
from plannora.config import Settings, get_settings
from plannora.database import (
    DatabaseUnavailableError,
    close_client,
    ensure_indexes,
    get_database,
    ping,
    seed_vendors,
)
from plannora.dependencies import get_db, limiter
from plannora.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from plannora.routers import auth, chat_ws, collaborations, events, matching, providers, vendors
from shared.logging import configure_logging
from shared.metrics import get_metrics_handler, setup_metrics

logger = structlog.get_logger(__name__)

settings: Settings = get_settings()


# ============================================================================
# Lifespan Management
# ============================================================================


def _prepare_database() -> None:
    db = get_database()
    ensure_indexes(db)
    if settings.seed_vendors:
        seed_vendors(db)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Configure logging and metrics, then prepare MongoDB.

    The API starts even when MongoDB is down; requests that need it answer
    503 until it comes back, and the fallback admin can still log in.
    """
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name="plannora-api",
        environment=settings.environment,
    )
    setup_metrics()

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await run_in_threadpool(_prepare_database)
        logger.info("database_prepared", database=settings.mongodb_database)
    except (DatabaseUnavailableError, PyMongoError) as e:
        logger.warning("database_prepare_skipped", error=str(e))

    logger.info("application_started", app_name=settings.app_name)

    try:
        yield
    finally:
        logger.info("application_shutting_down")
        close_client()
        logger.info("application_shutdown_complete")


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Event planning API: budget-bounded event plans built from a provider "
        "catalog, and planner collaborations with chat and shared vendor notes."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)

app.state.limiter = limiter

# ============================================================================
# Middleware Configuration
# ============================================================================

if settings.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# ============================================================================
# Exception Handlers
# ============================================================================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 with the pydantic error list."""
    logger.warning("validation_error", path=request.url.path, errors=exc.errors())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Every HTTP error body is `{"detail": ...}`."""
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(DatabaseUnavailableError)
async def database_unavailable_handler(request: Request, exc: DatabaseUnavailableError):
    """MongoDB unreachable."""
    logger.error("database_unavailable_response", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database connection failed"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ============================================================================
# Health and Readiness Endpoints
# ============================================================================


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """Liveness only; MongoDB is not contacted."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
    }


@app.get("/ready", tags=["Health"])
async def readiness_check(db: Database = Depends(get_db)) -> JSONResponse:
    """Pings MongoDB; 503 while it is unreachable."""
    healthy = await run_in_threadpool(ping, db)
    if not healthy:
        logger.error("database_health_check_failed")

    checks = {"database": "healthy" if healthy else "unhealthy"}
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if healthy else "not_ready",
            "service": settings.app_name,
            "version": __version__,
            "checks": checks,
        },
    )


# ============================================================================
# Metrics Endpoint
# ============================================================================

_metrics_handler = get_metrics_handler()


@app.get("/metrics", tags=["Monitoring"])
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    if not settings.metrics_enabled:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Not Found"})
    return Response(content=_metrics_handler(), media_type=CONTENT_TYPE_LATEST)


# ============================================================================
# API Router Registration
# ============================================================================

for router in (
    auth.router,
    events.router,
    providers.router,
    matching.planners_router,
    matching.match_router,
    collaborations.router,
    vendors.directory_router,
    vendors.shortlist_router,
):
    app.include_router(router, prefix=settings.api_prefix)

app.include_router(chat_ws.router)


@app.get(settings.api_prefix, tags=["Health"])
async def api_status() -> Dict[str, str]:
    return {"message": "API is running"}


@app.get(f"{settings.api_prefix}/debug", tags=["Health"])
async def api_debug() -> Dict[str, Any]:
    """Configuration flags for troubleshooting. Never includes secrets."""
    if settings.is_production:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "API endpoint not found"})
    return {
        "environment": settings.environment,
        "version": __version__,
        "database": settings.mongodb_database,
        "mongodbConfigured": bool(settings.mongodb_url),
        "fallbackAdminEnabled": settings.fallback_admin_enabled,
        "rateLimitEnabled": settings.rate_limit_enabled,
        "metricsEnabled": settings.metrics_enabled,
    }


@app.api_route(
    f"{settings.api_prefix}/{{path:path}}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def api_not_found(path: str) -> JSONResponse:
    """Unknown API paths."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "API endpoint not found"},
    )


# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

    uvicorn.run(
        "plannora.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
