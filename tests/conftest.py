"""
Shared pytest fixtures.

The application reads its settings at import time, so the test
environment is configured here before anything from ``plannora`` is
imported. Route tests run against an in-memory mongomock database
injected through ``app.dependency_overrides``.
"""

import os

os.environ["PLANNORA_ENVIRONMENT"] = "test"
os.environ["PLANNORA_JWT_SECRET_KEY"] = "test-secret-key-for-plannora-unit-tests-0123456789"
os.environ["PLANNORA_RATE_LIMIT_ENABLED"] = "false"
os.environ["PLANNORA_PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["PLANNORA_FALLBACK_ADMIN_EMAIL"] = "admin@example.com"
os.environ["PLANNORA_FALLBACK_ADMIN_PASSWORD"] = "fallback-secret"
os.environ["PLANNORA_SEED_VENDORS"] = "false"
os.environ["PLANNORA_LOG_LEVEL"] = "WARNING"
os.environ["PLANNORA_MONGODB_SERVER_SELECTION_TIMEOUT_MS"] = "200"

from typing import Any, Dict, Iterator  # noqa: E402

import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from plannora import main as main_module  # noqa: E402
from plannora.database import ensure_indexes  # noqa: E402
from plannora.dependencies import get_db  # noqa: E402
from plannora.main import app  # noqa: E402
from tests.helpers import PLANNER_PROFILE, create_collaboration, register  # noqa: E402


# ============================================================================
# DATABASE
# ============================================================================


@pytest.fixture
def mongo_db():
    """Fresh in-memory database with the application indexes."""
    client = mongomock.MongoClient()
    db = client["plannora_test"]
    ensure_indexes(db)
    yield db
    client.close()


# ============================================================================
# HTTP CLIENTS
# ============================================================================


@pytest.fixture
def client(mongo_db) -> Iterator[TestClient]:
    """TestClient bound to the mongomock database (lifespan not started)."""
    app.dependency_overrides[get_db] = lambda: mongo_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def live_client(mongo_db, monkeypatch) -> Iterator[TestClient]:
    """
    TestClient running the lifespan, sharing one event loop across requests.

    Needed when HTTP requests and WebSocket sessions must see each other,
    e.g. a posted message broadcast to a connected socket.
    """
    monkeypatch.setattr(main_module, "_prepare_database", lambda: None)
    app.dependency_overrides[get_db] = lambda: mongo_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


# ============================================================================
# ACCOUNTS
# ============================================================================


@pytest.fixture
def client_account(client) -> Dict[str, Any]:
    return register(client, "client@example.com", name="Casey Client")


@pytest.fixture
def planner_account(client) -> Dict[str, Any]:
    return register(
        client,
        "planner@example.com",
        name="Pat Planner",
        account_type="planner",
        planner_profile=PLANNER_PROFILE,
    )


@pytest.fixture
def collaboration(client, client_account, planner_account) -> Dict[str, Any]:
    """Active collaboration opened from a general (event-less) request."""
    return create_collaboration(client, client_account, planner_account)
