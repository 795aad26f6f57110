"""
MongoDB connection cache.

Every router shares a single lazily created ``MongoClient``. The client
is cheap to construct and only talks to the server on first use, so
connectivity problems surface from repository calls and are translated
into ``DatabaseUnavailableError`` there.

Also provides:
- Readiness ping
- Index creation at startup
- Seeding of the vendor directory
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConfigurationError, PyMongoError

from plannora.config import get_settings

logger = structlog.get_logger(__name__)

_client: Optional[MongoClient] = None


class DatabaseUnavailableError(RuntimeError):
    """Raised when MongoDB cannot be reached or is misconfigured."""


# ============================================================================
# CONNECTION CACHE
# ============================================================================


def get_client() -> MongoClient:
    """
    Get the cached MongoDB client, creating it on first use.

    Returns:
        Shared MongoClient

    Raises:
        DatabaseUnavailableError: If the connection URL is invalid
    """
    global _client

    if _client is not None:
        return _client

    settings = get_settings()

    try:
        _client = MongoClient(
            settings.mongodb_url,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
            maxPoolSize=settings.mongodb_max_pool_size,
            appname=settings.app_name,
        )
    except ConfigurationError as e:
        logger.error("mongodb_client_init_failed", error=str(e))
        raise DatabaseUnavailableError("Database connection failed") from e

    logger.info(
        "mongodb_client_created",
        database=settings.mongodb_database,
        host=settings.mongodb_url.split("@")[-1],
    )
    return _client


def get_database() -> Database:
    """
    Get the configured database from the cached client.

    Returns:
        pymongo Database
    """
    return get_client()[get_settings().mongodb_database]


def close_client() -> None:
    """Close the cached client. Called during application shutdown."""
    global _client

    if _client is not None:
        _client.close()
        logger.info("mongodb_client_closed")
        _client = None


def ping(db: Database) -> bool:
    """
    Check that the server answers a ping.

    Args:
        db: Database to ping through

    Returns:
        True when the server responded
    """
    try:
        db.command("ping")
        return True
    except PyMongoError as e:
        logger.warning("mongodb_ping_failed", error=str(e))
        return False


# ============================================================================
# STARTUP TASKS
# ============================================================================


def ensure_indexes(db: Database) -> None:
    """
    Create the indexes the API queries rely on.

    Args:
        db: Target database
    """
    db.users.create_index([("email", ASCENDING)], unique=True)
    db.users.create_index([("accountType", ASCENDING)])
    db.events.create_index([("user", ASCENDING), ("updatedAt", DESCENDING)])
    db.events.create_index([("collaborators", ASCENDING)])
    db.matchRequests.create_index([("receiverId", ASCENDING), ("status", ASCENDING)])
    db.matchRequests.create_index([("senderId", ASCENDING)])
    db.collaborations.create_index([("clientId", ASCENDING)])
    db.collaborations.create_index([("plannerId", ASCENDING)])
    db.collaborationMessages.create_index(
        [("collaborationId", ASCENDING), ("timestamp", DESCENDING)]
    )
    db.collaborationNotes.create_index(
        [("collaborationId", ASCENDING), ("vendorId", ASCENDING)]
    )
    db.collaborationVendors.create_index(
        [("collaborationId", ASCENDING), ("vendorId", ASCENDING)], unique=True
    )
    logger.info("mongodb_indexes_ensured", database=db.name)


def seed_vendors(db: Database) -> int:
    """
    Populate the vendor directory from the provider catalog when empty.

    Args:
        db: Target database

    Returns:
        Number of vendors inserted
    """
    from plannora.services.catalog import build_vendor_directory

    if db.vendors.count_documents({}, limit=1):
        return 0

    now = datetime.now(timezone.utc)
    documents = [dict(vendor, createdAt=now) for vendor in build_vendor_directory()]
    if documents:
        db.vendors.insert_many(documents)

    logger.info("vendor_directory_seeded", count=len(documents))
    return len(documents)
