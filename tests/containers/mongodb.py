"""Reusable Testcontainers configuration for integration tests.

Provides a MongoDB container with the Plannora indexes applied.
"""

from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database
from testcontainers.mongodb import MongoDbContainer as BaseMongoDbContainer

from plannora.database import ensure_indexes


class MongoDBContainer(BaseMongoDbContainer):
    """Standalone MongoDB server for repository tests."""

    def __init__(self, image: str = "mongo:7.0", **kwargs: object) -> None:
        """Initialize MongoDB container.

        Args:
            image: MongoDB image tag
            **kwargs: Additional container arguments
        """
        super().__init__(image=image, **kwargs)
        self._client: Optional[MongoClient] = None

    def client(self) -> MongoClient:
        """Shared client for the running container."""
        if self._client is None:
            self._client = MongoClient(self.get_connection_url(), serverSelectionTimeoutMS=5000)
        return self._client

    def fresh_database(self, name: str) -> Database:
        """Drop ``name`` and return it with the application indexes created.

        Args:
            name: Database name, one per test

        Returns:
            Empty indexed database
        """
        client = self.client()
        client.drop_database(name)
        db = client[name]
        ensure_indexes(db)
        return db

    def stop(self, *args: object, **kwargs: object) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
        super().stop(*args, **kwargs)


# Singleton container instance for test session
_mongodb_container: Optional[MongoDBContainer] = None


def get_mongodb_container() -> MongoDBContainer:
    """Get or create the MongoDB container instance.

    Returns:
        Started MongoDBContainer
    """
    global _mongodb_container
    if _mongodb_container is None:
        _mongodb_container = MongoDBContainer()
        _mongodb_container.start()
    return _mongodb_container


def stop_mongodb_container() -> None:
    """Stop the session container if one was started."""
    global _mongodb_container
    if _mongodb_container is not None:
        _mongodb_container.stop()
        _mongodb_container = None
