"""Testcontainers for integration testing."""

from .mongodb import (
    MongoDBContainer,
    get_mongodb_container,
    stop_mongodb_container,
)

__all__ = [
    "MongoDBContainer",
    "get_mongodb_container",
    "stop_mongodb_container",
]
