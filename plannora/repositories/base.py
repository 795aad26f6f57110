"""
Base repository for MongoDB collections.

pymongo is a blocking driver; every call is pushed to the threadpool so
async route handlers never block the event loop. Connectivity failures
are translated into ``DatabaseUnavailableError``.
"""

from functools import partial
from typing import Any, Callable, Dict, List, Optional, TypeVar

import structlog
from bson import ObjectId
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure
from starlette.concurrency import run_in_threadpool

from plannora.config import get_settings
from plannora.database import DatabaseUnavailableError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class BaseRepository:
    """Common plumbing for collection repositories."""

    collection_name: str = ""

    def __init__(self, db: Database):
        """
        Initialize repository.

        Args:
            db: pymongo Database
        """
        self.db = db
        self.collection: Collection = db[self.collection_name]
        self.settings = get_settings()

    async def _run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Execute a blocking driver call in the threadpool.

        Raises:
            DatabaseUnavailableError: If the server cannot be reached
        """
        try:
            return await run_in_threadpool(partial(func, *args, **kwargs))
        except ConnectionFailure as e:
            logger.error(
                "database_unavailable",
                collection=self.collection_name,
                error=str(e),
            )
            raise DatabaseUnavailableError("Database connection failed") from e

    async def find_by_id(self, document_id: ObjectId) -> Optional[Dict[str, Any]]:
        """Fetch one document by ``_id``."""
        return await self._run(self.collection.find_one, {"_id": document_id})

    async def find_many(
        self,
        query: Dict[str, Any],
        sort: Optional[List[tuple]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        """Run a query and materialize the cursor."""
        def _find() -> List[Dict[str, Any]]:
            cursor = self.collection.find(query)
            if sort:
                cursor = cursor.sort(sort)
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

        return await self._run(_find)

    async def insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a document and return it with its ``_id``."""
        result = await self._run(self.collection.insert_one, document)
        document["_id"] = result.inserted_id
        return document
