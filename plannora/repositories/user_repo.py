"""
User repository for database operations.

Users live in the ``users`` collection with camelCase keys; planner
accounts carry an embedded ``plannerProfile``.
"""

from typing import Any, Dict, Iterable, List, Optional

import structlog
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from plannora.models.auth import AccountType
from plannora.models.common import utc_now
from plannora.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)

PLANNER_PROFILE_DEFAULTS: Dict[str, Any] = {
    "description": "",
    "pricing": "",
    "portfolio": [],
    "rating": 0,
    "reviewCount": 0,
    "isAvailable": True,
}

# Never returned by read helpers.
_PUBLIC_PROJECTION = {"password": 0}


class UserRepository(BaseRepository):
    """Repository for user database operations."""

    collection_name = "users"

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        account_type: AccountType,
        planner_profile: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Create a new user.

        Args:
            name: Display name
            email: Email address (lower-cased by the caller)
            password_hash: bcrypt hash
            account_type: client or planner
            planner_profile: Planner profile fields (planners only)

        Returns:
            Created user document without the password hash

        Raises:
            ValueError: If the email is already registered
        """
        if await self.find_by_email(email):
            raise ValueError("User already exists")

        now = utc_now()
        document: Dict[str, Any] = {
            "name": name,
            "email": email,
            "password": password_hash,
            "accountType": account_type.value,
            "createdAt": now,
            "updatedAt": now,
        }
        if account_type == AccountType.PLANNER:
            document["plannerProfile"] = {**PLANNER_PROFILE_DEFAULTS, **(planner_profile or {})}

        try:
            await self.insert(document)
        except DuplicateKeyError as e:
            logger.warning("user_create_duplicate", email=email)
            raise ValueError("User already exists") from e

        logger.info(
            "user_created",
            user_id=str(document["_id"]),
            account_type=account_type.value,
        )
        document.pop("password", None)
        return document

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Get user by email, including the password hash.

        Args:
            email: Email address

        Returns:
            User document or None
        """
        return await self._run(self.collection.find_one, {"email": email.lower()})

    async def get_public(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        """Get a user without the password hash."""
        return await self._run(
            self.collection.find_one, {"_id": user_id}, _PUBLIC_PROJECTION
        )

    async def find_names(self, user_ids: Iterable[Any]) -> Dict[Any, Dict[str, Any]]:
        """
        Look up several users at once for display purposes.

        Args:
            user_ids: User ids (duplicates allowed)

        Returns:
            Mapping of id to a document with name, email, accountType and plannerProfile
        """
        ids = list({user_id for user_id in user_ids if user_id is not None})
        if not ids:
            return {}
        documents = await self.find_many({"_id": {"$in": ids}})
        return {
            document["_id"]: {
                key: document.get(key)
                for key in ("name", "email", "accountType", "plannerProfile")
            }
            for document in documents
        }

    async def update_profile(
        self,
        user_id: ObjectId,
        name: Optional[str] = None,
        planner_profile: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Update a user's name and merge planner profile fields.

        Args:
            user_id: User id
            name: New display name
            planner_profile: Profile fields to merge (camelCase keys)

        Returns:
            Updated user document without the password hash, or None if missing
        """
        updates: Dict[str, Any] = {"updatedAt": utc_now()}
        if name is not None:
            updates["name"] = name
        for key, value in (planner_profile or {}).items():
            updates[f"plannerProfile.{key}"] = value

        document = await self._run(
            self.collection.find_one_and_update,
            {"_id": user_id},
            {"$set": updates},
            projection=_PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if document:
            logger.info("user_profile_updated", user_id=str(user_id), fields=sorted(updates))
        return document

    async def list_available_planners(self) -> List[Dict[str, Any]]:
        """Planners whose profile is marked available."""
        return await self.find_many(
            {
                "accountType": AccountType.PLANNER.value,
                "plannerProfile.isAvailable": True,
            },
            sort=[("plannerProfile.rating", -1), ("name", 1)],
        )
