"""
Event repository.

Access rule: an event is visible to its owner (``user``) and to every user
listed in ``collaborators``. Only the owner may delete it.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import structlog
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from plannora.models.common import utc_now
from plannora.models.event import DEFAULT_EVENT_TYPE, IMMUTABLE_EVENT_FIELDS
from plannora.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


def access_filter(event_id: ObjectId, user_ref: Any) -> Dict[str, Any]:
    """Query matching an event the user owns or collaborates on."""
    return {
        "_id": event_id,
        "$or": [{"user": user_ref}, {"collaborators": user_ref}],
    }


def event_defaults() -> Dict[str, Any]:
    """Field defaults for a fresh event."""
    return {
        "name": "",
        "date": date.today().isoformat(),
        "location": "",
        "guestCount": 0,
        "budget": 0,
        "eventType": DEFAULT_EVENT_TYPE,
        "selectedProviders": [],
        "step": 1,
    }


def strip_immutable(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys a client must not overwrite."""
    return {key: value for key, value in fields.items() if key not in IMMUTABLE_EVENT_FIELDS}


class EventRepository(BaseRepository):
    """Repository for planning events."""

    collection_name = "events"

    async def list_owned(self, user_ref: Any) -> List[Dict[str, Any]]:
        """Events owned by the user, most recently updated first."""
        return await self.find_many({"user": user_ref}, sort=[("updatedAt", DESCENDING)])

    async def find_accessible(self, event_id: ObjectId, user_ref: Any) -> Optional[Dict[str, Any]]:
        """Event the user owns or collaborates on."""
        return await self._run(self.collection.find_one, access_filter(event_id, user_ref))

    async def find_by_ids(self, event_ids: List[Any]) -> Dict[Any, Dict[str, Any]]:
        """Events keyed by id, for display lookups."""
        ids = list({event_id for event_id in event_ids if event_id is not None})
        if not ids:
            return {}
        documents = await self.find_many({"_id": {"$in": ids}})
        return {document["_id"]: document for document in documents}

    async def find_latest_owned(self, user_ref: Any) -> Optional[Dict[str, Any]]:
        """Most recently updated event owned by the user."""
        return await self._run(
            self.collection.find_one,
            {"user": user_ref},
            sort=[("updatedAt", DESCENDING)],
        )

    async def create(
        self,
        user_ref: Any,
        fields: Optional[Dict[str, Any]] = None,
        event_id: Optional[ObjectId] = None,
        collaborators: Optional[List[Any]] = None,
    ) -> Dict[str, Any]:
        """
        Create an event owned by the user.

        Args:
            user_ref: Owner reference
            fields: Event fields; defaults fill in anything missing
            event_id: Explicit id (used when a client saves an event it created offline)
            collaborators: Initial collaborator references

        Returns:
            Created event document
        """
        now = utc_now()
        document: Dict[str, Any] = {**event_defaults(), **strip_immutable(fields or {})}
        if not document.get("date"):
            document["date"] = date.today().isoformat()
        document.update(
            user=user_ref,
            collaborators=list(collaborators or []),
            createdAt=now,
            updatedAt=now,
        )
        if event_id is not None:
            document["_id"] = event_id

        await self.insert(document)
        logger.info("event_created", event_id=str(document["_id"]), user_id=str(user_ref))
        return document

    async def update_fields(
        self,
        event_id: ObjectId,
        user_ref: Any,
        fields: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """
        Set fields on an accessible event.

        Args:
            event_id: Event id
            user_ref: Caller reference (must own or collaborate)
            fields: Fields to set; immutable keys are ignored

        Returns:
            Updated event, or None when not accessible
        """
        updates = strip_immutable(fields)
        updates["updatedAt"] = utc_now()
        document = await self._run(
            self.collection.find_one_and_update,
            access_filter(event_id, user_ref),
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if document:
            logger.info("event_updated", event_id=str(event_id), fields=sorted(updates))
        return document

    async def save(
        self,
        event_id: ObjectId,
        user_ref: Any,
        fields: Dict[str, Any],
    ) -> Tuple[Optional[Dict[str, Any]], bool]:
        """
        Update an event, creating it under this id when it does not exist.

        Args:
            event_id: Event id chosen by the client
            user_ref: Caller reference
            fields: Event fields

        Returns:
            Tuple of (event or None when it exists but is not accessible, created flag)
        """
        existing = await self.find_by_id(event_id)
        if existing is None:
            try:
                created = await self.create(user_ref, fields, event_id=event_id)
                return created, True
            except DuplicateKeyError:
                # Another request created it first; update that one instead
                logger.info("event_created_concurrently", event_id=str(event_id))

        updated = await self.update_fields(event_id, user_ref, fields)
        return updated, False

    async def delete_owned(self, event_id: ObjectId, user_ref: Any) -> bool:
        """Delete an event if the user owns it."""
        result = await self._run(
            self.collection.delete_one, {"_id": event_id, "user": user_ref}
        )
        if result.deleted_count:
            logger.info("event_deleted", event_id=str(event_id), user_id=str(user_ref))
        return result.deleted_count > 0

    async def add_collaborator(self, event_id: ObjectId, user_ref: Any) -> bool:
        """Add a collaborator once."""
        result = await self._run(
            self.collection.update_one,
            {"_id": event_id},
            {"$addToSet": {"collaborators": user_ref}, "$set": {"updatedAt": utc_now()}},
        )
        return result.matched_count > 0
