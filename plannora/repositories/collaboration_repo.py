"""
Collaboration repositories: collaborations, chat messages and vendor notes.

A user may access a collaboration when they are its client or its
planner. Writes (messages, notes, vendor changes) additionally require the
collaboration to be active.
"""

from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument

from plannora.models.collaboration import CollaborationFilter, CollaborationStatus
from plannora.models.common import utc_now
from plannora.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


def participant_filter(user_ref: Any) -> Dict[str, Any]:
    return {"$or": [{"clientId": user_ref}, {"plannerId": user_ref}]}


class CollaborationRepository(BaseRepository):
    """Repository for client/planner collaborations."""

    collection_name = "collaborations"

    async def create_collaboration(
        self,
        client_ref: Any,
        planner_ref: Any,
        event_id: Optional[ObjectId],
    ) -> Dict[str, Any]:
        """Start an active collaboration."""
        now = utc_now()
        document = {
            "clientId": client_ref,
            "plannerId": planner_ref,
            "eventId": event_id,
            "status": CollaborationStatus.ACTIVE.value,
            "createdAt": now,
            "updatedAt": now,
        }
        await self.insert(document)
        logger.info(
            "collaboration_created",
            collaboration_id=str(document["_id"]),
            event_id=str(event_id),
        )
        return document

    async def list_for_user(
        self,
        user_ref: Any,
        status: CollaborationFilter = CollaborationFilter.ACTIVE,
    ) -> List[Dict[str, Any]]:
        """
        Collaborations the user takes part in.

        Args:
            user_ref: Participant reference
            status: all, active or archived

        Returns:
            Collaborations, most recently updated first
        """
        query = participant_filter(user_ref)
        if status != CollaborationFilter.ALL:
            query["status"] = status.value
        return await self.find_many(query, sort=[("updatedAt", DESCENDING)])

    async def find_for_user(
        self,
        collaboration_id: ObjectId,
        user_ref: Any,
        active_only: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Collaboration the user takes part in.

        Args:
            collaboration_id: Collaboration id
            user_ref: Participant reference
            active_only: Ignore archived collaborations

        Returns:
            Collaboration document or None
        """
        query = {"_id": collaboration_id, **participant_filter(user_ref)}
        if active_only:
            query["status"] = CollaborationStatus.ACTIVE.value
        return await self._run(self.collection.find_one, query)

    async def set_status(
        self,
        collaboration_id: ObjectId,
        user_ref: Any,
        status: CollaborationStatus,
    ) -> Optional[Dict[str, Any]]:
        document = await self._run(
            self.collection.find_one_and_update,
            {"_id": collaboration_id, **participant_filter(user_ref)},
            {"$set": {"status": status.value, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        if document:
            logger.info(
                "collaboration_status_changed",
                collaboration_id=str(collaboration_id),
                status=status.value,
            )
        return document

    async def touch(self, collaboration_id: ObjectId) -> None:
        """Bump ``updatedAt`` so the collaboration sorts first."""
        await self._run(
            self.collection.update_one,
            {"_id": collaboration_id},
            {"$set": {"updatedAt": utc_now()}},
        )


class MessageRepository(BaseRepository):
    """Repository for collaboration chat messages."""

    collection_name = "collaborationMessages"

    async def create_message(
        self,
        collaboration_id: ObjectId,
        sender_ref: Any,
        message: str,
    ) -> Dict[str, Any]:
        document = {
            "collaborationId": collaboration_id,
            "senderId": sender_ref,
            "message": message,
            "timestamp": utc_now(),
            "edited": False,
            "editedAt": None,
        }
        await self.insert(document)
        logger.info(
            "chat_message_created",
            collaboration_id=str(collaboration_id),
            message_id=str(document["_id"]),
        )
        return document

    async def list_page(
        self,
        collaboration_id: ObjectId,
        limit: int,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        One page of history, returned oldest first.

        Pages are counted from the newest message: offset 0 is the most
        recent ``limit`` messages.
        """
        newest_first = await self.find_many(
            {"collaborationId": collaboration_id},
            sort=[("timestamp", DESCENDING), ("_id", DESCENDING)],
            skip=offset,
            limit=limit,
        )
        return list(reversed(newest_first))


class NoteRepository(BaseRepository):
    """Repository for vendor notes shared inside a collaboration."""

    collection_name = "collaborationNotes"

    async def create_note(
        self,
        collaboration_id: ObjectId,
        event_id: Optional[ObjectId],
        vendor_id: ObjectId,
        author_ref: Any,
        note: str,
        rating: Optional[int],
        tags: List[str],
    ) -> Dict[str, Any]:
        now = utc_now()
        document = {
            "collaborationId": collaboration_id,
            "eventId": event_id,
            "vendorId": vendor_id,
            "authorId": author_ref,
            "note": note,
            "rating": rating,
            "tags": tags,
            "createdAt": now,
            "updatedAt": now,
        }
        await self.insert(document)
        logger.info(
            "vendor_note_created",
            collaboration_id=str(collaboration_id),
            note_id=str(document["_id"]),
        )
        return document

    async def list_notes(
        self,
        collaboration_id: ObjectId,
        vendor_id: Optional[ObjectId] = None,
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"collaborationId": collaboration_id}
        if vendor_id is not None:
            query["vendorId"] = vendor_id
        return await self.find_many(query, sort=[("createdAt", DESCENDING)])

    async def update_own(
        self,
        note_id: ObjectId,
        collaboration_id: ObjectId,
        author_ref: Any,
        fields: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """Update a note written by the author; None when not theirs or missing."""
        fields = dict(fields, updatedAt=utc_now())
        return await self._run(
            self.collection.find_one_and_update,
            {"_id": note_id, "collaborationId": collaboration_id, "authorId": author_ref},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

    async def delete_own(self, note_id: ObjectId, collaboration_id: ObjectId, author_ref: Any) -> bool:
        result = await self._run(
            self.collection.delete_one,
            {"_id": note_id, "collaborationId": collaboration_id, "authorId": author_ref},
        )
        return result.deleted_count > 0

    async def delete_for_vendor(self, collaboration_id: ObjectId, vendor_id: ObjectId) -> int:
        result = await self._run(
            self.collection.delete_many,
            {"collaborationId": collaboration_id, "vendorId": vendor_id},
        )
        return result.deleted_count
