"""
Match request repository.
"""

from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument

from plannora.models.common import utc_now
from plannora.models.match import MatchStatus
from plannora.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


class MatchRequestRepository(BaseRepository):
    """Repository for collaboration invitations."""

    collection_name = "matchRequests"

    async def find_pending_duplicate(
        self,
        sender_ref: Any,
        receiver_id: ObjectId,
        event_id: Optional[ObjectId],
    ) -> Optional[Dict[str, Any]]:
        """Pending request with the same sender, receiver and event."""
        return await self._run(
            self.collection.find_one,
            {
                "senderId": sender_ref,
                "receiverId": receiver_id,
                "eventId": event_id,
                "status": MatchStatus.PENDING.value,
            },
        )

    async def create_request(
        self,
        sender_ref: Any,
        receiver_id: ObjectId,
        event_id: Optional[ObjectId],
        message: str,
    ) -> Dict[str, Any]:
        """
        Create a pending match request.

        Returns:
            Created request document
        """
        now = utc_now()
        document = {
            "senderId": sender_ref,
            "receiverId": receiver_id,
            "eventId": event_id,
            "message": message,
            "status": MatchStatus.PENDING.value,
            "createdAt": now,
            "updatedAt": now,
        }
        await self.insert(document)
        logger.info(
            "match_request_created",
            request_id=str(document["_id"]),
            receiver_id=str(receiver_id),
        )
        return document

    async def list_received_pending(self, user_ref: Any) -> List[Dict[str, Any]]:
        return await self.find_many(
            {"receiverId": user_ref, "status": MatchStatus.PENDING.value},
            sort=[("createdAt", DESCENDING)],
        )

    async def list_sent(self, user_ref: Any) -> List[Dict[str, Any]]:
        return await self.find_many({"senderId": user_ref}, sort=[("createdAt", DESCENDING)])

    async def claim_pending(
        self,
        request_id: ObjectId,
        user_ref: Any,
        status: MatchStatus,
    ) -> Optional[Dict[str, Any]]:
        """
        Record the receiver's answer to a pending request in one step.

        Only the first answer wins; later calls for the same request find
        nothing pending.

        Returns:
            Answered request, or None when no pending request is addressed
            to the user
        """
        return await self._run(
            self.collection.find_one_and_update,
            {"_id": request_id, "receiverId": user_ref, "status": MatchStatus.PENDING.value},
            {"$set": {"status": status.value, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )

    async def set_event(self, request_id: ObjectId, event_id: ObjectId) -> None:
        """Link an accepted request to the event it now belongs to."""
        await self._run(
            self.collection.update_one,
            {"_id": request_id},
            {"$set": {"eventId": event_id, "updatedAt": utc_now()}},
        )
