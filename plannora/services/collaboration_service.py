"""
Collaboration workflows spanning several collections.

Provides:
- Answering match requests (accept creates or joins the event and opens a
  collaboration)
- Collaboration lookups with participant and event display fields
- Chat message posting shared by the HTTP and WebSocket channels
- Vendor shortlist and note presentation
- Collaboration budget summaries
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from pymongo.database import Database

from plannora.models.auth import CurrentUser
from plannora.models.budget import BudgetSummary
from plannora.models.collaboration import (
    ChatMessageResponse,
    CollaborationResponse,
    VendorNoteResponse,
)
from plannora.models.match import MatchResponseResult, MatchStatus
from plannora.models.vendor import CollaborationVendorResponse, VendorStatus
from plannora.repositories import (
    CollaborationRepository,
    CollaborationVendorRepository,
    EventRepository,
    MatchRequestRepository,
    MessageRepository,
    NoteRepository,
    UserRepository,
    VendorRepository,
)
from plannora.services import budget as budget_service
from plannora.services.chat_manager import manager
from shared.metrics import setup_metrics

logger = structlog.get_logger(__name__)

COLLABORATION_NOT_FOUND = "Collaboration not found or access denied"

# Event opened when a request without an event is accepted.
COLLABORATION_EVENT_DEFAULTS: Dict[str, Any] = {
    "name": "New Collaboration Event",
    "location": "To be determined",
    "eventType": "general",
    "guestCount": 50,
    "budget": 5000,
    "services": [],
    "selectedProviders": [],
}
COLLABORATION_EVENT_LEAD_DAYS = 30


class ResourceNotFoundError(LookupError):
    """Raised when a document is missing or the caller may not see it."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


def _is_same(user: CurrentUser, reference: Any) -> bool:
    return reference is not None and str(reference) == user.id


class CollaborationService:
    """Service for collaboration operations."""

    def __init__(self, db: Database):
        """
        Initialize collaboration service.

        Args:
            db: pymongo Database shared by the repositories
        """
        self.users = UserRepository(db)
        self.events = EventRepository(db)
        self.match_requests = MatchRequestRepository(db)
        self.collaborations = CollaborationRepository(db)
        self.messages = MessageRepository(db)
        self.notes = NoteRepository(db)
        self.vendors = VendorRepository(db)
        self.collaboration_vendors = CollaborationVendorRepository(db)

    # ========================================================================
    # Match Requests
    # ========================================================================

    async def respond_to_match(
        self,
        request_id: ObjectId,
        user: CurrentUser,
        status: MatchStatus,
    ) -> MatchResponseResult:
        """
        Accept or decline a pending match request addressed to the user.

        Accepting without an event creates one owned by the sender with the
        receiver as collaborator; accepting with an event adds the receiver
        to its collaborators. Either way a collaboration is opened.

        Raises:
            ResourceNotFoundError: No pending request for this receiver
        """
        request = await self.match_requests.claim_pending(request_id, user.ref, status)
        if not request:
            raise ResourceNotFoundError("Match request not found")

        _, planning = setup_metrics()

        if status == MatchStatus.DECLINED:
            planning.match_requests.labels(status=MatchStatus.DECLINED.value).inc()
            logger.info("match_request_declined", request_id=str(request_id))
            return MatchResponseResult(
                message=f"Match request {MatchStatus.DECLINED.value}",
                status=MatchStatus.DECLINED,
            )

        sender_ref = request["senderId"]
        receiver_ref = request["receiverId"]
        event_id = request.get("eventId")

        if event_id is None:
            event_date = date.today() + timedelta(days=COLLABORATION_EVENT_LEAD_DAYS)
            event = await self.events.create(
                sender_ref,
                dict(COLLABORATION_EVENT_DEFAULTS, date=event_date.isoformat()),
                collaborators=[receiver_ref],
            )
            event_id = event["_id"]
            planning.events_created.labels(source="match_request").inc()
            await self.match_requests.set_event(request_id, event_id)
        else:
            await self.events.add_collaborator(event_id, receiver_ref)

        collaboration = await self.collaborations.create_collaboration(
            client_ref=sender_ref,
            planner_ref=receiver_ref,
            event_id=event_id,
        )
        planning.match_requests.labels(status=MatchStatus.ACCEPTED.value).inc()

        logger.info(
            "match_request_accepted",
            request_id=str(request_id),
            collaboration_id=str(collaboration["_id"]),
            event_id=str(event_id),
        )
        return MatchResponseResult(
            message=f"Match request {MatchStatus.ACCEPTED.value}",
            status=MatchStatus.ACCEPTED,
            collaboration_id=collaboration["_id"],
            event_id=event_id,
        )

    # ========================================================================
    # Collaborations
    # ========================================================================

    async def get_collaboration(
        self,
        collaboration_id: ObjectId,
        user: CurrentUser,
        active_only: bool = False,
    ) -> Dict[str, Any]:
        """
        Collaboration the user takes part in.

        Raises:
            ResourceNotFoundError: Missing, not a participant, or archived when
                ``active_only`` is set
        """
        collaboration = await self.collaborations.find_for_user(
            collaboration_id, user.ref, active_only=active_only
        )
        if not collaboration:
            raise ResourceNotFoundError(COLLABORATION_NOT_FOUND)
        return collaboration

    async def describe(
        self,
        collaborations: List[Dict[str, Any]],
        user: CurrentUser,
    ) -> List[CollaborationResponse]:
        """Attach participant names and event details to collaborations."""
        people = await self.users.find_names(
            [c.get("clientId") for c in collaborations] + [c.get("plannerId") for c in collaborations]
        )
        events = await self.events.find_by_ids([c.get("eventId") for c in collaborations])

        described = []
        for collaboration in collaborations:
            client = people.get(collaboration.get("clientId"), {})
            planner = people.get(collaboration.get("plannerId"), {})
            event = events.get(collaboration.get("eventId"), {})
            described.append(
                CollaborationResponse.model_validate(
                    {
                        **collaboration,
                        "clientName": client.get("name"),
                        "plannerName": planner.get("name"),
                        "plannerBusinessName": (planner.get("plannerProfile") or {}).get("businessName"),
                        "eventName": event.get("name"),
                        "eventDate": event.get("date"),
                        "eventLocation": event.get("location"),
                        "budget": event.get("budget") or 0,
                        "isClient": _is_same(user, collaboration.get("clientId")),
                    }
                )
            )
        return described

    async def budget_summary(self, collaboration: Dict[str, Any]) -> BudgetSummary:
        """Budget summary over the collaboration's booked vendors."""
        event = None
        if collaboration.get("eventId") is not None:
            event = await self.events.find_by_id(collaboration["eventId"])
        budget = float((event or {}).get("budget") or 0)

        entries = await self.collaboration_vendors.list_for_collaboration(collaboration["_id"])
        vendors = await self.vendors.find_by_ids([entry["vendorId"] for entry in entries])
        populated = [dict(entry, vendor=vendors.get(entry["vendorId"])) for entry in entries]
        directory = await self.vendors.list_vendors()

        return budget_service.summarize_collaboration(budget, populated, directory)

    # ========================================================================
    # Chat
    # ========================================================================

    async def post_message(
        self,
        collaboration_id: ObjectId,
        user: CurrentUser,
        text: str,
        channel: str = "http",
    ) -> ChatMessageResponse:
        """
        Store a chat message and broadcast it to the collaboration room.

        Args:
            collaboration_id: Collaboration id
            user: Sender
            text: Message text (trimmed before storing)
            channel: ``http`` or ``websocket``, for metrics

        Returns:
            Stored message

        Raises:
            ValueError: Blank message
            ResourceNotFoundError: Collaboration missing, archived or not the user's
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Message cannot be empty")

        await self.get_collaboration(collaboration_id, user, active_only=True)

        document = await self.messages.create_message(collaboration_id, user.ref, text)
        await self.collaborations.touch(collaboration_id)

        _, planning = setup_metrics()
        planning.chat_messages.labels(channel=channel).inc()

        message = ChatMessageResponse.model_validate({**document, "senderName": user.name})
        delivered = await manager.broadcast(
            str(collaboration_id),
            {"type": "new_message", "message": message.model_dump(by_alias=True, mode="json")},
        )
        logger.debug(
            "chat_message_broadcast",
            collaboration_id=str(collaboration_id),
            delivered=delivered,
        )

        message.is_current_user = True
        return message

    async def list_messages(
        self,
        collaboration_id: ObjectId,
        user: CurrentUser,
        limit: int,
        offset: int = 0,
    ) -> List[ChatMessageResponse]:
        """Page of chat history in chronological order."""
        documents = await self.messages.list_page(collaboration_id, limit=limit, offset=offset)
        senders = await self.users.find_names(document.get("senderId") for document in documents)

        messages = []
        for document in documents:
            sender_id = document.get("senderId")
            sender_name = senders.get(sender_id, {}).get("name")
            if sender_name is None and _is_same(user, sender_id):
                sender_name = user.name
            messages.append(
                ChatMessageResponse.model_validate(
                    {
                        **document,
                        "senderName": sender_name or "Unknown",
                        "isCurrentUser": _is_same(user, sender_id),
                    }
                )
            )
        return messages

    # ========================================================================
    # Vendor Notes and Shortlist
    # ========================================================================

    async def describe_notes(
        self,
        notes: List[Dict[str, Any]],
        user: CurrentUser,
    ) -> List[VendorNoteResponse]:
        """Attach author names to vendor notes."""
        authors = await self.users.find_names(note.get("authorId") for note in notes)
        described = []
        for note in notes:
            author_id = note.get("authorId")
            author_name = authors.get(author_id, {}).get("name")
            if author_name is None and _is_same(user, author_id):
                author_name = user.name
            described.append(
                VendorNoteResponse.model_validate(
                    {
                        **note,
                        "authorName": author_name or "Unknown",
                        "isCurrentUser": _is_same(user, author_id),
                    }
                )
            )
        return described

    async def list_vendors(
        self,
        collaboration: Dict[str, Any],
        user: CurrentUser,
    ) -> List[CollaborationVendorResponse]:
        """Shortlisted vendors with their directory entry, adder and notes."""
        entries = await self.collaboration_vendors.list_for_collaboration(collaboration["_id"])
        if not entries:
            return []

        vendors = await self.vendors.find_by_ids([entry["vendorId"] for entry in entries])
        adders = await self.users.find_names(entry.get("addedBy") for entry in entries)

        notes_by_vendor: Dict[Any, List[Dict[str, Any]]] = defaultdict(list)
        for note in await self.notes.list_notes(collaboration["_id"]):
            notes_by_vendor[note.get("vendorId")].append(note)

        described = []
        for entry in entries:
            notes = await self.describe_notes(notes_by_vendor.get(entry["vendorId"], []), user)
            described.append(
                CollaborationVendorResponse.model_validate(
                    {
                        **entry,
                        "vendor": vendors.get(entry["vendorId"]),
                        "addedByName": adders.get(entry.get("addedBy"), {}).get("name"),
                        "notes": notes,
                    }
                )
            )
        return described

    async def add_vendor(
        self,
        collaboration: Dict[str, Any],
        vendor_id: ObjectId,
        user: CurrentUser,
        status: VendorStatus,
    ) -> CollaborationVendorResponse:
        """
        Shortlist a directory vendor.

        Raises:
            ResourceNotFoundError: Unknown vendor
            ValueError: Vendor already on the shortlist
        """
        vendor = await self.vendors.find_by_id(vendor_id)
        if not vendor:
            raise ResourceNotFoundError("Vendor not found")

        entry = await self.collaboration_vendors.add_vendor(
            collaboration["_id"], vendor_id, user.ref, status
        )
        await self.collaborations.touch(collaboration["_id"])
        return CollaborationVendorResponse.model_validate(
            {**entry, "vendor": vendor, "addedByName": user.name}
        )

    async def remove_vendor(self, collaboration: Dict[str, Any], vendor_id: ObjectId) -> Optional[int]:
        """
        Drop a vendor and its notes from the collaboration.

        Returns:
            Number of notes removed, or None when the vendor was not shortlisted
        """
        removed = await self.collaboration_vendors.remove_vendor(collaboration["_id"], vendor_id)
        if not removed:
            return None
        return await self.notes.delete_for_vendor(collaboration["_id"], vendor_id)
