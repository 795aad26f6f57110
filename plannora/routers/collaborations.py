"""
Collaboration router.

Provides REST API endpoints for:
- Listing, reading and archiving collaborations
- The collaboration budget summary
- Chat history and posting (posts are broadcast to WebSocket subscribers)
- Vendor notes shared between client and planner

Reads are allowed on archived collaborations; writes require an active one.
"""

from typing import List, Optional

import structlog
from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query, status

from plannora.dependencies import (
    PaginationParams,
    get_collaboration_service,
    get_current_user,
    get_pagination_params,
    parse_object_id,
)
from plannora.models.auth import CurrentUser
from plannora.models.budget import BudgetSummary
from plannora.models.collaboration import (
    ArchiveRequest,
    ArchiveResponse,
    ChatMessageResponse,
    CollaborationFilter,
    CollaborationResponse,
    CollaborationStatus,
    SendMessageRequest,
    VendorNoteCreate,
    VendorNoteResponse,
    VendorNoteUpdate,
)
from plannora.models.common import ErrorResponse, MessageResponse
from plannora.services.collaboration_service import (
    COLLABORATION_NOT_FOUND,
    CollaborationService,
    ResourceNotFoundError,
)

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/collaborations",
    tags=["Collaborations"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "Not Found"},
    },
)

NOTE_NOT_FOUND = "Vendor note not found or access denied"


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


async def _load(
    service: CollaborationService,
    collaboration_id: str,
    current_user: CurrentUser,
    active_only: bool = False,
) -> dict:
    try:
        return await service.get_collaboration(
            parse_object_id(collaboration_id, "collaboration"),
            current_user,
            active_only=active_only,
        )
    except ResourceNotFoundError as e:
        raise _not_found(e.detail) from e


# ============================================================================
# COLLABORATIONS
# ============================================================================


@router.get("", response_model=List[CollaborationResponse], summary="List collaborations")
async def list_collaborations(
    status_filter: CollaborationFilter = Query(CollaborationFilter.ACTIVE, alias="status"),
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> List[CollaborationResponse]:
    """Collaborations the caller takes part in, most recently active first."""
    collaborations = await service.collaborations.list_for_user(current_user.ref, status_filter)
    return await service.describe(collaborations, current_user)


@router.get("/{collaboration_id}", response_model=CollaborationResponse, summary="Get collaboration")
async def get_collaboration(
    collaboration_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> CollaborationResponse:
    collaboration = await _load(service, collaboration_id, current_user)
    described = await service.describe([collaboration], current_user)
    return described[0]


@router.patch(
    "/{collaboration_id}/archive",
    response_model=ArchiveResponse,
    summary="Archive or restore",
)
async def archive_collaboration(
    collaboration_id: str,
    archive_request: ArchiveRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> ArchiveResponse:
    new_status = CollaborationStatus.ARCHIVED if archive_request.archived else CollaborationStatus.ACTIVE
    updated = await service.collaborations.set_status(
        parse_object_id(collaboration_id, "collaboration"),
        current_user.ref,
        new_status,
    )
    if not updated:
        raise _not_found(COLLABORATION_NOT_FOUND)

    verb = "archived" if archive_request.archived else "restored"
    return ArchiveResponse(message=f"Collaboration {verb} successfully", status=new_status)


@router.get(
    "/{collaboration_id}/budget",
    response_model=BudgetSummary,
    summary="Collaboration budget",
)
async def get_collaboration_budget(
    collaboration_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> BudgetSummary:
    """Budget of the collaboration's event against its booked vendors."""
    collaboration = await _load(service, collaboration_id, current_user)
    return await service.budget_summary(collaboration)


# ============================================================================
# CHAT
# ============================================================================


@router.post(
    "/{collaboration_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send chat message",
)
async def send_message(
    collaboration_id: str,
    message_request: SendMessageRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> ChatMessageResponse:
    """Store a message and push it to connected chat sockets."""
    object_id = parse_object_id(collaboration_id, "collaboration")
    try:
        return await service.post_message(object_id, current_user, message_request.message)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except ResourceNotFoundError as e:
        raise _not_found(e.detail) from e


@router.get(
    "/{collaboration_id}/messages",
    response_model=List[ChatMessageResponse],
    summary="Chat history",
)
async def list_messages(
    collaboration_id: str,
    pagination: PaginationParams = Depends(get_pagination_params),
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> List[ChatMessageResponse]:
    """
    One page of chat history in chronological order.

    ``offset`` counts back from the newest message, so offset 0 is the
    latest page. Clients without a WebSocket poll this endpoint.
    """
    collaboration = await _load(service, collaboration_id, current_user)
    return await service.list_messages(
        collaboration["_id"],
        current_user,
        limit=pagination.limit,
        offset=pagination.offset,
    )


# ============================================================================
# VENDOR NOTES
# ============================================================================


@router.post(
    "/{collaboration_id}/vendor-notes",
    response_model=VendorNoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add vendor note",
)
async def create_vendor_note(
    collaboration_id: str,
    note_request: VendorNoteCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> VendorNoteResponse:
    collaboration = await _load(service, collaboration_id, current_user, active_only=True)
    note = await service.notes.create_note(
        collaboration_id=collaboration["_id"],
        event_id=collaboration.get("eventId"),
        vendor_id=parse_object_id(note_request.vendor_id, "vendor"),
        author_ref=current_user.ref,
        note=note_request.note,
        rating=note_request.rating,
        tags=note_request.tags,
    )
    await service.collaborations.touch(collaboration["_id"])
    described = await service.describe_notes([note], current_user)
    return described[0]


@router.get(
    "/{collaboration_id}/vendor-notes",
    response_model=List[VendorNoteResponse],
    summary="List vendor notes",
)
async def list_vendor_notes(
    collaboration_id: str,
    vendor_id: Optional[str] = Query(None, alias="vendorId"),
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> List[VendorNoteResponse]:
    """Notes in the collaboration, newest first, optionally for one vendor."""
    collaboration = await _load(service, collaboration_id, current_user, active_only=True)
    vendor_object_id: Optional[ObjectId] = None
    if vendor_id:
        vendor_object_id = parse_object_id(vendor_id, "vendor")

    notes = await service.notes.list_notes(collaboration["_id"], vendor_object_id)
    return await service.describe_notes(notes, current_user)


@router.put(
    "/{collaboration_id}/vendor-notes/{note_id}",
    response_model=VendorNoteResponse,
    summary="Edit vendor note",
)
async def update_vendor_note(
    collaboration_id: str,
    note_id: str,
    note_request: VendorNoteUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> VendorNoteResponse:
    """Edit a note. Only its author may edit it."""
    collaboration = await _load(service, collaboration_id, current_user, active_only=True)

    fields = note_request.model_dump(exclude_unset=True)
    if "note" in fields:
        fields["note"] = (fields["note"] or "").strip()
        if not fields["note"]:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Note cannot be empty")

    note = await service.notes.update_own(
        parse_object_id(note_id, "note"),
        collaboration["_id"],
        current_user.ref,
        fields,
    )
    if not note:
        raise _not_found(NOTE_NOT_FOUND)

    described = await service.describe_notes([note], current_user)
    return described[0]


@router.delete(
    "/{collaboration_id}/vendor-notes/{note_id}",
    response_model=MessageResponse,
    summary="Delete vendor note",
)
async def delete_vendor_note(
    collaboration_id: str,
    note_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> MessageResponse:
    """Delete a note. Only its author may delete it."""
    collaboration = await _load(service, collaboration_id, current_user, active_only=True)
    deleted = await service.notes.delete_own(
        parse_object_id(note_id, "note"),
        collaboration["_id"],
        current_user.ref,
    )
    if not deleted:
        raise _not_found(NOTE_NOT_FOUND)
    return MessageResponse(message="Vendor note deleted successfully")
