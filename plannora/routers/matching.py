"""
Planner directory and match request router.

Provides REST API endpoints for:
- Browsing available planners
- Sending match requests
- Listing received (pending) and sent requests
- Accepting or declining a request, which opens a collaboration
"""

from typing import Any, Dict, List

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from plannora.dependencies import (
    get_collaboration_service,
    get_current_user,
    get_event_repository,
    get_match_repository,
    get_user_repository,
    parse_object_id,
)
from plannora.models.auth import CurrentUser
from plannora.models.common import ErrorResponse
from plannora.models.match import (
    GENERAL_REQUEST_LABEL,
    CreateMatchRequest,
    MatchRequestResponse,
    MatchResponseResult,
    MatchStatus,
    PlannerSummary,
    RespondMatchRequest,
)
from plannora.repositories.event_repo import EventRepository
from plannora.repositories.match_repo import MatchRequestRepository
from plannora.repositories.user_repo import UserRepository
from plannora.services.collaboration_service import CollaborationService, ResourceNotFoundError
from shared.metrics import setup_metrics

logger = structlog.get_logger(__name__)

planners_router = APIRouter(
    prefix="/planners",
    tags=["Planners"],
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
)

match_router = APIRouter(
    prefix="/match-requests",
    tags=["Match Requests"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "Not Found"},
    },
)


# ============================================================================
# PLANNER DIRECTORY
# ============================================================================


@planners_router.get("", response_model=List[PlannerSummary], summary="List planners")
async def list_planners(
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
) -> List[PlannerSummary]:
    """Planners accepting new clients, with their profile flattened."""
    planners = await user_repo.list_available_planners()
    return [
        PlannerSummary.model_validate(
            {
                "_id": planner["_id"],
                "name": planner.get("name", ""),
                "email": planner.get("email", ""),
                **{
                    key: value
                    for key, value in (planner.get("plannerProfile") or {}).items()
                    if key in {
                        "businessName", "services", "experience", "description",
                        "pricing", "rating", "reviewCount",
                    }
                },
            }
        )
        for planner in planners
    ]


# ============================================================================
# MATCH REQUESTS
# ============================================================================


@match_router.post(
    "",
    response_model=MatchRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send match request",
)
async def create_match_request(
    match_request: CreateMatchRequest,
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
    events: EventRepository = Depends(get_event_repository),
    match_repo: MatchRequestRepository = Depends(get_match_repository),
) -> MatchRequestResponse:
    """
    Invite another user to collaborate, optionally around one event.

    **Error Responses:**
    - 400: Invalid id, request to self, or a pending duplicate
    - 404: Unknown user or event
    """
    receiver_id = parse_object_id(match_request.target_id, "user")
    if str(receiver_id) == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot send a match request to yourself",
        )

    receiver = await user_repo.get_public(receiver_id)
    if not receiver:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    event = None
    event_id = None
    if match_request.event_id:
        event_id = parse_object_id(match_request.event_id, "event")
        event = await events.find_by_id(event_id)
        if not event:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    if await match_repo.find_pending_duplicate(current_user.ref, receiver_id, event_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Match request already sent",
        )

    document = await match_repo.create_request(
        current_user.ref, receiver_id, event_id, match_request.message
    )
    _, planning = setup_metrics()
    planning.match_requests.labels(status=MatchStatus.PENDING.value).inc()

    return MatchRequestResponse.model_validate(
        {
            **document,
            "senderName": current_user.name,
            "receiverName": receiver.get("name"),
            "eventName": event.get("name") if event else GENERAL_REQUEST_LABEL,
        }
    )


async def _populate(
    requests: List[Dict[str, Any]],
    user_repo: UserRepository,
    events: EventRepository,
    counterpart_key: str,
) -> List[Dict[str, Any]]:
    people = await user_repo.find_names(request.get(counterpart_key) for request in requests)
    event_docs = await events.find_by_ids([request.get("eventId") for request in requests])

    populated = []
    for request in requests:
        person = people.get(request.get(counterpart_key), {})
        event = event_docs.get(request.get("eventId"))
        populated.append(
            {
                **request,
                "_person": person,
                "eventName": event.get("name") if event else GENERAL_REQUEST_LABEL,
                "eventDate": event.get("date") if event else None,
                "eventLocation": event.get("location") if event else None,
            }
        )
    return populated


@match_router.get(
    "/received",
    response_model=List[MatchRequestResponse],
    summary="Pending requests received",
)
async def list_received(
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
    events: EventRepository = Depends(get_event_repository),
    match_repo: MatchRequestRepository = Depends(get_match_repository),
) -> List[MatchRequestResponse]:
    """Pending requests addressed to the caller, newest first."""
    requests = await match_repo.list_received_pending(current_user.ref)
    populated = await _populate(requests, user_repo, events, "senderId")
    return [
        MatchRequestResponse.model_validate(
            {
                **request,
                "senderName": request["_person"].get("name"),
                "senderEmail": request["_person"].get("email"),
                "senderAccountType": request["_person"].get("accountType"),
            }
        )
        for request in populated
    ]


@match_router.get(
    "/sent",
    response_model=List[MatchRequestResponse],
    summary="Requests sent",
)
async def list_sent(
    current_user: CurrentUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
    events: EventRepository = Depends(get_event_repository),
    match_repo: MatchRequestRepository = Depends(get_match_repository),
) -> List[MatchRequestResponse]:
    """Every request the caller sent, newest first."""
    requests = await match_repo.list_sent(current_user.ref)
    populated = await _populate(requests, user_repo, events, "receiverId")
    return [
        MatchRequestResponse.model_validate(
            {**request, "receiverName": request["_person"].get("name")}
        )
        for request in populated
    ]


@match_router.patch(
    "/{request_id}",
    response_model=MatchResponseResult,
    response_model_exclude_none=True,
    summary="Accept or decline",
)
async def respond_to_match_request(
    request_id: str,
    response_request: RespondMatchRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> MatchResponseResult:
    """
    Answer a pending request addressed to the caller.

    Accepting opens a collaboration; when the request has no event a new
    one is created for it.
    """
    try:
        return await service.respond_to_match(
            parse_object_id(request_id, "request"),
            current_user,
            response_request.status,
        )
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.detail) from e
