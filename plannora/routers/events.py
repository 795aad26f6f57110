"""
Event planning router.

An event is readable and writable by its owner and its collaborators;
only the owner may delete it. Provider selection, budget summaries and
alternatives are computed from the static provider catalog.

Fixed paths (``/current``, ``/new``, ``/step``, ``/category``) are declared
before ``/{event_id}`` so they are never captured as ids.
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from plannora.dependencies import get_current_user, get_event_repository, parse_object_id
from plannora.models.auth import CurrentUser
from plannora.models.budget import BudgetSummary
from plannora.models.common import ErrorResponse, MessageResponse, UpsertResponse
from plannora.models.event import (
    CategoryUpdateRequest,
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
    ProviderSelectionResponse,
    SelectProviderRequest,
    StepUpdateRequest,
)
from plannora.models.provider import Provider
from plannora.repositories.event_repo import EventRepository
from plannora.services import budget, catalog
from shared.metrics import setup_metrics

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/events",
    tags=["Events"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid ID format"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "Not Found"},
    },
)

EVENT_NOT_FOUND = "Event not found"


def _not_found(detail: str = EVENT_NOT_FOUND) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _record_created(source: str) -> None:
    _, planning = setup_metrics()
    planning.events_created.labels(source=source).inc()


def _resolve_provider(provider_id: str) -> Provider:
    provider = catalog.get_provider(provider_id)
    if provider is None:
        raise _not_found("Provider not found")
    return provider


# ============================================================================
# COLLECTION AND CURRENT EVENT
# ============================================================================


@router.get("", response_model=List[EventResponse], summary="List own events")
async def list_events(
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> List[EventResponse]:
    """Events owned by the caller, most recently updated first."""
    documents = await events.list_owned(current_user.ref)
    return [EventResponse.model_validate(document) for document in documents]


@router.get(
    "/current",
    response_model=EventResponse,
    summary="Current event",
    responses={201: {"model": EventResponse, "description": "A fresh event was created"}},
)
async def get_current_event(
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> EventResponse:
    """
    Most recently updated event owned by the caller.

    When the caller has no events yet an empty one is created and returned
    with status 201.
    """
    document = await events.find_latest_owned(current_user.ref)
    if document is None:
        document = await events.create(current_user.ref)
        _record_created("current")
        response.status_code = status.HTTP_201_CREATED
    return EventResponse.model_validate(document)


@router.delete("/current", response_model=MessageResponse, summary="Delete current event")
async def delete_current_event(
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> MessageResponse:
    document = await events.find_latest_owned(current_user.ref)
    if document is None:
        raise _not_found("No current event found")

    await events.delete_owned(document["_id"], current_user.ref)
    return MessageResponse(message="Event deleted successfully")


@router.post(
    "/new",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
)
async def create_event(
    event_request: EventCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> EventResponse:
    """Create an event from the body; missing fields take their defaults."""
    document = await events.create(
        current_user.ref, event_request.model_dump(by_alias=True, exclude_none=True)
    )
    _record_created("api")
    return EventResponse.model_validate(document)


# ============================================================================
# PARTIAL UPSERTS
# ============================================================================


async def _upsert(
    events: EventRepository,
    raw_event_id: str,
    current_user: CurrentUser,
    fields: dict,
    label: str,
) -> UpsertResponse:
    event_id = parse_object_id(raw_event_id, "event")
    document, created = await events.save(event_id, current_user.ref, fields)
    if document is None:
        raise _not_found()
    if created:
        _record_created("upsert")
    return UpsertResponse(message=f"{label} updated successfully", upserted=created)


@router.patch("/step", response_model=UpsertResponse, summary="Save wizard step")
async def update_step(
    step_request: StepUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> UpsertResponse:
    return await _upsert(
        events, step_request.event_id, current_user, {"step": step_request.step}, "Step"
    )


@router.patch("/category", response_model=UpsertResponse, summary="Save active category")
async def update_category(
    category_request: CategoryUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> UpsertResponse:
    return await _upsert(
        events,
        category_request.event_id,
        current_user,
        {"activeCategory": category_request.active_category},
        "Category",
    )


# ============================================================================
# SINGLE EVENT
# ============================================================================


@router.get("/{event_id}", response_model=EventResponse, summary="Get event")
async def get_event(
    event_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> EventResponse:
    document = await events.find_accessible(parse_object_id(event_id, "event"), current_user.ref)
    if document is None:
        raise _not_found()
    return EventResponse.model_validate(document)


@router.put(
    "/{event_id}",
    response_model=EventResponse,
    summary="Save event",
    responses={201: {"model": EventResponse, "description": "Event created under this id"}},
)
async def save_event(
    event_id: str,
    update_request: EventUpdateRequest,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> EventResponse:
    """
    Write the event under this id.

    Immutable keys (``_id``, ``id``, ``user``, ``collaborators``,
    ``createdAt``) in the body are ignored. An unknown id creates the event
    with the caller as owner.
    """
    object_id = parse_object_id(event_id, "event")
    fields = update_request.model_dump(by_alias=True, exclude_unset=True)

    document, created = await events.save(object_id, current_user.ref, fields)
    if document is None:
        raise _not_found()

    if created:
        _record_created("upsert")
        response.status_code = status.HTTP_201_CREATED
    return EventResponse.model_validate(document)


@router.delete("/{event_id}", response_model=MessageResponse, summary="Delete event")
async def delete_event(
    event_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> MessageResponse:
    """Delete an event. Only the owner may delete."""
    deleted = await events.delete_owned(parse_object_id(event_id, "event"), current_user.ref)
    if not deleted:
        raise _not_found("Event not found or you do not have permission to delete it")
    return MessageResponse(message="Event deleted successfully")


# ============================================================================
# PROVIDER SELECTION AND BUDGET
# ============================================================================


@router.post(
    "/{event_id}/providers",
    response_model=ProviderSelectionResponse,
    summary="Select provider",
)
async def select_provider(
    event_id: str,
    selection: SelectProviderRequest,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> ProviderSelectionResponse:
    """
    Toggle a provider offer in the event's selection.

    Choosing a new provider adds it, choosing another offer of a selected
    provider switches package, and choosing the selected offer again
    removes it. Adds that overshoot the budget come with cheaper
    alternatives.
    """
    object_id = parse_object_id(event_id, "event")
    event = await events.find_accessible(object_id, current_user.ref)
    if event is None:
        raise _not_found()

    provider = _resolve_provider(selection.provider_id)
    offer = provider.get_offer(selection.offer_id)
    if offer is None:
        raise _not_found("Offer not found")

    selected, impact, alternatives = budget.toggle_selection(event, provider, offer)
    updated = await events.update_fields(object_id, current_user.ref, {"selectedProviders": selected})
    if updated is None:
        raise _not_found()

    logger.info(
        "provider_selection_changed",
        event_id=event_id,
        provider_id=provider.id,
        action=impact.action.value if impact else "add",
    )
    return ProviderSelectionResponse(
        event=EventResponse.model_validate(updated),
        impact=impact,
        alternatives=alternatives,
    )


@router.delete(
    "/{event_id}/providers/{provider_id}",
    response_model=ProviderSelectionResponse,
    summary="Remove provider",
)
async def remove_provider(
    event_id: str,
    provider_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> ProviderSelectionResponse:
    object_id = parse_object_id(event_id, "event")
    event = await events.find_accessible(object_id, current_user.ref)
    if event is None:
        raise _not_found()

    selected, impact = budget.remove_selection(event, provider_id)
    if impact is None:
        raise _not_found("Provider is not selected for this event")

    updated = await events.update_fields(object_id, current_user.ref, {"selectedProviders": selected})
    if updated is None:
        raise _not_found()
    return ProviderSelectionResponse(event=EventResponse.model_validate(updated), impact=impact)


@router.get("/{event_id}/budget", response_model=BudgetSummary, summary="Budget summary")
async def get_budget(
    event_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> BudgetSummary:
    event = await events.find_accessible(parse_object_id(event_id, "event"), current_user.ref)
    if event is None:
        raise _not_found()
    return budget.summarize_event(event)


@router.get(
    "/{event_id}/alternatives",
    response_model=List[Provider],
    summary="Cheaper alternatives",
)
async def get_alternatives(
    event_id: str,
    provider_id: str = Query(..., alias="providerId"),
    current_user: CurrentUser = Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
) -> List[Provider]:
    """Affordable providers in the same category when this one does not fit the budget."""
    event = await events.find_accessible(parse_object_id(event_id, "event"), current_user.ref)
    if event is None:
        raise _not_found()
    return budget.alternatives_for(event, _resolve_provider(provider_id))
