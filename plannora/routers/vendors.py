"""
Vendor directory and collaboration shortlist router.

The directory lives in the ``vendors`` collection (seeded from the
provider catalog). A collaboration keeps its own shortlist of directory
vendors with a status and shared notes.
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from plannora.dependencies import (
    get_collaboration_service,
    get_current_user,
    get_vendor_repository,
    parse_object_id,
)
from plannora.models.auth import CurrentUser
from plannora.models.common import ErrorResponse, MessageResponse
from plannora.models.vendor import (
    AddVendorRequest,
    CollaborationVendorResponse,
    UpdateVendorStatusRequest,
    VendorResponse,
)
from plannora.repositories.vendor_repo import VendorRepository
from plannora.services.collaboration_service import CollaborationService, ResourceNotFoundError

logger = structlog.get_logger(__name__)

directory_router = APIRouter(
    prefix="/vendors",
    tags=["Vendors"],
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}},
)

shortlist_router = APIRouter(
    prefix="/collaborations/{collaboration_id}/vendors",
    tags=["Collaboration Vendors"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "Not Found"},
    },
)

VENDOR_NOT_IN_COLLABORATION = "Vendor not found in collaboration"


async def _active_collaboration(
    service: CollaborationService,
    collaboration_id: str,
    current_user: CurrentUser,
    active_only: bool = True,
) -> dict:
    try:
        return await service.get_collaboration(
            parse_object_id(collaboration_id, "collaboration"),
            current_user,
            active_only=active_only,
        )
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.detail) from e


# ============================================================================
# DIRECTORY
# ============================================================================


@directory_router.get("", response_model=List[VendorResponse], summary="Vendor directory")
async def list_vendors(
    category: Optional[str] = Query(None, description="Only this category"),
    current_user: CurrentUser = Depends(get_current_user),
    vendor_repo: VendorRepository = Depends(get_vendor_repository),
) -> List[VendorResponse]:
    vendors = await vendor_repo.list_vendors(category)
    return [VendorResponse.model_validate(vendor) for vendor in vendors]


# ============================================================================
# COLLABORATION SHORTLIST
# ============================================================================


@shortlist_router.get("", response_model=List[CollaborationVendorResponse], summary="Shortlist")
async def list_collaboration_vendors(
    collaboration_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> List[CollaborationVendorResponse]:
    """Shortlisted vendors with directory details, who added them and their notes."""
    collaboration = await _active_collaboration(
        service, collaboration_id, current_user, active_only=False
    )
    return await service.list_vendors(collaboration, current_user)


@shortlist_router.post(
    "",
    response_model=CollaborationVendorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add vendor",
)
async def add_collaboration_vendor(
    collaboration_id: str,
    add_request: AddVendorRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> CollaborationVendorResponse:
    collaboration = await _active_collaboration(service, collaboration_id, current_user)
    vendor_id = parse_object_id(add_request.vendor_id, "vendor")

    try:
        return await service.add_vendor(collaboration, vendor_id, current_user, add_request.status)
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.detail) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@shortlist_router.patch(
    "/{vendor_id}",
    response_model=CollaborationVendorResponse,
    summary="Update vendor status",
)
async def update_collaboration_vendor(
    collaboration_id: str,
    vendor_id: str,
    status_request: UpdateVendorStatusRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> CollaborationVendorResponse:
    """Move a shortlisted vendor to considering, contacted, booked or declined."""
    collaboration = await _active_collaboration(service, collaboration_id, current_user)
    entry = await service.collaboration_vendors.set_status(
        collaboration["_id"],
        parse_object_id(vendor_id, "vendor"),
        status_request.status,
    )
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=VENDOR_NOT_IN_COLLABORATION)

    await service.collaborations.touch(collaboration["_id"])
    logger.info(
        "collaboration_vendor_status_changed",
        collaboration_id=collaboration_id,
        vendor_id=vendor_id,
        status=status_request.status.value,
    )
    return CollaborationVendorResponse.model_validate(entry)


@shortlist_router.delete("/{vendor_id}", response_model=MessageResponse, summary="Remove vendor")
async def remove_collaboration_vendor(
    collaboration_id: str,
    vendor_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
) -> MessageResponse:
    """Remove a vendor from the shortlist together with its notes."""
    collaboration = await _active_collaboration(service, collaboration_id, current_user)
    removed_notes = await service.remove_vendor(collaboration, parse_object_id(vendor_id, "vendor"))
    if removed_notes is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=VENDOR_NOT_IN_COLLABORATION)

    logger.info(
        "collaboration_vendor_removed_with_notes",
        collaboration_id=collaboration_id,
        vendor_id=vendor_id,
        notes_removed=removed_notes,
    )
    return MessageResponse(message="Vendor removed from collaboration successfully")
