"""
Provider catalog router.

The catalog is static and public; no authentication is required.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from plannora.models.common import ErrorResponse
from plannora.models.provider import CategorySummary, Provider, ProviderCategory
from plannora.services import catalog

router = APIRouter(prefix="/providers", tags=["Providers"])


@router.get("", response_model=List[Provider], summary="List providers")
async def list_providers(
    category: Optional[ProviderCategory] = Query(None, description="Only this category"),
    search: Optional[str] = Query(None, max_length=100, description="Name or description contains"),
) -> List[Provider]:
    return catalog.list_providers(category=category, search=search)


@router.get("/categories", response_model=List[CategorySummary], summary="List categories")
async def list_categories() -> List[CategorySummary]:
    """Categories with provider counts and their cheapest base price."""
    return catalog.list_categories()


@router.get(
    "/{provider_id}",
    response_model=Provider,
    summary="Get provider",
    responses={404: {"model": ErrorResponse, "description": "Not Found"}},
)
async def get_provider(provider_id: str) -> Provider:
    provider = catalog.get_provider(provider_id)
    if provider is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Provider not found")
    return provider
