"""
Event planning schemas.

Events are schema-less documents; the models here describe the fields the
API relies on and let everything else pass through untouched.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from plannora.models.budget import BudgetImpact
from plannora.models.common import CamelModel, PyObjectId
from plannora.models.provider import Provider

DEFAULT_EVENT_TYPE = "Party"

# Keys a client may never overwrite through an update.
IMMUTABLE_EVENT_FIELDS = frozenset({"_id", "id", "user", "collaborators", "createdAt"})


class EventCreateRequest(CamelModel):
    """New event; unknown fields are stored as sent."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    date: Optional[str] = Field(None, description="Event date (YYYY-MM-DD)")
    location: str = ""
    guest_count: int = Field(default=0, ge=0)
    budget: float = Field(default=0, ge=0)
    event_type: str = DEFAULT_EVENT_TYPE
    selected_providers: List[Dict[str, Any]] = Field(default_factory=list)
    step: int = Field(default=1, ge=1)


class EventUpdateRequest(CamelModel):
    """Partial event; only the fields sent are written."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    guest_count: Optional[int] = Field(None, ge=0)
    budget: Optional[float] = Field(None, ge=0)
    event_type: Optional[str] = None
    selected_providers: Optional[List[Dict[str, Any]]] = None
    step: Optional[int] = Field(None, ge=1)
    active_category: Optional[str] = None


class EventResponse(CamelModel):
    """Stored event."""

    model_config = ConfigDict(extra="allow")

    id: PyObjectId = Field(..., alias="_id")
    user: PyObjectId
    collaborators: List[PyObjectId] = Field(default_factory=list)
    name: str = ""
    date: Optional[str] = None
    location: str = ""
    guest_count: int = 0
    budget: float = 0
    event_type: str = DEFAULT_EVENT_TYPE
    selected_providers: List[Dict[str, Any]] = Field(default_factory=list)
    step: int = 1
    active_category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StepUpdateRequest(CamelModel):
    event_id: str
    step: int = Field(..., ge=1)


class CategoryUpdateRequest(CamelModel):
    event_id: str
    active_category: str = Field(..., min_length=1)


class SelectProviderRequest(CamelModel):
    """Select (or toggle) a catalog provider's offer for an event."""

    provider_id: str
    offer_id: Optional[str] = Field(
        None, description="Offer to select; defaults to the provider's first package"
    )


class ProviderSelectionResponse(CamelModel):
    """Outcome of a selection change."""

    event: EventResponse
    impact: Optional[BudgetImpact] = None
    alternatives: List[Provider] = Field(default_factory=list)
