"""
Vendor directory and collaboration vendor schemas.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import ConfigDict, Field

from plannora.models.collaboration import VendorNoteResponse
from plannora.models.common import CamelModel, PyObjectId


class VendorStatus(str, Enum):
    """Progress of a vendor on a collaboration's shortlist."""
    CONSIDERING = "considering"
    CONTACTED = "contacted"
    BOOKED = "booked"
    DECLINED = "declined"


class VendorResponse(CamelModel):
    """Vendor directory entry."""

    model_config = ConfigDict(extra="allow")

    id: PyObjectId = Field(..., alias="_id")
    name: str
    category: str
    description: str = ""
    price_range: str = ""
    rating: float = 0
    location: str = ""
    services: List[str] = Field(default_factory=list)
    is_verified: bool = False


class AddVendorRequest(CamelModel):
    vendor_id: str
    status: VendorStatus = VendorStatus.CONSIDERING


class UpdateVendorStatusRequest(CamelModel):
    status: VendorStatus


class CollaborationVendorResponse(CamelModel):
    """A vendor on a collaboration's shortlist with its notes."""

    id: PyObjectId = Field(..., alias="_id")
    collaboration_id: PyObjectId
    vendor_id: PyObjectId
    added_by: PyObjectId
    status: VendorStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    vendor: Optional[VendorResponse] = None
    added_by_name: Optional[str] = None
    notes: List[VendorNoteResponse] = Field(default_factory=list)
