"""
Collaboration, chat message and vendor note schemas.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from plannora.models.common import CamelModel, PyObjectId


class CollaborationStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class CollaborationFilter(str, Enum):
    """Listing filter for collaborations."""
    ALL = "all"
    ACTIVE = "active"
    ARCHIVED = "archived"


class CollaborationResponse(CamelModel):
    """Collaboration with participant and event details filled in."""

    id: PyObjectId = Field(..., alias="_id")
    client_id: PyObjectId
    planner_id: PyObjectId
    event_id: Optional[PyObjectId] = None
    status: CollaborationStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    client_name: Optional[str] = None
    planner_name: Optional[str] = None
    planner_business_name: Optional[str] = None
    event_name: Optional[str] = None
    event_date: Optional[str] = None
    event_location: Optional[str] = None
    budget: float = 0
    is_client: bool = False


class ArchiveRequest(CamelModel):
    archived: bool


class ArchiveResponse(CamelModel):
    message: str
    status: CollaborationStatus


# ============================================================================
# Chat
# ============================================================================


class SendMessageRequest(CamelModel):
    message: str = Field(..., max_length=5000)


class ChatMessageResponse(CamelModel):
    id: PyObjectId = Field(..., alias="_id")
    collaboration_id: PyObjectId
    sender_id: PyObjectId
    message: str
    timestamp: datetime
    edited: bool = False
    edited_at: Optional[datetime] = None
    sender_name: Optional[str] = None
    is_current_user: bool = False


# ============================================================================
# Vendor Notes
# ============================================================================


class VendorNoteCreate(CamelModel):
    vendor_id: str
    note: str = Field(..., min_length=1, max_length=5000)
    rating: Optional[int] = Field(None, ge=1, le=5)
    tags: List[str] = Field(default_factory=list)

    @field_validator("note")
    @classmethod
    def validate_note(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Note cannot be empty")
        return v


class VendorNoteUpdate(CamelModel):
    note: Optional[str] = Field(None, min_length=1, max_length=5000)
    rating: Optional[int] = Field(None, ge=1, le=5)
    tags: Optional[List[str]] = None


class VendorNoteResponse(CamelModel):
    id: PyObjectId = Field(..., alias="_id")
    collaboration_id: PyObjectId
    event_id: Optional[PyObjectId] = None
    vendor_id: PyObjectId
    author_id: PyObjectId
    note: str
    rating: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None
    is_current_user: bool = False
