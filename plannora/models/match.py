"""
Planner directory and match request schemas.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from plannora.models.common import CamelModel, PyObjectId

GENERAL_REQUEST_LABEL = "General collaboration request"


class MatchStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class PlannerSummary(CamelModel):
    """Planner listing entry (user flattened with its planner profile)."""

    id: PyObjectId = Field(..., alias="_id")
    name: str
    email: str
    business_name: str = ""
    services: List[str] = Field(default_factory=list)
    experience: str = ""
    description: str = ""
    pricing: str = ""
    rating: float = 0
    review_count: int = 0


class CreateMatchRequest(CamelModel):
    """
    Invitation to collaborate.

    The target may be given as ``receiverId`` or ``targetUserId``.
    """

    receiver_id: Optional[str] = None
    target_user_id: Optional[str] = None
    event_id: Optional[str] = None
    message: str = Field(default="", max_length=2000)

    @model_validator(mode="after")
    def require_target(self) -> "CreateMatchRequest":
        if not (self.receiver_id or self.target_user_id):
            raise ValueError("receiverId or targetUserId is required")
        return self

    @property
    def target_id(self) -> str:
        return self.receiver_id or self.target_user_id


class RespondMatchRequest(CamelModel):
    status: MatchStatus

    @model_validator(mode="after")
    def reject_pending(self) -> "RespondMatchRequest":
        if self.status == MatchStatus.PENDING:
            raise ValueError("status must be 'accepted' or 'declined'")
        return self


class MatchRequestResponse(CamelModel):
    """Match request with display fields filled in from users and events."""

    id: PyObjectId = Field(..., alias="_id")
    sender_id: PyObjectId
    receiver_id: PyObjectId
    event_id: Optional[PyObjectId] = None
    message: str = ""
    status: MatchStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    sender_name: Optional[str] = None
    sender_email: Optional[str] = None
    sender_account_type: Optional[str] = None
    receiver_name: Optional[str] = None
    event_name: Optional[str] = None
    event_date: Optional[str] = None
    event_location: Optional[str] = None


class MatchResponseResult(CamelModel):
    message: str
    status: MatchStatus
    collaboration_id: Optional[PyObjectId] = None
    event_id: Optional[PyObjectId] = None
