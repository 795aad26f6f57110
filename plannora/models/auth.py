"""
Authentication and user account models.

Provides Pydantic schemas for:
- Account types
- Registration, login and profile update requests
- User and authentication responses
- JWT payloads and the authenticated principal
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, EmailStr, Field, field_validator

from plannora.models.common import CamelModel, PyObjectId, to_object_id


# ============================================================================
# Account Types
# ============================================================================


class AccountType(str, Enum):
    """
    Kind of account.

    - CLIENT: plans their own events
    - PLANNER: offers planning services and can be matched with clients
    - ADMIN: synthetic account issued by the fallback admin login
    """
    CLIENT = "client"
    PLANNER = "planner"
    ADMIN = "admin"


# ============================================================================
# Planner Profile
# ============================================================================


class PlannerProfileInput(CamelModel):
    """Planner profile supplied at registration."""

    business_name: str = Field(..., min_length=1, max_length=200)
    services: List[str] = Field(..., min_length=1, description="Offered services")
    experience: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    pricing: str = Field(default="", max_length=500)

    @field_validator("business_name", "experience")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Reject whitespace-only values."""
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class PlannerProfileUpdate(CamelModel):
    """Partial planner profile; only provided fields are merged."""

    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
    services: Optional[List[str]] = None
    experience: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    pricing: Optional[str] = Field(None, max_length=500)
    portfolio: Optional[List[str]] = None
    is_available: Optional[bool] = None


class PlannerProfile(CamelModel):
    """Stored planner profile."""

    business_name: str = ""
    services: List[str] = Field(default_factory=list)
    experience: str = ""
    description: str = ""
    pricing: str = ""
    portfolio: List[str] = Field(default_factory=list)
    rating: float = 0
    review_count: int = 0
    is_available: bool = True


# ============================================================================
# Requests
# ============================================================================


class RegisterRequest(CamelModel):
    """Account registration request."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    account_type: AccountType = Field(default=AccountType.CLIENT)
    planner_profile: Optional[PlannerProfileInput] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names are trimmed and must not be blank."""
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are matched case-insensitively."""
        return v.lower()

    @field_validator("account_type")
    @classmethod
    def validate_account_type(cls, v: AccountType) -> AccountType:
        """Admin accounts cannot be registered."""
        if v == AccountType.ADMIN:
            raise ValueError("accountType must be 'client' or 'planner'")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "password": "secret123",
                "accountType": "planner",
                "plannerProfile": {
                    "businessName": "Jane's Events",
                    "services": ["Weddings", "Corporate"],
                    "experience": "5 years"
                }
            }
        }
    }


class LoginRequest(CamelModel):
    """Login request with email and password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are matched case-insensitively."""
        return v.lower()

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "jane@example.com",
                "password": "secret123"
            }
        }
    }


class UpdateProfileRequest(CamelModel):
    """Profile update; planner profile changes only apply to planners."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    planner_profile: Optional[PlannerProfileUpdate] = None


# ============================================================================
# Responses
# ============================================================================


class UserResponse(CamelModel):
    """User information response (never includes the password hash)."""

    id: PyObjectId = Field(..., alias="_id")
    name: str
    email: str
    account_type: AccountType = AccountType.CLIENT
    planner_profile: Optional[PlannerProfile] = None
    created_at: Optional[datetime] = None


class AuthResponse(UserResponse):
    """Response for register and login: the user plus a session token."""

    token: str = Field(..., description="JWT session token")
    fallback: bool = Field(default=False, description="Issued by the fallback admin path")


# ============================================================================
# Token and Principal
# ============================================================================


class TokenPayload(BaseModel):
    """Decoded JWT claims."""

    sub: str = Field(..., description="User id")
    email: str
    account_type: str = Field(default=AccountType.CLIENT.value, alias="accountType")
    exp: int
    iat: int


class CurrentUser(BaseModel):
    """
    Authenticated user principal.

    Injected into route handlers via dependencies.
    """

    id: str
    name: str
    email: str
    account_type: AccountType = AccountType.CLIENT
    planner_profile: Optional[Dict[str, Any]] = None
    is_fallback: bool = False

    @property
    def ref(self) -> Any:
        """Value stored in reference fields (ObjectId for real users)."""
        return to_object_id(self.id)

    @property
    def is_planner(self) -> bool:
        return self.account_type == AccountType.PLANNER

    @property
    def is_admin(self) -> bool:
        return self.account_type == AccountType.ADMIN

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "CurrentUser":
        """Build the principal from a stored user document."""
        user_id = document["_id"]
        return cls(
            id=str(user_id) if isinstance(user_id, ObjectId) else user_id,
            name=document.get("name", ""),
            email=document.get("email", ""),
            account_type=document.get("accountType", AccountType.CLIENT.value),
            planner_profile=document.get("plannerProfile"),
        )
