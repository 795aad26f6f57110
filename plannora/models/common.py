"""
Shared schema building blocks.

Documents are stored with camelCase keys and ObjectId references; API
schemas expose the same camelCase names and render ObjectIds as hex
strings.
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _stringify_object_id(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


PyObjectId = Annotated[str, BeforeValidator(_stringify_object_id)]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Any:
    """
    Convert a 24-hex string to ObjectId, leaving anything else untouched.

    Synthetic identifiers such as the fallback admin's ``"admin-id"`` are
    stored as plain strings.
    """
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


class CamelModel(BaseModel):
    """Base schema accepting both camelCase and snake_case input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(CamelModel):
    """Plain acknowledgement body."""

    message: str = Field(..., description="Human readable outcome")


class UpsertResponse(CamelModel):
    """Result of a partial update that may have created the document."""

    message: str
    upserted: bool = Field(..., description="True when a new document was created")


class ErrorResponse(BaseModel):
    """
    Standard error response.

    Returned for all error cases (4xx, 5xx).
    """

    detail: str = Field(..., description="Error message")

    model_config = {
        "json_schema_extra": {
            "example": {
                "detail": "Invalid credentials"
            }
        }
    }
