"""User schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Create a user. Values are normalized by the field rules, not here."""

    name: str | None = None
    age: Any = Field(None, description="Integer or integer string, >= 0")
    email: str | None = None
    address: str | None = None


class UserUpdate(BaseModel):
    """Update a user. Only fields present in the request body are applied."""

    name: str | None = None
    age: Any = Field(None, description="Integer or integer string, >= 0")
    email: str | None = None
    address: str | None = None


class UserResponse(BaseModel):
    """User response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    age: int
    email: str
    address: str
    created_at: datetime
    updated_at: datetime


class UserListResponse(BaseModel):
    """One page of users plus totals for the whole match set."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")
    data: list[UserResponse]


class UserMutationResponse(BaseModel):
    """Result of a create or update."""

    message: str
    data: UserResponse


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str
