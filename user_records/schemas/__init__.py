"""Pydantic schemas for API requests and responses."""

from user_records.schemas.user import (
    ErrorResponse,
    MessageResponse,
    UserCreate,
    UserListResponse,
    UserMutationResponse,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserListResponse",
    "UserMutationResponse",
    "MessageResponse",
    "ErrorResponse",
]
