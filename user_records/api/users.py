"""User API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from user_records.api.dependencies import get_user_service
from user_records.schemas.user import (
    ErrorResponse,
    MessageResponse,
    UserCreate,
    UserListResponse,
    UserMutationResponse,
    UserResponse,
    UserUpdate,
)
from user_records.services.user_service import UserPatch, UserService

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)

NOT_FOUND_RESPONSE = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


@router.get("", response_model=UserListResponse)
async def list_users(
    service: Annotated[UserService, Depends(get_user_service)],
    page: str | None = None,
    limit: str | None = None,
    search: str | None = None,
):
    """List users, optionally filtered by a case-insensitive search on name, email or address."""
    return await service.list_users(page=page, limit=limit, search=search)


@router.get("/{user_id}", response_model=UserResponse, responses=NOT_FOUND_RESPONSE)
def get_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Get a single user."""
    return service.get_user(user_id)


@router.post("", response_model=UserMutationResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Create a user."""
    return service.create_user(user_data)


@router.put("/{user_id}", response_model=UserMutationResponse, responses=NOT_FOUND_RESPONSE)
def update_user(
    user_id: str,
    user_data: UserUpdate,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Update only the fields present in the request body."""
    return service.update_user(user_id, UserPatch.from_request(user_data))


@router.delete("/{user_id}", response_model=MessageResponse, responses=NOT_FOUND_RESPONSE)
def delete_user(
    user_id: str,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Delete a user."""
    return service.delete_user(user_id)
