"""FastAPI dependencies for the user store and service."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from user_records.database import SessionLocal
from user_records.services.user_service import UserService
from user_records.store import UserStore


@lru_cache
def get_user_store() -> UserStore:
    """Get the process-wide user store."""
    return UserStore(SessionLocal)


def get_user_service(
    store: Annotated[UserStore, Depends(get_user_store)],
) -> UserService:
    """Get user service bound to the store."""
    return UserService(store)
