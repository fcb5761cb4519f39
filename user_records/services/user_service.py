"""User service: validation, uniqueness and pagination on top of the store."""

import asyncio
import logging
import math
import re
import uuid
from dataclasses import dataclass, fields
from typing import Any

from user_records.schemas.user import (
    MessageResponse,
    UserCreate,
    UserListResponse,
    UserMutationResponse,
    UserResponse,
    UserUpdate,
)
from user_records.services.errors import ConflictError, DuplicateKeyError, NotFoundError
from user_records.services.validation import MISSING, parse_record_id, validate_fields
from user_records.store import UserFilter, UserStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 5
MAX_LIMIT = 100
# Keeps (page - 1) * limit within a signed 64-bit OFFSET
MAX_PAGE = (2**63 - 1) // MAX_LIMIT

EMAIL_EXISTS_MESSAGE = "Email already exists"
NOT_FOUND_MESSAGE = "User not found"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int_param(value: str | int | None) -> int | None:
    """Parse the leading integer of a query parameter ("3abc" -> 3, "abc" -> None)."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def resolve_pagination(page: str | int | None, limit: str | int | None) -> tuple[int, int]:
    """Apply defaults and bounds to raw page/limit values.

    Missing, unparseable and zero values fall back to the defaults. A page
    below 1 becomes 1 and a page above ``MAX_PAGE`` is capped. A limit below
    1 becomes the default limit and a limit above ``MAX_LIMIT`` is capped.
    """
    resolved_page = parse_int_param(page) or DEFAULT_PAGE
    resolved_limit = parse_int_param(limit) or DEFAULT_LIMIT

    if resolved_page < 1:
        resolved_page = 1
    if resolved_page > MAX_PAGE:
        resolved_page = MAX_PAGE
    if resolved_limit < 1:
        resolved_limit = DEFAULT_LIMIT
    if resolved_limit > MAX_LIMIT:
        resolved_limit = MAX_LIMIT
    return resolved_page, resolved_limit


@dataclass(frozen=True)
class UserPatch:
    """Partial update where every field is either ``MISSING`` or a supplied value.

    ``None`` is a supplied value (an explicit null) and is validated like any
    other; only ``MISSING`` leaves the stored field untouched.
    """

    name: Any = MISSING
    age: Any = MISSING
    email: Any = MISSING
    address: Any = MISSING

    @classmethod
    def from_request(cls, data: UserUpdate) -> "UserPatch":
        """Keep only the keys the client actually sent."""
        return cls(**{key: getattr(data, key) for key in data.model_fields_set})

    def present(self) -> dict[str, Any]:
        """Fields that were supplied, with their raw values."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not MISSING
        }


class UserService:
    """Service for user record operations."""

    def __init__(self, store: UserStore):
        self.store = store

    async def list_users(
        self,
        page: str | int | None = None,
        limit: str | int | None = None,
        search: str | None = None,
    ) -> UserListResponse:
        """Return one page of users matching ``search`` plus totals.

        The page and the total count are fetched concurrently; they share the
        filter but not a snapshot, so concurrent writes may make them disagree.
        """
        page, limit = resolve_pagination(page, limit)
        search = (search or "").strip()
        user_filter = UserFilter(search=search or None)
        skip = (page - 1) * limit

        users, total = await asyncio.gather(
            asyncio.to_thread(self.store.find_page, user_filter, skip, limit),
            asyncio.to_thread(self.store.count, user_filter),
        )

        return UserListResponse(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
            data=[UserResponse.model_validate(user) for user in users],
        )

    def get_user(self, raw_id: Any) -> UserResponse:
        """Fetch a single user by id."""
        user_id = parse_record_id(raw_id)
        user = self.store.find_one(UserFilter(id=user_id))
        if user is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return UserResponse.model_validate(user)

    def create_user(self, data: UserCreate) -> UserMutationResponse:
        """Validate, check email uniqueness and persist a new user."""
        cleaned = validate_fields(data.model_dump())
        self._ensure_email_available(cleaned["email"])

        try:
            user = self.store.create(cleaned)
        except DuplicateKeyError as e:
            # Another request claimed the email after our check
            logger.warning(f"Duplicate email rejected by store on create: {cleaned['email']}")
            raise ConflictError(EMAIL_EXISTS_MESSAGE) from e

        logger.info(f"Created user {user.id}")
        return UserMutationResponse(
            message="User created successfully",
            data=UserResponse.model_validate(user),
        )

    def update_user(self, raw_id: Any, patch: UserPatch) -> UserMutationResponse:
        """Apply the supplied fields of ``patch`` to an existing user."""
        user_id = parse_record_id(raw_id)
        cleaned = validate_fields(patch.present(), partial=True)

        if "email" in cleaned:
            self._ensure_email_available(cleaned["email"], exclude_id=user_id)

        try:
            user = self.store.update_by_id(user_id, cleaned)
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate email rejected by store on update: {cleaned['email']}")
            raise ConflictError(EMAIL_EXISTS_MESSAGE) from e

        if user is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        logger.info(f"Updated user {user.id}: {sorted(cleaned)}")
        return UserMutationResponse(
            message="User updated successfully",
            data=UserResponse.model_validate(user),
        )

    def delete_user(self, raw_id: Any) -> MessageResponse:
        """Delete a user by id."""
        user_id = parse_record_id(raw_id)
        user = self.store.delete_by_id(user_id)
        if user is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        logger.info(f"Deleted user {user_id}")
        return MessageResponse(message="User deleted successfully")

    def _ensure_email_available(self, email: str, exclude_id: uuid.UUID | None = None) -> None:
        existing = self.store.find_one(UserFilter(email=email, exclude_id=exclude_id))
        if existing is not None:
            logger.warning(f"Rejected duplicate email: {email}")
            raise ConflictError(EMAIL_EXISTS_MESSAGE)
