"""SQLAlchemy models."""

from user_records.models.user import User

__all__ = [
    "User",
]
