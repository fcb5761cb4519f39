"""Persistence for user records.

``UserStore`` is the only component that talks to the database. Each
operation opens its own short-lived session, so independent operations can
run concurrently on separate pooled connections.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session, sessionmaker

from user_records.models.user import EMAIL_UNIQUE_CONSTRAINT, User
from user_records.services.errors import DuplicateKeyError, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserFilter:
    """Predicate over stored users. Unset attributes do not constrain."""

    search: str | None = None
    email: str | None = None
    id: uuid.UUID | None = None
    exclude_id: uuid.UUID | None = None


def _is_duplicate_email(error: IntegrityError) -> bool:
    """Recognise unique-email violations across drivers.

    PostgreSQL names the constraint, SQLite names the column.
    """
    message = str(error.orig)
    return EMAIL_UNIQUE_CONSTRAINT in message or "users.email" in message


class UserStore:
    """Record store for users backed by SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
        except IntegrityError as e:
            session.rollback()
            if _is_duplicate_email(e):
                raise DuplicateKeyError("email") from e
            logger.exception("Integrity error in user store")
            raise StoreError() from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Database error in user store")
            raise StoreError() from e
        finally:
            session.close()

    @staticmethod
    def _filtered(session: Session, user_filter: UserFilter) -> Query:
        query = session.query(User)
        if user_filter.search:
            query = query.filter(
                or_(
                    User.name.icontains(user_filter.search, autoescape=True),
                    User.email.icontains(user_filter.search, autoescape=True),
                    User.address.icontains(user_filter.search, autoescape=True),
                )
            )
        if user_filter.email is not None:
            query = query.filter(User.email == user_filter.email)
        if user_filter.id is not None:
            query = query.filter(User.id == user_filter.id)
        if user_filter.exclude_id is not None:
            query = query.filter(User.id != user_filter.exclude_id)
        return query

    def create(self, fields: dict[str, Any]) -> User:
        """Insert a new user and return it with its assigned id."""
        with self._session() as session:
            user = User(**fields)
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    def find_page(self, user_filter: UserFilter, skip: int, limit: int) -> list[User]:
        """Return up to ``limit`` matching users after ``skip``, in insertion order."""
        with self._session() as session:
            return (
                self._filtered(session, user_filter)
                .order_by(User.seq)
                .offset(skip)
                .limit(limit)
                .all()
            )

    def count(self, user_filter: UserFilter) -> int:
        """Count all users matching the filter."""
        with self._session() as session:
            return self._filtered(session, user_filter).count()

    def find_one(self, user_filter: UserFilter) -> User | None:
        """Return the first matching user, if any."""
        with self._session() as session:
            return self._filtered(session, user_filter).order_by(User.seq).first()

    def update_by_id(self, user_id: uuid.UUID, fields: dict[str, Any]) -> User | None:
        """Apply ``fields`` to the user with ``user_id``; None if it does not exist."""
        with self._session() as session:
            user = session.query(User).filter(User.id == user_id).first()
            if user is None:
                return None
            for key, value in fields.items():
                setattr(user, key, value)
            session.commit()
            session.refresh(user)
            return user

    def delete_by_id(self, user_id: uuid.UUID) -> User | None:
        """Delete the user with ``user_id`` and return it; None if it does not exist."""
        with self._session() as session:
            user = session.query(User).filter(User.id == user_id).first()
            if user is None:
                return None
            session.delete(user)
            session.commit()
            return user
