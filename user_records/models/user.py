"""User record model."""

import uuid

from sqlalchemy import CheckConstraint, Column, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import validates

from user_records.database import Base
from user_records.models.mixins import TimestampMixin
from user_records.services.validation import validate_field

EMAIL_UNIQUE_CONSTRAINT = "uq_users_email"


class User(Base, TimestampMixin):
    """A user record.

    Field rules are re-applied on every attribute write, and the table
    constraints back up the service-level checks.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),
        CheckConstraint("age >= 0", name="ck_users_age_non_negative"),
    )

    seq = Column(Integer, primary_key=True, autoincrement=True)  # Insertion order
    id = Column(Uuid, unique=True, nullable=False, index=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    age = Column(Integer, nullable=False)
    email = Column(Text, nullable=False)
    address = Column(Text, nullable=False, default="")

    @validates("name", "age", "email", "address")
    def _apply_field_rules(self, key, value):
        return validate_field(key, value)
