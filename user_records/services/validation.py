"""Declarative field rules for user records.

The same ``FIELD_RULES`` table normalizes and validates input on create,
on partial update, and again inside the model when attributes are written.
"""

import re
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from user_records.services.errors import ValidationError


class _Missing:
    """Marker for a field that was not supplied at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")

# Upper bound of the 32-bit Integer column
MAX_INTEGER = 2**31 - 1

INVALID_ID_MESSAGE = "Invalid user id"


def _text(label: str) -> Callable[[Any], str]:
    def normalize(value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(f"{label} must be a string")
        return value.strip()

    return normalize


def _email(value: Any) -> str:
    return _text("Email")(value).lower()


def _integer(value: Any) -> int:
    """Coerce ints, integral floats and digit strings; reject everything else."""
    # bool is an int subclass but never a valid age
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and INTEGER_PATTERN.match(value.strip()):
        return int(value.strip())
    raise ValueError(value)


@dataclass(frozen=True)
class FieldRule:
    """Normalization plus constraints for a single field."""

    label: str
    normalize: Callable[[Any], Any]
    message: str
    required: bool = True
    default: Any = None
    min_length: int | None = None
    minimum: int | None = None
    maximum: int | None = None
    pattern: re.Pattern[str] | None = None

    def apply(self, value: Any) -> Any:
        """Return the normalized value or raise ``ValidationError``."""
        if value is None or value is MISSING:
            if self.required:
                raise ValidationError(f"{self.label} is required")
            return self.default

        try:
            value = self.normalize(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(self.message) from e

        if self.required and value == "":
            raise ValidationError(f"{self.label} is required")
        if self.min_length is not None and len(value) < self.min_length:
            raise ValidationError(self.message)
        if self.minimum is not None and value < self.minimum:
            raise ValidationError(self.message)
        if self.maximum is not None and value > self.maximum:
            raise ValidationError(f"{self.label} must be at most {self.maximum}")
        if self.pattern is not None and not self.pattern.match(value):
            raise ValidationError(self.message)
        return value


# Evaluation order matters: the first violated rule is the one reported.
FIELD_RULES: dict[str, FieldRule] = {
    "age": FieldRule(
        label="Age",
        normalize=_integer,
        message="Age must be an integer >= 0",
        minimum=0,
        maximum=MAX_INTEGER,
    ),
    "name": FieldRule(
        label="Name",
        normalize=_text("Name"),
        message="Name must be at least 2 characters",
        min_length=2,
    ),
    "email": FieldRule(
        label="Email",
        normalize=_email,
        message="Email is invalid",
        pattern=EMAIL_PATTERN,
    ),
    "address": FieldRule(
        label="Address",
        normalize=_text("Address"),
        message="Address must be a string",
        required=False,
        default="",
    ),
}


def validate_field(field: str, value: Any) -> Any:
    """Apply the rule for one field."""
    return FIELD_RULES[field].apply(value)


def validate_fields(data: Mapping[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """Normalize a set of fields against ``FIELD_RULES``.

    With ``partial`` only the keys present in ``data`` are checked and
    returned; otherwise every field is checked and defaults are filled in.
    """
    cleaned = {}
    for field, rule in FIELD_RULES.items():
        value = data.get(field, MISSING)
        if partial and value is MISSING:
            continue
        cleaned[field] = rule.apply(value)
    return cleaned


def parse_record_id(raw: Any) -> uuid.UUID:
    """Parse a record id, rejecting anything that is not a canonical UUID."""
    if isinstance(raw, uuid.UUID):
        return raw
    if not isinstance(raw, str):
        raise ValidationError(INVALID_ID_MESSAGE)
    try:
        parsed = uuid.UUID(raw)
    except ValueError as e:
        raise ValidationError(INVALID_ID_MESSAGE) from e
    # uuid.UUID also accepts braces, urn prefixes and missing hyphens
    if str(parsed) != raw.lower():
        raise ValidationError(INVALID_ID_MESSAGE)
    return parsed
