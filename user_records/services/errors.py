"""Service-level exceptions.

Each exception carries the HTTP status it maps to, so the API layer can
render any of them as ``{"error": message}`` without a lookup table.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Malformed or out-of-range input, including malformed ids."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ServiceError):
    """A unique field collides with an existing record."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    """No record matches the given id."""

    status_code = status.HTTP_404_NOT_FOUND


class StoreError(ServiceError):
    """Unexpected persistence failure. Driver details stay out of the message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


class DuplicateKeyError(StoreError):
    """The store rejected a write because of a unique constraint."""

    def __init__(self, field: str):
        super().__init__()
        self.field = field
