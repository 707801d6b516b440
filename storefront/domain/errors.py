"""
Error taxonomy surfaced to callers of the content and form cores.

Every expected business outcome has its own exception class; the set of
kinds is closed (ErrorKind). The API layer turns these into JSON responses
with the matching HTTP status.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    BAD_REQUEST = "bad_request"
    VALIDATION = "validation"
    TOO_MANY_REQUESTS = "too_many_requests"
    DATABASE = "database"


class StorefrontError(Exception):
    """Base error. `operational` errors are expected and safe to show users."""

    kind: ErrorKind = ErrorKind.BAD_REQUEST
    status_code: int = 400
    operational: bool = True
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None, errors: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = list(errors) if errors else []
        super().__init__(self.message)


class NotFoundError(StorefrontError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Resource not found"


class ConflictError(StorefrontError):
    kind = ErrorKind.CONFLICT
    status_code = 409
    default_message = "Resource conflict"


class BadRequestError(StorefrontError):
    kind = ErrorKind.BAD_REQUEST
    status_code = 400
    default_message = "Bad request"


class ValidationError(StorefrontError):
    """Carries every offending field, not just the first."""

    kind = ErrorKind.VALIDATION
    status_code = 422
    default_message = "Validation failed"

    @property
    def fields(self) -> list[str]:
        names: list[str] = []
        for err in self.errors:
            name = err.get("field") if isinstance(err, dict) else getattr(err, "field", None)
            if name and name not in names:
                names.append(name)
        return names


class TooManyRequestsError(StorefrontError):
    kind = ErrorKind.TOO_MANY_REQUESTS
    status_code = 429
    default_message = "Too many requests. Please try again later."

    def __init__(self, message: str | None = None, retry_after_seconds: int = 900) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message)


class DatabaseError(StorefrontError):
    kind = ErrorKind.DATABASE
    status_code = 500
    operational = False
    default_message = "Database error"


def error_payload(error: StorefrontError) -> dict[str, Any]:
    """Format an error for an API response. Non-operational detail is hidden."""
    payload: dict[str, Any] = {
        "success": False,
        "code": error.kind.value,
        "message": error.message if error.operational else "Internal server error",
    }
    if error.errors:
        payload["errors"] = [
            e if isinstance(e, dict) else getattr(e, "to_dict", lambda: str(e))()
            for e in error.errors
        ]
    return payload
