"""Domain error taxonomy.

Stores and ledgers raise these; the web layer maps each kind 1:1 to a
transport status (see ``web.backend.app.errors``).
"""

from __future__ import annotations

from typing import Optional


class DevHubError(Exception):
    """Base class for all domain failures."""

    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(DevHubError):
    """Malformed input rejected before (or by) an operation.

    ``errors`` is a list of ``{"field": ..., "message": ...}`` dicts.
    """

    default_message = "Validation failed"

    def __init__(self, errors: Optional[list[dict]] = None, message: Optional[str] = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls([{"field": field, "message": message}])


class NotFound(DevHubError):
    default_message = "Resource not found"


class Forbidden(DevHubError):
    default_message = "Not authorized to perform this action"


class Conflict(DevHubError):
    default_message = "Resource already exists"


class Unauthorized(DevHubError):
    default_message = "Not authenticated"


class DeliveryFailed(DevHubError):
    """An outbound notification required for success did not complete."""

    default_message = "Failed to deliver notification. Please try again."


class Internal(DevHubError):
    default_message = "Internal server error"
