"""
Domain errors and update outcomes.

Services raise these; the API layer maps each one to an HTTP status
(see ``bookcourier.api.app``).
"""

from __future__ import annotations

from enum import Enum


class BookCourierError(Exception):
    """Base exception for domain errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(BookCourierError):
    """Missing or invalid credential."""

    status_code = 401
    default_message = "Unauthorized"


class Forbidden(BookCourierError):
    """Valid identity, wrong role or not the owner."""

    status_code = 403
    default_message = "Forbidden"


class NotFound(BookCourierError):
    """Referenced entity does not exist."""

    status_code = 404
    default_message = "Not found"


class Conflict(BookCourierError):
    """Request clashes with existing state (e.g. duplicate wishlist entry)."""

    status_code = 400
    default_message = "Conflict"


class InvalidInput(BookCourierError):
    """Request is well-formed but carries an unacceptable value."""

    status_code = 400
    default_message = "Invalid input"


class InvalidTransition(Conflict):
    """Order status change out of a terminal state."""

    default_message = "Invalid status transition"


class UpdateOutcome(str, Enum):
    """Result of an update that may not apply."""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    NOOP = "noop"
    UPDATED = "updated"

    @property
    def succeeded(self) -> bool:
        return self is UpdateOutcome.UPDATED
