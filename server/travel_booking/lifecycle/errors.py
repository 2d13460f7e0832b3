"""Errors raised or reported by the booking lifecycle components.

These never carry raw transport or exception text meant for the end user;
``message`` is always safe to show.
"""

from typing import Dict, List, Optional


class LifecycleError(Exception):
    """Base class for booking lifecycle errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LifecycleError):
    """Local validation failed before any request was made."""

    def __init__(self, message: str = "incomplete card data"):
        super().__init__(message)


class NotAuthenticatedError(LifecycleError):
    """No identity or no valid session for the attempted operation."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ConflictError(LifecycleError):
    """The server-side state no longer matches the operation's precondition."""

    def __init__(
        self,
        message: str = "The booking is no longer pending",
        booking_id: Optional[int] = None,
        current_status: Optional[str] = None,
    ):
        super().__init__(message)
        self.booking_id = booking_id
        self.current_status = current_status


class StructuredValidationError(LifecycleError):
    """The server rejected the request with per-field messages."""

    def __init__(self, errors: Dict[str, List[str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    def messages(self) -> List[str]:
        """Flatten field errors in field order."""
        return [message for field_messages in self.errors.values() for message in field_messages or []]


class ServiceError(LifecycleError):
    """The server reported failure or the request could not be completed."""


class SubmissionInProgressError(LifecycleError):
    """A submission from the same form is still awaiting its outcome."""

    def __init__(self, message: str = "A submission is already in progress"):
        super().__init__(message)
