"""Optimistic booking-creation flow for the tour booking form."""

import logging
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .errors import (
    LifecycleError,
    NotAuthenticatedError,
    ServiceError,
    StructuredValidationError,
    SubmissionInProgressError,
)
from .ports import USER_BOOKINGS_CACHE_KEY, BookingDataSource, CacheInvalidator, IdentityProvider, NotificationSink
from .types import BookingForm, BookingRecord, Identity

logger = logging.getLogger(__name__)

DEFAULT_GUESTS = 2


class SubmissionState(str, Enum):
    """Submission state of a booking form."""
    IDLE = "idle"
    SUBMITTING = "submitting"


class SubmissionMessages(BaseModel):
    """Caller-supplied text for booking submission notifications."""

    booking_success: str = "Booking request submitted successfully!"
    booking_error: str = "Failed to create booking. Please try again."
    login_to_book: str = "Please log in to book this tour"


class SubmissionOutcome(BaseModel):
    """Authoritative result of one booking submission."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    success: bool
    booking: Optional[BookingRecord] = None
    error: Optional[LifecycleError] = None
    notified_errors: List[str] = []


class OptimisticSubmissionCoordinator:
    """
    Drives one booking form through ``idle -> submitting -> idle``.

    While submitting, the form displays the optimistic snapshot taken at submit
    time and rejects edits. The live values are kept separately; after a failed
    submission the form shows the live values, never the snapshot.
    """

    def __init__(
        self,
        tour_id: int,
        data_source: BookingDataSource,
        identity: IdentityProvider,
        notifier: NotificationSink,
        cache: CacheInvalidator,
        messages: Optional[SubmissionMessages] = None,
        default_guests: int = DEFAULT_GUESTS,
    ):
        self.tour_id = tour_id
        self.data_source = data_source
        self.identity = identity
        self.notifier = notifier
        self.cache = cache
        self.messages = messages or SubmissionMessages()
        self.default_guests = default_guests
        self.state = SubmissionState.IDLE
        self._snapshot: Optional[BookingForm] = None
        self._live = self.defaults()

    def defaults(self) -> BookingForm:
        """Blank form pre-filled from the signed-in user, if any."""
        return self._defaults_for(self.identity.current_identity())

    def _defaults_for(self, identity: Optional[Identity]) -> BookingForm:
        return BookingForm(
            tour_id=self.tour_id,
            name=(identity.name if identity else None) or "",
            email=(identity.email if identity else None) or "",
            phone=(identity.phone_number if identity else None) or "",
            date="",
            guests=self.default_guests,
            message="",
        )

    @property
    def is_disabled(self) -> bool:
        """Fields and submit control are disabled until the outcome is known."""
        return self.state == SubmissionState.SUBMITTING

    @property
    def live_values(self) -> BookingForm:
        return self._live

    @property
    def displayed(self) -> BookingForm:
        """Values to render: the optimistic snapshot while submitting, else the live form."""
        if self.state == SubmissionState.SUBMITTING and self._snapshot is not None:
            return self._snapshot
        return self._live

    def edit(self, **values) -> BookingForm:
        """
        Apply user edits to the live form.

        Raises:
            SubmissionInProgressError: If the form is disabled
        """
        if self.is_disabled:
            raise SubmissionInProgressError()
        self._live = self._live.model_copy(update=values)
        return self._live

    def on_identity_changed(self) -> None:
        """Clear the live form when nobody is signed in any more."""
        if self.identity.current_identity() is None:
            self._live = self._defaults_for(None)

    async def submit(self) -> SubmissionOutcome:
        """
        Submit the form.

        Returns:
            SubmissionOutcome: the server's authoritative result

        Raises:
            NotAuthenticatedError: If the signed-in user has no email; nothing
                is shown optimistically and no request is made
            SubmissionInProgressError: If a submission is already outstanding
        """
        if self.is_disabled:
            raise SubmissionInProgressError()

        identity = self.identity.current_identity()
        if identity is None or not identity.email:
            self.notifier.error(self.messages.login_to_book)
            raise NotAuthenticatedError(self.messages.login_to_book)

        self._snapshot = self._live.model_copy()
        self.state = SubmissionState.SUBMITTING
        self.notifier.success(self.messages.booking_success)

        try:
            result = await self.data_source.create_booking(self._snapshot)
        except Exception as e:
            logger.error(
                "Booking submission failed",
                extra={"tour_id": self.tour_id, "error": str(e)},
            )
            return self._fail(ServiceError(self.messages.booking_error), [self.messages.booking_error])
        finally:
            self._snapshot = None
            self.state = SubmissionState.IDLE

        if result.success:
            self._live = self.defaults()
            self.cache.invalidate(USER_BOOKINGS_CACHE_KEY)
            logger.info(
                "Booking submission confirmed",
                extra={
                    "tour_id": self.tour_id,
                    "booking_id": result.booking.booking_id if result.booking else None,
                },
            )
            return SubmissionOutcome(success=True, booking=result.booking)

        field_errors = {field: messages for field, messages in (result.errors or {}).items() if messages}
        if field_errors:
            error = StructuredValidationError(field_errors, result.message or self.messages.booking_error)
            return self._fail(error, error.messages())

        message = result.message or result.error or self.messages.booking_error
        return self._fail(ServiceError(message), [message])

    def _fail(self, error: LifecycleError, messages: List[str]) -> SubmissionOutcome:
        self.notifier.dismiss()
        for message in messages:
            self.notifier.error(message)
        logger.warning(
            "Booking submission rejected",
            extra={"tour_id": self.tour_id, "error_count": len(messages)},
        )
        return SubmissionOutcome(success=False, error=error, notified_errors=messages)
