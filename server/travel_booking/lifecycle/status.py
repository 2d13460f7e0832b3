"""Booking status machine and the admin status-change flow."""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .errors import ConflictError, LifecycleError, NotAuthenticatedError, ServiceError
from .ports import BookingDataSource, IdentityProvider, NotificationSink
from .types import BookingRecord, BookingStatus, Identity

logger = logging.getLogger(__name__)

class Transition(BaseModel):
    """A legal move between two statuses."""

    model_config = ConfigDict(frozen=True)

    from_status: BookingStatus
    to_status: BookingStatus


class NoTransitionAvailable(BaseModel):
    """The requested move is not defined from the current status."""

    model_config = ConfigDict(frozen=True)

    current_status: BookingStatus
    requested_status: BookingStatus


TransitionPlan = Union[Transition, NoTransitionAvailable]

# Admin actions keyed by the status they lead to.
APPROVE = BookingStatus.CONFIRMED
REJECT = BookingStatus.CANCELLED


def allowed_targets(status: BookingStatus) -> Tuple[BookingStatus, ...]:
    """Statuses an admin may move a booking to from ``status``."""
    if status == BookingStatus.PENDING:
        return (BookingStatus.CONFIRMED, BookingStatus.CANCELLED)
    if status == BookingStatus.CONFIRMED:
        return ()
    if status == BookingStatus.CANCELLED:
        return ()
    raise ValueError(f"Unknown booking status: {status!r}")


def plan_transition(current: BookingStatus, requested: BookingStatus) -> TransitionPlan:
    """Resolve a requested status change against the machine."""
    if requested in allowed_targets(current):
        return Transition(from_status=current, to_status=requested)
    return NoTransitionAvailable(current_status=current, requested_status=requested)


def is_terminal(status: BookingStatus) -> bool:
    """Return True for statuses with no outgoing admin transition."""
    return not allowed_targets(status)


class StatusMessages(BaseModel):
    """Caller-supplied text for status-change notifications."""

    status_labels: Dict[BookingStatus, str] = {
        BookingStatus.PENDING: "pending",
        BookingStatus.CONFIRMED: "confirmed",
        BookingStatus.CANCELLED: "cancelled",
    }
    status_changed: str = "Booking {id} has been {status}!"
    update_failed: str = "Error updating booking status"
    conflict: str = "Booking {id} is no longer pending"
    no_transition: str = "Booking {id} cannot be moved from {current} to {status}"
    unauthorized: str = "Unauthorized"

    def label(self, status: BookingStatus) -> str:
        return self.status_labels.get(status, status.value)


class StatusChangeOutcome(BaseModel):
    """Result of one admin status-change attempt."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    booking: BookingRecord
    applied: bool
    error: Optional[LifecycleError] = None


def is_admin_session(
    identity: Optional[Identity],
    now: Optional[datetime] = None,
    admin_role: str = "admin",
) -> bool:
    """Return True for an unexpired identity holding ``admin_role``."""
    if identity is None or identity.role != admin_role:
        return False
    if identity.expires_at is None:
        return True
    now = now or datetime.now(timezone.utc)
    expires_at = identity.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at > now


class BookingStatusCoordinator:
    """
    Applies admin approve/reject actions.

    Status changes are not optimistic: the returned booking carries the new
    status only after the data source acknowledged the change.
    """

    def __init__(
        self,
        data_source: BookingDataSource,
        identity: IdentityProvider,
        notifier: NotificationSink,
        messages: Optional[StatusMessages] = None,
        admin_role: str = "admin",
    ):
        self.data_source = data_source
        self.identity = identity
        self.notifier = notifier
        self.messages = messages or StatusMessages()
        self.admin_role = admin_role

    async def approve(self, booking: BookingRecord) -> StatusChangeOutcome:
        """Move a pending booking to confirmed."""
        return await self.change_status(booking, APPROVE)

    async def reject(self, booking: BookingRecord) -> StatusChangeOutcome:
        """Move a pending booking to cancelled."""
        return await self.change_status(booking, REJECT)

    async def change_status(self, booking: BookingRecord, new_status: BookingStatus) -> StatusChangeOutcome:
        """
        Request a status transition for a booking.

        Args:
            booking: Booking as currently displayed
            new_status: Requested status

        Returns:
            StatusChangeOutcome: the booking to display and the error, if any
        """
        if not is_admin_session(self.identity.current_identity(), admin_role=self.admin_role):
            self.notifier.error(self.messages.unauthorized)
            return self._rejected(booking, NotAuthenticatedError(self.messages.unauthorized))

        plan = plan_transition(booking.status, new_status)
        if isinstance(plan, NoTransitionAvailable):
            message = self.messages.no_transition.format(
                id=booking.booking_id,
                current=self.messages.label(plan.current_status),
                status=self.messages.label(plan.requested_status),
            )
            logger.warning(
                "Status change refused - no transition available",
                extra={
                    "booking_id": booking.booking_id,
                    "current_status": plan.current_status.value,
                    "requested_status": plan.requested_status.value,
                },
            )
            self.notifier.error(message)
            return self._rejected(booking, ConflictError(message, booking.booking_id, booking.status.value))

        try:
            result = await self.data_source.update_booking_status(booking.booking_id, plan.to_status)
        except ConflictError as e:
            message = self.messages.conflict.format(id=booking.booking_id)
            logger.warning(
                "Status change rejected by server - precondition no longer holds",
                extra={
                    "booking_id": booking.booking_id,
                    "requested_status": plan.to_status.value,
                    "current_status": e.current_status,
                },
            )
            self.notifier.error(message)
            return self._rejected(booking, e)
        except NotAuthenticatedError as e:
            self.notifier.error(self.messages.unauthorized)
            return self._rejected(booking, e)
        except Exception as e:
            logger.error(
                "Status change request failed",
                extra={"booking_id": booking.booking_id, "error": str(e)},
            )
            self.notifier.error(self.messages.update_failed)
            return self._rejected(booking, ServiceError(self.messages.update_failed))

        if not result.success:
            message = result.error or result.message or self.messages.update_failed
            self.notifier.error(message)
            return self._rejected(booking, ServiceError(message))

        updated = booking.model_copy(update={"status": plan.to_status})
        self.notifier.success(
            self.messages.status_changed.format(
                id=booking.booking_id,
                status=self.messages.label(plan.to_status),
            )
        )
        logger.info(
            "Booking status changed",
            extra={
                "booking_id": booking.booking_id,
                "from_status": plan.from_status.value,
                "to_status": plan.to_status.value,
            },
        )
        return StatusChangeOutcome(booking=updated, applied=True)

    @staticmethod
    def _rejected(booking: BookingRecord, error: LifecycleError) -> StatusChangeOutcome:
        return StatusChangeOutcome(booking=booking, applied=False, error=error)
