"""Payment reconciliation and the operator-facing payment badge."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .errors import LifecycleError, ServiceError, SubmissionInProgressError, ValidationError
from .ports import NotificationSink, PaymentDataSource, ProcessPaymentRequest
from .types import BookingRecord, CardData, PaymentMethod, PaymentRecord, PaymentStatus

logger = logging.getLogger(__name__)


class PaymentStatusColor(str, Enum):
    """Severity shown next to a payment label."""
    RED = "red"
    GREEN = "green"


class PaymentLabels(BaseModel):
    """Caller-supplied text for payment labels and notifications."""

    unpaid: str = "Unpaid"
    paid: str = "Paid"
    banking: str = "Banking"
    credit_card: str = "Credit Card"
    failed: str = "Failed"
    pending: str = "Pending"
    card_data_required: str = "Please fill in all card details"
    payment_successful: str = "Payment successful!"
    payment_failed: str = "Payment failed"
    payment_error: str = "An error occurred while processing your payment. Please try again."


DEFAULT_LABELS = PaymentLabels()


def is_settled(payment: Optional[PaymentRecord]) -> bool:
    """A payment counts as paid only once completed."""
    return payment is not None and payment.status == PaymentStatus.COMPLETED


def format_payment_status(payment: Optional[PaymentRecord], labels: PaymentLabels = DEFAULT_LABELS) -> str:
    """Human-facing payment label for the bookings table."""
    if payment is None:
        return labels.unpaid

    if is_settled(payment):
        if payment.payment_method == PaymentMethod.INTERNET_BANKING:
            method = labels.banking
        else:
            method = labels.credit_card
        return f"{labels.paid} ({method})"

    if payment.status == PaymentStatus.FAILED:
        return labels.failed

    return labels.pending


def get_payment_status_color(payment: Optional[PaymentRecord]) -> PaymentStatusColor:
    """Green for completed payments, red for everything else."""
    if is_settled(payment):
        return PaymentStatusColor.GREEN
    return PaymentStatusColor.RED


def validate_payment_request(request: ProcessPaymentRequest) -> None:
    """
    Check instrument data before contacting the server.

    Raises:
        ValidationError: If paying by card with any card field empty
    """
    if request.payment_method != PaymentMethod.CARD:
        return
    if request.card_data is None or not request.card_data.is_complete():
        raise ValidationError("incomplete card data")


class PaymentOutcome(BaseModel):
    """Result of one payment submission."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    booking: BookingRecord
    success: bool
    message: str
    error: Optional[LifecycleError] = None


class PaymentReconciler:
    """
    Submits payment attempts and attaches the outcome to the booking.

    A failed attempt is reported but never recorded as ``failed`` here; the
    user may simply retry.
    """

    def __init__(
        self,
        data_source: PaymentDataSource,
        notifier: NotificationSink,
        labels: PaymentLabels = DEFAULT_LABELS,
    ):
        self.data_source = data_source
        self.notifier = notifier
        self.labels = labels
        self.is_processing = False

    async def submit(
        self,
        booking: BookingRecord,
        payment_method: PaymentMethod,
        card_data: Optional[CardData] = None,
    ) -> PaymentOutcome:
        """
        Pay for a booking.

        Args:
            booking: Booking being paid for
            payment_method: Selected instrument
            card_data: Card fields, used only when paying by card

        Returns:
            PaymentOutcome: the booking with its payment outcome attached

        Raises:
            ValidationError: If card data is incomplete; no request is made
            SubmissionInProgressError: If a payment is already being processed
        """
        if self.is_processing:
            raise SubmissionInProgressError()

        request = ProcessPaymentRequest(
            booking_id=booking.booking_id,
            payment_method=payment_method,
            card_data=card_data if payment_method == PaymentMethod.CARD else None,
        )
        try:
            validate_payment_request(request)
        except ValidationError:
            self.notifier.error(self.labels.card_data_required)
            raise

        self.is_processing = True
        try:
            result = await self.data_source.process_payment(request)
        except Exception as e:
            logger.error(
                "Payment request failed",
                extra={
                    "booking_id": booking.booking_id,
                    "payment_method": payment_method.value,
                    "error": str(e),
                },
            )
            self.notifier.error(self.labels.payment_error)
            return PaymentOutcome(
                booking=booking,
                success=False,
                message=self.labels.payment_error,
                error=ServiceError(self.labels.payment_error),
            )
        finally:
            self.is_processing = False

        if not result.success:
            message = result.error or self.labels.payment_failed
            logger.warning(
                "Payment declined",
                extra={"booking_id": booking.booking_id, "payment_method": payment_method.value},
            )
            self.notifier.error(message)
            return PaymentOutcome(booking=booking, success=False, message=message, error=ServiceError(message))

        payment = PaymentRecord(
            status=PaymentStatus.COMPLETED,
            payment_method=payment_method,
            transaction_id=result.transaction_id,
            paid_at=datetime.now(timezone.utc),
        )
        # A retry replaces whatever outcome was attached before.
        paid_booking = booking.model_copy(update={"payment": payment})
        self.notifier.success(self.labels.payment_successful)
        logger.info(
            "Payment completed",
            extra={
                "booking_id": booking.booking_id,
                "payment_method": payment_method.value,
                "transaction_id": result.transaction_id,
            },
        )
        return PaymentOutcome(booking=paid_booking, success=True, message=self.labels.payment_successful)
