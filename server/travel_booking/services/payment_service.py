"""Payment service settling payment attempts against bookings."""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AuthenticatedUser
from ..core.exceptions import PaymentNotAllowedError
from ..core.observability import metrics_collector
from ..lifecycle.errors import ValidationError as IncompletePaymentError
from ..lifecycle.payments import validate_payment_request
from ..lifecycle.ports import ProcessPaymentRequest
from ..lifecycle.types import BookingStatus, PaymentStatus
from ..models.payment import Payment
from .booking_service import BookingService

logger = logging.getLogger(__name__)


def generate_transaction_id(booking_id: int) -> str:
    """Gateway-style reference: ``TXN-<epoch-ms>-<bookingId>``."""
    return f"TXN-{int(time.time() * 1000)}-{booking_id}"


class PaymentService:
    """
    Service for payment-related operations.

    The gateway is simulated: once a booking passes the precondition checks
    the charge always succeeds.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.booking_service = BookingService(db)

    async def get_payment_by_booking_id(self, booking_id: int) -> Optional[Payment]:
        """
        Get the current payment record of a booking.

        Args:
            booking_id: Booking the payment belongs to

        Returns:
            Payment if one was ever attempted, None otherwise
        """
        stmt = select(Payment).where(Payment.booking_id == booking_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def process_payment(self, request: ProcessPaymentRequest, user: AuthenticatedUser) -> Payment:
        """
        Charge the caller's booking and record the outcome.

        Retries overwrite the booking's single payment record.

        Args:
            request: Payment attempt
            user: Authenticated caller, who must own the booking

        Returns:
            The completed payment record

        Raises:
            NotFoundError: If the booking does not exist or belongs to someone else
            PaymentNotAllowedError: If the card data is incomplete, the booking
                is cancelled or it is already paid
        """
        method = request.payment_method.value
        try:
            validate_payment_request(request)
        except IncompletePaymentError as e:
            metrics_collector.record_payment(method, "rejected")
            raise PaymentNotAllowedError(
                booking_id=request.booking_id,
                detail="Please fill in all card details",
                code="INCOMPLETE_CARD_DATA",
            ) from e

        booking, amounts = await self.booking_service.get_booking_for_payment(request.booking_id, user)

        if booking.status == BookingStatus.CANCELLED.value:
            metrics_collector.record_payment(method, "rejected")
            logger.warning(
                "Payment rejected - booking cancelled",
                extra={"booking_id": booking.booking_id, "user_id": user.user_id}
            )
            raise PaymentNotAllowedError(
                booking_id=booking.booking_id,
                detail="Booking is cancelled",
                code="BOOKING_CANCELLED",
            )

        payment = booking.payment
        if payment is not None and payment.status == PaymentStatus.COMPLETED.value:
            metrics_collector.record_payment(method, "rejected")
            logger.warning(
                "Payment rejected - already completed",
                extra={"booking_id": booking.booking_id, "payment_id": payment.payment_id}
            )
            raise PaymentNotAllowedError(
                booking_id=booking.booking_id,
                detail="Payment already completed",
                code="PAYMENT_ALREADY_COMPLETED",
            )

        booking_id = booking.booking_id
        if payment is None:
            payment = Payment(booking_id=booking_id)
            self.db.add(payment)

        payment.amount = amounts.total
        payment.payment_method = method
        payment.status = PaymentStatus.COMPLETED.value
        payment.transaction_id = generate_transaction_id(booking_id)
        payment.paid_at = datetime.now(timezone.utc)

        try:
            await self.db.commit()
        except IntegrityError as e:
            # A concurrent attempt inserted the booking's payment row first
            await self.db.rollback()
            metrics_collector.record_payment(method, "rejected")
            logger.warning(
                "Payment rejected - concurrent payment recorded first",
                extra={"booking_id": booking_id, "user_id": user.user_id}
            )
            raise PaymentNotAllowedError(
                booking_id=booking_id,
                detail="Payment already completed",
                code="PAYMENT_ALREADY_COMPLETED",
            ) from e
        await self.db.refresh(payment)

        metrics_collector.record_payment(method, "completed")
        logger.info(
            "Payment processed successfully",
            extra={
                "booking_id": booking.booking_id,
                "payment_id": payment.payment_id,
                "payment_method": method,
                "amount": str(payment.amount),
                "transaction_id": payment.transaction_id
            }
        )

        return payment
