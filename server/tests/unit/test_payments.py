"""Unit tests for payment reconciliation and payment badges."""

import asyncio

import pytest

from travel_booking.lifecycle.errors import ServiceError, SubmissionInProgressError, ValidationError
from travel_booking.lifecycle.payments import (
    PaymentLabels,
    PaymentReconciler,
    PaymentStatusColor,
    format_payment_status,
    get_payment_status_color,
    validate_payment_request,
)
from travel_booking.lifecycle.ports import PaymentResult, ProcessPaymentRequest
from travel_booking.lifecycle.types import CardData, PaymentMethod, PaymentRecord, PaymentStatus

FULL_CARD = CardData(card_number="4111111111111111", expiration="12/30", cvc="123")


@pytest.fixture
def reconciler(payment_source, notifier):
    return PaymentReconciler(payment_source, notifier)


class TestPaymentBadge:

    def test_unpaid(self):
        assert format_payment_status(None) == "Unpaid"
        assert get_payment_status_color(None) == PaymentStatusColor.RED

    def test_paid_by_card(self):
        payment = PaymentRecord(status=PaymentStatus.COMPLETED, payment_method=PaymentMethod.CARD)

        assert format_payment_status(payment) == "Paid (Credit Card)"
        assert get_payment_status_color(payment) == PaymentStatusColor.GREEN

    def test_paid_by_banking(self):
        payment = PaymentRecord(status=PaymentStatus.COMPLETED, payment_method=PaymentMethod.INTERNET_BANKING)

        assert format_payment_status(payment) == "Paid (Banking)"
        assert get_payment_status_color(payment) == PaymentStatusColor.GREEN

    def test_failed_and_pending(self):
        failed = PaymentRecord(status=PaymentStatus.FAILED, payment_method=PaymentMethod.CARD)
        pending = PaymentRecord(status=PaymentStatus.PENDING, payment_method=PaymentMethod.CARD)

        assert format_payment_status(failed) == "Failed"
        assert format_payment_status(pending) == "Pending"
        assert get_payment_status_color(failed) == PaymentStatusColor.RED
        assert get_payment_status_color(pending) == PaymentStatusColor.RED

    def test_caller_supplied_labels(self):
        labels = PaymentLabels(paid="Đã thanh toán", banking="Ngân hàng")
        payment = PaymentRecord(status=PaymentStatus.COMPLETED, payment_method=PaymentMethod.INTERNET_BANKING)

        assert format_payment_status(payment, labels) == "Đã thanh toán (Ngân hàng)"


class TestValidation:

    def test_card_with_empty_cvc_is_rejected(self):
        request = ProcessPaymentRequest(
            booking_id=1,
            payment_method=PaymentMethod.CARD,
            card_data=FULL_CARD.model_copy(update={"cvc": ""}),
        )

        with pytest.raises(ValidationError, match="incomplete card data"):
            validate_payment_request(request)

    def test_card_without_card_data_is_rejected(self):
        with pytest.raises(ValidationError):
            validate_payment_request(ProcessPaymentRequest(booking_id=1, payment_method=PaymentMethod.CARD))

    def test_internet_banking_needs_no_fields(self):
        validate_payment_request(ProcessPaymentRequest(booking_id=1, payment_method=PaymentMethod.INTERNET_BANKING))


@pytest.mark.asyncio
async def test_empty_cvc_makes_no_call(reconciler, payment_source, notifier, booking_factory):
    with pytest.raises(ValidationError):
        await reconciler.submit(
            booking_factory(),
            PaymentMethod.CARD,
            FULL_CARD.model_copy(update={"cvc": ""}),
        )

    assert payment_source.requests == []
    assert notifier.errors == ["Please fill in all card details"]
    assert not reconciler.is_processing


@pytest.mark.asyncio
async def test_successful_card_payment(reconciler, payment_source, notifier, booking_factory):
    payment_source.result = PaymentResult(success=True, payment_id=5, transaction_id="TXN-1-9")
    booking = booking_factory(booking_id=9)

    outcome = await reconciler.submit(booking, PaymentMethod.CARD, FULL_CARD)

    assert outcome.success
    assert outcome.booking.payment.status == PaymentStatus.COMPLETED
    assert outcome.booking.payment.payment_method == PaymentMethod.CARD
    assert outcome.booking.payment.transaction_id == "TXN-1-9"
    assert format_payment_status(outcome.booking.payment) == "Paid (Credit Card)"
    assert booking.payment is None
    assert payment_source.requests[0].card_data == FULL_CARD
    assert notifier.successes == ["Payment successful!"]


@pytest.mark.asyncio
async def test_banking_payment_drops_card_data(reconciler, payment_source, booking_factory):
    outcome = await reconciler.submit(booking_factory(), PaymentMethod.INTERNET_BANKING, FULL_CARD)

    assert outcome.success
    assert payment_source.requests[0].card_data is None
    assert format_payment_status(outcome.booking.payment) == "Paid (Banking)"


@pytest.mark.asyncio
async def test_declined_payment_is_not_marked_failed(reconciler, payment_source, notifier, booking_factory):
    """A declined attempt leaves the booking unpaid so the user can retry."""
    payment_source.result = PaymentResult(success=False, error="Booking is cancelled")

    outcome = await reconciler.submit(booking_factory(), PaymentMethod.INTERNET_BANKING)

    assert not outcome.success
    assert outcome.booking.payment is None
    assert isinstance(outcome.error, ServiceError)
    assert notifier.errors == ["Booking is cancelled"]


@pytest.mark.asyncio
async def test_declined_without_reason_uses_fallback(reconciler, payment_source, notifier, booking_factory):
    payment_source.result = PaymentResult(success=False)

    await reconciler.submit(booking_factory(), PaymentMethod.INTERNET_BANKING)

    assert notifier.errors == ["Payment failed"]


@pytest.mark.asyncio
async def test_transport_failure_hides_exception_text(reconciler, payment_source, notifier, booking_factory):
    payment_source.error = ConnectionError("10.0.0.3:5432 refused")

    outcome = await reconciler.submit(booking_factory(), PaymentMethod.INTERNET_BANKING)

    assert not outcome.success
    assert notifier.errors == ["An error occurred while processing your payment. Please try again."]
    assert "refused" not in outcome.message
    assert not reconciler.is_processing


@pytest.mark.asyncio
async def test_retry_after_failure_succeeds(reconciler, payment_source, booking_factory):
    booking = booking_factory()
    payment_source.result = PaymentResult(success=False, error="Payment failed")
    first = await reconciler.submit(booking, PaymentMethod.INTERNET_BANKING)

    payment_source.result = PaymentResult(success=True, transaction_id="TXN-2-1")
    second = await reconciler.submit(first.booking, PaymentMethod.INTERNET_BANKING)

    assert second.success
    assert second.booking.payment.status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_second_submit_while_processing(reconciler, payment_source, booking_factory):
    payment_source.gate = asyncio.Event()
    booking = booking_factory()

    first = asyncio.create_task(reconciler.submit(booking, PaymentMethod.INTERNET_BANKING))
    await asyncio.sleep(0)
    assert reconciler.is_processing

    with pytest.raises(SubmissionInProgressError):
        await reconciler.submit(booking, PaymentMethod.INTERNET_BANKING)

    payment_source.gate.set()
    outcome = await first

    assert outcome.success
    assert len(payment_source.requests) == 1
