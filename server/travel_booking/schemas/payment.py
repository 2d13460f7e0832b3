"""Payment-related Pydantic schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field

from ..lifecycle.ports import PaymentResult, ProcessPaymentRequest
from ..lifecycle.types import BookingRecord, CardData, PaymentMethod


class BookingForPaymentRequest(BaseModel):
    """Request schema for loading a booking onto the payment form."""

    booking_id: int = Field(..., ge=1, description="Booking to pay for")


class BookingForPaymentResponse(BaseModel):
    """Booking and the amounts shown by the payment form and order summary."""

    booking: BookingRecord
    subtotal: Decimal = Field(..., description="Price per person times guests")
    taxes: Decimal = Field(..., description="Taxes on the subtotal")
    total: Decimal = Field(..., description="Amount charged")


__all__ = [
    "BookingForPaymentRequest",
    "BookingForPaymentResponse",
    "CardData",
    "PaymentMethod",
    "PaymentResult",
    "ProcessPaymentRequest",
]
