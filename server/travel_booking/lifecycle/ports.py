"""Boundary contracts consumed by the booking lifecycle components."""

from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from .types import BookingForm, BookingRecord, BookingStatus, CardData, Identity, PaymentMethod

USER_BOOKINGS_CACHE_KEY = "userBookings"


class CreateBookingResult(BaseModel):
    """Outcome of a booking-creation request."""

    success: bool
    booking: Optional[BookingRecord] = None
    error: Optional[str] = None
    message: Optional[str] = None
    errors: Optional[Dict[str, List[str]]] = None


class StatusUpdateResult(BaseModel):
    """Outcome of a status-transition request."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


class ProcessPaymentRequest(BaseModel):
    """A single payment attempt against a booking."""

    booking_id: int = Field(..., ge=1, description="Booking to pay for")
    payment_method: PaymentMethod = Field(..., description="Instrument to charge")
    card_data: Optional[CardData] = Field(None, description="Required when paying by card")


class PaymentResult(BaseModel):
    """Outcome of a payment attempt."""

    success: bool
    payment_id: Optional[int] = None
    transaction_id: Optional[str] = None
    error: Optional[str] = None


class BookingDataSource(Protocol):
    """Where bookings are listed, created and transitioned."""

    async def list_bookings(self) -> List[BookingRecord]: ...

    async def create_booking(self, form: BookingForm) -> CreateBookingResult: ...

    async def update_booking_status(self, booking_id: int, new_status: BookingStatus) -> StatusUpdateResult: ...


class PaymentDataSource(Protocol):
    """Where payment attempts are settled."""

    async def process_payment(self, request: ProcessPaymentRequest) -> PaymentResult: ...


class IdentityProvider(Protocol):
    """Supplies the current user, or None when nobody is signed in."""

    def current_identity(self) -> Optional[Identity]: ...


class NotificationSink(Protocol):
    """Fire-and-forget user notifications."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def dismiss(self) -> None: ...


class CacheInvalidator(Protocol):
    """Named-key invalidation of cached views."""

    def invalidate(self, key: str) -> None: ...


class StaticIdentityProvider:
    """Identity provider returning a fixed identity."""

    def __init__(self, identity: Optional[Identity] = None):
        self.identity = identity

    def current_identity(self) -> Optional[Identity]:
        return self.identity
