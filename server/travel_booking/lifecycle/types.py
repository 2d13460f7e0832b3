"""Value types shared by the booking lifecycle components."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    """Payment method enumeration."""
    CARD = "card"
    INTERNET_BANKING = "internet_banking"


class UserRef(BaseModel):
    """Registered user a booking belongs to."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    user_id: int = Field(..., description="Unique user ID")
    full_name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Contact email")


class TourRef(BaseModel):
    """Read-only view of the tour a booking references."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    tour_id: int = Field(..., description="Unique tour ID")
    title: str = Field("", description="Tour title")
    price_per_person: Optional[Decimal] = Field(None, ge=0, description="Current price per guest")
    max_guests: Optional[int] = Field(None, ge=1, description="Maximum guests per booking")
    duration_days: Optional[int] = Field(None, ge=1, description="Tour length in days")
    start_date: Optional[date] = Field(None, description="First day of the tour")


class PaymentRecord(BaseModel):
    """The single current payment outcome attached to a booking."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    status: PaymentStatus = Field(..., description="Payment status")
    payment_method: PaymentMethod = Field(..., description="Instrument used for the attempt")
    amount: Optional[Decimal] = Field(None, ge=0, description="Amount charged")
    transaction_id: Optional[str] = Field(None, description="Gateway transaction reference")
    paid_at: Optional[datetime] = Field(None, description="Settlement time")


class BookingRecord(BaseModel):
    """
    A booking together with its tour, booker and payment relations.

    A booking has exactly one identity source: either a registered ``user``
    or a ``guest_full_name``/``guest_email`` pair.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    booking_id: int = Field(..., description="Unique booking ID")
    status: BookingStatus = Field(..., description="Lifecycle status")
    num_guests: int = Field(..., ge=1, description="Number of guests")
    total_price: Decimal = Field(..., ge=0, description="Total fixed at creation time")
    booking_date: date = Field(..., description="Departure date")
    tour: Optional[TourRef] = None
    user: Optional[UserRef] = None
    guest_full_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    message: Optional[str] = None
    payment: Optional[PaymentRecord] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_identity_source(self) -> "BookingRecord":
        """Require exactly one of a registered user or a guest name/email pair."""
        has_guest = bool(self.guest_full_name or self.guest_email)
        if self.user is not None and has_guest:
            raise ValueError("A booking cannot reference both a user and guest details")
        if self.user is None and not (self.guest_full_name and self.guest_email):
            raise ValueError("A guest booking requires both guest_full_name and guest_email")
        return self


class Identity(BaseModel):
    """The signed-in user as reported by the identity provider."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    role: str = "user"
    expires_at: Optional[datetime] = None


class CardData(BaseModel):
    """Card instrument fields as typed into the payment form."""

    card_number: str = ""
    expiration: str = ""
    cvc: str = ""

    def is_complete(self) -> bool:
        """Return True when every card field is non-empty."""
        return bool(self.card_number and self.expiration and self.cvc)


class BookingForm(BaseModel):
    """Booking-creation form values."""

    tour_id: Optional[int] = Field(None, description="Tour to book")
    name: str = Field("", description="Booker name")
    email: str = Field("", description="Booker email")
    phone: str = Field("", description="Booker phone number")
    date: str = Field("", description="Departure date (YYYY-MM-DD)")
    guests: Optional[int] = Field(None, description="Number of guests")
    message: str = Field("", description="Optional note to the operator")
