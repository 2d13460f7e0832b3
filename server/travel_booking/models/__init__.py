"""Models module exporting all database models."""

from .booking import Booking
from .payment import Payment
from .tour import Tour
from .user import User

__all__ = [
    "Tour",
    "User",
    "Booking",
    "Payment",
]
