"""Business logic services."""

from .booking_service import BookingService
from .payment_service import PaymentService
from .tour_service import TourService
from .user_service import UserService

__all__ = [
    "BookingService",
    "PaymentService",
    "TourService",
    "UserService",
]
