"""Booking-related Pydantic schemas."""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field

from ..lifecycle.aggregator import ALL, StatusFilter
from ..lifecycle.ports import CreateBookingResult, StatusUpdateResult
from ..lifecycle.types import BookingForm, BookingRecord, BookingStatus

# Wire shapes shared with the lifecycle core
CreateBookingRequest = BookingForm
Booking = BookingRecord


class UpdateBookingStatusRequest(BaseModel):
    """Request schema for an admin status transition."""

    booking_id: int = Field(..., ge=1, description="Booking to transition")
    status: BookingStatus = Field(..., description="Requested target status")


class BookingIdRequest(BaseModel):
    """Request schema for operations addressing a single booking."""

    booking_id: int = Field(..., ge=1, description="Booking ID")


class BookingListResponse(BaseModel):
    """List of bookings with their tour, user and payment relations."""

    bookings: List[Booking] = Field(default_factory=list)


class BookingStatsRequest(BaseModel):
    """Filter criteria for the admin statistics endpoint."""

    status: StatusFilter = Field(ALL, description="Status to filter by, or 'All'")
    search_term: str = Field("", max_length=255, description="Free-text search")


class BookingStatsResponse(BaseModel):
    """Statistics over all bookings plus the size of the filtered view."""

    pending_count: int = Field(..., ge=0)
    confirmed_count: int = Field(..., ge=0)
    total_revenue: Decimal = Field(..., ge=0, description="Sum of non-cancelled booking totals")
    visible_count: int = Field(..., ge=0, description="Bookings matching the filter criteria")


class DashboardStatsResponse(BaseModel):
    """Admin dashboard figures for the current calendar month."""

    current_month_revenue: Decimal = Field(..., ge=0, description="Total of paid bookings created this month")
    last_month_revenue: Decimal = Field(..., ge=0, description="Total of paid bookings created last month")
    revenue_change: float = Field(..., description="Revenue change versus last month, in percent")
    current_month_paid_bookings: int = Field(..., ge=0)
    last_month_paid_bookings: int = Field(..., ge=0)
    bookings_change: float = Field(..., description="Paid booking count change versus last month, in percent")
    total_bookings: int = Field(..., ge=0, description="All bookings regardless of status or payment")
    recent_bookings: List[Booking] = Field(default_factory=list, description="Most recently created bookings")


class MessageResponse(BaseModel):
    """Plain success acknowledgement."""

    success: bool = True
    message: str


__all__ = [
    "Booking",
    "BookingIdRequest",
    "BookingListResponse",
    "BookingStatsRequest",
    "BookingStatsResponse",
    "BookingStatus",
    "CreateBookingRequest",
    "CreateBookingResult",
    "DashboardStatsResponse",
    "MessageResponse",
    "StatusUpdateResult",
    "UpdateBookingStatusRequest",
]
