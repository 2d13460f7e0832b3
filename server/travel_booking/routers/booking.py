"""Booking router for booking operations."""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, AuthenticatedUser, DatabaseSession, OptionalAuth, RequiredAuth
from ..core.exceptions import DuplicateBookingError, NotFoundError, ValidationError
from ..lifecycle.aggregator import BookingAggregator, BookingFilterCriteria
from ..lifecycle.status import StatusMessages
from ..schemas.booking import (
    Booking,
    BookingIdRequest,
    BookingListResponse,
    BookingStatsRequest,
    BookingStatsResponse,
    BookingStatus,
    CreateBookingRequest,
    CreateBookingResult,
    DashboardStatsResponse,
    MessageResponse,
    StatusUpdateResult,
    UpdateBookingStatusRequest,
)
from ..services.booking_service import BookingMessages, BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"])

STATUS_MESSAGES = StatusMessages()


def _json(model) -> JSONResponse:
    return JSONResponse(status_code=200, content=model.model_dump(mode="json"))


@router.post("/create", response_model=CreateBookingResult)
async def create_booking(
    request: CreateBookingRequest,
    user: Optional[AuthenticatedUser] = OptionalAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Create a pending booking for a registered user or a guest.

    Validation failures are reported as ``success: false`` with per-field
    ``errors`` rather than as an HTTP error.
    """
    booking_service = BookingService(db)

    try:
        booking = await booking_service.create_booking(request, user)
    except ValidationError as e:
        return _json(CreateBookingResult(success=False, message=e.message, errors=e.errors))
    except DuplicateBookingError as e:
        return _json(CreateBookingResult(success=False, message=e.message, errors={"date": [e.message]}))
    except NotFoundError as e:
        return _json(CreateBookingResult(success=False, message=e.message, errors={}))

    return _json(CreateBookingResult(
        success=True,
        booking=Booking.model_validate(booking),
        message=BookingMessages.BOOKING_SUCCESS,
    ))


@router.post("/list", response_model=BookingListResponse)
async def list_bookings(
    admin: AuthenticatedUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """List all bookings with their tour, user and payment."""
    bookings = await BookingService(db).list_bookings()
    return _json(BookingListResponse(bookings=[Booking.model_validate(b) for b in bookings]))


@router.post("/mine", response_model=BookingListResponse)
async def list_my_bookings(
    user: AuthenticatedUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """List the caller's own bookings."""
    bookings = await BookingService(db).list_user_bookings(user.user_id)
    return _json(BookingListResponse(bookings=[Booking.model_validate(b) for b in bookings]))


@router.post("/update-status", response_model=StatusUpdateResult)
async def update_booking_status(
    request: UpdateBookingStatusRequest,
    admin: AuthenticatedUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Confirm or cancel a pending booking.

    A booking that is no longer pending yields 409 Problem Details with code
    ``BOOKING_NOT_PENDING``.
    """
    booking = await BookingService(db).update_booking_status(request.booking_id, request.status)

    logger.info(
        "Booking status changed by admin",
        extra={
            "booking_id": booking.booking_id,
            "status": booking.status,
            "admin_id": admin.user_id
        }
    )

    return _json(StatusUpdateResult(
        success=True,
        message=STATUS_MESSAGES.status_changed.format(
            id=booking.booking_id,
            status=STATUS_MESSAGES.label(request.status),
        ),
    ))


@router.post("/cancel", response_model=StatusUpdateResult)
async def cancel_booking(
    request: BookingIdRequest,
    user: AuthenticatedUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Cancel one of the caller's pending bookings."""
    booking = await BookingService(db).cancel_own_booking(request.booking_id, user)
    return _json(StatusUpdateResult(
        success=True,
        message=STATUS_MESSAGES.status_changed.format(
            id=booking.booking_id,
            status=STATUS_MESSAGES.label(BookingStatus.CANCELLED),
        ),
    ))


@router.post("/delete", response_model=MessageResponse)
async def delete_booking(
    request: BookingIdRequest,
    admin: AuthenticatedUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Delete a booking and its payment record."""
    await BookingService(db).delete_booking(request.booking_id)
    return _json(MessageResponse(message="Booking deleted successfully"))


@router.post("/stats", response_model=BookingStatsResponse)
async def booking_stats(
    request: BookingStatsRequest,
    admin: AuthenticatedUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Statistics over every booking, plus how many match the filter.

    Counts and revenue always cover the full collection; only
    ``visible_count`` depends on the criteria.
    """
    bookings = await BookingService(db).list_bookings()
    aggregator = BookingAggregator(
        [Booking.model_validate(b) for b in bookings],
        BookingFilterCriteria(status=request.status, search_term=request.search_term),
    )
    stats = aggregator.stats

    return _json(BookingStatsResponse(
        pending_count=stats.pending_count,
        confirmed_count=stats.confirmed_count,
        total_revenue=stats.total_revenue,
        visible_count=len(aggregator.visible),
    ))


@router.post("/dashboard", response_model=DashboardStatsResponse)
async def dashboard_stats(
    admin: AuthenticatedUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Admin dashboard: this month's paid revenue and bookings against last month,
    the total booking count and the five most recent bookings.
    """
    stats = await BookingService(db).dashboard_stats()
    return _json(stats)
