"""Booking service for business logic operations."""

import logging
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.dependencies import AuthenticatedUser
from ..core.exceptions import BookingNotPendingError, DuplicateBookingError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..lifecycle.aggregator import percent_change
from ..lifecycle.money import Amounts, compute_amounts, compute_total_price
from ..lifecycle.status import NoTransitionAvailable, plan_transition
from ..lifecycle.types import BookingForm, BookingRecord, BookingStatus, PaymentStatus
from ..models.booking import Booking
from ..models.payment import Payment
from ..schemas.booking import DashboardStatsResponse
from .tour_service import TourService
from .user_service import UserService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]+$")

RECENT_BOOKINGS_LIMIT = 5


class BookingMessages:
    """Validation and result messages returned to the booking form."""
    TOUR_ID_REQUIRED = "Tour ID is required"
    NAME_REQUIRED = "Name is required"
    NAME_TOO_SHORT = "Name must be at least 2 characters"
    EMAIL_REQUIRED = "Email is required"
    EMAIL_INVALID = "Please enter a valid email address"
    PHONE_REQUIRED = "Phone number is required"
    PHONE_INVALID = "Please enter a valid phone number"
    DATE_REQUIRED = "Departure date is required"
    DATE_INVALID = "Please enter a valid date"
    DATE_MUST_BE_FUTURE = "Departure date must be in the future"
    GUESTS_REQUIRED = "Number of guests is required"
    GUESTS_MIN = "At least 1 guest is required"
    FILL_ALL_FIELDS = "Please fill in all required fields"
    TOUR_NOT_FOUND = "Tour not found"
    DUPLICATE_BOOKING = "You have already booked this tour for this date."
    BOOKING_SUCCESS = "Booking request submitted successfully!"

    @staticmethod
    def guests_max(max_guests: int) -> str:
        return f"Maximum {max_guests} guests allowed"


def validate_booking_form(form: BookingForm, max_guests: int, today: Optional[date] = None) -> Dict[str, List[str]]:
    """
    Validate booking form fields against a tour's guest limit.

    Each failing field reports its first failing rule only.

    Returns:
        Field name to messages; empty when the form is valid
    """
    today = today or date.today()
    errors: Dict[str, List[str]] = {}

    name = form.name.strip()
    if not name:
        errors["name"] = [BookingMessages.NAME_REQUIRED]
    elif len(name) < 2:
        errors["name"] = [BookingMessages.NAME_TOO_SHORT]

    email = form.email.strip()
    if not email:
        errors["email"] = [BookingMessages.EMAIL_REQUIRED]
    elif not EMAIL_PATTERN.match(email):
        errors["email"] = [BookingMessages.EMAIL_INVALID]

    phone = form.phone.strip()
    if not phone:
        errors["phone"] = [BookingMessages.PHONE_REQUIRED]
    elif len(phone) < 10 or not PHONE_PATTERN.match(phone):
        errors["phone"] = [BookingMessages.PHONE_INVALID]

    if not form.date:
        errors["date"] = [BookingMessages.DATE_REQUIRED]
    else:
        try:
            departure = date.fromisoformat(form.date)
        except ValueError:
            errors["date"] = [BookingMessages.DATE_INVALID]
        else:
            if departure < today:
                errors["date"] = [BookingMessages.DATE_MUST_BE_FUTURE]

    if form.guests is None:
        errors["guests"] = [BookingMessages.GUESTS_REQUIRED]
    elif form.guests < 1:
        errors["guests"] = [BookingMessages.GUESTS_MIN]
    elif form.guests > max_guests:
        errors["guests"] = [BookingMessages.guests_max(max_guests)]

    return errors


def month_windows(now: datetime) -> Tuple[datetime, datetime]:
    """Starts of the current and the previous calendar month as naive UTC datetimes."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    current_start = datetime(now.year, now.month, 1)
    if now.month == 1:
        previous_start = datetime(now.year - 1, 12, 1)
    else:
        previous_start = datetime(now.year, now.month - 1, 1)
    return current_start, previous_start


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)
        self.user_service = UserService(db)

    @staticmethod
    def _with_relations():
        # populate_existing refreshes rows already in the identity map
        return select(Booking).options(
            selectinload(Booking.tour),
            selectinload(Booking.user),
            selectinload(Booking.payment),
        ).execution_options(populate_existing=True)

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        """
        Get a booking with its tour, user and payment loaded.

        Args:
            booking_id: Booking ID to search for

        Returns:
            Booking if found, None otherwise
        """
        stmt = self._with_relations().where(Booking.booking_id == booking_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_or_raise(self, booking_id: int) -> Booking:
        booking = await self.get_booking(booking_id)
        if not booking:
            logger.warning(
                "Booking not found",
                extra={"booking_id": booking_id}
            )
            raise NotFoundError(resource_type="booking", resource_id=booking_id)
        return booking

    async def create_booking(self, form: BookingForm, user: Optional[AuthenticatedUser] = None) -> Booking:
        """
        Validate the form and create a pending booking.

        An authenticated caller books as a registered user and the guest
        columns stay empty; an anonymous caller books as a guest.

        Args:
            form: Booking form values
            user: Authenticated caller, if any

        Returns:
            Created booking with relations loaded

        Raises:
            ValidationError: If the tour ID or any field is invalid
            NotFoundError: If the tour does not exist
            DuplicateBookingError: If the same booker already holds a live
                booking for this tour and date
        """
        if not form.tour_id:
            raise ValidationError(
                detail=BookingMessages.TOUR_ID_REQUIRED,
                errors={"tourId": [BookingMessages.TOUR_ID_REQUIRED]},
            )

        tour = await self.tour_service.get_tour_by_id(form.tour_id)
        if not tour:
            logger.warning(
                "Booking creation failed - tour not found",
                extra={"tour_id": form.tour_id}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=form.tour_id,
                detail=BookingMessages.TOUR_NOT_FOUND,
            )

        errors = validate_booking_form(form, tour.max_guests)
        if errors:
            logger.info(
                "Booking creation rejected by validation",
                extra={"tour_id": form.tour_id, "fields": sorted(errors)}
            )
            raise ValidationError(detail=BookingMessages.FILL_ALL_FIELDS, errors=errors)

        booking_date = date.fromisoformat(form.date)
        guest_email = None if user else form.email.strip().lower()

        await self._ensure_not_duplicate(form.tour_id, booking_date, user, guest_email)

        booking = Booking(
            tour_id=tour.tour_id,
            booking_date=booking_date,
            num_guests=form.guests,
            total_price=compute_total_price(tour.price_per_person, form.guests),
            message=form.message.strip() or None,
            status=BookingStatus.PENDING.value,
        )
        if user:
            await self.user_service.sync_user(user)
            booking.user_id = user.user_id
        else:
            booking.guest_full_name = form.name.strip()
            booking.guest_email = guest_email
            booking.guest_phone = form.phone.strip()

        self.db.add(booking)
        await self.db.commit()

        metrics_collector.record_booking_created(registered_user=user is not None)
        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": booking.booking_id,
                "tour_id": tour.tour_id,
                "num_guests": booking.num_guests,
                "booker_type": "user" if user else "guest"
            }
        )

        return await self.get_booking_or_raise(booking.booking_id)

    async def _ensure_not_duplicate(
        self,
        tour_id: int,
        booking_date: date,
        user: Optional[AuthenticatedUser],
        guest_email: Optional[str],
    ) -> None:
        stmt = select(Booking.booking_id).where(
            Booking.tour_id == tour_id,
            Booking.booking_date == booking_date,
            Booking.status != BookingStatus.CANCELLED.value,
        )
        if user:
            stmt = stmt.where(Booking.user_id == user.user_id)
        else:
            stmt = stmt.where(Booking.guest_email == guest_email)

        existing = await self.db.scalar(stmt.limit(1))
        if existing is not None:
            logger.warning(
                "Booking creation failed - duplicate booking",
                extra={"tour_id": tour_id, "booking_date": booking_date.isoformat(), "existing_booking_id": existing}
            )
            raise DuplicateBookingError(
                tour_id=tour_id,
                booking_date=booking_date.isoformat(),
                detail=BookingMessages.DUPLICATE_BOOKING,
            )

    async def list_bookings(self) -> List[Booking]:
        """All bookings with relations, newest first."""
        stmt = self._with_relations().order_by(Booking.created_at.desc(), Booking.booking_id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_user_bookings(self, user_id: int) -> List[Booking]:
        """Bookings owned by a registered user, newest first."""
        stmt = (
            self._with_relations()
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.booking_id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _paid_booking_totals(self, start: datetime, end: Optional[datetime] = None) -> List[Decimal]:
        stmt = (
            select(Booking.total_price)
            .join(Payment, Payment.booking_id == Booking.booking_id)
            .where(
                Payment.status == PaymentStatus.COMPLETED.value,
                Booking.created_at >= start,
            )
        )
        if end is not None:
            stmt = stmt.where(Booking.created_at < end)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def dashboard_stats(self, now: Optional[datetime] = None) -> DashboardStatsResponse:
        """
        Month-over-month figures for the admin dashboard.

        Revenue sums the stored totals of bookings created in a month whose
        payment completed. Last month is the half-open range up to the first
        instant of the current month.

        Args:
            now: Reference instant, defaults to the current UTC time

        Returns:
            DashboardStatsResponse: revenue, paid booking counts, their
            changes, the total booking count and the latest bookings
        """
        current_start, previous_start = month_windows(now or datetime.now(timezone.utc))

        current = await self._paid_booking_totals(current_start)
        previous = await self._paid_booking_totals(previous_start, current_start)
        total_bookings = await self.db.scalar(select(func.count()).select_from(Booking))

        stmt = (
            self._with_relations()
            .order_by(Booking.created_at.desc(), Booking.booking_id.desc())
            .limit(RECENT_BOOKINGS_LIMIT)
        )
        result = await self.db.execute(stmt)
        recent = [BookingRecord.model_validate(b) for b in result.scalars().all()]

        current_revenue = sum(current, Decimal("0"))
        previous_revenue = sum(previous, Decimal("0"))

        logger.info(
            "Dashboard stats computed",
            extra={
                "month_start": current_start.isoformat(),
                "current_month_paid_bookings": len(current),
                "last_month_paid_bookings": len(previous),
                "total_bookings": total_bookings
            }
        )

        return DashboardStatsResponse(
            current_month_revenue=current_revenue,
            last_month_revenue=previous_revenue,
            revenue_change=percent_change(current_revenue, previous_revenue),
            current_month_paid_bookings=len(current),
            last_month_paid_bookings=len(previous),
            bookings_change=percent_change(len(current), len(previous)),
            total_bookings=total_bookings or 0,
            recent_bookings=recent,
        )

    async def get_owned_booking(
self, booking_id: int, user: AuthenticatedUser) -> Booking:
        """
        Get a booking owned by the caller.

        Raises:
            NotFoundError: If the booking does not exist or belongs to someone else
        """
        booking = await self.get_booking(booking_id)
        if not booking or booking.user_id != user.user_id:
            logger.warning(
                "Owned booking lookup failed",
                extra={"booking_id": booking_id, "user_id": user.user_id}
            )
            raise NotFoundError(resource_type="booking", resource_id=booking_id)
        return booking

    async def get_booking_for_payment(self, booking_id: int, user: AuthenticatedUser) -> tuple[Booking, Amounts]:
        """
        Load a caller's booking together with the amounts to charge.

        Args:
            booking_id: Booking to pay for
            user: Authenticated caller

        Returns:
            The booking and its subtotal, taxes and total

        Raises:
            NotFoundError: If the booking does not exist or belongs to someone else
        """
        booking = await self.get_owned_booking(booking_id, user)
        amounts = compute_amounts(
            booking.tour.price_per_person if booking.tour else None,
            booking.num_guests,
            booking.total_price,
        )
        return booking, amounts

    async def update_booking_status(self, booking_id: int, new_status: BookingStatus) -> Booking:
        """
        Move a pending booking to ``new_status``.

        The check and the write are one conditional UPDATE, so two concurrent
        transitions on the same booking cannot both succeed.

        Args:
            booking_id: Booking to transition
            new_status: Requested target status

        Returns:
            The updated booking with relations

        Raises:
            ValidationError: If ``new_status`` is not a transition target
            NotFoundError: If the booking does not exist
            BookingNotPendingError: If the booking is no longer pending
        """
        plan = plan_transition(BookingStatus.PENDING, new_status)
        if isinstance(plan, NoTransitionAvailable):
            raise ValidationError(
                detail=f"Bookings cannot be moved to {new_status.value}",
                errors={"status": [f"Bookings cannot be moved to {new_status.value}"]},
            )

        try:
            await self._transition_pending(booking_id, new_status)
        except BookingNotPendingError:
            metrics_collector.record_status_transition(new_status.value, "conflict")
            raise
        metrics_collector.record_status_transition(new_status.value, "applied")
        logger.info(
            "Booking status updated",
            extra={"booking_id": booking_id, "from_status": plan.from_status.value, "to_status": new_status.value}
        )
        return await self.get_booking_or_raise(booking_id)

    async def cancel_own_booking(self, booking_id: int, user: AuthenticatedUser) -> Booking:
        """
        Cancel one of the caller's pending bookings.

        Raises:
            NotFoundError: If the booking does not exist or belongs to someone else
            BookingNotPendingError: If the booking is no longer pending
        """
        await self.get_owned_booking(booking_id, user)
        try:
            await self._transition_pending(booking_id, BookingStatus.CANCELLED)
        except BookingNotPendingError:
            metrics_collector.record_user_cancellation("conflict")
            raise
        metrics_collector.record_user_cancellation("applied")
        logger.info(
            "Booking cancelled by owner",
            extra={"booking_id": booking_id, "user_id": user.user_id}
        )
        return await self.get_booking_or_raise(booking_id)

    async def _transition_pending(self, booking_id: int, new_status: BookingStatus) -> None:
        stmt = (
            update(Booking)
            .where(
                Booking.booking_id == booking_id,
                Booking.status == BookingStatus.PENDING.value,
            )
            .values(status=new_status.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount == 1:
            await self.db.commit()
            return

        await self.db.rollback()
        current_status = await self.db.scalar(
            select(Booking.status).where(Booking.booking_id == booking_id)
        )
        if current_status is None:
            raise NotFoundError(resource_type="booking", resource_id=booking_id)

        logger.warning(
            "Booking status transition rejected - booking not pending",
            extra={"booking_id": booking_id, "current_status": current_status, "requested_status": new_status.value}
        )
        raise BookingNotPendingError(
            booking_id=booking_id,
            current_status=current_status,
            requested_status=new_status.value,
        )

    async def delete_booking(self, booking_id: int) -> None:
        """
        Delete a booking and its payment record.

        Raises:
            NotFoundError: If the booking does not exist
        """
        booking = await self.get_booking_or_raise(booking_id)
        await self.db.delete(booking)
        await self.db.commit()
        logger.info(
            "Booking deleted",
            extra={"booking_id": booking_id}
        )
