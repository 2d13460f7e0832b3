"""Filtering, search and statistics over a booking collection."""

from decimal import Decimal
from typing import Iterable, List, Literal, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .types import BookingRecord, BookingStatus

ALL = "All"

StatusFilter = Union[BookingStatus, Literal["All"]]


class BookingFilterCriteria(BaseModel):
    """Status filter and free-text search applied to the bookings list."""

    model_config = ConfigDict(frozen=True)

    status: StatusFilter = ALL
    search_term: str = ""


class BookingStats(BaseModel):
    """Aggregate figures shown above the bookings list."""

    model_config = ConfigDict(frozen=True)

    pending_count: int
    confirmed_count: int
    total_revenue: Decimal


def booker_name(booking: BookingRecord) -> str:
    if booking.user is not None and booking.user.full_name:
        return booking.user.full_name
    return booking.guest_full_name or ""


def booker_email(booking: BookingRecord) -> str:
    if booking.user is not None and booking.user.email:
        return booking.user.email
    return booking.guest_email or ""


def searchable_fields(booking: BookingRecord) -> Tuple[str, ...]:
    """Fields the free-text search looks at."""
    tour_title = booking.tour.title if booking.tour is not None else ""
    return (booker_name(booking), booker_email(booking), tour_title, str(booking.booking_id))


def matches_status(booking: BookingRecord, criteria: BookingFilterCriteria) -> bool:
    return criteria.status == ALL or booking.status == criteria.status


def matches_search(booking: BookingRecord, criteria: BookingFilterCriteria) -> bool:
    """Case-insensitive substring match against any searchable field."""
    if not criteria.search_term:
        return True
    term = criteria.search_term.lower()
    return any(term in field.lower() for field in searchable_fields(booking))


def filter_bookings(bookings: Iterable[BookingRecord], criteria: BookingFilterCriteria) -> List[BookingRecord]:
    """Bookings matching both the status filter and the search term, in input order."""
    return [
        booking for booking in bookings
        if matches_status(booking, criteria) and matches_search(booking, criteria)
    ]


def compute_stats(bookings: Iterable[BookingRecord]) -> BookingStats:
    """
    Count pending and confirmed bookings and sum revenue.

    Cancelled bookings never contribute revenue, whether or not they were paid.
    """
    pending_count = 0
    confirmed_count = 0
    total_revenue = Decimal("0")
    for booking in bookings:
        if booking.status == BookingStatus.PENDING:
            pending_count += 1
        elif booking.status == BookingStatus.CONFIRMED:
            confirmed_count += 1
        if booking.status != BookingStatus.CANCELLED:
            total_revenue += booking.total_price
    return BookingStats(
        pending_count=pending_count,
        confirmed_count=confirmed_count,
        total_revenue=total_revenue,
    )


def percent_change(current: Union[Decimal, int], previous: Union[Decimal, int]) -> float:
    """
    Month-over-month change in percent.

    With nothing in the previous period the change reads 100 when the current
    period has anything and 0 otherwise.
    """
    if previous > 0:
        return float((current - previous) / previous * 100)
    return 100.0 if current > 0 else 0.0


class BookingAggregator:
    """
    Admin bookings view over an immutable snapshot.

    Both ``visible`` and ``stats`` are recomputed from the full snapshot on every
    access, so they always reflect the current criteria and collection.
    """

    def __init__(self, bookings: Sequence[BookingRecord] = (), criteria: BookingFilterCriteria = BookingFilterCriteria()):
        self._snapshot: Tuple[BookingRecord, ...] = tuple(bookings)
        self.criteria = criteria

    @property
    def snapshot(self) -> Tuple[BookingRecord, ...]:
        return self._snapshot

    def replace_snapshot(self, bookings: Sequence[BookingRecord]) -> None:
        """Swap in a freshly fetched collection."""
        self._snapshot = tuple(bookings)

    def apply(self, booking: BookingRecord) -> None:
        """Replace one booking in the snapshot by ID, e.g. after an acknowledged status change."""
        self._snapshot = tuple(
            booking if existing.booking_id == booking.booking_id else existing
            for existing in self._snapshot
        )

    def set_status_filter(self, status: StatusFilter) -> None:
        self.criteria = self.criteria.model_copy(update={"status": status})

    def set_search_term(self, search_term: str) -> None:
        self.criteria = self.criteria.model_copy(update={"search_term": search_term})

    @property
    def visible(self) -> List[BookingRecord]:
        return filter_bookings(self._snapshot, self.criteria)

    @property
    def stats(self) -> BookingStats:
        return compute_stats(self._snapshot)
