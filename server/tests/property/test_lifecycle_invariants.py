"""Property-based tests for booking lifecycle invariants."""

from datetime import date
from decimal import Decimal

from hypothesis import given
from hypothesis import strategies as st

from travel_booking.lifecycle.aggregator import ALL, BookingFilterCriteria, compute_stats, filter_bookings
from travel_booking.lifecycle.money import TAX_RATE, compute_amounts, to_cents
from travel_booking.lifecycle.payments import PaymentStatusColor, format_payment_status, get_payment_status_color
from travel_booking.lifecycle.status import Transition, allowed_targets, plan_transition
from travel_booking.lifecycle.types import (
    BookingRecord,
    BookingStatus,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
    TourRef,
)

# Strategies for generating test data
statuses = st.sampled_from(list(BookingStatus))
prices = st.decimals(min_value=0, max_value=100000, places=2, allow_nan=False, allow_infinity=False)
guest_counts = st.integers(min_value=1, max_value=50)
names = st.text(min_size=1, max_size=30, alphabet=st.characters(whitelist_categories=("L", "N", "Zs")))
search_terms = st.text(max_size=5, alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789@.")
payments = st.one_of(
    st.none(),
    st.builds(PaymentRecord, status=st.sampled_from(list(PaymentStatus)), payment_method=st.sampled_from(list(PaymentMethod))),
)


@st.composite
def booking_records(draw, booking_id=None):
    return BookingRecord(
        booking_id=booking_id if booking_id is not None else draw(st.integers(min_value=1, max_value=10**6)),
        status=draw(statuses),
        num_guests=draw(guest_counts),
        total_price=draw(prices),
        booking_date=date(2030, 1, 1),
        tour=TourRef(tour_id=1, title=draw(names)),
        guest_full_name=draw(names),
        guest_email=f"{draw(st.integers(min_value=0, max_value=999))}@example.com",
        payment=draw(payments),
    )


@st.composite
def booking_collections(draw):
    size = draw(st.integers(min_value=0, max_value=15))
    return [draw(booking_records(booking_id=i + 1)) for i in range(size)]


@given(bookings=booking_collections())
def test_revenue_never_includes_cancelled(bookings):
    """Revenue is the sum over non-cancelled bookings and counts match statuses."""
    stats = compute_stats(bookings)

    expected = sum((b.total_price for b in bookings if b.status != BookingStatus.CANCELLED), Decimal("0"))
    assert stats.total_revenue == expected
    assert stats.pending_count == sum(1 for b in bookings if b.status == BookingStatus.PENDING)
    assert stats.confirmed_count == sum(1 for b in bookings if b.status == BookingStatus.CONFIRMED)


@given(bookings=booking_collections(), status=st.one_of(st.just(ALL), statuses), term=search_terms)
def test_filter_is_an_ordered_subset(bookings, status, term):
    criteria = BookingFilterCriteria(status=status, search_term=term)

    visible = filter_bookings(bookings, criteria)

    ids = [b.booking_id for b in bookings]
    visible_ids = [b.booking_id for b in visible]
    assert visible_ids == [i for i in ids if i in set(visible_ids)]
    if status != ALL:
        assert all(b.status == status for b in visible)


@given(bookings=booking_collections(), status=statuses, term=search_terms)
def test_filter_is_conjunction_of_status_and_search(bookings, status, term):
    both = filter_bookings(bookings, BookingFilterCriteria(status=status, search_term=term))
    by_status = filter_bookings(bookings, BookingFilterCriteria(status=status))
    by_search = filter_bookings(bookings, BookingFilterCriteria(search_term=term))

    assert both == [b for b in by_status if b in by_search]


@given(bookings=booking_collections(), term=search_terms)
def test_search_ignores_case(bookings, term):
    lower = filter_bookings(bookings, BookingFilterCriteria(search_term=term.lower()))
    upper = filter_bookings(bookings, BookingFilterCriteria(search_term=term.upper()))

    assert lower == upper


@given(payment=payments)
def test_payment_label_and_color_agree(payment):
    """Green exactly when the label reads as paid."""
    label = format_payment_status(payment)
    color = get_payment_status_color(payment)

    assert (color == PaymentStatusColor.GREEN) == label.startswith("Paid")


@given(price=st.one_of(st.none(), prices), guests=guest_counts, stored=prices)
def test_amounts_relationships(price, guests, stored):
    amounts = compute_amounts(price, guests, stored)

    assert amounts.taxes == to_cents(amounts.subtotal * TAX_RATE)
    assert amounts.total == stored + amounts.taxes
    assert amounts.total == to_cents(amounts.total)
    if price is None:
        assert amounts.subtotal == stored
    else:
        assert amounts.subtotal == price * guests


@given(current=statuses, requested=statuses)
def test_transitions_only_leave_pending(current, requested):
    plan = plan_transition(current, requested)

    if isinstance(plan, Transition):
        assert current == BookingStatus.PENDING
        assert requested in allowed_targets(current)
    else:
        assert current != BookingStatus.PENDING or requested == BookingStatus.PENDING
