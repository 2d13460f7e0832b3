"""Unit tests for the booking status machine and the admin status-change flow."""

from datetime import datetime, timedelta, timezone

import pytest

from travel_booking.lifecycle.errors import ConflictError, NotAuthenticatedError, ServiceError
from travel_booking.lifecycle.ports import StaticIdentityProvider, StatusUpdateResult
from travel_booking.lifecycle.status import (
    BookingStatusCoordinator,
    NoTransitionAvailable,
    Transition,
    allowed_targets,
    is_admin_session,
    is_terminal,
    plan_transition,
)
from travel_booking.lifecycle.types import BookingStatus, Identity

ADMIN = Identity(name="Admin", email="admin@example.com", role="admin")


@pytest.fixture
def coordinator(booking_source, notifier):
    return BookingStatusCoordinator(booking_source, StaticIdentityProvider(ADMIN), notifier)


class TestTransitions:
    """The machine itself."""

    def test_pending_can_move_to_confirmed_or_cancelled(self):
        assert allowed_targets(BookingStatus.PENDING) == (BookingStatus.CONFIRMED, BookingStatus.CANCELLED)

    @pytest.mark.parametrize("status", [BookingStatus.CONFIRMED, BookingStatus.CANCELLED])
    def test_terminal_statuses_have_no_targets(self, status):
        assert allowed_targets(status) == ()
        assert is_terminal(status)

    def test_plan_legal_transition(self):
        plan = plan_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED)

        assert plan == Transition(from_status=BookingStatus.PENDING, to_status=BookingStatus.CONFIRMED)

    @pytest.mark.parametrize(
        "current,requested",
        [
            (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
            (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
            (BookingStatus.CONFIRMED, BookingStatus.PENDING),
            (BookingStatus.PENDING, BookingStatus.PENDING),
        ],
    )
    def test_plan_illegal_transition(self, current, requested):
        plan = plan_transition(current, requested)

        assert isinstance(plan, NoTransitionAvailable)
        assert plan.current_status == current
        assert plan.requested_status == requested

    def test_unknown_status_raises(self):
        with pytest.raises(ValueError):
            allowed_targets("archived")


class TestAdminSession:

    def test_admin_without_expiry(self):
        assert is_admin_session(ADMIN)

    def test_missing_identity_or_role(self):
        assert not is_admin_session(None)
        assert not is_admin_session(Identity(email="john@example.com", role="user"))

    def test_expired_session(self):
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        expired = ADMIN.model_copy(update={"expires_at": now - timedelta(seconds=1)})
        valid = ADMIN.model_copy(update={"expires_at": now + timedelta(minutes=5)})

        assert not is_admin_session(expired, now=now)
        assert is_admin_session(valid, now=now)

    def test_naive_expiry_is_utc(self):
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        naive = ADMIN.model_copy(update={"expires_at": datetime(2030, 1, 1, 0, 5)})

        assert is_admin_session(naive, now=now)

    def test_configured_admin_role(self):
        staff = Identity(email="ops@example.com", role="staff")

        assert is_admin_session(staff, admin_role="staff")
        assert not is_admin_session(ADMIN, admin_role="staff")


@pytest.mark.asyncio
async def test_approve_pending_booking(coordinator, booking_source, notifier, booking_factory):
    """Approval applies the new status only after the data source acknowledges it."""
    booking = booking_factory(booking_id=7)

    outcome = await coordinator.approve(booking)

    assert outcome.applied
    assert outcome.error is None
    assert outcome.booking.status == BookingStatus.CONFIRMED
    assert booking.status == BookingStatus.PENDING
    assert booking_source.status_calls == [(7, BookingStatus.CONFIRMED)]
    assert notifier.successes == ["Booking 7 has been confirmed!"]


@pytest.mark.asyncio
async def test_reject_pending_booking(coordinator, booking_source, notifier, booking_factory):
    outcome = await coordinator.reject(booking_factory(booking_id=8))

    assert outcome.applied
    assert outcome.booking.status == BookingStatus.CANCELLED
    assert booking_source.status_calls == [(8, BookingStatus.CANCELLED)]
    assert notifier.successes == ["Booking 8 has been cancelled!"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [BookingStatus.CONFIRMED, BookingStatus.CANCELLED])
async def test_terminal_booking_makes_no_call(coordinator, booking_source, notifier, booking_factory, status):
    booking = booking_factory(status=status)

    outcome = await coordinator.approve(booking)

    assert not outcome.applied
    assert isinstance(outcome.error, ConflictError)
    assert outcome.booking.status == status
    assert booking_source.status_calls == []
    assert len(notifier.errors) == 1


@pytest.mark.asyncio
async def test_non_admin_is_refused(booking_source, notifier, booking_factory):
    coordinator = BookingStatusCoordinator(
        booking_source,
        StaticIdentityProvider(Identity(email="john@example.com", role="user")),
        notifier,
    )

    outcome = await coordinator.approve(booking_factory())

    assert not outcome.applied
    assert isinstance(outcome.error, NotAuthenticatedError)
    assert booking_source.status_calls == []
    assert notifier.errors == ["Unauthorized"]


@pytest.mark.asyncio
async def test_coordinator_uses_configured_admin_role(booking_source, notifier, booking_factory):
    staff = Identity(name="Ops", email="ops@example.com", role="staff")
    coordinator = BookingStatusCoordinator(booking_source, StaticIdentityProvider(staff), notifier, admin_role="staff")

    outcome = await coordinator.approve(booking_factory(booking_id=5))

    assert outcome.applied
    assert booking_source.status_calls == [(5, BookingStatus.CONFIRMED)]

    refused = await BookingStatusCoordinator(
        booking_source, StaticIdentityProvider(ADMIN), notifier, admin_role="staff"
    ).approve(booking_factory(booking_id=6))

    assert not refused.applied
    assert isinstance(refused.error, NotAuthenticatedError)
    assert booking_source.status_calls == [(5, BookingStatus.CONFIRMED)]


@pytest.mark.asyncio
async def test_server_conflict_keeps_displayed_status(coordinator, booking_source, notifier, booking_factory):
    booking_source.error = ConflictError("stale", booking_id=3, current_status="confirmed")

    outcome = await coordinator.reject(booking_factory(booking_id=3))

    assert not outcome.applied
    assert isinstance(outcome.error, ConflictError)
    assert outcome.booking.status == BookingStatus.PENDING
    assert notifier.errors == ["Booking 3 is no longer pending"]


@pytest.mark.asyncio
async def test_unsuccessful_result_surfaces_server_error(coordinator, booking_source, notifier, booking_factory):
    booking_source.status_result = StatusUpdateResult(success=False, error="Booking not found")

    outcome = await coordinator.approve(booking_factory())

    assert not outcome.applied
    assert isinstance(outcome.error, ServiceError)
    assert notifier.errors == ["Booking not found"]


@pytest.mark.asyncio
async def test_transport_failure_uses_generic_message(coordinator, booking_source, notifier, booking_factory):
    booking_source.error = RuntimeError("connection reset by peer")

    outcome = await coordinator.approve(booking_factory())

    assert not outcome.applied
    assert isinstance(outcome.error, ServiceError)
    assert notifier.errors == ["Error updating booking status"]
    assert "connection reset" not in outcome.error.message
