"""Test configuration and fixtures."""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("BEARER_TOKEN_SECRET", "test-secret-key-for-bearer-tokens-0123456789")
os.environ.setdefault("ENVIRONMENT", "development")

import asyncio  # noqa: E402
from datetime import date, datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import List, Optional  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from travel_booking.core import dependencies  # noqa: E402
from travel_booking.core.config import settings  # noqa: E402
from travel_booking.core.database import Base  # noqa: E402
from travel_booking.core.dependencies import AuthenticatedUser  # noqa: E402
from travel_booking.lifecycle.ports import (  # noqa: E402
    CreateBookingResult,
    PaymentResult,
    ProcessPaymentRequest,
    StatusUpdateResult,
)
from travel_booking.lifecycle.types import (  # noqa: E402
    BookingForm,
    BookingRecord,
    BookingStatus,
    PaymentRecord,
    TourRef,
    UserRef,
)
from travel_booking.models import *  # noqa: E402, F403 - Import all models
from travel_booking.schemas.tour import CreateTourRequest  # noqa: E402
from travel_booking.services.tour_service import TourService  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

USER_ID = 1
OTHER_USER_ID = 2
ADMIN_ID = 99


def make_token(
    user_id: int = USER_ID,
    roles: Optional[List[str]] = None,
    email: Optional[str] = "john@example.com",
    name: Optional[str] = "John Doe",
    phone_number: Optional[str] = "0123456789",
    expires_in: int = 3600,
) -> str:
    """Sign a bearer token the API accepts."""
    payload = {
        "sub": str(user_id),
        "roles": roles or [],
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    if phone_number:
        payload["phone_number"] = phone_number
    return jwt.encode(payload, settings.bearer_token_secret, algorithm="HS256")


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """The real application with its database dependency pointed at the test session."""
    from travel_booking.main import create_app

    app = create_app()

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[dependencies.get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def user_token():
    return make_token()


@pytest.fixture
def user_headers(user_token):
    return auth_headers(user_token)


@pytest.fixture
def other_user_headers():
    return auth_headers(make_token(user_id=OTHER_USER_ID, email="jane@example.com", name="Jane Roe"))


@pytest.fixture
def admin_token():
    return make_token(user_id=ADMIN_ID, roles=["admin"], email="admin@example.com", name="Admin")


@pytest.fixture
def admin_headers(admin_token):
    return auth_headers(admin_token)


@pytest.fixture
def user_identity():
    """Decoded form of ``user_token`` for calling services directly."""
    return AuthenticatedUser(
        user_id=USER_ID,
        email="john@example.com",
        name="John Doe",
        phone_number="0123456789",
        roles=[],
    )


@pytest.fixture
def other_identity():
    return AuthenticatedUser(user_id=OTHER_USER_ID, email="jane@example.com", name="Jane Roe", roles=[])


@pytest_asyncio.fixture
async def sample_tour_id(test_session):
    """A tour priced 500 per person, at most 8 guests."""
    tour = await TourService(test_session).create_tour(
        CreateTourRequest(
            title="Paris Tour",
            price_per_person=Decimal("500.00"),
            max_guests=8,
            duration_days=3,
        )
    )
    return tour.tour_id


@pytest.fixture
def future_date():
    return (date.today() + timedelta(days=30)).isoformat()


@pytest.fixture
def booking_form_data(sample_tour_id, future_date):
    """Valid booking form payload for the sample tour."""
    return {
        "tour_id": sample_tour_id,
        "name": "John Doe",
        "email": "john@example.com",
        "phone": "0123456789",
        "date": future_date,
        "guests": 2,
        "message": "Vegetarian meals please",
    }


@pytest.fixture
def booking_factory():
    """Build BookingRecord values for the lifecycle components."""
    counter = {"next_id": 1}

    def build(
        booking_id: Optional[int] = None,
        status: BookingStatus = BookingStatus.PENDING,
        total_price="1000",
        num_guests: int = 2,
        user_name: Optional[str] = None,
        user_email: Optional[str] = None,
        guest_name: str = "Guest Person",
        guest_email: str = "guest@example.com",
        tour_title: str = "Paris Tour",
        price_per_person=None,
        payment: Optional[PaymentRecord] = None,
    ) -> BookingRecord:
        if booking_id is None:
            booking_id = counter["next_id"]
        counter["next_id"] = max(counter["next_id"], booking_id) + 1

        registered = user_name is not None or user_email is not None
        return BookingRecord(
            booking_id=booking_id,
            status=status,
            num_guests=num_guests,
            total_price=Decimal(str(total_price)),
            booking_date=date.today() + timedelta(days=30),
            tour=TourRef(
                tour_id=1,
                title=tour_title,
                price_per_person=Decimal(str(price_per_person)) if price_per_person is not None else None,
                max_guests=8,
            ),
            user=UserRef(user_id=booking_id, full_name=user_name, email=user_email) if registered else None,
            guest_full_name=None if registered else guest_name,
            guest_email=None if registered else guest_email,
            payment=payment,
        )

    return build


class RecordingNotifier:
    """NotificationSink that records every call in order."""

    def __init__(self):
        self.events = []

    def success(self, message: str) -> None:
        self.events.append(("success", message))

    def error(self, message: str) -> None:
        self.events.append(("error", message))

    def dismiss(self) -> None:
        self.events.append(("dismiss", None))

    @property
    def successes(self) -> List[str]:
        return [message for kind, message in self.events if kind == "success"]

    @property
    def errors(self) -> List[str]:
        return [message for kind, message in self.events if kind == "error"]


class RecordingCache:
    """CacheInvalidator that records invalidated keys."""

    def __init__(self):
        self.invalidated = []

    def invalidate(self, key: str) -> None:
        self.invalidated.append(key)


class FakeBookingDataSource:
    """
    In-memory BookingDataSource.

    Set ``error`` to make calls raise, or ``gate`` to hold ``create_booking``
    until the event is set.
    """

    def __init__(self):
        self.bookings: List[BookingRecord] = []
        self.create_result = CreateBookingResult(success=True)
        self.status_result = StatusUpdateResult(success=True)
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.created_forms: List[BookingForm] = []
        self.status_calls = []

    async def list_bookings(self) -> List[BookingRecord]:
        return list(self.bookings)

    async def create_booking(self, form: BookingForm) -> CreateBookingResult:
        self.created_forms.append(form)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.create_result

    async def update_booking_status(self, booking_id: int, new_status: BookingStatus) -> StatusUpdateResult:
        self.status_calls.append((booking_id, new_status))
        if self.error is not None:
            raise self.error
        return self.status_result


class FakePaymentDataSource:
    """In-memory PaymentDataSource."""

    def __init__(self):
        self.result = PaymentResult(success=True, payment_id=1, transaction_id="TXN-1-1")
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.requests: List[ProcessPaymentRequest] = []

    async def process_payment(self, request: ProcessPaymentRequest) -> PaymentResult:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def cache():
    return RecordingCache()


@pytest.fixture
def booking_source():
    return FakeBookingDataSource()


@pytest.fixture
def payment_source():
    return FakePaymentDataSource()
