"""Unit tests for tour service."""

from datetime import date
from decimal import Decimal

import pytest

from travel_booking.core.exceptions import NotFoundError
from travel_booking.schemas.tour import CreateTourRequest
from travel_booking.services.tour_service import TourService


@pytest.mark.asyncio
async def test_create_tour(test_session):
    """Test creating a tour."""
    service = TourService(test_session)

    tour = await service.create_tour(
        CreateTourRequest(
            title="Ha Long Bay Cruise",
            price_per_person=Decimal("320.50"),
            max_guests=12,
            duration_days=2,
            start_date=date(2030, 3, 1),
        )
    )

    assert tour.tour_id is not None
    assert tour.title == "Ha Long Bay Cruise"
    assert tour.price_per_person == Decimal("320.50")
    assert tour.max_guests == 12
    assert tour.start_date == date(2030, 3, 1)


@pytest.mark.asyncio
async def test_create_tour_defaults(test_session):
    """Duration defaults to a single day and the start date is optional."""
    tour = await TourService(test_session).create_tour(
        CreateTourRequest(title="Old Quarter Walk", price_per_person=Decimal("0"), max_guests=1)
    )

    assert tour.duration_days == 1
    assert tour.start_date is None
    assert tour.price_per_person == Decimal("0")


@pytest.mark.asyncio
async def test_get_tour_by_id(test_session, sample_tour_id):
    """Test getting a tour by ID."""
    service = TourService(test_session)

    found_tour = await service.get_tour_by_id(sample_tour_id)

    assert found_tour is not None
    assert found_tour.tour_id == sample_tour_id
    assert found_tour.title == "Paris Tour"


@pytest.mark.asyncio
async def test_get_tour_by_id_not_found(test_session):
    """Test getting a non-existent tour returns None."""
    service = TourService(test_session)

    tour = await service.get_tour_by_id(9999)
    assert tour is None


@pytest.mark.asyncio
async def test_get_tour_by_id_or_raise(test_session):
    """Test a missing tour raises NotFoundError."""
    with pytest.raises(NotFoundError) as exc_info:
        await TourService(test_session).get_tour_by_id_or_raise(9999)

    assert exc_info.value.message == "Tour not found"
    assert exc_info.value.problem_details["resource_id"] == "9999"
