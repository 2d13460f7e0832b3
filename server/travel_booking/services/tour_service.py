"""Tour service for business logic operations."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.tour import Tour
from ..schemas.tour import CreateTourRequest

logger = logging.getLogger(__name__)


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_tour(self, request: CreateTourRequest) -> Tour:
        """
        Create a new tour.

        Args:
            request: Tour creation request

        Returns:
            Created tour entity
        """
        tour = Tour(
            title=request.title,
            price_per_person=request.price_per_person,
            max_guests=request.max_guests,
            duration_days=request.duration_days,
            start_date=request.start_date,
        )

        self.db.add(tour)
        await self.db.commit()
        await self.db.refresh(tour)

        logger.info(
            "Tour created successfully",
            extra={
                "tour_id": tour.tour_id,
                "title": tour.title,
                "max_guests": tour.max_guests
            }
        )

        return tour

    async def get_tour_by_id(self, tour_id: int) -> Optional[Tour]:
        """
        Get tour by ID.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.tour_id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: int) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": tour_id}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=tour_id
            )
        return tour
