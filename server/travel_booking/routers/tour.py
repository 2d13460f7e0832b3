"""Tour router for tour management operations."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, AuthenticatedUser, DatabaseSession
from ..schemas.tour import CreateTourRequest, GetTourRequest, Tour
from ..services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/tour", tags=["tour"])


@router.post("/create", response_model=Tour)
async def create_tour(
    request: CreateTourRequest,
    admin: AuthenticatedUser = AdminAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Create a new tour."""
    tour = await TourService(db).create_tour(request)

    logger.info(
        "Tour created by admin",
        extra={"tour_id": tour.tour_id, "admin_id": admin.user_id}
    )

    response_data = Tour.model_validate(tour)
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/get", response_model=Tour)
async def get_tour(
    request: GetTourRequest,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """Get a tour by ID."""
    tour = await TourService(db).get_tour_by_id_or_raise(request.tour_id)

    response_data = Tour.model_validate(tour)
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
