"""Tour-related Pydantic schemas."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateTourRequest(BaseModel):
    """Request schema for creating a tour."""

    title: str = Field(..., min_length=1, max_length=255, description="Tour title")
    price_per_person: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, description="Price per guest")
    max_guests: int = Field(..., ge=1, le=100, description="Maximum guests per booking")
    duration_days: int = Field(1, ge=1, le=365, description="Tour length in days")
    start_date: Optional[date] = Field(None, description="First day of the tour")


class GetTourRequest(BaseModel):
    """Request schema for getting a tour."""

    tour_id: int = Field(..., ge=1, description="Tour to retrieve")


class Tour(BaseModel):
    """Tour response schema."""

    model_config = ConfigDict(from_attributes=True)

    tour_id: int = Field(..., description="Unique tour ID")
    title: str = Field(..., description="Tour title")
    price_per_person: Decimal = Field(..., description="Price per guest")
    max_guests: int = Field(..., description="Maximum guests per booking")
    duration_days: int = Field(..., description="Tour length in days")
    start_date: Optional[date] = Field(None, description="First day of the tour")
