"""Tour model definition."""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import Booking


class Tour(Base):
    """Tour entity. Bookings read its price and guest limit but never change it."""

    __tablename__ = "tours"

    tour_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Tour information
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price_per_person: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("price_per_person >= 0", name="ck_tour_price_non_negative"),
        CheckConstraint("max_guests > 0", name="ck_tour_max_guests_positive"),
        CheckConstraint("duration_days > 0", name="ck_tour_duration_positive"),
    )

    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="tour")

    def __repr__(self) -> str:
        return f"<Tour(tour_id={self.tour_id}, title='{self.title}', price_per_person={self.price_per_person})>"
