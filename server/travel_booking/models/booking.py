"""Booking model definition."""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from ..lifecycle.types import BookingStatus

if TYPE_CHECKING:
    from .payment import Payment
    from .tour import Tour
    from .user import User


class Booking(Base):
    """Booking entity representing a guest's reservation of a tour."""

    __tablename__ = "bookings"

    booking_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    tour_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tours.tour_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Exactly one identity source: a registered user or a guest name/email pair
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    guest_full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    guest_email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    guest_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Booking details
    booking_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    num_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING.value,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("num_guests > 0", name="ck_booking_num_guests_positive"),
        CheckConstraint("total_price >= 0", name="ck_booking_total_price_non_negative"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')",
            name="ck_booking_status_valid"
        ),
        CheckConstraint(
            "(user_id IS NOT NULL AND guest_email IS NULL AND guest_full_name IS NULL)"
            " OR (user_id IS NULL AND guest_email IS NOT NULL AND guest_full_name IS NOT NULL)",
            name="ck_booking_single_identity_source"
        ),
    )

    # Relationships
    tour: Mapped["Tour"] = relationship("Tour", back_populates="bookings")
    user: Mapped["User | None"] = relationship("User", back_populates="bookings")
    payment: Mapped["Payment | None"] = relationship(
        "Payment",
        back_populates="booking",
        cascade="all, delete-orphan",
        uselist=False
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(booking_id={self.booking_id}, tour_id={self.tour_id}, "
            f"num_guests={self.num_guests}, status={self.status})>"
        )
