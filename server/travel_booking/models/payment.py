"""Payment model definition."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from ..lifecycle.types import PaymentStatus

if TYPE_CHECKING:
    from .booking import Booking


class Payment(Base):
    """
    The single current payment record of a booking.

    Retries overwrite this row; attempt history is not kept.
    """

    __tablename__ = "payments"

    payment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    booking_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bookings.booking_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value
    )
    transaction_id: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payment_amount_non_negative"),
        CheckConstraint(
            "payment_method IN ('card', 'internet_banking')",
            name="ck_payment_method_valid"
        ),
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')",
            name="ck_payment_status_valid"
        ),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="payment")

    def __repr__(self) -> str:
        return (
            f"<Payment(payment_id={self.payment_id}, booking_id={self.booking_id}, "
            f"status={self.status}, payment_method={self.payment_method})>"
        )
