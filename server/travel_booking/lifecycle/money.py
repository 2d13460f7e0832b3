"""Monetary amounts for a booking.

Both the payment form and the order summary read their figures from
:func:`compute_amounts`, so the two views can never disagree.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

# Fixed tax rate applied on top of the subtotal. Not configurable.
TAX_RATE = Decimal("0.10")

CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


class Amounts(BaseModel):
    """Subtotal, taxes and billed total of a booking."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    taxes: Decimal
    total: Decimal


def to_decimal(value: Number) -> Decimal:
    """Convert a numeric value to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_cents(value: Decimal) -> Decimal:
    """Round half up to whole cents, the precision payments are stored at."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_total_price(price_per_person: Number, num_guests: int) -> Decimal:
    """Booking total fixed at creation time."""
    return to_decimal(price_per_person) * num_guests


def compute_amounts(
    price_per_person: Optional[Number],
    num_guests: int,
    fallback_total: Number,
) -> Amounts:
    """
    Compute subtotal, taxes and total for a booking.

    The subtotal uses the tour's current price when known and falls back to the
    stored booking total otherwise. The billed total is the stored booking total
    plus taxes, not ``subtotal + taxes``. Taxes and total are rounded to cents
    so the displayed total is exactly the amount charged.

    Args:
        price_per_person: Tour's current price per guest, or None
        num_guests: Number of guests on the booking
        fallback_total: Booking's stored total price

    Returns:
        Amounts: subtotal, taxes and total
    """
    stored_total = to_decimal(fallback_total)
    if price_per_person is not None:
        subtotal = compute_total_price(price_per_person, num_guests)
    else:
        subtotal = stored_total

    taxes = to_cents(subtotal * TAX_RATE)
    return Amounts(subtotal=subtotal, taxes=taxes, total=to_cents(stored_total + taxes))
