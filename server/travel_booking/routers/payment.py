"""Payment router for the booking payment flow."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AuthenticatedUser, DatabaseSession, RequiredAuth
from ..core.exceptions import NotFoundError, PaymentNotAllowedError
from ..lifecycle.types import BookingRecord
from ..schemas.payment import (
    BookingForPaymentRequest,
    BookingForPaymentResponse,
    PaymentResult,
    ProcessPaymentRequest,
)
from ..services.booking_service import BookingService
from ..services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/payment", tags=["payment"])


@router.post("/booking", response_model=BookingForPaymentResponse)
async def get_booking_for_payment(
    request: BookingForPaymentRequest,
    user: AuthenticatedUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Load the caller's booking with the subtotal, taxes and total to charge.
    """
    booking, amounts = await BookingService(db).get_booking_for_payment(request.booking_id, user)

    response_data = BookingForPaymentResponse(
        booking=BookingRecord.model_validate(booking),
        subtotal=amounts.subtotal,
        taxes=amounts.taxes,
        total=amounts.total,
    )
    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.post("/process", response_model=PaymentResult)
async def process_payment(
    request: ProcessPaymentRequest,
    user: AuthenticatedUser = RequiredAuth,
    db: AsyncSession = DatabaseSession
) -> JSONResponse:
    """
    Settle a payment attempt for the caller's booking.

    Rejections come back as ``success: false`` with a displayable ``error``;
    authentication failures stay HTTP errors.
    """
    try:
        payment = await PaymentService(db).process_payment(request, user)
    except (PaymentNotAllowedError, NotFoundError) as e:
        response_data = PaymentResult(success=False, error=e.message)
    else:
        response_data = PaymentResult(
            success=True,
            payment_id=payment.payment_id,
            transaction_id=payment.transaction_id,
        )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )
