"""Async HTTP client for the booking API.

Implements the booking and payment data sources the lifecycle coordinators
consume, translating HTTP failures into lifecycle errors.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .lifecycle.aggregator import BookingFilterCriteria
from .lifecycle.errors import ConflictError, NotAuthenticatedError, ServiceError
from .lifecycle.ports import CreateBookingResult, PaymentResult, ProcessPaymentRequest, StatusUpdateResult
from .lifecycle.types import BookingForm, BookingRecord, BookingStatus
from .schemas.booking import BookingStatsResponse
from .schemas.payment import BookingForPaymentResponse
from .schemas.tour import Tour

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
GENERIC_FAILURE = "The booking service could not process the request"


class BookingApiClient:
    """
    Client for the RPC-over-HTTP booking API.

    Mapping of failures:
        409 -> ConflictError
        401/403 -> NotAuthenticatedError
        other HTTP errors, timeouts and connection errors -> ServiceError
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.token = token
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "BookingApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            resp = await self._client.post(path, json=payload or {}, headers=self._headers())
        except httpx.TimeoutException as e:
            logger.warning("Booking API timeout", extra={"path": path})
            raise ServiceError(GENERIC_FAILURE) from e
        except httpx.HTTPError as e:
            logger.warning("Booking API unreachable", extra={"path": path, "error": str(e)})
            raise ServiceError(GENERIC_FAILURE) from e

        if resp.status_code < 400:
            return resp.json()

        problem = _problem_details(resp)
        detail = problem.get("detail") if isinstance(problem.get("detail"), str) else None

        if resp.status_code == 409:
            resource = problem.get("conflicting_resource") or {}
            raise ConflictError(
                detail or "The booking is no longer pending",
                booking_id=resource.get("booking_id"),
                current_status=resource.get("current_status"),
            )
        if resp.status_code in (401, 403):
            raise NotAuthenticatedError(detail or "Unauthorized")

        logger.warning(
            "Booking API request failed",
            extra={"path": path, "status_code": resp.status_code}
        )
        # Server errors never carry displayable text
        if resp.status_code >= 500 or not detail:
            raise ServiceError(GENERIC_FAILURE)
        raise ServiceError(detail)

    # Bookings

    async def list_bookings(self) -> List[BookingRecord]:
        data = await self._post("/v1/booking/list")
        return [BookingRecord.model_validate(b) for b in data["bookings"]]

    async def list_my_bookings(self) -> List[BookingRecord]:
        data = await self._post("/v1/booking/mine")
        return [BookingRecord.model_validate(b) for b in data["bookings"]]

    async def create_booking(self, form: BookingForm) -> CreateBookingResult:
        data = await self._post("/v1/booking/create", form.model_dump(mode="json"))
        return CreateBookingResult.model_validate(data)

    async def update_booking_status(self, booking_id: int, new_status: BookingStatus) -> StatusUpdateResult:
        """
        Request an admin status transition.

        Raises:
            ConflictError: If the booking is no longer pending
            NotAuthenticatedError: If the caller is not an admin
            ServiceError: On any other failure
        """
        data = await self._post(
            "/v1/booking/update-status",
            {"booking_id": booking_id, "status": new_status.value},
        )
        return StatusUpdateResult.model_validate(data)

    async def cancel_booking(self, booking_id: int) -> StatusUpdateResult:
        data = await self._post("/v1/booking/cancel", {"booking_id": booking_id})
        return StatusUpdateResult.model_validate(data)

    async def delete_booking(self, booking_id: int) -> None:
        await self._post("/v1/booking/delete", {"booking_id": booking_id})

    async def booking_stats(self, criteria: BookingFilterCriteria = BookingFilterCriteria()) -> BookingStatsResponse:
        data = await self._post("/v1/booking/stats", criteria.model_dump(mode="json"))
        return BookingStatsResponse.model_validate(data)

    # Payments

    async def get_booking_for_payment(self, booking_id: int) -> BookingForPaymentResponse:
        data = await self._post("/v1/payment/booking", {"booking_id": booking_id})
        return BookingForPaymentResponse.model_validate(data)

    async def process_payment(self, request: ProcessPaymentRequest) -> PaymentResult:
        data = await self._post("/v1/payment/process", request.model_dump(mode="json"))
        return PaymentResult.model_validate(data)

    # Tours

    async def get_tour(self, tour_id: int) -> Tour:
        data = await self._post("/v1/tour/get", {"tour_id": tour_id})
        return Tour.model_validate(data)


def _problem_details(resp: httpx.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
