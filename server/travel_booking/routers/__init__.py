"""FastAPI routers package."""

from .booking import router as booking_router
from .health import router as health_router
from .metrics import router as metrics_router
from .payment import router as payment_router
from .tour import router as tour_router

__all__ = [
    "booking_router",
    "health_router",
    "metrics_router",
    "payment_router",
    "tour_router",
]
