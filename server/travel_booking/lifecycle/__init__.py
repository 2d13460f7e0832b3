"""Booking and payment lifecycle: pure rules plus the client-side flows built on them."""

from .aggregator import (
    ALL,
    BookingAggregator,
    BookingFilterCriteria,
    BookingStats,
    compute_stats,
    filter_bookings,
    matches_search,
    matches_status,
)
from .errors import (
    ConflictError,
    LifecycleError,
    NotAuthenticatedError,
    ServiceError,
    StructuredValidationError,
    SubmissionInProgressError,
    ValidationError,
)
from .money import TAX_RATE, Amounts, compute_amounts, compute_total_price
from .payments import (
    PaymentLabels,
    PaymentReconciler,
    PaymentStatusColor,
    format_payment_status,
    get_payment_status_color,
    validate_payment_request,
)
from .status import (
    BookingStatusCoordinator,
    NoTransitionAvailable,
    Transition,
    allowed_targets,
    plan_transition,
)
from .submission import OptimisticSubmissionCoordinator, SubmissionState
from .types import (
    BookingForm,
    BookingRecord,
    BookingStatus,
    CardData,
    Identity,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
    TourRef,
    UserRef,
)

__all__ = [
    # Types
    "BookingStatus",
    "PaymentStatus",
    "PaymentMethod",
    "BookingRecord",
    "PaymentRecord",
    "TourRef",
    "UserRef",
    "Identity",
    "CardData",
    "BookingForm",

    # Money
    "TAX_RATE",
    "Amounts",
    "compute_amounts",
    "compute_total_price",

    # Status machine
    "Transition",
    "NoTransitionAvailable",
    "allowed_targets",
    "plan_transition",
    "BookingStatusCoordinator",

    # Payments
    "PaymentLabels",
    "PaymentStatusColor",
    "PaymentReconciler",
    "format_payment_status",
    "get_payment_status_color",
    "validate_payment_request",

    # Aggregation
    "ALL",
    "BookingFilterCriteria",
    "BookingStats",
    "BookingAggregator",
    "matches_status",
    "matches_search",
    "filter_bookings",
    "compute_stats",

    # Submission
    "OptimisticSubmissionCoordinator",
    "SubmissionState",

    # Errors
    "LifecycleError",
    "ValidationError",
    "NotAuthenticatedError",
    "ConflictError",
    "StructuredValidationError",
    "ServiceError",
    "SubmissionInProgressError",
]
