from klass_hero.schemas.enrollment.enrollment import (
    BookingCompleteRequest,
    BookingStartResponse,
    BookingUsageResponse,
    ChildSummary,
    EnrollmentCancelRequest,
    EnrollmentResponse,
    FeeQuoteRequest,
    FeeQuoteResponse,
)

__all__ = [
    "BookingCompleteRequest",
    "BookingStartResponse",
    "BookingUsageResponse",
    "ChildSummary",
    "EnrollmentCancelRequest",
    "EnrollmentResponse",
    "FeeQuoteRequest",
    "FeeQuoteResponse",
]
