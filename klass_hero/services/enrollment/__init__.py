"""
Enrollment services: fees, quota, enrollment lifecycle and booking flow.
"""

from klass_hero.services.enrollment.booking_quota_service import BookingQuotaService, BookingUsageInfo
from klass_hero.services.enrollment.booking_service import (
    BookingContext,
    BookingService,
    build_special_requirements,
)
from klass_hero.services.enrollment.enrollment_service import (
    CreateEnrollmentParams,
    EnrollmentService,
)
from klass_hero.services.enrollment.fee_calculation_service import (
    FeeCalculationService,
    FeeQuote,
    FeeSchedule,
    calculate_fees,
    parse_payment_method,
)

__all__ = [
    "BookingContext",
    "BookingQuotaService",
    "BookingService",
    "BookingUsageInfo",
    "CreateEnrollmentParams",
    "EnrollmentService",
    "FeeCalculationService",
    "FeeQuote",
    "FeeSchedule",
    "build_special_requirements",
    "calculate_fees",
    "parse_payment_method",
]
