"""
Booking flow endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from klass_hero.api import deps
from klass_hero.api.errors import result_or_raise
from klass_hero.schemas.enrollment import (
    BookingCompleteRequest,
    BookingStartResponse,
    BookingUsageResponse,
    ChildSummary,
    EnrollmentResponse,
    FeeQuoteRequest,
    FeeQuoteResponse,
)
from klass_hero.services.enrollment.booking_quota_service import BookingQuotaService
from klass_hero.services.enrollment.booking_service import BookingService
from klass_hero.services.enrollment.fee_calculation_service import FeeCalculationService

router = APIRouter(prefix="/bookings")


@router.post("/quote", response_model=FeeQuoteResponse)
def calculate_quote(
    payload: FeeQuoteRequest,
    service: FeeCalculationService = Depends(deps.get_fee_service),
) -> FeeQuoteResponse:
    quote = result_or_raise(service.calculate_quote(**payload.model_dump()))
    return FeeQuoteResponse.model_validate(quote)


@router.get("/usage", response_model=BookingUsageResponse)
def get_booking_usage(
    identity_id: str = Depends(deps.get_identity_id),
    service: BookingQuotaService = Depends(deps.get_quota_service),
) -> BookingUsageResponse:
    usage = result_or_raise(service.get_booking_usage_info(identity_id))
    return BookingUsageResponse.model_validate(usage)


@router.get("/{program_id}", response_model=BookingStartResponse)
def start_booking(
    program_id: str,
    payment_method: Optional[str] = Query("card"),
    identity_id: str = Depends(deps.get_identity_id),
    service: BookingService = Depends(deps.get_booking_service),
) -> BookingStartResponse:
    context = result_or_raise(service.start_booking(program_id, identity_id, payment_method))
    return BookingStartResponse(
        program_id=context.program.id,
        program_title=context.program.title,
        quote=FeeQuoteResponse.model_validate(context.quote),
        usage=BookingUsageResponse.model_validate(context.usage),
        remaining_capacity=context.remaining_capacity,
        children=[ChildSummary.model_validate(child) for child in context.children],
    )


@router.post(
    "/{program_id}",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def complete_booking(
    program_id: str,
    payload: BookingCompleteRequest,
    identity_id: str = Depends(deps.get_identity_id),
    service: BookingService = Depends(deps.get_booking_service),
) -> EnrollmentResponse:
    enrollment = result_or_raise(
        service.complete_booking(
            program_id,
            identity_id,
            payload.child_id,
            payload.payment_method,
            payload.special_requirements,
        )
    )
    return EnrollmentResponse.model_validate(enrollment)
