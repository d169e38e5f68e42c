"""
Program catalog endpoints: programs, registration window, capacity and
participant policies, fee quotes and sessions.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from klass_hero.api import deps
from klass_hero.api.errors import result_or_raise
from klass_hero.core.exceptions import ErrorCode
from klass_hero.schemas.catalog import (
    CapacityResponse,
    EnrollmentPolicyResponse,
    EnrollmentPolicyUpdate,
    EligibilityResponse,
    ParticipantPolicyResponse,
    ParticipantPolicyUpdate,
    ProgramCreate,
    ProgramResponse,
    RegistrationStatusResponse,
)
from klass_hero.schemas.enrollment import FeeQuoteResponse
from klass_hero.schemas.participation import SessionCreate, SessionResponse
from klass_hero.services.catalog.program_service import ProgramService
from klass_hero.services.enrollment.enrollment_service import EnrollmentService
from klass_hero.services.enrollment.fee_calculation_service import FeeCalculationService
from klass_hero.services.participation.participation_service import ParticipationService

router = APIRouter(prefix="/programs")


@router.post("", response_model=ProgramResponse, status_code=status.HTTP_201_CREATED)
def create_program(
    payload: ProgramCreate,
    service: ProgramService = Depends(deps.get_program_service),
) -> ProgramResponse:
    program = result_or_raise(service.create_program(**payload.model_dump()))
    return ProgramResponse.model_validate(program)


@router.get("", response_model=List[ProgramResponse])
def list_programs(
    provider_id: Optional[str] = Query(None),
    service: ProgramService = Depends(deps.get_program_service),
) -> List[ProgramResponse]:
    programs = result_or_raise(service.list_programs(provider_id))
    return [ProgramResponse.model_validate(program) for program in programs]


@router.get("/{program_id}", response_model=ProgramResponse)
def get_program(
    program_id: str,
    service: ProgramService = Depends(deps.get_program_service),
) -> ProgramResponse:
    return ProgramResponse.model_validate(result_or_raise(service.get_program(program_id)))


@router.get("/{program_id}/registration-status", response_model=RegistrationStatusResponse)
def get_registration_status(
    program_id: str,
    today: Optional[date] = Query(None, description="Evaluate the window on this day"),
    service: ProgramService = Depends(deps.get_program_service),
) -> RegistrationStatusResponse:
    return RegistrationStatusResponse(**result_or_raise(service.get_registration_status(program_id, today)))


@router.put("/{program_id}/enrollment-policy", response_model=EnrollmentPolicyResponse)
def set_enrollment_policy(
    program_id: str,
    payload: EnrollmentPolicyUpdate,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> EnrollmentPolicyResponse:
    policy = result_or_raise(
        service.set_enrollment_policy(program_id, payload.min_enrollment, payload.max_enrollment)
    )
    return EnrollmentPolicyResponse.model_validate(policy)


@router.get("/{program_id}/capacity", response_model=CapacityResponse)
def get_remaining_capacity(
    program_id: str,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> CapacityResponse:
    remaining = result_or_raise(service.get_remaining_capacity(program_id))
    return CapacityResponse(program_id=program_id, remaining_capacity=remaining)


@router.put("/{program_id}/participant-policy", response_model=ParticipantPolicyResponse)
def set_participant_policy(
    program_id: str,
    payload: ParticipantPolicyUpdate,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> ParticipantPolicyResponse:
    policy = result_or_raise(service.set_participant_policy(program_id, **payload.model_dump()))
    return ParticipantPolicyResponse.model_validate(policy)


@router.get("/{program_id}/participant-policy", response_model=ParticipantPolicyResponse)
def get_participant_policy(
    program_id: str,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> ParticipantPolicyResponse:
    return ParticipantPolicyResponse.model_validate(result_or_raise(service.get_participant_policy(program_id)))


@router.get("/{program_id}/eligibility", response_model=EligibilityResponse)
def check_eligibility(
    program_id: str,
    child_id: str = Query(...),
    today: Optional[date] = Query(None, description="Evaluate age on this day"),
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> EligibilityResponse:
    """Eligible or not, with every failed restriction; 404 for an unknown program or child."""
    result = service.check_participant_eligibility(program_id, child_id, today)
    if result.error_code == ErrorCode.PARTICIPANT_INELIGIBLE:
        return EligibilityResponse(
            program_id=program_id,
            child_id=child_id,
            eligible=False,
            reasons=result.error.details["reasons"],
        )
    result_or_raise(result)
    return EligibilityResponse(program_id=program_id, child_id=child_id, eligible=True)


@router.get("/{program_id}/quote", response_model=FeeQuoteResponse)
def get_program_quote(
    program_id: str,
    payment_method: str = Query("card"),
    service: FeeCalculationService = Depends(deps.get_fee_service),
) -> FeeQuoteResponse:
    quote = result_or_raise(service.quote_for_program(program_id, payment_method))
    return FeeQuoteResponse.model_validate(quote)


@router.get("/{program_id}/enrolled")
def is_enrolled(
    program_id: str,
    identity_id: str = Depends(deps.get_identity_id),
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> dict:
    return {"program_id": program_id, "enrolled": result_or_raise(service.enrolled(program_id, identity_id))}


@router.get("/{program_id}/enrolled-identities", response_model=List[str])
def list_enrolled_identities(
    program_id: str,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> List[str]:
    return result_or_raise(service.list_enrolled_identity_ids(program_id))


@router.post(
    "/{program_id}/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    program_id: str,
    payload: SessionCreate,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> SessionResponse:
    session = result_or_raise(service.create_session(program_id, **payload.model_dump()))
    return SessionResponse.model_validate(session)


@router.get("/{program_id}/sessions", response_model=List[SessionResponse])
def list_program_sessions(
    program_id: str,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> List[SessionResponse]:
    sessions = result_or_raise(service.list_program_sessions(program_id))
    return [SessionResponse.model_validate(session) for session in sessions]
