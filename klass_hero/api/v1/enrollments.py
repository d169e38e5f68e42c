"""
Enrollment lifecycle endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends

from klass_hero.api import deps
from klass_hero.api.errors import result_or_raise
from klass_hero.schemas.enrollment import EnrollmentCancelRequest, EnrollmentResponse
from klass_hero.services.enrollment.enrollment_service import EnrollmentService

router = APIRouter(prefix="/enrollments")


@router.get("", response_model=List[EnrollmentResponse])
def list_my_enrollments(
    identity_id: str = Depends(deps.get_identity_id),
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> List[EnrollmentResponse]:
    enrollments = result_or_raise(service.list_parent_enrollments(identity_id))
    return [EnrollmentResponse.model_validate(enrollment) for enrollment in enrollments]


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
def get_enrollment(
    enrollment_id: str,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> EnrollmentResponse:
    return EnrollmentResponse.model_validate(result_or_raise(service.get_enrollment(enrollment_id)))


@router.post("/{enrollment_id}/confirm", response_model=EnrollmentResponse)
def confirm_enrollment(
    enrollment_id: str,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> EnrollmentResponse:
    return EnrollmentResponse.model_validate(result_or_raise(service.confirm_enrollment(enrollment_id)))


@router.post("/{enrollment_id}/complete", response_model=EnrollmentResponse)
def complete_enrollment(
    enrollment_id: str,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> EnrollmentResponse:
    return EnrollmentResponse.model_validate(result_or_raise(service.complete_enrollment(enrollment_id)))


@router.post("/{enrollment_id}/cancel", response_model=EnrollmentResponse)
def cancel_enrollment(
    enrollment_id: str,
    payload: Optional[EnrollmentCancelRequest] = None,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
) -> EnrollmentResponse:
    reason = payload.reason if payload else None
    return EnrollmentResponse.model_validate(result_or_raise(service.cancel_enrollment(enrollment_id, reason)))
