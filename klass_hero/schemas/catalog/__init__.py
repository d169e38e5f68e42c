from klass_hero.schemas.catalog.program import (
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

__all__ = [
    "CapacityResponse",
    "EnrollmentPolicyResponse",
    "EnrollmentPolicyUpdate",
    "EligibilityResponse",
    "ParticipantPolicyResponse",
    "ParticipantPolicyUpdate",
    "ProgramCreate",
    "ProgramResponse",
    "RegistrationStatusResponse",
]
