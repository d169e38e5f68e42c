from klass_hero.repositories.catalog.program_repository import (
    EnrollmentPolicyRepository,
    ParticipantPolicyRepository,
    ProgramRepository,
)

__all__ = ["EnrollmentPolicyRepository", "ParticipantPolicyRepository", "ProgramRepository"]
