from klass_hero.services.participation.participation_service import (
    BatchCheckInResult,
    ParticipationOutcome,
    ParticipationService,
)

__all__ = ["BatchCheckInResult", "ParticipationOutcome", "ParticipationService"]
