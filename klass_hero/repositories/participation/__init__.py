from klass_hero.repositories.participation.participation_repository import (
    BehavioralNoteRepository,
    ParticipationRecordRepository,
    ProgramSessionRepository,
)

__all__ = ["BehavioralNoteRepository", "ParticipationRecordRepository", "ProgramSessionRepository"]
