from klass_hero.schemas.participation.participation import (
    BatchCheckInRequest,
    BatchCheckInResponse,
    BehavioralNoteCreate,
    BehavioralNoteRejection,
    BehavioralNoteResponse,
    ParticipationOutcomeResponse,
    ParticipationRecordResponse,
    RegisterChildRequest,
    SessionCreate,
    SessionResponse,
    TransitionRequest,
)

__all__ = [
    "BatchCheckInRequest",
    "BatchCheckInResponse",
    "BehavioralNoteCreate",
    "BehavioralNoteRejection",
    "BehavioralNoteResponse",
    "ParticipationOutcomeResponse",
    "ParticipationRecordResponse",
    "RegisterChildRequest",
    "SessionCreate",
    "SessionResponse",
    "TransitionRequest",
]
