"""
Program session, participation and behavioral note schemas.
"""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, model_validator

from klass_hero.models.base.enums import (
    ActorRole,
    BehavioralNoteStatus,
    ParticipationStatus,
    SessionStatus,
)
from klass_hero.models.participation.behavioral_note import MAX_NOTE_LENGTH
from klass_hero.schemas.common.base import BaseDBSchema, BaseSchema

__all__ = [
    "SessionCreate",
    "SessionResponse",
    "RegisterChildRequest",
    "ParticipationRecordResponse",
    "TransitionRequest",
    "BatchCheckInRequest",
    "ParticipationOutcomeResponse",
    "BatchCheckInResponse",
    "BehavioralNoteCreate",
    "BehavioralNoteRejection",
    "BehavioralNoteResponse",
]


class SessionCreate(BaseSchema):
    session_date: date
    start_time: time
    end_time: time
    location: Optional[str] = Field(default=None, max_length=255)
    max_capacity: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class SessionResponse(BaseDBSchema):
    program_id: str
    session_date: date
    start_time: time
    end_time: time
    status: SessionStatus
    location: Optional[str] = None
    max_capacity: Optional[int] = None
    notes: Optional[str] = None
    lock_version: int


class RegisterChildRequest(BaseSchema):
    child_id: str
    parent_id: Optional[str] = None


class ParticipationRecordResponse(BaseDBSchema):
    session_id: str
    child_id: str
    parent_id: Optional[str] = None
    status: ParticipationStatus
    check_in_at: Optional[datetime] = None
    check_in_by: Optional[str] = None
    check_in_notes: Optional[str] = None
    check_out_at: Optional[datetime] = None
    check_out_by: Optional[str] = None
    check_out_notes: Optional[str] = None
    absent_at: Optional[datetime] = None
    absent_marked_by: Optional[str] = None
    lock_version: int


class TransitionRequest(BaseSchema):
    """Actor performing a participation transition."""

    actor_role: ActorRole
    notes: Optional[str] = Field(default=None, max_length=2000)
    expected_version: Optional[int] = Field(default=None, ge=1)


class BatchCheckInRequest(BaseSchema):
    child_ids: List[str]
    actor_role: ActorRole = ActorRole.PROVIDER
    notes: Optional[str] = Field(default=None, max_length=2000)


class ParticipationOutcomeResponse(BaseSchema):
    child_id: str
    record_id: Optional[str] = None
    succeeded: bool
    status: Optional[ParticipationStatus] = None
    error_code: Optional[str] = None
    message: Optional[str] = None


class BatchCheckInResponse(BaseSchema):
    session_id: str
    succeeded_count: int
    failed_count: int
    partial_failure: bool
    outcomes: List[ParticipationOutcomeResponse]


class BehavioralNoteCreate(BaseSchema):
    content: str = Field(..., min_length=1, max_length=MAX_NOTE_LENGTH)


class BehavioralNoteRejection(BaseSchema):
    reason: Optional[str] = Field(default=None, max_length=2000)


class BehavioralNoteResponse(BaseDBSchema):
    participation_record_id: str
    child_id: str
    parent_id: Optional[str] = None
    provider_id: str
    content: str
    status: BehavioralNoteStatus
    rejection_reason: Optional[str] = None
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
