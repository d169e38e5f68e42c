"""
Session lifecycle, roster, attendance and behavioral note endpoints.

Transitions are attributed to the calling identity; the acting role comes
from the request body.
"""
from typing import List

from fastapi import APIRouter, Depends, status

from klass_hero.api import deps
from klass_hero.api.errors import result_or_raise
from klass_hero.schemas.participation import (
    BatchCheckInRequest,
    BatchCheckInResponse,
    BehavioralNoteCreate,
    BehavioralNoteRejection,
    BehavioralNoteResponse,
    ParticipationOutcomeResponse,
    ParticipationRecordResponse,
    RegisterChildRequest,
    SessionResponse,
    TransitionRequest,
)
from klass_hero.services.participation.participation_service import ParticipationService

router = APIRouter()


# --- Sessions ------------------------------------------------------------------

@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> SessionResponse:
    return SessionResponse.model_validate(result_or_raise(service.get_session(session_id)))


@router.post("/sessions/{session_id}/start", response_model=SessionResponse)
def start_session(
    session_id: str,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> SessionResponse:
    return SessionResponse.model_validate(result_or_raise(service.start_session(session_id)))


@router.post("/sessions/{session_id}/complete", response_model=SessionResponse)
def complete_session(
    session_id: str,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> SessionResponse:
    return SessionResponse.model_validate(result_or_raise(service.complete_session(session_id)))


@router.post("/sessions/{session_id}/cancel", response_model=SessionResponse)
def cancel_session(
    session_id: str,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> SessionResponse:
    return SessionResponse.model_validate(result_or_raise(service.cancel_session(session_id)))


# --- Roster --------------------------------------------------------------------

@router.get("/sessions/{session_id}/roster", response_model=List[ParticipationRecordResponse])
def get_session_roster(
    session_id: str,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> List[ParticipationRecordResponse]:
    records = result_or_raise(service.get_session_roster(session_id))
    return [ParticipationRecordResponse.model_validate(record) for record in records]


@router.post(
    "/sessions/{session_id}/roster",
    response_model=ParticipationRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_child(
    session_id: str,
    payload: RegisterChildRequest,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> ParticipationRecordResponse:
    record = result_or_raise(service.register_child(session_id, payload.child_id, payload.parent_id))
    return ParticipationRecordResponse.model_validate(record)


@router.post("/sessions/{session_id}/roster/seed", response_model=List[ParticipationRecordResponse])
def seed_roster(
    session_id: str,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> List[ParticipationRecordResponse]:
    records = result_or_raise(service.seed_roster(session_id))
    return [ParticipationRecordResponse.model_validate(record) for record in records]


# --- Attendance ----------------------------------------------------------------

@router.post("/participation/{record_id}/check-in", response_model=ParticipationRecordResponse)
def check_in(
    record_id: str,
    payload: TransitionRequest,
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> ParticipationRecordResponse:
    record = result_or_raise(
        service.check_in(
            record_id,
            payload.actor_role,
            identity_id,
            notes=payload.notes,
            expected_version=payload.expected_version,
        )
    )
    return ParticipationRecordResponse.model_validate(record)


@router.post("/participation/{record_id}/check-out", response_model=ParticipationRecordResponse)
def check_out(
    record_id: str,
    payload: TransitionRequest,
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> ParticipationRecordResponse:
    record = result_or_raise(
        service.check_out(
            record_id,
            payload.actor_role,
            identity_id,
            notes=payload.notes,
            expected_version=payload.expected_version,
        )
    )
    return ParticipationRecordResponse.model_validate(record)


@router.post("/participation/{record_id}/absent", response_model=ParticipationRecordResponse)
def mark_absent(
    record_id: str,
    payload: TransitionRequest,
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> ParticipationRecordResponse:
    record = result_or_raise(
        service.mark_absent(
            record_id,
            payload.actor_role,
            identity_id,
            expected_version=payload.expected_version,
        )
    )
    return ParticipationRecordResponse.model_validate(record)


@router.post("/sessions/{session_id}/check-ins", response_model=BatchCheckInResponse)
def batch_check_in(
    session_id: str,
    payload: BatchCheckInRequest,
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> BatchCheckInResponse:
    result = result_or_raise(
        service.batch_check_in(
            session_id,
            payload.child_ids,
            payload.actor_role,
            identity_id,
            notes=payload.notes,
        )
    )
    return BatchCheckInResponse(
        session_id=result.session_id,
        succeeded_count=result.succeeded_count,
        failed_count=result.failed_count,
        partial_failure=result.partial_failure,
        outcomes=[
            ParticipationOutcomeResponse(
                child_id=outcome.child_id,
                record_id=outcome.record_id,
                succeeded=outcome.succeeded,
                status=outcome.status,
                error_code=outcome.error_code.value if outcome.error_code else None,
                message=outcome.message,
            )
            for outcome in result.outcomes
        ],
    )


# --- Behavioral notes ----------------------------------------------------------

@router.post(
    "/participation/{record_id}/notes",
    response_model=BehavioralNoteResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_behavioral_note(
    record_id: str,
    payload: BehavioralNoteCreate,
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> BehavioralNoteResponse:
    note = result_or_raise(service.submit_behavioral_note(record_id, identity_id, payload.content))
    return BehavioralNoteResponse.model_validate(note)


@router.put("/notes/{note_id}", response_model=BehavioralNoteResponse)
def revise_behavioral_note(
    note_id: str,
    payload: BehavioralNoteCreate,
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> BehavioralNoteResponse:
    note = result_or_raise(service.revise_behavioral_note(note_id, identity_id, payload.content))
    return BehavioralNoteResponse.model_validate(note)


@router.post("/notes/{note_id}/approve", response_model=BehavioralNoteResponse)
def approve_behavioral_note(
    note_id: str,
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> BehavioralNoteResponse:
    return BehavioralNoteResponse.model_validate(
        result_or_raise(service.approve_behavioral_note(note_id, identity_id))
    )


@router.post("/notes/{note_id}/reject", response_model=BehavioralNoteResponse)
def reject_behavioral_note(
    note_id: str,
    payload: BehavioralNoteRejection,
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> BehavioralNoteResponse:
    return BehavioralNoteResponse.model_validate(
        result_or_raise(service.reject_behavioral_note(note_id, identity_id, payload.reason))
    )


@router.get("/notes/pending", response_model=List[BehavioralNoteResponse])
def list_pending_notes(
    identity_id: str = Depends(deps.get_identity_id),
    service: ParticipationService = Depends(deps.get_participation_service),
) -> List[BehavioralNoteResponse]:
    notes = result_or_raise(service.list_pending_notes(identity_id))
    return [BehavioralNoteResponse.model_validate(note) for note in notes]


@router.get("/children/{child_id}/notes", response_model=List[BehavioralNoteResponse])
def list_approved_notes(
    child_id: str,
    service: ParticipationService = Depends(deps.get_participation_service),
) -> List[BehavioralNoteResponse]:
    notes = result_or_raise(service.list_approved_notes(child_id))
    return [BehavioralNoteResponse.model_validate(note) for note in notes]
