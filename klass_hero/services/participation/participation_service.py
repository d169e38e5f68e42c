"""
Participation service.

Manages program sessions and the per-child attendance records in them:
registration of children onto a session roster, provider check-in and
check-out, absence marking, batch check-in with per-child outcomes,
session completion and provider behavioral notes reviewed by parents.

Concurrent edits of the same record are detected through its lock_version;
the losing write is reported as CONFLICT and changes nothing.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from klass_hero.core.exceptions import (
    BaseAppException,
    DuplicateBehavioralNoteError,
    InvalidRecordStatusError,
    NoParentProfileError,
    NoSpotsAvailableError,
    OptimisticLockError,
    ResourceNotFoundError,
    ValidationError,
)
from klass_hero.models.base.enums import (
    ActorRole,
    BehavioralNoteStatus,
    ParticipationStatus,
    SessionStatus,
)
from klass_hero.models.family.family import ParentProfile
from klass_hero.models.participation.behavioral_note import BehavioralNote
from klass_hero.models.participation.participation_record import ParticipationRecord
from klass_hero.models.participation.program_session import ProgramSession
from klass_hero.repositories.catalog.program_repository import ProgramRepository
from klass_hero.repositories.enrollment.enrollment_repository import EnrollmentRepository
from klass_hero.repositories.family.family_repository import ChildRepository, ParentProfileRepository
from klass_hero.repositories.participation.participation_repository import (
    BehavioralNoteRepository,
    ParticipationRecordRepository,
    ProgramSessionRepository,
)
from klass_hero.services.base import BaseService, ErrorCode, ServiceResult
from klass_hero.utils.date_utils import now_utc

REGISTRATION_OPEN_SESSION_STATUSES = (SessionStatus.SCHEDULED, SessionStatus.IN_PROGRESS)


@dataclass(frozen=True)
class ParticipationOutcome:
    """Result of one child's check-in attempt within a batch."""

    child_id: str
    record_id: Optional[str]
    succeeded: bool
    status: Optional[ParticipationStatus] = None
    error_code: Optional[ErrorCode] = None
    message: Optional[str] = None


@dataclass
class BatchCheckInResult:
    """Per-child outcomes of a batch check-in, in request order."""

    session_id: str
    outcomes: List[ParticipationOutcome] = field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.outcomes) - self.succeeded_count

    @property
    def partial_failure(self) -> bool:
        return self.failed_count > 0 and self.succeeded_count > 0

    @property
    def failures(self) -> List[ParticipationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]


class ParticipationService(BaseService[ParticipationRecord, ParticipationRecordRepository]):
    """Session lifecycle and attendance state machine operations."""

    def __init__(self, db_session: Session):
        super().__init__(ParticipationRecordRepository(db_session), db_session)
        self.session_repo = ProgramSessionRepository(db_session)
        self.program_repo = ProgramRepository(db_session)
        self.child_repo = ChildRepository(db_session)
        self.enrollment_repo = EnrollmentRepository(db_session)
        self.note_repo = BehavioralNoteRepository(db_session)
        self.parent_repo = ParentProfileRepository(db_session)

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def create_session(
        self,
        program_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        location: Optional[str] = None,
        max_capacity: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> ServiceResult[ProgramSession]:
        try:
            ProgramSession.validate_times(start_time, end_time)
            if max_capacity is not None and max_capacity < 1:
                raise ValidationError(
                    "Session capacity must be positive",
                    field_errors={"max_capacity": ["must be greater than or equal to 1"]},
                )

            with self.transaction():
                self.program_repo.get_by_id(program_id)
                session = ProgramSession(
                    program_id=program_id,
                    session_date=session_date,
                    start_time=start_time,
                    end_time=end_time,
                    location=location,
                    max_capacity=max_capacity,
                    notes=notes,
                )
                self.session_repo.create(session)

            self._log_operation("create session", session.id, {"program_id": program_id})
            return ServiceResult.success(session, message="Session created")
        except BaseAppException as e:
            return self._handle_app_exception(e, "create session", program_id)
        except Exception as e:
            return self._handle_exception(e, "create session", program_id)

    def get_session(self, session_id: str) -> ServiceResult[ProgramSession]:
        try:
            return ServiceResult.success(self.session_repo.get_by_id(session_id))
        except BaseAppException as e:
            return self._handle_app_exception(e, "get session", session_id)
        except Exception as e:
            return self._handle_exception(e, "get session", session_id)

    def list_program_sessions(self, program_id: str) -> ServiceResult[List[ProgramSession]]:
        try:
            return ServiceResult.success(self.session_repo.list_for_program(program_id))
        except Exception as e:
            return self._handle_exception(e, "list program sessions", program_id)

    def start_session(self, session_id: str) -> ServiceResult[ProgramSession]:
        try:
            with self.transaction():
                session = self.session_repo.get_by_id(session_id)
                session.start()
            self._log_operation("start session", session_id)
            return ServiceResult.success(session, message="Session started")
        except BaseAppException as e:
            return self._handle_app_exception(e, "start session", session_id)
        except Exception as e:
            return self._handle_exception(e, "start session", session_id)

    def cancel_session(self, session_id: str) -> ServiceResult[ProgramSession]:
        try:
            with self.transaction():
                session = self.session_repo.get_by_id(session_id)
                session.cancel()
            self._log_operation("cancel session", session_id)
            return ServiceResult.success(session, message="Session cancelled")
        except BaseAppException as e:
            return self._handle_app_exception(e, "cancel session", session_id)
        except Exception as e:
            return self._handle_exception(e, "cancel session", session_id)

    def complete_session(
        self,
        session_id: str,
        at: Optional[datetime] = None,
    ) -> ServiceResult[ProgramSession]:
        """
        Complete an in-progress session.

        Children still scheduled at that point never arrived; the system
        marks them absent in the same transaction.
        """
        at = at or now_utc()
        try:
            with self.transaction():
                session = self.session_repo.get_by_id(session_id)
                session.complete()
                absent = self.repository.list_scheduled_for_session(session_id)
                for record in absent:
                    record.mark_absent(ActorRole.SYSTEM, None, at)
                self.db.flush()

            self._log_operation(
                "complete session",
                session_id,
                {"marked_absent": len(absent)},
            )
            return ServiceResult.success(session, message="Session completed")
        except BaseAppException as e:
            return self._handle_app_exception(e, "complete session", session_id)
        except Exception as e:
            return self._handle_exception(e, "complete session", session_id)

    # -------------------------------------------------------------------------
    # Roster
    # -------------------------------------------------------------------------

    def register_child(
        self,
        session_id: str,
        child_id: str,
        parent_id: Optional[str] = None,
    ) -> ServiceResult[ParticipationRecord]:
        """Add a child to a session roster with status scheduled."""
        try:
            with self.transaction():
                session = self.session_repo.get_by_id(session_id)
                record = self._register(session, child_id, parent_id)
            self._log_operation("register child", record.id, {"session_id": session_id, "child_id": child_id})
            return ServiceResult.success(record, message="Child registered for session")
        except IntegrityError:
            self._rollback()
            return ServiceResult.conflict(
                "Child is already registered for this session",
                {"session_id": session_id, "child_id": child_id},
            )
        except BaseAppException as e:
            return self._handle_app_exception(e, "register child", session_id)
        except Exception as e:
            return self._handle_exception(e, "register child", session_id)

    def seed_roster(self, session_id: str) -> ServiceResult[List[ParticipationRecord]]:
        """
        Register every child actively enrolled in the session's program.

        Children already on the roster are skipped; the result holds only
        the newly created records.
        """
        try:
            with self.transaction():
                session = self.session_repo.get_by_id(session_id)
                created = []
                seen = set()
                for enrollment in self.enrollment_repo.list_active_for_program(session.program_id):
                    if enrollment.child_id in seen:
                        continue
                    seen.add(enrollment.child_id)
                    if self.repository.find_for_child(session_id, enrollment.child_id) is not None:
                        continue
                    created.append(self._register(session, enrollment.child_id, enrollment.parent_id))

            self._log_operation("seed roster", session_id, {"registered": len(created)})
            return ServiceResult.success(created, message=f"{len(created)} children registered")
        except BaseAppException as e:
            return self._handle_app_exception(e, "seed roster", session_id)
        except Exception as e:
            return self._handle_exception(e, "seed roster", session_id)

    def _register(
        self,
        session: ProgramSession,
        child_id: str,
        parent_id: Optional[str],
    ) -> ParticipationRecord:
        if session.status not in REGISTRATION_OPEN_SESSION_STATUSES:
            raise ValidationError(
                f"Session is {session.status.value} and no longer accepts registrations",
                field_errors={"session_id": ["session is not open for registration"]},
            )
        child = self.child_repo.get_by_id(child_id)
        if session.max_capacity is not None:
            registered = self.repository.count(session_id=session.id)
            if registered >= session.max_capacity:
                raise NoSpotsAvailableError(session.program_id, session.max_capacity)

        record = ParticipationRecord(
            session_id=session.id,
            child_id=child.id,
            parent_id=parent_id or child.parent_id,
            status=ParticipationStatus.SCHEDULED,
        )
        return self.repository.create(record)

    def get_session_roster(self, session_id: str) -> ServiceResult[List[ParticipationRecord]]:
        try:
            self.session_repo.get_by_id(session_id)
            return ServiceResult.success(self.repository.list_for_session(session_id))
        except BaseAppException as e:
            return self._handle_app_exception(e, "get session roster", session_id)
        except Exception as e:
            return self._handle_exception(e, "get session roster", session_id)

    # -------------------------------------------------------------------------
    # Attendance transitions
    # -------------------------------------------------------------------------

    def check_in(
        self,
        record_id: str,
        actor_role: ActorRole,
        actor_id: Optional[str] = None,
        notes: Optional[str] = None,
        at: Optional[datetime] = None,
        expected_version: Optional[int] = None,
    ) -> ServiceResult[ParticipationRecord]:
        return self._apply(
            "check_in", record_id, actor_role, actor_id, at, expected_version, notes=notes
        )

    def check_out(
        self,
        record_id: str,
        actor_role: ActorRole,
        actor_id: Optional[str] = None,
        notes: Optional[str] = None,
        at: Optional[datetime] = None,
        expected_version: Optional[int] = None,
    ) -> ServiceResult[ParticipationRecord]:
        return self._apply(
            "check_out", record_id, actor_role, actor_id, at, expected_version, notes=notes
        )

    def mark_absent(
        self,
        record_id: str,
        actor_role: ActorRole,
        actor_id: Optional[str] = None,
        at: Optional[datetime] = None,
        expected_version: Optional[int] = None,
    ) -> ServiceResult[ParticipationRecord]:
        return self._apply("mark_absent", record_id, actor_role, actor_id, at, expected_version)

    def _apply(
        self,
        action: str,
        record_id: str,
        actor_role: ActorRole,
        actor_id: Optional[str],
        at: Optional[datetime],
        expected_version: Optional[int],
        **kwargs,
    ) -> ServiceResult[ParticipationRecord]:
        operation = action.replace("_", " ")
        try:
            with self.transaction():
                record = self.repository.get_by_id(record_id)
                self._transition(record, action, actor_role, actor_id, at or now_utc(), expected_version, **kwargs)

            self._log_operation(
                operation,
                record_id,
                {"actor_role": ActorRole(actor_role).value, "participation_status": record.status.value},
            )
            return ServiceResult.success(record)
        except BaseAppException as e:
            return self._handle_app_exception(e, operation, record_id)
        except Exception as e:
            return self._handle_exception(e, operation, record_id)

    def _transition(
        self,
        record: ParticipationRecord,
        action: str,
        actor_role: ActorRole,
        actor_id: Optional[str],
        at: datetime,
        expected_version: Optional[int],
        **kwargs,
    ) -> None:
        if expected_version is not None and record.lock_version != expected_version:
            raise OptimisticLockError("ParticipationRecord", record.id)
        getattr(record, action)(actor_role, actor_id, at, **kwargs)
        try:
            self.db.flush()
        except StaleDataError as e:
            raise OptimisticLockError("ParticipationRecord", record.id) from e

    # -------------------------------------------------------------------------
    # Batch
    # -------------------------------------------------------------------------

    def batch_check_in(
        self,
        session_id: str,
        child_ids: Iterable[str],
        actor_role: ActorRole,
        actor_id: Optional[str] = None,
        notes: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> ServiceResult[BatchCheckInResult]:
        """
        Check in several children of one session.

        Each child is an independent attempt committed on its own: a failure
        for one child never undoes or blocks the others. The result lists one
        outcome per distinct requested child id, in request order.
        """
        unique_ids = list(dict.fromkeys(child_id for child_id in child_ids if child_id))
        if not unique_ids:
            return ServiceResult.validation_failure(
                "At least one child must be selected for check-in",
                field="child_ids",
            )

        try:
            self.session_repo.get_by_id(session_id)
        except BaseAppException as e:
            return self._handle_app_exception(e, "batch check in", session_id)

        at = at or now_utc()
        result = BatchCheckInResult(session_id=session_id)
        for child_id in unique_ids:
            result.outcomes.append(
                self._check_in_one(session_id, child_id, actor_role, actor_id, notes, at)
            )

        self._log_operation(
            "batch check in",
            session_id,
            {
                "requested": len(unique_ids),
                "succeeded": result.succeeded_count,
                "failed": result.failed_count,
            },
        )
        if result.failed_count:
            self._logger.warning(
                f"Batch check-in had {result.failed_count} failure(s)",
                extra={
                    "session_id": session_id,
                    "failed_child_ids": [outcome.child_id for outcome in result.failures],
                },
            )
        message = (
            f"{result.succeeded_count} of {len(unique_ids)} children checked in"
        )
        return ServiceResult.success(result, message=message)

    def _check_in_one(
        self,
        session_id: str,
        child_id: str,
        actor_role: ActorRole,
        actor_id: Optional[str],
        notes: Optional[str],
        at: datetime,
    ) -> ParticipationOutcome:
        record_id = None
        try:
            with self.transaction():
                record = self.repository.find_for_child(session_id, child_id)
                if record is None:
                    raise ResourceNotFoundError("ParticipationRecord", f"{session_id}/{child_id}")
                record_id = record.id
                self._transition(record, "check_in", actor_role, actor_id, at, None, notes=notes)
            return ParticipationOutcome(
                child_id=child_id,
                record_id=record_id,
                succeeded=True,
                status=record.status,
            )
        except BaseAppException as e:
            return ParticipationOutcome(
                child_id=child_id,
                record_id=record_id,
                succeeded=False,
                error_code=e.error_code,
                message=e.message,
            )
        except StaleDataError:
            return ParticipationOutcome(
                child_id=child_id,
                record_id=record_id,
                succeeded=False,
                error_code=ErrorCode.CONFLICT,
                message="Record was modified concurrently",
            )
        except Exception as e:
            failure = self._handle_exception(e, "check in child", child_id)
            return ParticipationOutcome(
                child_id=child_id,
                record_id=record_id,
                succeeded=False,
                error_code=failure.error_code,
                message=failure.message,
            )

    # -------------------------------------------------------------------------
    # Behavioral notes
    # -------------------------------------------------------------------------

    def submit_behavioral_note(
        self,
        record_id: str,
        provider_id: str,
        content: str,
    ) -> ServiceResult[BehavioralNote]:
        """
        Submit a provider's note on a checked-in or checked-out record.

        The note starts pending approval by the child's parent. A provider
        gets one note per record; a second one is a CONFLICT.
        """
        try:
            text = BehavioralNote.clean_content(content)
            with self.transaction():
                record = self.repository.get_by_id(record_id)
                if not record.allows_behavioral_note:
                    raise InvalidRecordStatusError(record.id, record.status.value)
                if self.note_repo.find_for_record(record.id, provider_id) is not None:
                    raise DuplicateBehavioralNoteError(record.id, provider_id)
                note = self.note_repo.create(
                    BehavioralNote(
                        participation_record_id=record.id,
                        child_id=record.child_id,
                        parent_id=record.parent_id,
                        provider_id=provider_id,
                        content=text,
                        status=BehavioralNoteStatus.PENDING_APPROVAL,
                        submitted_at=now_utc(),
                    )
                )
            self._log_operation(
                "submit behavioral note",
                note.id,
                {"record_id": record_id, "provider_id": provider_id},
            )
            return ServiceResult.success(note, message="Behavioral note submitted")
        except BaseAppException as e:
            return self._handle_app_exception(e, "submit behavioral note", record_id)
        except Exception as e:
            return self._handle_exception(e, "submit behavioral note", record_id)

    def approve_behavioral_note(self, note_id: str, identity_id: str) -> ServiceResult[BehavioralNote]:
        return self._review_note(note_id, identity_id, approve=True)

    def reject_behavioral_note(
        self,
        note_id: str,
        identity_id: str,
        reason: Optional[str] = None,
    ) -> ServiceResult[BehavioralNote]:
        return self._review_note(note_id, identity_id, approve=False, reason=reason)

    def _review_note(
        self,
        note_id: str,
        identity_id: str,
        approve: bool,
        reason: Optional[str] = None,
    ) -> ServiceResult[BehavioralNote]:
        operation = "approve behavioral note" if approve else "reject behavioral note"
        try:
            with self.transaction():
                parent = self._parent_for(identity_id)
                note = self.note_repo.get_by_id(note_id)
                # Other parents' notes are reported as missing
                if note.parent_id != parent.id:
                    raise ResourceNotFoundError("BehavioralNote", note_id)
                if approve:
                    note.approve(now_utc())
                else:
                    note.reject(now_utc(), (reason or "").strip() or None)
            self._log_operation(operation, note_id, {"parent_id": parent.id})
            return ServiceResult.success(note)
        except BaseAppException as e:
            return self._handle_app_exception(e, operation, note_id)
        except Exception as e:
            return self._handle_exception(e, operation, note_id)

    def revise_behavioral_note(
        self,
        note_id: str,
        provider_id: str,
        content: str,
    ) -> ServiceResult[BehavioralNote]:
        """Rewrite a rejected note and resubmit it for approval."""
        try:
            with self.transaction():
                note = self.note_repo.get_by_id(note_id)
                if note.provider_id != provider_id:
                    raise ResourceNotFoundError("BehavioralNote", note_id)
                note.revise(content, now_utc())
            self._log_operation("revise behavioral note", note_id, {"provider_id": provider_id})
            return ServiceResult.success(note, message="Behavioral note resubmitted")
        except BaseAppException as e:
            return self._handle_app_exception(e, "revise behavioral note", note_id)
        except Exception as e:
            return self._handle_exception(e, "revise behavioral note", note_id)

    def list_pending_notes(self, identity_id: str) -> ServiceResult[List[BehavioralNote]]:
        """Notes waiting for the review of the parent behind an identity."""
        try:
            parent = self._parent_for(identity_id)
            return ServiceResult.success(
                self.note_repo.list_for_parent(parent.id, BehavioralNoteStatus.PENDING_APPROVAL)
            )
        except BaseAppException as e:
            return self._handle_app_exception(e, "list pending notes", identity_id)
        except Exception as e:
            return self._handle_exception(e, "list pending notes", identity_id)

    def list_approved_notes(self, child_id: str) -> ServiceResult[List[BehavioralNote]]:
        try:
            self.child_repo.get_by_id(child_id)
            return ServiceResult.success(self.note_repo.list_approved_for_child(child_id))
        except BaseAppException as e:
            return self._handle_app_exception(e, "list approved notes", child_id)
        except Exception as e:
            return self._handle_exception(e, "list approved notes", child_id)

    def _parent_for(self, identity_id: str) -> ParentProfile:
        parent = self.parent_repo.find_by_identity(identity_id)
        if parent is None:
            raise NoParentProfileError(identity_id)
        return parent
