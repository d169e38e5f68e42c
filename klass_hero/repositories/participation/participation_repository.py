"""
Participation repositories: program sessions, attendance records and
behavioral notes.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from klass_hero.models.base.enums import BehavioralNoteStatus, ParticipationStatus
from klass_hero.models.family.family import Child
from klass_hero.models.participation.behavioral_note import BehavioralNote
from klass_hero.models.participation.participation_record import ParticipationRecord
from klass_hero.models.participation.program_session import ProgramSession
from klass_hero.repositories.base.base_repository import BaseRepository


class ProgramSessionRepository(BaseRepository[ProgramSession]):
    """Data access for program sessions."""

    def __init__(self, db: Session):
        super().__init__(ProgramSession, db)

    def list_for_program(self, program_id: str) -> List[ProgramSession]:
        stmt = (
            select(ProgramSession)
            .where(ProgramSession.program_id == program_id)
            .order_by(ProgramSession.session_date, ProgramSession.start_time)
        )
        return list(self.db.scalars(stmt).all())


class ParticipationRecordRepository(BaseRepository[ParticipationRecord]):
    """Data access for participation records."""

    def __init__(self, db: Session):
        super().__init__(ParticipationRecord, db)

    def find_for_child(self, session_id: str, child_id: str) -> Optional[ParticipationRecord]:
        return self.find_one_by(session_id=session_id, child_id=child_id)

    def list_for_session(self, session_id: str) -> List[ParticipationRecord]:
        """Roster of a session ordered by child name."""
        stmt = (
            select(ParticipationRecord)
            .join(Child, Child.id == ParticipationRecord.child_id)
            .where(ParticipationRecord.session_id == session_id)
            .order_by(Child.last_name, Child.first_name, Child.id)
        )
        return list(self.db.scalars(stmt).all())

    def list_scheduled_for_session(self, session_id: str) -> List[ParticipationRecord]:
        stmt = (
            select(ParticipationRecord)
            .where(ParticipationRecord.session_id == session_id)
            .where(ParticipationRecord.status == ParticipationStatus.SCHEDULED)
        )
        return list(self.db.scalars(stmt).all())


class BehavioralNoteRepository(BaseRepository[BehavioralNote]):
    """Data access for behavioral notes."""

    def __init__(self, db: Session):
        super().__init__(BehavioralNote, db)

    def find_for_record(self, record_id: str, provider_id: str) -> Optional[BehavioralNote]:
        return self.find_one_by(participation_record_id=record_id, provider_id=provider_id)

    def list_for_parent(self, parent_id: str, status: BehavioralNoteStatus) -> List[BehavioralNote]:
        """Notes about a parent's children in one status, newest submission first."""
        stmt = (
            select(BehavioralNote)
            .where(BehavioralNote.parent_id == parent_id)
            .where(BehavioralNote.status == status)
            .order_by(BehavioralNote.submitted_at.desc())
        )
        return list(self.db.scalars(stmt).all())

    def list_approved_for_child(self, child_id: str) -> List[BehavioralNote]:
        stmt = (
            select(BehavioralNote)
            .where(BehavioralNote.child_id == child_id)
            .where(BehavioralNote.status == BehavioralNoteStatus.APPROVED)
            .order_by(BehavioralNote.submitted_at.desc())
        )
        return list(self.db.scalars(stmt).all())
