"""
Program session model.

A session is one scheduled meeting of a program. Attendance for each child
is tracked in ParticipationRecord rows belonging to the session.
"""

from datetime import date, time
from typing import List, Optional

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klass_hero.core.exceptions import InvalidTransitionError, ValidationError
from klass_hero.models.base.base_model import TimestampModel
from klass_hero.models.base.enums import SessionStatus

__all__ = ["ProgramSession"]


class ProgramSession(TimestampModel):
    """
    Scheduled session of a program.

    Lifecycle: scheduled -> in_progress -> completed, scheduled -> cancelled.
    """

    __tablename__ = "program_sessions"

    ALLOWED_TRANSITIONS = {
        SessionStatus.SCHEDULED: (SessionStatus.IN_PROGRESS, SessionStatus.CANCELLED),
        SessionStatus.IN_PROGRESS: (SessionStatus.COMPLETED,),
        SessionStatus.COMPLETED: (),
        SessionStatus.CANCELLED: (),
    }

    program_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )
    start_time: Mapped[time] = mapped_column(
        Time,
        nullable=False,
    )
    end_time: Mapped[time] = mapped_column(
        Time,
        nullable=False,
    )
    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, name="session_status_enum"),
        nullable=False,
        default=SessionStatus.SCHEDULED,
        index=True,
    )
    location: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    max_capacity: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    lock_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    records: Mapped[List["ParticipationRecord"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_program_sessions_time_order"),
    )

    __mapper_args__ = {"version_id_col": lock_version}

    @staticmethod
    def validate_times(start_time: time, end_time: time) -> None:
        if start_time >= end_time:
            raise ValidationError(
                "Session start time must be before end time",
                field_errors={"start_time": ["must be before end_time"]},
            )

    def _transition(self, target: SessionStatus) -> None:
        if target not in self.ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError("session", self.status.value, target.value)
        self.status = target

    def start(self) -> None:
        self._transition(SessionStatus.IN_PROGRESS)

    def complete(self) -> None:
        self._transition(SessionStatus.COMPLETED)

    def cancel(self) -> None:
        self._transition(SessionStatus.CANCELLED)
