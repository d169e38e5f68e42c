"""
Participation record model with attendance state machine.

States:
    scheduled -> checked_in -> checked_out
    scheduled -> absent

checked_out and absent are terminal. Every transition is guarded by the
actor's role and the current state; both guards run before any field is
touched, so a rejected transition leaves the record unchanged.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klass_hero.core.exceptions import InvalidTransitionError, TransitionNotPermittedError
from klass_hero.models.base.base_model import TimestampModel
from klass_hero.models.base.enums import ActorRole, ParticipationStatus

__all__ = ["ParticipationRecord"]


class ParticipationRecord(TimestampModel):
    """Attendance of one child at one program session."""

    __tablename__ = "participation_records"

    # action -> (required current status, target status, permitted roles)
    TRANSITIONS = {
        "check_in": (
            ParticipationStatus.SCHEDULED,
            ParticipationStatus.CHECKED_IN,
            (ActorRole.PROVIDER,),
        ),
        "check_out": (
            ParticipationStatus.CHECKED_IN,
            ParticipationStatus.CHECKED_OUT,
            (ActorRole.PROVIDER,),
        ),
        "mark_absent": (
            ParticipationStatus.SCHEDULED,
            ParticipationStatus.ABSENT,
            (ActorRole.PROVIDER, ActorRole.SYSTEM),
        ),
    }

    TERMINAL_STATUSES = (ParticipationStatus.CHECKED_OUT, ParticipationStatus.ABSENT)
    NOTE_STATUSES = (ParticipationStatus.CHECKED_IN, ParticipationStatus.CHECKED_OUT)

    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("program_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    child_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("children.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("parent_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[ParticipationStatus] = mapped_column(
        Enum(ParticipationStatus, name="participation_status_enum"),
        nullable=False,
        default=ParticipationStatus.SCHEDULED,
        index=True,
    )

    check_in_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    check_in_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )
    check_in_notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    check_out_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    check_out_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )
    check_out_notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    absent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    absent_marked_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
    )

    lock_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    session: Mapped["ProgramSession"] = relationship(back_populates="records")
    child = relationship("Child")

    __table_args__ = (
        UniqueConstraint("session_id", "child_id", name="uq_participation_session_child"),
    )

    __mapper_args__ = {"version_id_col": lock_version}

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def allows_behavioral_note(self) -> bool:
        return self.status in self.NOTE_STATUSES

    def _guard(self, action: str, actor_role: ActorRole) -> ParticipationStatus:
        """Check role and current state; return the target status."""
        required, target, roles = self.TRANSITIONS[action]
        if actor_role not in roles:
            raise TransitionNotPermittedError(
                action,
                ActorRole(actor_role).value,
                [role.value for role in roles],
            )
        if self.status != required:
            raise InvalidTransitionError("participation", self.status.value, target.value)
        return target

    def check_in(
        self,
        actor_role: ActorRole,
        actor_id: Optional[str],
        at: datetime,
        notes: Optional[str] = None,
    ) -> None:
        self.status = self._guard("check_in", actor_role)
        self.check_in_at = at
        self.check_in_by = actor_id
        self.check_in_notes = notes

    def check_out(
        self,
        actor_role: ActorRole,
        actor_id: Optional[str],
        at: datetime,
        notes: Optional[str] = None,
    ) -> None:
        self.status = self._guard("check_out", actor_role)
        self.check_out_at = at
        self.check_out_by = actor_id
        self.check_out_notes = notes

    def mark_absent(self, actor_role: ActorRole, actor_id: Optional[str], at: datetime) -> None:
        self.status = self._guard("mark_absent", actor_role)
        self.absent_at = at
        self.absent_marked_by = actor_id
