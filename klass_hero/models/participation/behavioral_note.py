"""
Behavioral note model.

A provider writes at most one note per participation record once the
child has been checked in. Parents review it:

    pending_approval -> approved
    pending_approval -> rejected -> (revise) -> pending_approval

approved is terminal.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klass_hero.core.exceptions import InvalidTransitionError, ValidationError
from klass_hero.models.base.base_model import TimestampModel
from klass_hero.models.base.enums import BehavioralNoteStatus

__all__ = ["BehavioralNote", "MAX_NOTE_LENGTH"]

MAX_NOTE_LENGTH = 1000


class BehavioralNote(TimestampModel):
    """Provider's note on how a child behaved during one session."""

    __tablename__ = "behavioral_notes"

    participation_record_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("participation_records.id", ondelete="CASCADE"),
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
        index=True,
    )
    provider_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    status: Mapped[BehavioralNoteStatus] = mapped_column(
        Enum(BehavioralNoteStatus, name="behavioral_note_status_enum"),
        nullable=False,
        default=BehavioralNoteStatus.PENDING_APPROVAL,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    participation_record = relationship("ParticipationRecord")

    __table_args__ = (
        UniqueConstraint(
            "participation_record_id",
            "provider_id",
            name="uq_behavioral_note_record_provider",
        ),
    )

    @staticmethod
    def clean_content(content: Optional[str]) -> str:
        """Trimmed note text; ValidationError when blank or too long."""
        text = (content or "").strip()
        if not text:
            raise ValidationError("Note content is required", field_errors={"content": ["must not be blank"]})
        if len(text) > MAX_NOTE_LENGTH:
            raise ValidationError(
                "Note content is too long",
                field_errors={"content": [f"must be at most {MAX_NOTE_LENGTH} characters"]},
            )
        return text

    def _require(self, current: BehavioralNoteStatus, target: BehavioralNoteStatus) -> None:
        if self.status != current:
            raise InvalidTransitionError("behavioral note", self.status.value, target.value)

    def approve(self, at: datetime) -> None:
        self._require(BehavioralNoteStatus.PENDING_APPROVAL, BehavioralNoteStatus.APPROVED)
        self.status = BehavioralNoteStatus.APPROVED
        self.reviewed_at = at

    def reject(self, at: datetime, reason: Optional[str] = None) -> None:
        self._require(BehavioralNoteStatus.PENDING_APPROVAL, BehavioralNoteStatus.REJECTED)
        self.status = BehavioralNoteStatus.REJECTED
        self.rejection_reason = reason
        self.reviewed_at = at

    def revise(self, content: str, at: datetime) -> None:
        """Replace the text of a rejected note and send it back for approval."""
        self._require(BehavioralNoteStatus.REJECTED, BehavioralNoteStatus.PENDING_APPROVAL)
        self.content = self.clean_content(content)
        self.status = BehavioralNoteStatus.PENDING_APPROVAL
        self.rejection_reason = None
        self.submitted_at = at
        self.reviewed_at = None
