"""
Enrollment model with status lifecycle.

An enrollment books one child into one program. The quoted fee breakdown
is stored alongside it so the charged amounts never change after booking.

Lifecycle:
    pending -> confirmed -> completed
    pending | confirmed -> cancelled
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klass_hero.core.exceptions import InvalidTransitionError
from klass_hero.models.base.base_model import TimestampModel
from klass_hero.models.base.enums import (
    ACTIVE_ENROLLMENT_STATUSES,
    EnrollmentStatus,
    PaymentMethod,
)

__all__ = ["Enrollment"]


class Enrollment(TimestampModel):
    """Child enrollment in a program."""

    __tablename__ = "enrollments"

    ALLOWED_TRANSITIONS = {
        EnrollmentStatus.PENDING: (EnrollmentStatus.CONFIRMED, EnrollmentStatus.CANCELLED),
        EnrollmentStatus.CONFIRMED: (EnrollmentStatus.COMPLETED, EnrollmentStatus.CANCELLED),
        EnrollmentStatus.COMPLETED: (),
        EnrollmentStatus.CANCELLED: (),
    }

    program_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    child_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("children.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("parent_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(EnrollmentStatus, name="enrollment_status_enum"),
        nullable=False,
        default=EnrollmentStatus.PENDING,
        index=True,
    )

    # Lifecycle timestamps
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    cancellation_reason: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    # Fee breakdown captured at booking time
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, name="payment_method_enum"),
        nullable=False,
    )
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    vat_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    card_fee_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    special_requirements: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    program = relationship("Program")
    child = relationship("Child")

    __table_args__ = (
        Index("ix_enrollments_parent_enrolled_at", "parent_id", "enrolled_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_ENROLLMENT_STATUSES

    def _transition(self, target: EnrollmentStatus) -> None:
        if target not in self.ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError("enrollment", self.status.value, target.value)
        self.status = target

    def confirm(self, at: datetime) -> None:
        self._transition(EnrollmentStatus.CONFIRMED)
        self.confirmed_at = at

    def complete(self, at: datetime) -> None:
        self._transition(EnrollmentStatus.COMPLETED)
        self.completed_at = at

    def cancel(self, at: datetime, reason: Optional[str] = None) -> None:
        self._transition(EnrollmentStatus.CANCELLED)
        self.cancelled_at = at
        self.cancellation_reason = reason
