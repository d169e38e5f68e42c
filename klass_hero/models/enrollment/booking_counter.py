"""
Monthly booking counter.

One row per parent and calendar month. The quota gate increments it with a
guarded UPDATE in the same transaction that inserts the enrollment.
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from klass_hero.models.base.base_model import TimestampModel

__all__ = ["BookingCounter"]


class BookingCounter(TimestampModel):
    """Number of active bookings a parent made in one calendar month."""

    __tablename__ = "booking_counters"

    parent_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("parent_profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="First day of the counted month",
    )
    used: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    __table_args__ = (
        UniqueConstraint("parent_id", "period_start", name="uq_booking_counters_parent_period"),
    )
