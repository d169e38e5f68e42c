"""
Program catalog model.

A program is an activity offered by a provider. It carries its own
registration window and, optionally, its own pricing; programs without
pricing fall back to the configured booking defaults.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from klass_hero.models.base.base_model import TimestampModel
from klass_hero.models.catalog.registration_period import RegistrationPeriod

__all__ = ["Program"]


class Program(TimestampModel):
    """Bookable activity program."""

    __tablename__ = "programs"

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    provider_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        index=True,
    )

    # Registration window (inclusive, both optional)
    registration_start_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
    )
    registration_end_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
    )

    start_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
    )

    # Pricing
    weekly_fee: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
    )
    registration_fee: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
    )
    weeks_count: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    enrollment_policy = relationship(
        "EnrollmentPolicy",
        back_populates="program",
        uselist=False,
        cascade="all, delete-orphan",
    )

    participant_policy = relationship(
        "ParticipantPolicy",
        back_populates="program",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def registration_period(self) -> RegistrationPeriod:
        return RegistrationPeriod(self.registration_start_date, self.registration_end_date)

    def __repr__(self) -> str:
        return f"<Program(id={self.id}, title='{self.title}')>"
