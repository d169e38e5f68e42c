"""
Registration period value object.

A program may restrict the dates during which it accepts new enrollments.
Both bounds are optional and inclusive.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from klass_hero.core.exceptions import ValidationError
from klass_hero.models.base.enums import RegistrationStatus


@dataclass(frozen=True)
class RegistrationPeriod:
    """Inclusive [start_date, end_date] window, either side may be open."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError(
                "Registration start date must be before the end date",
                field_errors={"registration_start_date": ["must be before registration_end_date"]},
            )

    @property
    def is_unbounded(self) -> bool:
        return self.start_date is None and self.end_date is None

    def status_on(self, today: date) -> RegistrationStatus:
        """Derive the registration status for the given day."""
        if self.is_unbounded:
            return RegistrationStatus.ALWAYS_OPEN
        if self.start_date is not None and today < self.start_date:
            return RegistrationStatus.UPCOMING
        if self.end_date is not None and today > self.end_date:
            return RegistrationStatus.CLOSED
        return RegistrationStatus.OPEN

    def is_open_on(self, today: date) -> bool:
        return self.status_on(today) in (RegistrationStatus.ALWAYS_OPEN, RegistrationStatus.OPEN)
