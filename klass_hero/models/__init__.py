"""
ORM models.

Importing this package registers every table on the shared metadata.
"""

from klass_hero.models.base import Base, BaseModel, TimestampModel
from klass_hero.models.catalog import Program, RegistrationPeriod
from klass_hero.models.family import Child, ParentProfile
from klass_hero.models.enrollment import (
    BookingCounter,
    Enrollment,
    EnrollmentPolicy,
    ParticipantPolicy,
)
from klass_hero.models.participation import BehavioralNote, ParticipationRecord, ProgramSession

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "BehavioralNote",
    "BookingCounter",
    "Child",
    "Enrollment",
    "EnrollmentPolicy",
    "ParentProfile",
    "ParticipantPolicy",
    "ParticipationRecord",
    "Program",
    "ProgramSession",
    "RegistrationPeriod",
]
