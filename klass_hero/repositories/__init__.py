"""
Repository layer.
"""

from klass_hero.repositories.base import BaseRepository
from klass_hero.repositories.catalog import EnrollmentPolicyRepository, ProgramRepository
from klass_hero.repositories.enrollment import BookingCounterRepository, EnrollmentRepository
from klass_hero.repositories.family import ChildRepository, ParentProfileRepository
from klass_hero.repositories.participation import (
    ParticipationRecordRepository,
    ProgramSessionRepository,
)

__all__ = [
    "BaseRepository",
    "BookingCounterRepository",
    "ChildRepository",
    "EnrollmentPolicyRepository",
    "EnrollmentRepository",
    "ParentProfileRepository",
    "ParticipationRecordRepository",
    "ProgramRepository",
    "ProgramSessionRepository",
]
