"""
Enrollment repository.

Counting queries used by the capacity and quota gates live here so both
gates read the same definition of an "active" enrollment.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from klass_hero.core.exceptions import RepositoryError
from klass_hero.models.base.enums import ACTIVE_ENROLLMENT_STATUSES
from klass_hero.models.enrollment.enrollment import Enrollment
from klass_hero.models.family.family import ParentProfile
from klass_hero.repositories.base.base_repository import BaseRepository


class EnrollmentRepository(BaseRepository[Enrollment]):
    """Data access for enrollments."""

    def __init__(self, db: Session):
        super().__init__(Enrollment, db)

    def count_active_for_program(self, program_id: str) -> int:
        """Number of pending or confirmed enrollments in a program."""
        stmt = (
            select(func.count(Enrollment.id))
            .where(Enrollment.program_id == program_id)
            .where(Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES))
        )
        return self.db.scalar(stmt) or 0

    def find_active(self, program_id: str, child_id: str) -> Optional[Enrollment]:
        stmt = (
            select(Enrollment)
            .where(Enrollment.program_id == program_id)
            .where(Enrollment.child_id == child_id)
            .where(Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES))
            .limit(1)
        )
        return self.db.scalars(stmt).first()

    def count_monthly_bookings(
        self,
        parent_id: str,
        period_start: datetime,
        period_end: datetime,
    ) -> int:
        """
        Count active enrollments of a parent with enrolled_at in
        [period_start, period_end).
        """
        try:
            stmt = (
                select(func.count(Enrollment.id))
                .where(Enrollment.parent_id == parent_id)
                .where(Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES))
                .where(Enrollment.enrolled_at >= period_start)
                .where(Enrollment.enrolled_at < period_end)
            )
            return self.db.scalar(stmt) or 0
        except SQLAlchemyError as e:
            raise RepositoryError(f"Count monthly bookings failed: {str(e)}") from e

    def list_for_parent(self, parent_id: str) -> List[Enrollment]:
        """All enrollments of a parent, newest first."""
        stmt = (
            select(Enrollment)
            .where(Enrollment.parent_id == parent_id)
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id)
        )
        return list(self.db.scalars(stmt).all())

    def list_active_for_program(self, program_id: str) -> List[Enrollment]:
        stmt = (
            select(Enrollment)
            .where(Enrollment.program_id == program_id)
            .where(Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES))
            .order_by(Enrollment.enrolled_at)
        )
        return list(self.db.scalars(stmt).all())

    def is_identity_enrolled(self, program_id: str, identity_id: str) -> bool:
        """True when the parent behind an identity has an active enrollment."""
        stmt = (
            select(func.count(Enrollment.id))
            .join(ParentProfile, ParentProfile.id == Enrollment.parent_id)
            .where(Enrollment.program_id == program_id)
            .where(ParentProfile.identity_id == identity_id)
            .where(Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES))
        )
        return (self.db.scalar(stmt) or 0) > 0

    def list_enrolled_identity_ids(self, program_id: str) -> List[str]:
        stmt = (
            select(ParentProfile.identity_id)
            .join(Enrollment, Enrollment.parent_id == ParentProfile.id)
            .where(Enrollment.program_id == program_id)
            .where(Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES))
            .distinct()
            .order_by(ParentProfile.identity_id)
        )
        return list(self.db.scalars(stmt).all())
