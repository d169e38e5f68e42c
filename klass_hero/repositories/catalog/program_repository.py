"""
Program catalog repositories.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from klass_hero.core.exceptions import RepositoryError
from klass_hero.models.catalog.program import Program
from klass_hero.models.enrollment.enrollment_policy import EnrollmentPolicy
from klass_hero.models.enrollment.participant_policy import ParticipantPolicy
from klass_hero.repositories.base.base_repository import BaseRepository


class ProgramRepository(BaseRepository[Program]):
    """Data access for programs."""

    def __init__(self, db: Session):
        super().__init__(Program, db)

    def find_for_update(self, program_id: str) -> Optional[Program]:
        """
        Load a program and lock its row until the transaction ends.

        SQLite ignores FOR UPDATE; its database-level write lock serializes
        concurrent writers instead.
        """
        try:
            stmt = select(Program).where(Program.id == program_id).with_for_update()
            return self.db.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Lock program failed: {str(e)}") from e

    def list_for_provider(self, provider_id: str) -> List[Program]:
        stmt = (
            select(Program)
            .where(Program.provider_id == provider_id)
            .order_by(Program.title)
        )
        return list(self.db.scalars(stmt).all())


class EnrollmentPolicyRepository(BaseRepository[EnrollmentPolicy]):
    """Data access for per-program capacity policies."""

    def __init__(self, db: Session):
        super().__init__(EnrollmentPolicy, db)

    def find_by_program(self, program_id: str) -> Optional[EnrollmentPolicy]:
        return self.find_one_by(program_id=program_id)

    def upsert(
        self,
        program_id: str,
        min_enrollment: Optional[int],
        max_enrollment: Optional[int],
    ) -> EnrollmentPolicy:
        """Create the policy of a program or replace its bounds."""
        policy = self.find_by_program(program_id)
        if policy is None:
            policy = EnrollmentPolicy(
                program_id=program_id,
                min_enrollment=min_enrollment,
                max_enrollment=max_enrollment,
            )
            return self.create(policy)
        return self.update(
            policy,
            {"min_enrollment": min_enrollment, "max_enrollment": max_enrollment},
        )


class ParticipantPolicyRepository(BaseRepository[ParticipantPolicy]):
    """Data access for per-program participant restrictions."""

    def __init__(self, db: Session):
        super().__init__(ParticipantPolicy, db)

    def find_by_program(self, program_id: str) -> Optional[ParticipantPolicy]:
        return self.find_one_by(program_id=program_id)

    def upsert(self, program_id: str, values: Dict[str, Any]) -> ParticipantPolicy:
        """Create the policy of a program or replace every restriction."""
        policy = self.find_by_program(program_id)
        if policy is None:
            return self.create(ParticipantPolicy(program_id=program_id, **values))
        return self.update(policy, values)
