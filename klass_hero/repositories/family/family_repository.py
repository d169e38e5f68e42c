"""
Family repositories: parent profiles and children.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from klass_hero.models.family.family import Child, ParentProfile
from klass_hero.repositories.base.base_repository import BaseRepository


class ParentProfileRepository(BaseRepository[ParentProfile]):
    """Data access for parent profiles."""

    def __init__(self, db: Session):
        super().__init__(ParentProfile, db)

    def find_by_identity(self, identity_id: str) -> Optional[ParentProfile]:
        return self.find_one_by(identity_id=identity_id)


class ChildRepository(BaseRepository[Child]):
    """Data access for children."""

    def __init__(self, db: Session):
        super().__init__(Child, db)

    def list_for_parent(self, parent_id: str) -> List[Child]:
        stmt = (
            select(Child)
            .where(Child.parent_id == parent_id)
            .order_by(Child.first_name, Child.last_name)
        )
        return list(self.db.scalars(stmt).all())

    def find_for_parent(self, child_id: str, parent_id: str) -> Optional[Child]:
        """Return the child only if it belongs to the given parent."""
        return self.find_one_by(id=child_id, parent_id=parent_id)
