from klass_hero.repositories.family.family_repository import (
    ChildRepository,
    ParentProfileRepository,
)

__all__ = ["ChildRepository", "ParentProfileRepository"]
