from klass_hero.schemas.family.family import (
    ChildCreate,
    ChildResponse,
    ParentProfileCreate,
    ParentProfileResponse,
)

__all__ = ["ChildCreate", "ChildResponse", "ParentProfileCreate", "ParentProfileResponse"]
