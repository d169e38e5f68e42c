from klass_hero.models.family.family import Child, ParentProfile

__all__ = ["Child", "ParentProfile"]
