from klass_hero.services.family.family_service import FamilyService

__all__ = ["FamilyService"]
