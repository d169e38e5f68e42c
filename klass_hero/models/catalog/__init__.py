from klass_hero.models.catalog.program import Program
from klass_hero.models.catalog.registration_period import RegistrationPeriod

__all__ = ["Program", "RegistrationPeriod"]
