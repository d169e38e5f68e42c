from klass_hero.services.catalog.program_service import ProgramService
from klass_hero.services.catalog.registration_window import (
    ensure_registration_open,
    program_registration_status,
    registration_open,
    registration_status,
)

__all__ = [
    "ProgramService",
    "ensure_registration_open",
    "program_registration_status",
    "registration_open",
    "registration_status",
]
