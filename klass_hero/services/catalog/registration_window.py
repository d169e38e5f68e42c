"""
Registration window gate.

Decides whether a program accepts new enrollments on a given day. The
booking flow evaluates it when a booking starts and again inside the
enrollment transaction; both evaluations fail closed.
"""

from datetime import date
from typing import Optional

from klass_hero.core.exceptions import RegistrationNotOpenError
from klass_hero.models.base.enums import RegistrationStatus
from klass_hero.models.catalog.program import Program
from klass_hero.models.catalog.registration_period import RegistrationPeriod
from klass_hero.utils.date_utils import today_local

OPEN_STATUSES = (RegistrationStatus.ALWAYS_OPEN, RegistrationStatus.OPEN)


def registration_status(period: Optional[RegistrationPeriod], today: date) -> RegistrationStatus:
    if period is None:
        return RegistrationStatus.ALWAYS_OPEN
    return period.status_on(today)


def program_registration_status(program: Program, today: Optional[date] = None) -> RegistrationStatus:
    return registration_status(program.registration_period, today or today_local())


def registration_open(program: Program, today: Optional[date] = None) -> bool:
    """True when the program accepts enrollments on `today` (default: local today)."""
    return program_registration_status(program, today) in OPEN_STATUSES


def ensure_registration_open(program: Program, today: Optional[date] = None) -> None:
    """Raise RegistrationNotOpenError unless registration is open."""
    status = program_registration_status(program, today)
    if status not in OPEN_STATUSES:
        raise RegistrationNotOpenError(program.id, status.value)
