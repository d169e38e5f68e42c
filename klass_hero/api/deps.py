from fastapi import Depends, Header
from sqlalchemy.orm import Session

from klass_hero.core.logging import identity_id as identity_id_var
from klass_hero.db.session import get_db
from klass_hero.services.catalog.program_service import ProgramService
from klass_hero.services.enrollment.booking_quota_service import BookingQuotaService
from klass_hero.services.enrollment.booking_service import BookingService
from klass_hero.services.enrollment.enrollment_service import EnrollmentService
from klass_hero.services.enrollment.fee_calculation_service import FeeCalculationService
from klass_hero.services.family.family_service import FamilyService
from klass_hero.services.participation.participation_service import ParticipationService

__all__ = [
    "get_db",
    "get_identity_id",
    "get_program_service",
    "get_fee_service",
    "get_quota_service",
    "get_booking_service",
    "get_enrollment_service",
    "get_family_service",
    "get_participation_service",
]

# Example usage in a router:
#   @router.get("/bookings/usage")
#   def usage(identity_id: str = Depends(deps.get_identity_id), ...):


# --- Identity ------------------------------------------------------------------


def get_identity_id(x_identity_id: str = Header(..., alias="X-Identity-ID", min_length=1)) -> str:
    """Identity of the caller, as asserted by the upstream gateway."""
    identity_id_var.set(x_identity_id)
    return x_identity_id


# --- Services ------------------------------------------------------------------

def get_program_service(db: Session = Depends(get_db)) -> ProgramService:
    return ProgramService(db)


def get_fee_service(db: Session = Depends(get_db)) -> FeeCalculationService:
    return FeeCalculationService(db)


def get_quota_service(db: Session = Depends(get_db)) -> BookingQuotaService:
    return BookingQuotaService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_enrollment_service(db: Session = Depends(get_db)) -> EnrollmentService:
    return EnrollmentService(db)


def get_family_service(db: Session = Depends(get_db)) -> FamilyService:
    return FamilyService(db)


def get_participation_service(db: Session = Depends(get_db)) -> ParticipationService:
    return ParticipationService(db)
