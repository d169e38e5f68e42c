"""
Booking flow service.

Orchestrates the two steps a parent goes through when booking a program:

- start_booking: entry into the booking form. Checks the program exists,
  registration is open and seats remain, and returns what the form needs
  (quote, monthly usage, the parent's children).
- complete_booking: submission. Re-validates the child, the payment method
  and the registration window, recomputes the quote server-side and creates
  the enrollment, which re-checks registration, capacity, duplicates and
  quota inside its transaction.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from klass_hero.core.exceptions import (
    BaseAppException,
    ChildNotSelectedError,
    NoParentProfileError,
    NoSpotsAvailableError,
    ResourceNotFoundError,
)
from klass_hero.models.base.enums import PaymentMethod
from klass_hero.models.catalog.program import Program
from klass_hero.models.enrollment.enrollment import Enrollment
from klass_hero.models.family.family import Child
from klass_hero.repositories.catalog.program_repository import ProgramRepository
from klass_hero.repositories.family.family_repository import (
    ChildRepository,
    ParentProfileRepository,
)
from klass_hero.services.base import BaseService, ServiceResult
from klass_hero.services.catalog.registration_window import ensure_registration_open
from klass_hero.services.enrollment.booking_quota_service import BookingUsageInfo
from klass_hero.services.enrollment.enrollment_service import (
    CreateEnrollmentParams,
    EnrollmentService,
)
from klass_hero.services.enrollment.fee_calculation_service import (
    FeeQuote,
    calculate_fees,
    parse_payment_method,
)


def build_special_requirements(child: Child) -> str:
    """Join a child's allergies and support needs, skipping blank entries."""
    parts = []
    for value in (child.allergies, child.support_needs):
        if value and value.strip():
            parts.append(value.strip())
    return "\n".join(parts)


@dataclass
class BookingContext:
    """Everything the booking form shows before submission."""

    program: Program
    quote: FeeQuote
    usage: BookingUsageInfo
    children: List[Child] = field(default_factory=list)
    remaining_capacity: Any = None


class BookingService(BaseService[Program, ProgramRepository]):
    """Booking entry and submission."""

    def __init__(self, db_session: Session):
        super().__init__(ProgramRepository(db_session), db_session)
        self.parent_repo = ParentProfileRepository(db_session)
        self.child_repo = ChildRepository(db_session)
        self.enrollment_service = EnrollmentService(db_session)
        self.quota_service = self.enrollment_service.quota_service
        self.fee_service = self.enrollment_service.fee_service

    def start_booking(
        self,
        program_id: str,
        identity_id: str,
        payment_method: Any = PaymentMethod.CARD,
        today: Optional[date] = None,
    ) -> ServiceResult[BookingContext]:
        """
        Validate entry into the booking flow.

        A missing parent profile does not block entry; usage is then
        reported as unlimited and the children list is empty.
        """
        try:
            program = self.repository.get_by_id(program_id)
            ensure_registration_open(program, today)

            remaining = self.enrollment_service.remaining_capacity(program.id)
            if remaining == 0:
                policy = program.enrollment_policy
                raise NoSpotsAvailableError(program.id, policy.max_enrollment if policy else 0)

            quote = calculate_fees(self.fee_service.schedule_for_program(program, payment_method))

            parent = self.parent_repo.find_by_identity(identity_id)
            if parent is None:
                usage = BookingUsageInfo.unlimited()
                children = []
            else:
                usage = self.quota_service.usage_for_parent(parent)
                children = self.child_repo.list_for_parent(parent.id)

            self._log_operation(
                "start booking",
                program.id,
                {"identity_id": identity_id, "bookings_used": usage.used},
            )
            return ServiceResult.success(
                BookingContext(
                    program=program,
                    quote=quote,
                    usage=usage,
                    children=children,
                    remaining_capacity=remaining,
                )
            )
        except BaseAppException as e:
            return self._handle_app_exception(e, "start booking", program_id)
        except Exception as e:
            return self._handle_exception(e, "start booking", program_id)

    def complete_booking(
        self,
        program_id: str,
        identity_id: str,
        child_id: Optional[str],
        payment_method: Any,
        special_requirements: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ServiceResult[Enrollment]:
        """
        Submit a booking.

        When no special requirements are given, they are prefilled from the
        child's allergies and support needs.
        """
        try:
            if not child_id:
                raise ChildNotSelectedError()
            method = parse_payment_method(payment_method)

            parent = self.parent_repo.find_by_identity(identity_id)
            if parent is None:
                raise NoParentProfileError(identity_id)

            program = self.repository.get_by_id(program_id)
            ensure_registration_open(program, today)

            child = self.child_repo.find_for_parent(child_id, parent.id)
            if child is None:
                raise ResourceNotFoundError("Child", child_id)
            if special_requirements is None:
                special_requirements = build_special_requirements(child)

            quote = calculate_fees(self.fee_service.schedule_for_program(program, method))
        except BaseAppException as e:
            return self._handle_app_exception(e, "complete booking", program_id)
        except Exception as e:
            return self._handle_exception(e, "complete booking", program_id)

        return self.enrollment_service.create_enrollment(
            CreateEnrollmentParams(
                program_id=program.id,
                parent_id=parent.id,
                child_id=child.id,
                payment_method=method,
                special_requirements=special_requirements,
                quote=quote,
                today=today,
            )
        )
