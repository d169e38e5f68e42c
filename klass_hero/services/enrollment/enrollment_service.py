"""
Enrollment service.

Creates enrollments behind every booking gate (child selection, payment
method, ownership, registration window, participant eligibility, capacity,
duplicate check and monthly quota) in a single transaction, and drives the enrollment status
lifecycle afterwards.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Union

from sqlalchemy.orm import Session

from klass_hero.core.exceptions import (
    BaseAppException,
    ChildNotSelectedError,
    DuplicateEnrollmentError,
    NoParentProfileError,
    NoSpotsAvailableError,
    ParticipantIneligibleError,
    ResourceNotFoundError,
)
from klass_hero.models.base.enums import EligibilityReference
from klass_hero.models.catalog.program import Program
from klass_hero.models.enrollment.enrollment import Enrollment
from klass_hero.models.enrollment.enrollment_policy import UNLIMITED, EnrollmentPolicy
from klass_hero.models.enrollment.participant_policy import ParticipantPolicy, gender_values
from klass_hero.models.family.family import Child
from klass_hero.repositories.catalog.program_repository import (
    EnrollmentPolicyRepository,
    ParticipantPolicyRepository,
    ProgramRepository,
)
from klass_hero.repositories.enrollment.enrollment_repository import EnrollmentRepository
from klass_hero.repositories.family.family_repository import (
    ChildRepository,
    ParentProfileRepository,
)
from klass_hero.services.base import BaseService, ServiceResult
from klass_hero.services.catalog.registration_window import ensure_registration_open
from klass_hero.services.enrollment.booking_quota_service import BookingQuotaService
from klass_hero.services.enrollment.fee_calculation_service import (
    FeeCalculationService,
    FeeQuote,
    calculate_fees,
    parse_payment_method,
)
from klass_hero.utils.date_utils import age_in_months, now_utc, today_local


@dataclass
class CreateEnrollmentParams:
    """Input of create_enrollment."""

    program_id: str
    parent_id: str
    child_id: Optional[str]
    payment_method: Any
    special_requirements: Optional[str] = None
    quote: Optional[FeeQuote] = None
    today: Optional[date] = None


class EnrollmentService(BaseService[Enrollment, EnrollmentRepository]):
    """Enrollment creation, lifecycle and capacity policy."""

    def __init__(self, db_session: Session):
        super().__init__(EnrollmentRepository(db_session), db_session)
        self.program_repo = ProgramRepository(db_session)
        self.policy_repo = EnrollmentPolicyRepository(db_session)
        self.participant_policy_repo = ParticipantPolicyRepository(db_session)
        self.parent_repo = ParentProfileRepository(db_session)
        self.child_repo = ChildRepository(db_session)
        self.quota_service = BookingQuotaService(db_session)
        self.fee_service = FeeCalculationService(db_session)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create_enrollment(self, params: CreateEnrollmentParams) -> ServiceResult[Enrollment]:
        """
        Create a pending enrollment.

        Returns a failed result with CHILD_NOT_SELECTED, INVALID_PAYMENT_METHOD,
        NOT_FOUND, REGISTRATION_NOT_OPEN, PARTICIPANT_INELIGIBLE, NO_SPOTS_AVAILABLE,
        DUPLICATE_ENROLLMENT or BOOKING_LIMIT_EXCEEDED; nothing is written in
        any of those cases.
        """
        try:
            if not params.child_id:
                raise ChildNotSelectedError()
            payment_method = parse_payment_method(params.payment_method)

            with self.transaction():
                parent = self.parent_repo.get_by_id(params.parent_id)
                child = self.child_repo.find_for_parent(params.child_id, parent.id)
                if child is None:
                    raise ResourceNotFoundError("Child", params.child_id)

                program = self.program_repo.find_for_update(params.program_id)
                if program is None:
                    raise ResourceNotFoundError("Program", params.program_id)

                ensure_registration_open(program, params.today)
                self._ensure_eligible(program, child, params.today)
                self._ensure_capacity(program)

                if self.repository.find_active(program.id, child.id) is not None:
                    raise DuplicateEnrollmentError(program.id, child.id)

                enrolled_at = now_utc()
                self.quota_service.reserve_booking(parent, enrolled_at)

                quote = params.quote or calculate_fees(
                    self.fee_service.schedule_for_program(program, payment_method)
                )
                enrollment = Enrollment(
                    program_id=program.id,
                    child_id=child.id,
                    parent_id=parent.id,
                    enrolled_at=enrolled_at,
                    payment_method=payment_method,
                    subtotal=quote.subtotal,
                    vat_amount=quote.vat_amount,
                    card_fee_amount=quote.card_fee_amount,
                    total_amount=quote.total,
                    special_requirements=params.special_requirements or None,
                )
                self.repository.create(enrollment)

            self._log_operation(
                "create enrollment",
                enrollment.id,
                {
                    "program_id": enrollment.program_id,
                    "child_id": enrollment.child_id,
                    "parent_id": enrollment.parent_id,
                    "total_amount": str(enrollment.total_amount),
                },
            )
            return ServiceResult.success(enrollment, message="Enrollment created successfully")
        except BaseAppException as e:
            return self._handle_app_exception(e, "create enrollment", params.program_id)
        except Exception as e:
            return self._handle_exception(e, "create enrollment", params.program_id)

    def _ensure_eligible(self, program: Program, child: Child, today: Optional[date]) -> None:
        reasons = self._ineligibility_reasons(program, child, today)
        if reasons:
            raise ParticipantIneligibleError(program.id, child.id, reasons)

    def _ineligibility_reasons(self, program: Program, child: Child, today: Optional[date]) -> List[str]:
        policy = self.participant_policy_repo.find_by_program(program.id)
        if policy is None:
            return []
        age_months = None
        if child.date_of_birth is not None:
            as_of = policy.reference_date(today or today_local(), program.start_date)
            age_months = age_in_months(child.date_of_birth, as_of)
        return policy.ineligibility_reasons(age_months, child.gender, child.school_grade)

    def _ensure_capacity(self, program: Program) -> None:
        policy = self.policy_repo.find_by_program(program.id)
        if policy is None:
            return
        active = self.repository.count_active_for_program(program.id)
        if not policy.has_capacity(active):
            raise NoSpotsAvailableError(program.id, policy.max_enrollment)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def confirm_enrollment(self, enrollment_id: str) -> ServiceResult[Enrollment]:
        try:
            with self.transaction():
                enrollment = self.repository.get_by_id(enrollment_id)
                enrollment.confirm(now_utc())
            self._log_operation("confirm enrollment", enrollment_id)
            return ServiceResult.success(enrollment, message="Enrollment confirmed")
        except BaseAppException as e:
            return self._handle_app_exception(e, "confirm enrollment", enrollment_id)
        except Exception as e:
            return self._handle_exception(e, "confirm enrollment", enrollment_id)

    def complete_enrollment(self, enrollment_id: str) -> ServiceResult[Enrollment]:
        """Complete a confirmed enrollment; it no longer counts against the monthly quota."""
        try:
            with self.transaction():
                enrollment = self.repository.get_by_id(enrollment_id)
                enrollment.complete(now_utc())
                self.quota_service.release_booking(enrollment)
            self._log_operation("complete enrollment", enrollment_id)
            return ServiceResult.success(enrollment, message="Enrollment completed")
        except BaseAppException as e:
            return self._handle_app_exception(e, "complete enrollment", enrollment_id)
        except Exception as e:
            return self._handle_exception(e, "complete enrollment", enrollment_id)

    def cancel_enrollment(
        self,
        enrollment_id: str,
        reason: Optional[str] = None,
    ) -> ServiceResult[Enrollment]:
        """Cancel an active enrollment and give its monthly booking back."""
        try:
            with self.transaction():
                enrollment = self.repository.get_by_id(enrollment_id)
                enrollment.cancel(now_utc(), reason)
                self.quota_service.release_booking(enrollment)
            self._log_operation("cancel enrollment", enrollment_id, {"reason": reason})
            return ServiceResult.success(enrollment, message="Enrollment cancelled")
        except BaseAppException as e:
            return self._handle_app_exception(e, "cancel enrollment", enrollment_id)
        except Exception as e:
            return self._handle_exception(e, "cancel enrollment", enrollment_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_enrollment(self, enrollment_id: str) -> ServiceResult[Enrollment]:
        return self.get_by_id(enrollment_id)

    def list_parent_enrollments(self, identity_id: str) -> ServiceResult[List[Enrollment]]:
        """Enrollments of the parent behind an identity, newest first."""
        try:
            parent = self.parent_repo.find_by_identity(identity_id)
            if parent is None:
                raise NoParentProfileError(identity_id)
            return ServiceResult.success(self.repository.list_for_parent(parent.id))
        except BaseAppException as e:
            return self._handle_app_exception(e, "list parent enrollments", identity_id)
        except Exception as e:
            return self._handle_exception(e, "list parent enrollments", identity_id)

    def enrolled(self, program_id: str, identity_id: str) -> ServiceResult[bool]:
        try:
            return ServiceResult.success(self.repository.is_identity_enrolled(program_id, identity_id))
        except Exception as e:
            return self._handle_exception(e, "check enrollment", program_id)

    def list_enrolled_identity_ids(self, program_id: str) -> ServiceResult[List[str]]:
        try:
            return ServiceResult.success(self.repository.list_enrolled_identity_ids(program_id))
        except Exception as e:
            return self._handle_exception(e, "list enrolled identities", program_id)

    # -------------------------------------------------------------------------
    # Capacity policy
    # -------------------------------------------------------------------------

    def set_enrollment_policy(
        self,
        program_id: str,
        min_enrollment: Optional[int] = None,
        max_enrollment: Optional[int] = None,
    ) -> ServiceResult[EnrollmentPolicy]:
        """Create or replace a program's enrollment bounds."""
        try:
            EnrollmentPolicy.validate_bounds(min_enrollment, max_enrollment)
            with self.transaction():
                self.program_repo.get_by_id(program_id)
                policy = self.policy_repo.upsert(program_id, min_enrollment, max_enrollment)
            self._log_operation(
                "set enrollment policy",
                program_id,
                {"min_enrollment": min_enrollment, "max_enrollment": max_enrollment},
            )
            return ServiceResult.success(policy, message="Enrollment policy saved")
        except BaseAppException as e:
            return self._handle_app_exception(e, "set enrollment policy", program_id)
        except Exception as e:
            return self._handle_exception(e, "set enrollment policy", program_id)

    def get_remaining_capacity(self, program_id: str) -> ServiceResult[Union[int, str]]:
        """Seats left in a program, or "unlimited" without a maximum."""
        try:
            self.program_repo.get_by_id(program_id)
            return ServiceResult.success(self.remaining_capacity(program_id))
        except BaseAppException as e:
            return self._handle_app_exception(e, "get remaining capacity", program_id)
        except Exception as e:
            return self._handle_exception(e, "get remaining capacity", program_id)

    def remaining_capacity(self, program_id: str) -> Union[int, str]:
        policy = self.policy_repo.find_by_program(program_id)
        if policy is None:
            return UNLIMITED
        return policy.remaining_capacity(self.repository.count_active_for_program(program_id))

    # -------------------------------------------------------------------------
    # Participant policy
    # -------------------------------------------------------------------------

    def set_participant_policy(
        self,
        program_id: str,
        min_age_months: Optional[int] = None,
        max_age_months: Optional[int] = None,
        allowed_genders: Optional[List[Any]] = None,
        min_grade: Optional[int] = None,
        max_grade: Optional[int] = None,
        eligibility_at: EligibilityReference = EligibilityReference.REGISTRATION,
    ) -> ServiceResult[ParticipantPolicy]:
        """Create or replace the age, gender and grade restrictions of a program."""
        try:
            ParticipantPolicy.validate_restrictions(min_age_months, max_age_months, min_grade, max_grade)
            values = {
                "min_age_months": min_age_months,
                "max_age_months": max_age_months,
                "allowed_genders": gender_values(allowed_genders),
                "min_grade": min_grade,
                "max_grade": max_grade,
                "eligibility_at": EligibilityReference(eligibility_at),
            }
            with self.transaction():
                self.program_repo.get_by_id(program_id)
                policy = self.participant_policy_repo.upsert(program_id, values)
            self._log_operation(
                "set participant policy",
                program_id,
                {key: str(value) for key, value in values.items()},
            )
            return ServiceResult.success(policy, message="Participant policy saved")
        except BaseAppException as e:
            return self._handle_app_exception(e, "set participant policy", program_id)
        except Exception as e:
            return self._handle_exception(e, "set participant policy", program_id)

    def get_participant_policy(self, program_id: str) -> ServiceResult[ParticipantPolicy]:
        try:
            policy = self.participant_policy_repo.find_by_program(program_id)
            if policy is None:
                return ServiceResult.not_found("ParticipantPolicy", program_id)
            return ServiceResult.success(policy)
        except Exception as e:
            return self._handle_exception(e, "get participant policy", program_id)

    def check_participant_eligibility(
        self,
        program_id: str,
        child_id: str,
        today: Optional[date] = None,
    ) -> ServiceResult[bool]:
        """
        Whether a child may enroll in a program.

        Succeeds with True when the child meets every restriction or the
        program has no policy; fails with PARTICIPANT_INELIGIBLE otherwise,
        listing every failed restriction in `details["reasons"]`.
        """
        try:
            program = self.program_repo.get_by_id(program_id)
            child = self.child_repo.get_by_id(child_id)
            self._ensure_eligible(program, child, today)
            return ServiceResult.success(True, message="Child is eligible")
        except BaseAppException as e:
            return self._handle_app_exception(e, "check participant eligibility", program_id)
        except Exception as e:
            return self._handle_exception(e, "check participant eligibility", program_id)
