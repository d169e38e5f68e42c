"""
Booking quota service.

Reports how many bookings a parent made this month against the monthly cap
of their subscription tier, and enforces the cap at commit time.

Enforcement is a storage-level compare-and-swap on the parent's counter row
for the month (see BookingCounterRepository), executed in the same
transaction that inserts the enrollment. Two concurrent submissions at the
cap boundary cannot both succeed: the second UPDATE matches no row.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from klass_hero.core.exceptions import BaseAppException, BookingLimitExceededError, NoParentProfileError
from klass_hero.models.enrollment.booking_counter import BookingCounter
from klass_hero.models.enrollment.enrollment import Enrollment
from klass_hero.models.enrollment.enrollment_policy import UNLIMITED
from klass_hero.models.family.family import ParentProfile
from klass_hero.repositories.enrollment.booking_counter_repository import BookingCounterRepository
from klass_hero.repositories.enrollment.enrollment_repository import EnrollmentRepository
from klass_hero.repositories.family.family_repository import ParentProfileRepository
from klass_hero.services.base import BaseService, ServiceResult
from klass_hero.services.enrollment import entitlements
from klass_hero.utils.date_utils import month_bounds, month_start, now_utc


@dataclass(frozen=True)
class BookingUsageInfo:
    """Monthly booking usage of a parent; cap and remaining may be "unlimited"."""

    parent_id: Optional[str]
    tier: Optional[str]
    cap: Union[int, str]
    used: int
    remaining: Union[int, str]

    @property
    def limit_reached(self) -> bool:
        return self.remaining != UNLIMITED and self.remaining <= 0

    @classmethod
    def unlimited(cls) -> "BookingUsageInfo":
        """Usage reported when no parent profile exists yet."""
        return cls(parent_id=None, tier=None, cap=UNLIMITED, used=0, remaining=UNLIMITED)


class BookingQuotaService(BaseService[BookingCounter, BookingCounterRepository]):
    """Monthly booking quota per parent subscription tier."""

    def __init__(self, db_session: Session):
        super().__init__(BookingCounterRepository(db_session), db_session)
        self.enrollment_repo = EnrollmentRepository(db_session)
        self.parent_repo = ParentProfileRepository(db_session)

    def count_monthly_bookings(self, parent_id: str, month: Optional[date] = None) -> int:
        """Active (pending or confirmed) enrollments made in the given month."""
        start, end = month_bounds(month or now_utc().date())
        return self.enrollment_repo.count_monthly_bookings(parent_id, start, end)

    def usage_for_parent(self, parent: ParentProfile, month: Optional[date] = None) -> BookingUsageInfo:
        tier = entitlements.resolve_tier(parent.subscription_tier)
        cap = entitlements.booking_cap(tier)
        used = self.count_monthly_bookings(parent.id, month)
        return BookingUsageInfo(
            parent_id=parent.id,
            tier=tier.value,
            cap=UNLIMITED if cap is None else cap,
            used=used,
            remaining=UNLIMITED if cap is None else max(cap - used, 0),
        )

    def get_booking_usage_info(
        self,
        identity_id: str,
        month: Optional[date] = None,
    ) -> ServiceResult[BookingUsageInfo]:
        """Booking usage of the parent behind an identity, or NO_PARENT_PROFILE."""
        try:
            parent = self.parent_repo.find_by_identity(identity_id)
            if parent is None:
                raise NoParentProfileError(identity_id)
            return ServiceResult.success(self.usage_for_parent(parent, month))
        except BaseAppException as e:
            return self._handle_app_exception(e, "get booking usage info", identity_id)
        except Exception as e:
            return self._handle_exception(e, "get booking usage info", identity_id)

    def reserve_booking(self, parent: ParentProfile, at: datetime) -> None:
        """
        Consume one booking of the month containing `at`.

        Must run inside the caller's transaction.

        Raises:
            BookingLimitExceededError: the tier's cap is already used up;
                the counter is left unchanged
        """
        tier = entitlements.resolve_tier(parent.subscription_tier)
        cap = entitlements.booking_cap(tier)
        period = month_start(at.date())

        self.repository.ensure_row(
            parent.id,
            period,
            seed_used=self.count_monthly_bookings(parent.id, period),
        )
        if not self.repository.try_increment(parent.id, period, cap):
            raise BookingLimitExceededError(parent.id, tier.value, cap)

        self._logger.debug(
            "Booking reserved",
            extra={"parent_id": parent.id, "period": period.isoformat(), "tier": tier.value},
        )

    def release_booking(self, enrollment: Enrollment) -> None:
        """Give back the booking an active enrollment consumed in its month."""
        period = month_start(enrollment.enrolled_at.date())
        self.repository.decrement(enrollment.parent_id, period)
