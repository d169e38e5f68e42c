from datetime import date, datetime, timedelta, timezone

from klass_hero.core.exceptions import ErrorCode
from klass_hero.models.base.enums import EnrollmentStatus, SubscriptionTier
from klass_hero.repositories.enrollment.booking_counter_repository import BookingCounterRepository
from klass_hero.services.enrollment import entitlements
from klass_hero.services.enrollment.booking_quota_service import BookingQuotaService
from klass_hero.services.enrollment.enrollment_service import (
    CreateEnrollmentParams,
    EnrollmentService,
)
from klass_hero.utils.date_utils import month_start, now_utc


def _enroll(db, program, parent, child):
    return EnrollmentService(db).create_enrollment(
        CreateEnrollmentParams(
            program_id=program.id,
            parent_id=parent.id,
            child_id=child.id,
            payment_method="card",
        )
    )


def _used(db, parent):
    return BookingCounterRepository(db).get_used(parent.id, month_start(now_utc().date()))


def test_tier_entitlements():
    assert entitlements.booking_cap(SubscriptionTier.EXPLORER) == 2
    assert entitlements.booking_cap(SubscriptionTier.ACTIVE) is None
    assert entitlements.monthly_booking_cap("active") == "unlimited"
    assert entitlements.can_create_booking(SubscriptionTier.EXPLORER, 1)
    assert not entitlements.can_create_booking(SubscriptionTier.EXPLORER, 2)
    assert entitlements.can_create_booking(SubscriptionTier.ACTIVE, 500)
    assert entitlements.resolve_tier(None) is SubscriptionTier.EXPLORER


def test_explorer_blocked_at_cap_and_counter_unchanged(db, make_parent, make_child, make_program):
    parent = make_parent(SubscriptionTier.EXPLORER)
    children = [make_child(parent, first_name=name) for name in ("Ana", "Ben", "Cleo")]
    program = make_program()

    assert _enroll(db, program, parent, children[0]).is_success
    assert _enroll(db, program, parent, children[1]).is_success
    assert _used(db, parent) == 2

    result = _enroll(db, program, parent, children[2])

    assert result.error_code == ErrorCode.BOOKING_LIMIT_EXCEEDED
    assert _used(db, parent) == 2
    assert BookingQuotaService(db).count_monthly_bookings(parent.id) == 2


def test_active_tier_is_unlimited(db, make_parent, make_child, make_program):
    parent = make_parent(SubscriptionTier.ACTIVE)
    program = make_program()

    for index in range(5):
        child = make_child(parent, first_name=f"Kid{index}")
        assert _enroll(db, program, parent, child).is_success

    assert _used(db, parent) == 5


def test_counter_seeded_from_existing_bookings(db, make_parent, make_child, make_program, make_enrollment):
    parent = make_parent()
    program = make_program()
    first, second, third = (make_child(parent, first_name=n) for n in ("Ana", "Ben", "Cleo"))
    make_enrollment(program, first)

    assert _enroll(db, program, parent, second).is_success
    assert _used(db, parent) == 2
    assert _enroll(db, program, parent, third).error_code == ErrorCode.BOOKING_LIMIT_EXCEEDED


def test_cancel_gives_booking_back(db, make_parent, make_child, make_program):
    parent = make_parent()
    program = make_program()
    first, second, third = (make_child(parent, first_name=n) for n in ("Ana", "Ben", "Cleo"))
    service = EnrollmentService(db)

    enrollment = _enroll(db, program, parent, first).data
    assert _enroll(db, program, parent, second).is_success

    assert service.cancel_enrollment(enrollment.id, "moved away").is_success
    assert _used(db, parent) == 1
    assert _enroll(db, program, parent, third).is_success


def test_monthly_count_uses_half_open_month(db, make_parent, make_child, make_program, make_enrollment):
    parent = make_parent()
    child = make_child(parent)
    march = date(2026, 3, 1)
    moments = [
        datetime(2026, 2, 28, 23, 59, 59, tzinfo=timezone.utc),
        datetime(2026, 3, 1, 0, 0, 0, tzinfo=timezone.utc),
        datetime(2026, 3, 31, 23, 59, 59, tzinfo=timezone.utc),
        datetime(2026, 4, 1, 0, 0, 0, tzinfo=timezone.utc),
    ]
    for index, moment in enumerate(moments):
        make_enrollment(make_program(title=f"Program {index}"), child, enrolled_at=moment)

    assert BookingQuotaService(db).count_monthly_bookings(parent.id, march) == 2


def test_monthly_count_ignores_inactive(db, make_parent, make_child, make_program, make_enrollment):
    parent = make_parent()
    child = make_child(parent)
    make_enrollment(make_program(title="A"), child, status=EnrollmentStatus.CANCELLED)
    make_enrollment(make_program(title="B"), child, status=EnrollmentStatus.COMPLETED)
    make_enrollment(make_program(title="C"), child, status=EnrollmentStatus.CONFIRMED)
    make_enrollment(
        make_program(title="D"),
        child,
        enrolled_at=now_utc() - timedelta(days=62),
    )

    assert BookingQuotaService(db).count_monthly_bookings(parent.id) == 1


def test_usage_info(db, make_parent, make_child, make_program, make_enrollment):
    parent = make_parent(identity_id="user-1")
    make_enrollment(make_program(), make_child(parent))

    usage = BookingQuotaService(db).get_booking_usage_info("user-1").data

    assert usage.cap == 2
    assert usage.used == 1
    assert usage.remaining == 1
    assert not usage.limit_reached


def test_usage_info_unlimited_tier(db, make_parent):
    make_parent(SubscriptionTier.ACTIVE, identity_id="user-2")

    usage = BookingQuotaService(db).get_booking_usage_info("user-2").data

    assert usage.cap == "unlimited"
    assert usage.remaining == "unlimited"
    assert not usage.limit_reached


def test_usage_info_without_profile(db):
    result = BookingQuotaService(db).get_booking_usage_info("nobody")
    assert result.error_code == ErrorCode.NO_PARENT_PROFILE


def test_counter_never_negative(db, make_parent):
    parent = make_parent()
    repo = BookingCounterRepository(db)
    period = date(2026, 3, 1)
    repo.ensure_row(parent.id, period, seed_used=0)

    assert repo.decrement(parent.id, period) is False
    assert repo.get_used(parent.id, period) == 0


def test_seed_is_idempotent(db, make_parent):
    parent = make_parent()
    repo = BookingCounterRepository(db)
    period = date(2026, 3, 1)

    repo.ensure_row(parent.id, period, seed_used=1)
    repo.ensure_row(parent.id, period, seed_used=0)

    assert repo.get_used(parent.id, period) == 1
    assert repo.try_increment(parent.id, period, cap=2) is True
    assert repo.try_increment(parent.id, period, cap=2) is False
    assert repo.get_used(parent.id, period) == 2


def test_completed_booking_frees_quota_like_usage_reports(db, make_parent, make_child, make_program):
    parent = make_parent(identity_id="user-3")
    program = make_program()
    first, second, third = (make_child(parent, first_name=n) for n in ("Ana", "Ben", "Cleo"))
    service = EnrollmentService(db)

    enrollment = _enroll(db, program, parent, first).data
    assert _enroll(db, program, parent, second).is_success
    service.confirm_enrollment(enrollment.id)
    assert service.complete_enrollment(enrollment.id).is_success

    usage = BookingQuotaService(db).get_booking_usage_info("user-3").data
    assert usage.used == 1
    assert usage.remaining == 1
    assert _used(db, parent) == 1

    assert _enroll(db, program, parent, third).is_success
    assert BookingQuotaService(db).get_booking_usage_info("user-3").data.remaining == 0
