from datetime import date
from decimal import Decimal

from klass_hero.core.exceptions import ErrorCode
from klass_hero.models.base.enums import SubscriptionTier
from klass_hero.models.family.family import Child
from klass_hero.services.enrollment.booking_service import BookingService, build_special_requirements
from klass_hero.services.enrollment.enrollment_service import EnrollmentService


def test_special_requirements_from_child():
    child = Child(allergies="Peanuts", support_needs="Needs a quiet space")
    assert build_special_requirements(child) == "Peanuts\nNeeds a quiet space"


def test_special_requirements_skip_blank_parts():
    assert build_special_requirements(Child(allergies="  ", support_needs="Hearing aid")) == "Hearing aid"
    assert build_special_requirements(Child()) == ""


def test_start_booking_context(db, make_parent, make_child, make_program):
    parent = make_parent(identity_id="ident-a")
    make_child(parent, first_name="Ana")
    make_child(parent, first_name="Ben")
    program = make_program()

    result = BookingService(db).start_booking(program.id, "ident-a")

    assert result.is_success
    context = result.data
    assert context.program.id == program.id
    assert context.quote.total == Decimal("85.80")
    assert context.usage.cap == 2
    assert context.usage.used == 0
    assert context.remaining_capacity == "unlimited"
    assert [child.first_name for child in context.children] == ["Ana", "Ben"]


def test_start_booking_transfer_quote(db, make_parent, make_program):
    make_parent(identity_id="ident-a")

    result = BookingService(db).start_booking(make_program().id, "ident-a", "transfer")

    assert result.data.quote.total == Decimal("83.30")


def test_start_booking_without_profile(db, make_program):
    result = BookingService(db).start_booking(make_program().id, "new-identity")

    assert result.is_success
    assert result.data.usage.cap == "unlimited"
    assert result.data.children == []


def test_start_booking_registration_closed(db, make_program):
    program = make_program(
        registration_start_date=date(2026, 5, 1),
        registration_end_date=date(2026, 5, 31),
    )

    result = BookingService(db).start_booking(program.id, "ident-a", today=date(2026, 4, 30))

    assert result.error_code == ErrorCode.REGISTRATION_NOT_OPEN


def test_start_booking_full_program(db, make_parent, make_child, make_program, make_enrollment):
    parent = make_parent(identity_id="ident-a")
    program = make_program()
    EnrollmentService(db).set_enrollment_policy(program.id, max_enrollment=1)
    make_enrollment(program, make_child(parent))

    result = BookingService(db).start_booking(program.id, "ident-a")

    assert result.error_code == ErrorCode.NO_SPOTS_AVAILABLE


def test_start_booking_unknown_program(db):
    assert BookingService(db).start_booking("missing", "ident-a").error_code == ErrorCode.NOT_FOUND


def test_complete_booking_prefills_requirements(db, make_parent, make_child, make_program):
    parent = make_parent(identity_id="ident-a")
    child = make_child(parent, allergies="Peanuts", support_needs="Needs a quiet space")

    result = BookingService(db).complete_booking(make_program().id, "ident-a", child.id, "card")

    assert result.is_success
    assert result.data.special_requirements == "Peanuts\nNeeds a quiet space"
    assert result.data.parent_id == parent.id


def test_complete_booking_keeps_given_requirements(db, make_parent, make_child, make_program):
    parent = make_parent(identity_id="ident-a")
    child = make_child(parent, allergies="Peanuts")

    result = BookingService(db).complete_booking(
        make_program().id, "ident-a", child.id, "transfer", special_requirements="Vegetarian lunch"
    )

    assert result.data.special_requirements == "Vegetarian lunch"
    assert result.data.total_amount == Decimal("83.30")


def test_complete_booking_failures(db, make_parent, make_child, make_program):
    parent = make_parent(identity_id="ident-a")
    child = make_child(parent)
    program = make_program()
    service = BookingService(db)

    assert service.complete_booking(program.id, "ident-a", None, "card").error_code == ErrorCode.CHILD_NOT_SELECTED
    assert service.complete_booking(program.id, "ident-a", child.id, "cash").error_code == ErrorCode.INVALID_PAYMENT_METHOD
    assert service.complete_booking(program.id, "nobody", child.id, "card").error_code == ErrorCode.NO_PARENT_PROFILE
    assert service.complete_booking("missing", "ident-a", child.id, "card").error_code == ErrorCode.NOT_FOUND


def test_complete_booking_limit(db, make_parent, make_child, make_program):
    parent = make_parent(SubscriptionTier.EXPLORER, identity_id="ident-a")
    program = make_program()
    service = BookingService(db)

    for name in ("Ana", "Ben"):
        assert service.complete_booking(program.id, "ident-a", make_child(parent, first_name=name).id, "card").is_success

    result = service.complete_booking(program.id, "ident-a", make_child(parent, first_name="Cleo").id, "card")

    assert result.error_code == ErrorCode.BOOKING_LIMIT_EXCEEDED
    assert service.start_booking(program.id, "ident-a").data.usage.limit_reached
