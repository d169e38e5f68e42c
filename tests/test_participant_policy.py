from datetime import date

import pytest

from klass_hero.core.exceptions import ErrorCode
from klass_hero.models import Enrollment, ParticipantPolicy
from klass_hero.models.base.enums import EligibilityReference, Gender
from klass_hero.services.enrollment.enrollment_service import (
    CreateEnrollmentParams,
    EnrollmentService,
)

TODAY = date(2026, 3, 1)
API = "/api/v1"


@pytest.fixture
def parent(make_parent):
    return make_parent(identity_id="parent-identity")


def _check(db, program, child, today=TODAY):
    return EnrollmentService(db).check_participant_eligibility(program.id, child.id, today)


def test_no_policy_is_eligible(db, parent, make_child, make_program):
    program = make_program()
    child = make_child(parent, date_of_birth=date(2018, 6, 15), gender=Gender.MALE)

    result = _check(db, program, child)

    assert result.is_success
    assert result.data is True


def test_child_meeting_every_restriction(db, parent, make_child, make_program):
    program = make_program()
    child = make_child(parent, date_of_birth=date(2018, 6, 15), gender=Gender.MALE, school_grade=3)
    service = EnrollmentService(db)
    assert service.set_participant_policy(
        program.id,
        min_age_months=60,
        max_age_months=120,
        allowed_genders=[Gender.MALE, Gender.FEMALE],
        min_grade=1,
        max_grade=6,
    ).is_success

    assert service.check_participant_eligibility(program.id, child.id, TODAY).is_success


@pytest.mark.parametrize(
    "policy, child_fields, reason",
    [
        ({"min_age_months": 60}, {"date_of_birth": date(2026, 1, 15)}, "child is too young (minimum age: 60 months)"),
        ({"max_age_months": 120}, {"date_of_birth": date(2005, 1, 1)}, "child is too old (maximum age: 120 months)"),
        ({"min_age_months": 60}, {}, "date of birth is required for this program"),
        (
            {"allowed_genders": [Gender.FEMALE]},
            {"gender": Gender.MALE},
            "gender not allowed for this program (allowed: female)",
        ),
        ({"allowed_genders": [Gender.FEMALE]}, {}, "gender not allowed for this program (allowed: female)"),
        ({"min_grade": 3, "max_grade": 6}, {"school_grade": 1}, "school grade too low (minimum: grade 3)"),
        ({"max_grade": 4}, {"school_grade": 7}, "school grade too high (maximum: grade 4)"),
        ({"min_grade": 1}, {}, "school grade is required for this program"),
    ],
)
def test_single_failed_restriction(db, parent, make_child, make_program, policy, child_fields, reason):
    program = make_program()
    child = make_child(parent, **child_fields)
    EnrollmentService(db).set_participant_policy(program.id, **policy)

    result = _check(db, program, child)

    assert result.error_code == ErrorCode.PARTICIPANT_INELIGIBLE
    assert result.error.details["reasons"] == [reason]


def test_every_failed_restriction_is_reported(db, parent, make_child, make_program):
    program = make_program()
    child = make_child(parent, date_of_birth=date(2024, 1, 1), gender=Gender.MALE, school_grade=1)
    EnrollmentService(db).set_participant_policy(
        program.id,
        min_age_months=60,
        allowed_genders=[Gender.FEMALE],
        min_grade=3,
    )

    reasons = _check(db, program, child).error.details["reasons"]

    assert len(reasons) == 3
    assert reasons[0].startswith("child is too young")
    assert reasons[1].startswith("gender not allowed")
    assert reasons[2].startswith("school grade too low")


def test_age_evaluated_at_program_start(db, parent, make_child, make_program):
    # 59 months today, 65 months when the program starts
    child = make_child(parent, date_of_birth=date(2021, 4, 1))
    service = EnrollmentService(db)

    starts_later = make_program(start_date=date(2026, 9, 1))
    service.set_participant_policy(
        starts_later.id,
        min_age_months=60,
        eligibility_at=EligibilityReference.PROGRAM_START,
    )
    at_registration = make_program(start_date=date(2026, 9, 1))
    service.set_participant_policy(at_registration.id, min_age_months=60)

    assert _check(db, starts_later, child).is_success
    assert _check(db, at_registration, child).error_code == ErrorCode.PARTICIPANT_INELIGIBLE


def test_program_start_without_start_date_uses_today(db, parent, make_child, make_program):
    program = make_program()
    child = make_child(parent, date_of_birth=date(2021, 4, 1))
    EnrollmentService(db).set_participant_policy(
        program.id,
        min_age_months=60,
        eligibility_at=EligibilityReference.PROGRAM_START,
    )

    assert _check(db, program, child).error_code == ErrorCode.PARTICIPANT_INELIGIBLE


def test_unknown_child(db, make_program):
    result = EnrollmentService(db).check_participant_eligibility(make_program().id, "missing", TODAY)
    assert result.error_code == ErrorCode.NOT_FOUND


@pytest.mark.parametrize(
    "fields, field",
    [
        ({"min_age_months": 100, "max_age_months": 50}, "min_age_months"),
        ({"min_grade": 5, "max_grade": 2}, "min_grade"),
        ({"max_grade": 14}, "max_grade"),
        ({"min_age_months": -1}, "min_age_months"),
    ],
)
def test_invalid_policy(db, make_program, fields, field):
    program = make_program()

    result = EnrollmentService(db).set_participant_policy(program.id, **fields)

    assert result.error_code == ErrorCode.VALIDATION_ERROR
    assert field in result.error.details["field_errors"]
    assert db.query(ParticipantPolicy).count() == 0


def test_policy_upsert_replaces_restrictions(db, make_program):
    program = make_program()
    service = EnrollmentService(db)
    service.set_participant_policy(program.id, min_age_months=60, allowed_genders=[Gender.FEMALE, Gender.FEMALE])

    first = service.get_participant_policy(program.id).data
    assert first.allowed_genders == ["female"]

    service.set_participant_policy(program.id, min_grade=2)
    policy = service.get_participant_policy(program.id).data

    assert db.query(ParticipantPolicy).count() == 1
    assert policy.min_age_months is None
    assert policy.allowed_genders == []
    assert policy.min_grade == 2
    assert policy.eligibility_at == EligibilityReference.REGISTRATION


def test_policy_for_unknown_program(db):
    service = EnrollmentService(db)
    assert service.set_participant_policy("missing", min_grade=1).error_code == ErrorCode.NOT_FOUND
    assert service.get_participant_policy("missing").error_code == ErrorCode.NOT_FOUND


def test_ineligible_child_is_not_enrolled(db, parent, make_child, make_program):
    program = make_program()
    child = make_child(parent, school_grade=1)
    service = EnrollmentService(db)
    service.set_participant_policy(program.id, min_grade=3)

    result = service.create_enrollment(
        CreateEnrollmentParams(
            program_id=program.id,
            parent_id=parent.id,
            child_id=child.id,
            payment_method="card",
            today=TODAY,
        )
    )

    assert result.error_code == ErrorCode.PARTICIPANT_INELIGIBLE
    assert result.error.details["reasons"] == ["school grade too low (minimum: grade 3)"]
    assert db.query(Enrollment).count() == 0
    assert service.quota_service.usage_for_parent(parent).used == 0


def test_eligibility_endpoints(client):
    headers = {"X-Identity-ID": "parent-1"}
    program_id = client.post(f"{API}/programs", json={"title": "Chess Club"}).json()["id"]
    client.post(f"{API}/parents/me", json={}, headers=headers)
    child_id = client.post(
        f"{API}/parents/me/children",
        json={"first_name": "Ana", "last_name": "Weber", "gender": "female", "school_grade": 1},
        headers=headers,
    ).json()["id"]

    policy = client.put(
        f"{API}/programs/{program_id}/participant-policy",
        json={"min_grade": 3, "allowed_genders": ["female"]},
    )
    assert policy.status_code == 200
    assert policy.json()["eligibility_at"] == "registration"
    assert client.get(f"{API}/programs/{program_id}/participant-policy").json()["min_grade"] == 3

    eligibility = client.get(f"{API}/programs/{program_id}/eligibility", params={"child_id": child_id})
    assert eligibility.status_code == 200
    assert eligibility.json()["eligible"] is False
    assert eligibility.json()["reasons"] == ["school grade too low (minimum: grade 3)"]

    booking = client.post(f"{API}/bookings/{program_id}", json={"child_id": child_id}, headers=headers)
    assert booking.status_code == 422
    assert booking.json()["error"]["code"] == "PARTICIPANT_INELIGIBLE"

    invalid = client.put(f"{API}/programs/{program_id}/participant-policy", json={"allowed_genders": ["robot"]})
    assert invalid.status_code == 422
