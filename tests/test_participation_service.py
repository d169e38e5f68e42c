from datetime import date, time

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from klass_hero.core.exceptions import ErrorCode
from klass_hero.models.base.enums import (
    ActorRole,
    EnrollmentStatus,
    ParticipationStatus,
    SessionStatus,
)
from klass_hero.services.participation.participation_service import ParticipationService


@pytest.fixture
def setup(make_parent, make_child, make_program, make_session):
    parent = make_parent()
    child = make_child(parent)
    program = make_program()
    return parent, child, program, make_session(program)


@pytest.fixture
def service(db):
    return ParticipationService(db)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

def test_provider_check_in_and_out(db, service, setup, make_record):
    _, child, _, session = setup
    record = make_record(session, child)

    checked_in = service.check_in(record.id, ActorRole.PROVIDER, "provider-1", notes="arrived with dad")
    assert checked_in.is_success
    assert checked_in.data.status == ParticipationStatus.CHECKED_IN
    assert checked_in.data.check_in_by == "provider-1"
    assert checked_in.data.check_in_notes == "arrived with dad"
    assert checked_in.data.check_in_at is not None
    assert checked_in.data.lock_version == 2

    checked_out = service.check_out(record.id, ActorRole.PROVIDER, "provider-1")
    assert checked_out.data.status == ParticipationStatus.CHECKED_OUT
    assert checked_out.data.check_out_at is not None
    assert checked_out.data.lock_version == 3


def test_check_out_requires_check_in(service, setup, make_record):
    _, child, _, session = setup
    record = make_record(session, child)

    result = service.check_out(record.id, ActorRole.PROVIDER)

    assert result.error_code == ErrorCode.INVALID_TRANSITION


def test_parent_cannot_check_in(db, service, setup, make_record):
    _, child, _, session = setup
    record = make_record(session, child)

    result = service.check_in(record.id, ActorRole.PARENT, "parent-1")

    assert result.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS
    db.refresh(record)
    assert record.status == ParticipationStatus.SCHEDULED
    assert record.check_in_at is None


def test_system_may_only_mark_absent(service, setup, make_record):
    _, child, _, session = setup
    record = make_record(session, child)

    assert service.check_in(record.id, ActorRole.SYSTEM).error_code == ErrorCode.INSUFFICIENT_PERMISSIONS
    result = service.mark_absent(record.id, ActorRole.SYSTEM)
    assert result.data.status == ParticipationStatus.ABSENT
    assert result.data.absent_marked_by is None


def test_role_checked_before_state(service, setup, make_record):
    _, child, _, session = setup
    record = make_record(session, child, status=ParticipationStatus.CHECKED_OUT)

    result = service.check_out(record.id, ActorRole.PARENT)

    assert result.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS


@pytest.mark.parametrize("terminal", [ParticipationStatus.CHECKED_OUT, ParticipationStatus.ABSENT])
@pytest.mark.parametrize("action", ["check_in", "check_out", "mark_absent"])
def test_terminal_states_reject_every_transition(db, service, setup, make_record, terminal, action):
    _, child, _, session = setup
    record = make_record(session, child, status=terminal)

    result = getattr(service, action)(record.id, ActorRole.PROVIDER, "provider-1")

    assert result.error_code == ErrorCode.INVALID_TRANSITION
    db.refresh(record)
    assert record.status == terminal
    assert record.lock_version == 1
    assert record.check_in_at is None
    assert record.check_out_at is None
    assert record.absent_at is None


def test_expected_version_mismatch_is_conflict(db, service, setup, make_record):
    _, child, _, session = setup
    record = make_record(session, child)

    result = service.check_in(record.id, ActorRole.PROVIDER, expected_version=7)

    assert result.error_code == ErrorCode.CONFLICT
    db.refresh(record)
    assert record.status == ParticipationStatus.SCHEDULED


def test_concurrent_write_is_conflict(db, service, setup, make_record):
    _, child, _, session = setup
    record = make_record(session, child)
    assert record.lock_version == 1

    # Another writer bumps the version underneath the loaded record
    db.execute(
        text("UPDATE participation_records SET lock_version = lock_version + 1 WHERE id = :id"),
        {"id": record.id},
    )

    result = service.check_in(record.id, ActorRole.PROVIDER)

    assert result.error_code == ErrorCode.CONFLICT
    db.refresh(record)
    assert record.status == ParticipationStatus.SCHEDULED


def test_unknown_record(service):
    assert service.check_in("missing", ActorRole.PROVIDER).error_code == ErrorCode.NOT_FOUND


def test_get_session_database_error_is_typed(service, setup, monkeypatch):
    *_, session = setup

    def _fail(session_id):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(service.session_repo, "get_by_id", _fail)

    assert service.get_session(session.id).error_code == ErrorCode.DATABASE_ERROR


# ---------------------------------------------------------------------------
# Batch check-in
# ---------------------------------------------------------------------------

def test_batch_check_in_partial_failure(db, service, setup, make_child, make_record):
    parent, child, _, session = setup
    already_in = make_child(parent, first_name="Ben")
    not_on_roster = make_child(parent, first_name="Cleo")
    make_record(session, child)
    make_record(session, already_in, status=ParticipationStatus.CHECKED_IN)

    result = service.batch_check_in(
        session.id,
        [child.id, already_in.id, not_on_roster.id, child.id],
        ActorRole.PROVIDER,
        "provider-1",
    )

    assert result.is_success
    batch = result.data
    assert [outcome.child_id for outcome in batch.outcomes] == [child.id, already_in.id, not_on_roster.id]
    assert batch.succeeded_count == 1
    assert batch.failed_count == 2
    assert batch.partial_failure
    assert batch.outcomes[0].status == ParticipationStatus.CHECKED_IN
    assert batch.outcomes[1].error_code == ErrorCode.INVALID_TRANSITION
    assert batch.outcomes[2].error_code == ErrorCode.NOT_FOUND
    assert batch.outcomes[2].record_id is None

    statuses = {r.child_id: r.status for r in service.get_session_roster(session.id).data}
    assert statuses[child.id] == ParticipationStatus.CHECKED_IN


def test_batch_all_succeed_is_not_partial(service, setup, make_child, make_record):
    parent, child, _, session = setup
    other = make_child(parent, first_name="Ben")
    make_record(session, child)
    make_record(session, other)

    batch = service.batch_check_in(session.id, [child.id, other.id], ActorRole.PROVIDER).data

    assert batch.succeeded_count == 2
    assert not batch.partial_failure


def test_batch_requires_children(service, setup):
    *_, session = setup
    assert service.batch_check_in(session.id, [], ActorRole.PROVIDER).error_code == ErrorCode.VALIDATION_ERROR


def test_batch_unknown_session(service):
    assert service.batch_check_in("missing", ["c1"], ActorRole.PROVIDER).error_code == ErrorCode.NOT_FOUND


def test_batch_wrong_role_fails_each_child(service, setup, make_record):
    _, child, _, session = setup
    make_record(session, child)

    batch = service.batch_check_in(session.id, [child.id], ActorRole.PARENT).data

    assert batch.failed_count == 1
    assert not batch.partial_failure
    assert batch.outcomes[0].error_code == ErrorCode.INSUFFICIENT_PERMISSIONS


# ---------------------------------------------------------------------------
# Sessions and roster
# ---------------------------------------------------------------------------

def test_create_session_validates_times(service, make_program):
    program = make_program()

    bad = service.create_session(program.id, date(2026, 3, 14), time(16, 0), time(15, 0))
    good = service.create_session(program.id, date(2026, 3, 14), time(15, 0), time(16, 0), location="Hall A")

    assert bad.error_code == ErrorCode.VALIDATION_ERROR
    assert good.data.status == SessionStatus.SCHEDULED
    assert [s.id for s in service.list_program_sessions(program.id).data] == [good.data.id]


def test_session_lifecycle_marks_no_shows_absent(db, service, setup, make_child, make_record):
    parent, child, _, session = setup
    no_show = make_child(parent, first_name="Ben")
    attended = make_record(session, child)
    missing = make_record(session, no_show)

    assert service.start_session(session.id).data.status == SessionStatus.IN_PROGRESS
    service.check_in(attended.id, ActorRole.PROVIDER)

    completed = service.complete_session(session.id)

    assert completed.data.status == SessionStatus.COMPLETED
    db.refresh(missing)
    db.refresh(attended)
    assert missing.status == ParticipationStatus.ABSENT
    assert missing.absent_marked_by is None
    assert attended.status == ParticipationStatus.CHECKED_IN


def test_cannot_complete_scheduled_session(service, setup):
    *_, session = setup
    assert service.complete_session(session.id).error_code == ErrorCode.INVALID_TRANSITION


def test_register_child(service, setup):
    parent, child, _, session = setup

    record = service.register_child(session.id, child.id).data

    assert record.status == ParticipationStatus.SCHEDULED
    assert record.parent_id == parent.id
    assert service.register_child(session.id, child.id).error_code == ErrorCode.CONFLICT


def test_register_respects_session_capacity(service, make_parent, make_child, make_program, make_session):
    parent = make_parent()
    session = make_session(make_program(), max_capacity=1)

    assert service.register_child(session.id, make_child(parent, first_name="Ana").id).is_success
    result = service.register_child(session.id, make_child(parent, first_name="Ben").id)

    assert result.error_code == ErrorCode.NO_SPOTS_AVAILABLE


def test_cancelled_session_rejects_registration(service, setup):
    _, child, _, session = setup
    service.cancel_session(session.id)

    assert service.register_child(session.id, child.id).error_code == ErrorCode.VALIDATION_ERROR


def test_seed_roster_from_active_enrollments(service, setup, make_child, make_enrollment):
    parent, child, program, session = setup
    cancelled_child = make_child(parent, first_name="Ben")
    make_enrollment(program, child, status=EnrollmentStatus.CONFIRMED)
    make_enrollment(program, cancelled_child, status=EnrollmentStatus.CANCELLED)

    first = service.seed_roster(session.id).data
    second = service.seed_roster(session.id).data

    assert [record.child_id for record in first] == [child.id]
    assert second == []


def test_roster_sorted_by_name(service, make_parent, make_child, make_program, make_session, make_record):
    parent = make_parent()
    session = make_session(make_program())
    make_record(session, make_child(parent, first_name="Zoe", last_name="Zimmer"))
    make_record(session, make_child(parent, first_name="Ada", last_name="Adler"))

    roster = service.get_session_roster(session.id).data

    assert [record.child.last_name for record in roster] == ["Adler", "Zimmer"]
