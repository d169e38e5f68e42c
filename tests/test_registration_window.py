from datetime import date

import pytest

from klass_hero.core.exceptions import ErrorCode, RegistrationNotOpenError, ValidationError
from klass_hero.models.base.enums import RegistrationStatus
from klass_hero.models.catalog.registration_period import RegistrationPeriod
from klass_hero.services.catalog.program_service import ProgramService
from klass_hero.services.catalog.registration_window import (
    ensure_registration_open,
    registration_open,
    registration_status,
)

START = date(2026, 3, 1)
END = date(2026, 3, 31)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2026, 2, 28), RegistrationStatus.UPCOMING),
        (START, RegistrationStatus.OPEN),
        (date(2026, 3, 15), RegistrationStatus.OPEN),
        (END, RegistrationStatus.OPEN),
        (date(2026, 4, 1), RegistrationStatus.CLOSED),
    ],
)
def test_bounded_window_is_inclusive(today, expected):
    assert registration_status(RegistrationPeriod(START, END), today) == expected


def test_no_period_is_always_open():
    assert registration_status(None, date(2026, 1, 1)) == RegistrationStatus.ALWAYS_OPEN
    assert RegistrationPeriod().status_on(date(1999, 1, 1)) == RegistrationStatus.ALWAYS_OPEN


def test_start_only_window():
    period = RegistrationPeriod(start_date=START)

    assert period.status_on(date(2026, 2, 28)) == RegistrationStatus.UPCOMING
    assert period.status_on(date(2030, 1, 1)) == RegistrationStatus.OPEN


def test_end_only_window():
    period = RegistrationPeriod(end_date=END)

    assert period.status_on(date(2020, 1, 1)) == RegistrationStatus.OPEN
    assert period.status_on(date(2026, 4, 1)) == RegistrationStatus.CLOSED


@pytest.mark.parametrize("start, end", [(END, START), (START, START)])
def test_start_must_precede_end(start, end):
    with pytest.raises(ValidationError):
        RegistrationPeriod(start, end)


def test_program_gate(make_program):
    program = make_program(registration_start_date=START, registration_end_date=END)

    assert registration_open(program, END)
    assert not registration_open(program, date(2026, 4, 1))
    with pytest.raises(RegistrationNotOpenError) as exc_info:
        ensure_registration_open(program, date(2026, 2, 1))
    assert exc_info.value.details["registration_status"] == "upcoming"


def test_program_without_window_is_open(make_program):
    assert registration_open(make_program(), date(2026, 7, 1))


def test_registration_status_report(db, make_program):
    program = make_program(registration_start_date=START, registration_end_date=END)

    result = ProgramService(db).get_registration_status(program.id, date(2026, 4, 1))

    assert result.is_success
    assert result.data["status"] == RegistrationStatus.CLOSED
    assert result.data["open"] is False
    assert result.data["evaluated_on"] == date(2026, 4, 1)


def test_create_program_rejects_inverted_window(db):
    result = ProgramService(db).create_program(
        "Chess Club",
        registration_start_date=END,
        registration_end_date=START,
    )

    assert result.error_code == ErrorCode.VALIDATION_ERROR
    assert ProgramService(db).list_programs().data == []
