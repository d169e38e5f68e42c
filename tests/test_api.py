# tests/test_api.py
"""
HTTP surface: status codes, error bodies and money formatting.
"""
import pytest

from klass_hero.api.errors import STATUS_BY_CODE
from klass_hero.core.exceptions import ErrorCode

API = "/api/v1"


def _headers(identity="parent-1"):
    return {"X-Identity-ID": identity}


@pytest.fixture
def program_id(client):
    response = client.post(f"{API}/programs", json={"title": "Junior Football"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def parent_with_children(client):
    assert client.post(f"{API}/parents/me", json={"display_name": "Sam"}, headers=_headers()).status_code == 201
    child_ids = []
    for name in ("Ana", "Ben", "Cleo"):
        response = client.post(
            f"{API}/parents/me/children",
            json={"first_name": name, "last_name": "Weber", "allergies": "Peanuts"},
            headers=_headers(),
        )
        assert response.status_code == 201
        child_ids.append(response.json()["id"])
    return child_ids


def test_every_error_code_has_a_status():
    assert set(STATUS_BY_CODE) == set(ErrorCode)


def test_health(client):
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_echoed(client):
    response = client.get(f"{API}/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers


def test_create_program_formats_money(client):
    response = client.post(
        f"{API}/programs",
        json={"title": "Swim School", "weekly_fee": "30", "registration_fee": 10.5},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["weekly_fee"] == "30.00"
    assert body["registration_fee"] == "10.50"


def test_get_unknown_program(client):
    response = client.get(f"{API}/programs/missing")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_registration_status_endpoint(client):
    program = client.post(
        f"{API}/programs",
        json={
            "title": "Art Camp",
            "registration_start_date": "2026-03-01",
            "registration_end_date": "2026-03-31",
        },
    ).json()

    closed = client.get(f"{API}/programs/{program['id']}/registration-status", params={"today": "2026-04-01"})
    open_ = client.get(f"{API}/programs/{program['id']}/registration-status", params={"today": "2026-03-31"})

    assert closed.json()["status"] == "closed"
    assert closed.json()["open"] is False
    assert open_.json()["status"] == "open"


def test_explicit_quote(client):
    response = client.post(
        f"{API}/bookings/quote",
        json={
            "weekly_fee": "45.00",
            "registration_fee": "25.00",
            "vat_rate": "0.19",
            "card_fee": "2.50",
            "payment_method": "transfer",
        },
    )

    assert response.status_code == 200
    assert response.json()["total"] == "83.30"
    assert response.json()["card_fee_amount"] == "0.00"


def test_explicit_quote_rejects_oversized_amount(client):
    response = client.post(
        f"{API}/bookings/quote",
        json={
            "weekly_fee": "1e30",
            "registration_fee": "25.00",
            "vat_rate": "0.19",
            "card_fee": "2.50",
            "payment_method": "card",
        },
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_quote_rejects_unknown_method(client, program_id):
    response = client.get(f"{API}/programs/{program_id}/quote", params={"payment_method": "cash"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_PAYMENT_METHOD"


def test_booking_flow(client, program_id, parent_with_children):
    ana, ben, cleo = parent_with_children

    start = client.get(f"{API}/bookings/{program_id}", headers=_headers())
    assert start.status_code == 200
    assert start.json()["quote"]["total"] == "85.80"
    assert start.json()["usage"]["cap"] == 2
    assert len(start.json()["children"]) == 3

    first = client.post(f"{API}/bookings/{program_id}", json={"child_id": ana}, headers=_headers())
    assert first.status_code == 201
    assert first.json()["status"] == "pending"
    assert first.json()["total_amount"] == "85.80"
    assert first.json()["special_requirements"] == "Peanuts"

    second = client.post(
        f"{API}/bookings/{program_id}",
        json={"child_id": ben, "payment_method": "transfer"},
        headers=_headers(),
    )
    assert second.json()["total_amount"] == "83.30"

    third = client.post(f"{API}/bookings/{program_id}", json={"child_id": cleo}, headers=_headers())
    assert third.status_code == 403
    assert third.json()["error"]["code"] == "BOOKING_LIMIT_EXCEEDED"

    usage = client.get(f"{API}/bookings/usage", headers=_headers()).json()
    assert usage["used"] == 2
    assert usage["remaining"] == 0

    enrolled = client.get(f"{API}/programs/{program_id}/enrolled", headers=_headers())
    assert enrolled.json()["enrolled"] is True


def test_booking_requires_identity(client, program_id):
    response = client.get(f"{API}/bookings/{program_id}")

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_booking_without_child(client, program_id, parent_with_children):
    response = client.post(f"{API}/bookings/{program_id}", json={}, headers=_headers())

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "CHILD_NOT_SELECTED"


def test_booking_without_profile(client, program_id):
    response = client.post(f"{API}/bookings/{program_id}", json={"child_id": "c1"}, headers=_headers("nobody"))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NO_PARENT_PROFILE"


def test_booking_closed_registration(client, parent_with_children):
    program = client.post(
        f"{API}/programs",
        json={
            "title": "Past Camp",
            "registration_start_date": "2020-01-01",
            "registration_end_date": "2020-01-31",
        },
    ).json()

    response = client.get(f"{API}/bookings/{program['id']}", headers=_headers())

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "REGISTRATION_NOT_OPEN"


def test_full_program(client, program_id, parent_with_children):
    policy = client.put(f"{API}/programs/{program_id}/enrollment-policy", json={"max_enrollment": 1})
    assert policy.status_code == 200

    client.post(f"{API}/bookings/{program_id}", json={"child_id": parent_with_children[0]}, headers=_headers())
    capacity = client.get(f"{API}/programs/{program_id}/capacity").json()
    response = client.get(f"{API}/bookings/{program_id}", headers=_headers())

    assert capacity["remaining_capacity"] == 0
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "NO_SPOTS_AVAILABLE"


def test_invalid_policy(client, program_id):
    response = client.put(
        f"{API}/programs/{program_id}/enrollment-policy",
        json={"min_enrollment": 5, "max_enrollment": 2},
    )
    assert response.status_code == 422


def test_enrollment_lifecycle(client, program_id, parent_with_children):
    enrollment = client.post(
        f"{API}/bookings/{program_id}",
        json={"child_id": parent_with_children[0]},
        headers=_headers(),
    ).json()

    confirmed = client.post(f"{API}/enrollments/{enrollment['id']}/confirm")
    cancelled = client.post(f"{API}/enrollments/{enrollment['id']}/cancel", json={"reason": "ill"})
    again = client.post(f"{API}/enrollments/{enrollment['id']}/confirm")
    mine = client.get(f"{API}/enrollments", headers=_headers())

    assert confirmed.json()["status"] == "confirmed"
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["cancellation_reason"] == "ill"
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_TRANSITION"
    assert [e["id"] for e in mine.json()] == [enrollment["id"]]


def test_duplicate_parent_profile(client):
    client.post(f"{API}/parents/me", json={}, headers=_headers("dup"))
    response = client.post(f"{API}/parents/me", json={}, headers=_headers("dup"))

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_attendance_flow(client, program_id, parent_with_children):
    ana, ben, _ = parent_with_children
    session = client.post(
        f"{API}/programs/{program_id}/sessions",
        json={"session_date": "2026-03-14", "start_time": "15:00", "end_time": "16:30"},
    )
    assert session.status_code == 201
    session_id = session.json()["id"]

    record = client.post(f"{API}/sessions/{session_id}/roster", json={"child_id": ana}).json()
    client.post(f"{API}/sessions/{session_id}/roster", json={"child_id": ben})

    by_parent = client.post(
        f"{API}/participation/{record['id']}/check-in",
        json={"actor_role": "parent"},
        headers=_headers(),
    )
    assert by_parent.status_code == 403
    assert by_parent.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"

    checked_in = client.post(
        f"{API}/participation/{record['id']}/check-in",
        json={"actor_role": "provider", "expected_version": 1},
        headers=_headers("provider-1"),
    )
    assert checked_in.status_code == 200
    assert checked_in.json()["status"] == "checked_in"
    assert checked_in.json()["check_in_by"] == "provider-1"

    stale = client.post(
        f"{API}/participation/{record['id']}/check-out",
        json={"actor_role": "provider", "expected_version": 1},
        headers=_headers("provider-1"),
    )
    assert stale.status_code == 409
    assert stale.json()["error"]["code"] == "CONFLICT"

    batch = client.post(
        f"{API}/sessions/{session_id}/check-ins",
        json={"child_ids": [ana, ben]},
        headers=_headers("provider-1"),
    ).json()
    assert batch["succeeded_count"] == 1
    assert batch["failed_count"] == 1
    assert batch["partial_failure"] is True
    assert batch["outcomes"][0]["error_code"] == "INVALID_TRANSITION"
    assert batch["outcomes"][1]["status"] == "checked_in"


def test_session_rejects_inverted_times(client, program_id):
    response = client.post(
        f"{API}/programs/{program_id}/sessions",
        json={"session_date": "2026-03-14", "start_time": "16:00", "end_time": "15:00"},
    )
    assert response.status_code == 422
