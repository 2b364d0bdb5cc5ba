from datetime import datetime, time, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from slotbook.base.models import parse_instant
from slotbook.main import app
from slotbook.routers.dependencies import get_booking_service
from tests.conftest import ALICE, ALICE_EMAIL, SAST

API_KEY = {"X-API-Key": "super-secret-key"}


def next_working_day(days_ahead: int = 7) -> datetime:
    """A weekday far enough ahead to clear the 24h notice."""
    day = datetime.now(SAST).date() + timedelta(days=days_ahead)
    while day.isoweekday() > 5:
        day += timedelta(days=1)
    return datetime.combine(day, time(0), tzinfo=SAST)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_booking_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def book(client, start: datetime, minutes: int = 60, **overrides):
    payload = {
        "organization_id": "org-1",
        "interviewer_user_id": ALICE,
        "candidate_name": "Thandi Nkosi",
        "candidate_email": "thandi@example.com",
        "title": "Technical Interview",
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(minutes=minutes)).isoformat(),
        "timezone": "Africa/Johannesburg",
    }
    payload.update(overrides)
    return client.post("/scheduling/interviews", json=payload, headers=API_KEY)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_api_key_is_required(client):
    response = client.post("/scheduling/availability", json={})

    assert response.status_code == 403


def test_availability_endpoint(client, calendar):
    day = next_working_day()
    calendar.add_busy(ALICE_EMAIL, day.replace(hour=10), day.replace(hour=11))

    response = client.post(
        "/scheduling/availability",
        json={"interviewer_user_id": ALICE, "start_date": day.isoformat(), "end_date": day.isoformat()},
        headers=API_KEY,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == len(body["slots"]) == 10
    first = parse_instant(body["slots"][0]["start"]).astimezone(SAST)
    assert first.hour == 11 and first.minute == 30


def test_panel_availability_endpoint(client, calendar):
    day = next_working_day()
    calendar.add_busy("bob@example.com", day - timedelta(days=1), day + timedelta(days=2))

    response = client.post(
        "/scheduling/availability/panel",
        json={"interviewer_user_ids": [ALICE, "user-bob"], "start_date": day.isoformat(), "end_date": day.isoformat()},
        headers=API_KEY,
    )

    assert response.status_code == 200
    assert response.json() == {"slots": [], "count": 0}


def test_book_reschedule_cancel_flow(client):
    day = next_working_day()

    booked = book(client, day.replace(hour=9))
    assert booked.status_code == 201
    interview = booked.json()
    assert interview["status"] == "scheduled"
    assert interview["provider_event_id"]

    moved = client.patch(
        f"/scheduling/interviews/{interview['id']}/reschedule",
        json={
            "new_start_time": day.replace(hour=14).isoformat(),
            "new_end_time": day.replace(hour=15).isoformat(),
        },
        headers=API_KEY,
    )
    assert moved.status_code == 200
    assert moved.json()["status"] == "rescheduled"
    assert moved.json()["provider_event_id"] == interview["provider_event_id"]

    cancelled = client.post(f"/scheduling/interviews/{interview['id']}/cancel", headers=API_KEY)
    assert cancelled.json() == {"status": "cancelled", "interview_id": interview["id"]}

    again = client.patch(
        f"/scheduling/interviews/{interview['id']}/reschedule",
        json={
            "new_start_time": day.replace(hour=16).isoformat(),
            "new_end_time": day.replace(hour=17).isoformat(),
        },
        headers=API_KEY,
    )
    assert again.status_code == 409
    assert again.json()["type"] == "invalid_state_transition"


def test_double_booking_returns_conflict(client):
    day = next_working_day()

    assert book(client, day.replace(hour=11)).status_code == 201
    response = book(client, day.replace(hour=11), candidate_email="other@example.com")

    assert response.status_code == 409
    assert response.json()["type"] == "slot_unavailable"


def test_unconnected_interviewer_is_precondition_failure(client):
    response = book(client, next_working_day().replace(hour=11), interviewer_user_id="user-without-calendar")

    assert response.status_code == 412
    assert response.json()["type"] == "calendar_not_connected"


def test_unknown_interview_is_not_found(client):
    response = client.get("/scheduling/interviews/missing", headers=API_KEY)

    assert response.status_code == 404


def test_invalid_interval_is_rejected(client):
    start = next_working_day().replace(hour=11)

    response = book(client, start, end_time=(start - timedelta(hours=1)).astimezone(timezone.utc).isoformat())

    assert response.status_code == 422
