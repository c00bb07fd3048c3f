"""Tests for the HTTP adapter."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from roombooking.domain.errors import DataSourceError
from roombooking.main import app, booking_store

client = TestClient(app)


@pytest.fixture(autouse=True)
def reset_store():
    """Clear bookings before each test."""
    booking_store.reset()
    yield


def _booking(**overrides) -> dict:
    body = {
        "room_id": 1,
        "date": "2030-01-07",
        "start_time": "10:00",
        "end_time": "11:00",
        "booker": "Karin",
    }
    body.update(overrides)
    return body


def test_list_rooms():
    response = client.get("/rooms")
    assert response.status_code == 200
    assert {room["name"] for room in response.json()} == {"Svea", "Göta", "Vasa", "Kalmar"}


def test_create_and_list_booking():
    response = client.post("/bookings", json=_booking())
    assert response.status_code == 201
    data = response.json()
    assert data["id"] == 1
    assert data["start_time"] == "10:00:00"

    listed = client.get("/bookings", params={"date": "2030-01-07"}).json()
    assert [b["id"] for b in listed] == [1]


def test_create_booking_inverted_times():
    response = client.post("/bookings", json=_booking(start_time="12:00", end_time="11:00"))
    assert response.status_code == 422


def test_create_booking_unknown_room():
    response = client.post("/bookings", json=_booking(room_id=99))
    assert response.status_code == 422
    assert "unknown room" in response.json()["detail"]


def test_create_booking_overlap_conflict():
    client.post("/bookings", json=_booking())
    response = client.post("/bookings", json=_booking(start_time="10:30", end_time="11:30"))
    assert response.status_code == 409
    report = response.json()["report"]
    assert report["has_conflict"] is True
    assert [b["id"] for b in report["conflicts"]] == [1]


def test_overlap_endpoint():
    client.post("/bookings", json=_booking())
    body = {"room_id": 1, "date": "2030-01-07", "start_time": "11:00", "end_time": "12:00"}
    assert client.post("/overlap", json=body).json() == {"has_conflict": False, "conflicts": []}

    body["start_time"] = "10:59"
    assert client.post("/overlap", json=body).json()["has_conflict"] is True

    body["exclude_booking_id"] = 1
    assert client.post("/overlap", json=body).json()["has_conflict"] is False


def test_allocate_largest_then_null():
    interval = {"date": "2030-01-07", "start_time": "10:00", "end_time": "11:00"}
    assert client.post("/allocate", json=interval).json()["name"] == "Kalmar"

    for room_id in (1, 2, 3, 4):
        client.post("/bookings", json=_booking(room_id=room_id))
    response = client.post("/allocate", json=interval)
    assert response.status_code == 200
    assert response.json() is None


def test_expand_recurrence():
    body = {
        "seed": _booking(date="2024-01-01"),
        "rule": {"pattern": "weekly", "weekdays": [1], "occurrences": 4},
    }
    response = client.post("/recurrence/expand", json=body)
    assert response.status_code == 200
    assert [c["date"] for c in response.json()] == [
        "2024-01-01",
        "2024-01-08",
        "2024-01-15",
        "2024-01-22",
    ]


def test_expand_recurrence_invalid_rule():
    body = {"seed": _booking(), "rule": {"pattern": "daily"}}
    response = client.post("/recurrence/expand", json=body)
    assert response.status_code == 422


def test_recurring_booking_reports_counts():
    client.post("/bookings", json=_booking(date="2030-01-08"))
    body = {
        "seed": _booking(),
        "rule": {"pattern": "daily", "end_date": "2030-01-09"},
    }
    response = client.post("/bookings/recurring", json=body)
    assert response.status_code == 201
    data = response.json()
    assert data["created_count"] == 2
    assert data["skipped_count"] == 1
    assert data["skipped"][0]["request"]["date"] == "2030-01-08"


def test_recurring_booking_storage_failure_returns_partial_result(monkeypatch):
    store_add = booking_store.add_booking
    writes = []

    async def flaky_add(request):
        writes.append(request.date)
        if len(writes) == 2:
            raise DataSourceError("write timed out")
        return await store_add(request)

    monkeypatch.setattr(booking_store, "add_booking", flaky_add)
    body = {"seed": _booking(), "rule": {"pattern": "daily", "occurrences": 3}}

    response = client.post("/bookings/recurring", json=body)

    assert response.status_code == 503
    result = response.json()["result"]
    assert result["created_count"] == 1
    assert [r["date"] for r in result["unprocessed"]] == ["2030-01-08", "2030-01-09"]


def test_emergency_booking():
    response = client.post(
        "/bookings/emergency", json={"now": "2030-01-07T09:20:00", "duration_minutes": 30}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["room_id"] == 4
    assert data["start_time"] == "09:00:00"
    assert data["end_time"] == "09:30:00"
    assert data["is_quick"] is True


def test_emergency_booking_no_room():
    for room_id in (1, 2, 3, 4):
        client.post("/bookings", json=_booking(room_id=room_id, start_time="09:00"))
    response = client.post("/bookings/emergency", json={"now": "2030-01-07T10:10:00"})
    assert response.status_code == 404
