from datetime import date, timedelta

import pytest

from pickups import filter_pickups, paginate, sort_pickups

PICKUPS = [
    {"id": "p1", "user_id": "u1", "description": "Garden waste", "location": "Baner",
     "status": "pending", "pickup_date": "2025-04-12T14:30:00Z"},
    {"id": "p2", "user_id": "u2", "description": "Old fridge", "location": "Kothrud",
     "status": "completed", "pickup_date": "2025-04-10T09:00:00Z"},
    {"id": "p3", "user_id": "u1", "description": "Glass bottles", "location": "Aundh",
     "status": "pending", "pickup_date": "2025-04-11T09:00:00"},
]


def _tomorrow_plus(days=2) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


# ---------------- helpers ----------------
def test_filter_by_status_and_query():
    assert [p["id"] for p in filter_pickups(PICKUPS, "pending")] == ["p1", "p3"]
    assert [p["id"] for p in filter_pickups(PICKUPS, "all", "FRIDGE")] == ["p2"]
    assert [p["id"] for p in filter_pickups(PICKUPS, "pending", "u1")] == ["p1", "p3"]


def test_sort_by_pickup_date():
    ids = [p["id"] for p in sort_pickups(PICKUPS, "pickup_date")]
    assert ids == ["p2", "p3", "p1"]
    ids = [p["id"] for p in sort_pickups(PICKUPS, "pickup_date", "desc")]
    assert ids == ["p1", "p3", "p2"]


def test_sort_by_text_field():
    assert [p["location"] for p in sort_pickups(PICKUPS, "location")] == ["Aundh", "Baner", "Kothrud"]


@pytest.mark.parametrize("count,page,expected_page,last,size", [
    (0, 1, 1, 1, 0),
    (25, 3, 3, 3, 5),
    (25, 9, 3, 3, 5),
    (10, 0, 1, 1, 10),
])
def test_paginate(count, page, expected_page, last, size):
    items, got_page, last_page = paginate(list(range(count)), page)
    assert (got_page, last_page, len(items)) == (expected_page, last, size)


# ---------------- listing ----------------
def test_user_sees_own_pickups(client, backend):
    backend.list_user_pickups.return_value = PICKUPS[:1]

    body = client.get("/api/pickups").get_json()

    backend.list_user_pickups.assert_called_once_with("user_123")
    backend.list_pickups.assert_not_called()
    assert body["is_admin"] is False
    assert body["total"] == 1


def test_admin_sees_all_pickups(admin, backend):
    backend.list_pickups.return_value = PICKUPS
    body = admin.get("/api/pickups?status=pending").get_json()
    assert body["is_admin"] is True
    assert body["total"] == 2


def test_listing_falls_back_to_demo(client, backend, offline):
    backend.list_user_pickups.side_effect = offline

    body = client.get("/api/pickups").get_json()

    assert body["total"] == 3
    assert body["error"] == "Failed to fetch pickups: Network error"


def test_admin_demo_listing(admin, backend, offline):
    backend.list_pickups.side_effect = offline
    assert admin.get("/api/pickups").get_json()["total"] == 5


# ---------------- scheduling ----------------
def test_schedule_pickup(client, backend):
    backend.schedule_pickup.return_value = {"id": "srv_1"}
    day = _tomorrow_plus()

    resp = client.post("/api/pickups", json={
        "description": "Garden waste", "location": "Baner", "pickup_date": day, "pickup_time": "09:30",
    })

    assert resp.status_code == 201
    assert resp.get_json()["simulated"] is False
    payload = backend.schedule_pickup.call_args[0][0]
    assert payload["id"].startswith("pickup_")
    assert payload["pickup_date"] == f"{day}T09:30:00"
    assert payload["status"] == "pending"
    assert payload["user_id"] == "user_123"


def test_schedule_pickup_simulated(client, backend, offline):
    backend.schedule_pickup.side_effect = offline
    resp = client.post("/api/pickups", json={
        "description": "Garden waste", "location": "Baner", "pickup_date": _tomorrow_plus(),
    })
    assert resp.status_code == 201
    assert resp.get_json()["simulated"] is True


def test_schedule_pickup_without_fallbacks(app, client, backend, offline):
    app.config["DEMO_FALLBACKS"] = False
    backend.schedule_pickup.side_effect = offline
    resp = client.post("/api/pickups", json={
        "description": "Garden waste", "location": "Baner", "pickup_date": _tomorrow_plus(),
    })
    assert resp.status_code == 502


@pytest.mark.parametrize("payload,error", [
    ({"location": "Baner", "pickup_date": "2099-01-01"}, "Missing fields"),
    ({"description": "x", "location": "Baner", "pickup_date": "01/02/2099"}, "Invalid pickup date or time"),
    ({"description": "x", "location": "Baner", "pickup_date": date.today().isoformat()},
     "Pickup date must be after today"),
])
def test_schedule_pickup_rejected(client, backend, payload, error):
    resp = client.post("/api/pickups", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == error
    backend.schedule_pickup.assert_not_called()


def test_admin_cannot_schedule(admin, backend):
    resp = admin.post("/api/pickups", json={
        "description": "x", "location": "Baner", "pickup_date": _tomorrow_plus(),
    })
    assert resp.status_code == 403
    assert resp.get_json()["error"].startswith("Administrators cannot schedule pickups")


# ---------------- status updates ----------------
def test_update_status(admin, backend):
    body = admin.put("/api/pickups/p1/status/completed").get_json()
    backend.update_pickup_status.assert_called_once_with("p1", "completed")
    assert body["status"] == "completed"


def test_update_status_invalid(admin, backend):
    assert admin.put("/api/pickups/p1/status/lost").status_code == 400


def test_update_status_requires_admin(client, backend):
    assert client.put("/api/pickups/p1/status/completed").status_code == 403


def test_update_status_backend_error(admin, backend, offline):
    backend.update_pickup_status.side_effect = offline
    assert admin.put("/api/pickups/p1/status/completed").status_code == 502


# ---------------- authority board ----------------
def test_board_is_seeded(admin):
    rows = admin.get("/api/pickup-requests").get_json()["requests"]
    assert [r["id"] for r in rows] == ["1", "2", "3"]
    assert rows[0]["wasteType"] == "Household Waste"
    assert rows[2]["status"] == "scheduled"


def test_board_schedule_and_verify(admin):
    admin.get("/api/pickup-requests")

    resp = admin.post("/api/pickup-requests/1/schedule", json={"date": "2025-05-01", "time": "08:00"})
    row = resp.get_json()["request"]
    assert (row["date"], row["time"], row["status"]) == ("2025-05-01", "08:00", "scheduled")

    row = admin.post("/api/pickup-requests/1/verify").get_json()["request"]
    assert row["status"] == "verified"
    assert row["verificationStatus"] == "verified"


def test_board_schedule_needs_date_and_time(admin):
    admin.get("/api/pickup-requests")
    resp = admin.post("/api/pickup-requests/1/schedule", json={"date": "2025-05-01"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Please select both date and time"


def test_board_unknown_request(admin):
    admin.get("/api/pickup-requests")
    assert admin.post("/api/pickup-requests/99/verify").status_code == 404


def test_board_requires_admin(client):
    assert client.get("/api/pickup-requests").status_code == 403
