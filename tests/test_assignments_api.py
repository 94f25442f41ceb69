from __future__ import annotations

from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from crewboard.core.auth import ensure_user_principal
from crewboard.models.entities import User, UserRole
from crewboard.services.calendar import utc_today, week_start_for


def _headers(user: User) -> dict[str, str]:
    return {"X-User-Email": user.email, "X-User-Name": user.display_name}


def _payload(employee_id: str, project_id: str, day) -> dict[str, str]:
    return {"employee_id": employee_id, "project_id": project_id, "assignment_date": day.isoformat()}


def test_create_list_and_read_assignment(client: TestClient, crew: dict[str, object], manager: User) -> None:
    tuesday = week_start_for(utc_today()) + timedelta(days=1)

    response = client.post(
        "/api/v1/assignments",
        json={**_payload("E001", "P1", tuesday), "location": "North gate"},
        headers=_headers(manager),
    )
    assert response.status_code == 201
    created = response.json()
    assert created["employee_id"] == "E001"
    assert created["created_by"] == str(manager.id)

    listing = client.get("/api/v1/assignments", headers=_headers(manager))
    assert listing.status_code == 200
    body = listing.json()
    assert [item["assignment_id"] for item in body["items"]] == [created["assignment_id"]]
    assert body["date_range"]["start_date"] == week_start_for(utc_today()).isoformat()

    detail = client.get(f"/api/v1/assignments/{created['assignment_id']}", headers=_headers(manager))
    assert detail.status_code == 200
    assert detail.json()["employee_name"] == "Alice Moreno"
    assert detail.json()["position_code"] == "FM"
    assert detail.json()["location"] == "North gate"


def test_list_filters_by_query_parameters(client: TestClient, crew: dict[str, object], manager: User) -> None:
    monday = week_start_for(utc_today())
    headers = _headers(manager)
    client.post("/api/v1/assignments", json=_payload("E001", "P1", monday), headers=headers)
    client.post("/api/v1/assignments", json=_payload("E002", "P2", monday), headers=headers)

    response = client.get(
        "/api/v1/assignments",
        params={
            "start_date": monday.isoformat(),
            "end_date": (monday + timedelta(days=4)).isoformat(),
            "position_id": crew["electrician_id"],
        },
        headers=headers,
    )

    assert response.status_code == 200
    assert [item["employee_id"] for item in response.json()["items"]] == ["E002"]

    reversed_range = client.get(
        "/api/v1/assignments",
        params={"start_date": (monday + timedelta(days=4)).isoformat(), "end_date": monday.isoformat()},
        headers=headers,
    )
    assert reversed_range.status_code == 422


def test_double_booking_returns_conflict(client: TestClient, crew: dict[str, object], manager: User) -> None:
    monday = week_start_for(utc_today())
    first = client.post("/api/v1/assignments", json=_payload("E001", "P1", monday), headers=_headers(manager))

    second = client.post("/api/v1/assignments", json=_payload("E001", "P2", monday), headers=_headers(manager))

    assert second.status_code == 409
    assert second.json()["existing_id"] == first.json()["assignment_id"]


def test_terminal_references_and_missing_rows(client: TestClient, crew: dict[str, object], manager: User) -> None:
    monday = week_start_for(utc_today())
    headers = _headers(manager)

    assert client.post("/api/v1/assignments", json=_payload("E900", "P1", monday), headers=headers).status_code == 409
    assert client.post("/api/v1/assignments", json=_payload("E001", "P8", monday), headers=headers).status_code == 409
    missing = client.post("/api/v1/assignments", json=_payload("E404", "P1", monday), headers=headers)
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Employee with ID E404 not found."}
    assert client.get("/api/v1/assignments/999", headers=headers).status_code == 404


def test_validation_errors_are_listed(client: TestClient, crew: dict[str, object], manager: User) -> None:
    far_future = utc_today() + timedelta(days=800)

    response = client.post(
        "/api/v1/assignments",
        json=_payload("E001", "P1", far_future),
        headers=_headers(manager),
    )

    assert response.status_code == 422
    assert response.json()["errors"] == ["Assignment date cannot be more than 1 year(s) in the future"]

    too_long = client.post(
        "/api/v1/assignments",
        json=_payload("E0000000001", "P1", utc_today()),
        headers=_headers(manager),
    )
    assert too_long.status_code == 422


def test_update_and_delete_keep_history(client: TestClient, crew: dict[str, object], manager: User, sink) -> None:
    monday = week_start_for(utc_today())
    headers = _headers(manager)
    created = client.post("/api/v1/assignments", json=_payload("E001", "P1", monday), headers=headers).json()
    assignment_id = created["assignment_id"]

    moved = client.put(f"/api/v1/assignments/{assignment_id}", json={"project_id": "P2"}, headers=headers)
    assert moved.status_code == 200
    assert moved.json()["project_id"] == "P2"
    assert moved.json()["updated_by"] == str(manager.id)

    empty = client.put(f"/api/v1/assignments/{assignment_id}", json={}, headers=headers)
    assert empty.status_code == 422
    assert empty.json()["detail"] == "No valid fields to update."

    deleted = client.delete(f"/api/v1/assignments/{assignment_id}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"/api/v1/assignments/{assignment_id}", headers=headers).status_code == 404

    history = client.get(f"/api/v1/assignments/{assignment_id}/history", headers=headers)
    assert history.status_code == 200
    entries = history.json()["items"]
    assert [entry["change_reason"] for entry in entries] == [
        "Assignment created",
        "Assignment updated",
        "Assignment deleted",
    ]
    assert entries[1]["previous_project_id"] == "P1"
    assert entries[1]["new_project_id"] == "P2"
    assert sink.names == ["assignment_created", "assignment_moved", "assignment_deleted"]


def test_bulk_create_is_atomic(client: TestClient, crew: dict[str, object], manager: User) -> None:
    monday = week_start_for(utc_today())
    headers = _headers(manager)

    ok = client.post(
        "/api/v1/assignments/bulk",
        json={"assignments": [_payload("E001", "P1", monday), _payload("E002", "P1", monday)]},
        headers=headers,
    )
    assert ok.status_code == 201
    assert ok.json()["count"] == 2

    tuesday = monday + timedelta(days=1)
    rejected = client.post(
        "/api/v1/assignments/bulk",
        json={"assignments": [_payload("E001", "P1", tuesday), _payload("E001", "P2", tuesday)]},
        headers=headers,
    )
    assert rejected.status_code == 409

    listing = client.get("/api/v1/assignments", headers=headers).json()
    assert len(listing["items"]) == 2

    assert client.post("/api/v1/assignments/bulk", json={"assignments": []}, headers=headers).status_code == 422


def test_viewers_cannot_write(client: TestClient, db_session: Session, crew: dict[str, object]) -> None:
    viewer = ensure_user_principal(db_session, email="viewer@test.local", display_name="Viewer")
    monday = week_start_for(utc_today())

    response = client.post("/api/v1/assignments", json=_payload("E001", "P1", monday), headers=_headers(viewer))
    assert response.status_code == 403

    assert client.get("/api/v1/assignments", headers=_headers(viewer)).status_code == 200


def test_unknown_header_user_starts_as_view_only(client: TestClient, crew: dict[str, object]) -> None:
    monday = week_start_for(utc_today())
    headers = {"X-User-Email": "Newcomer@Test.local", "X-User-Name": "Newcomer"}

    response = client.post("/api/v1/assignments", json=_payload("E001", "P1", monday), headers=headers)

    assert response.status_code == 403


def test_dashboard_week_and_conflicts(client: TestClient, crew: dict[str, object], manager: User) -> None:
    monday = week_start_for(utc_today())
    headers = _headers(manager)
    client.post("/api/v1/assignments", json=_payload("E001", "P1", monday + timedelta(days=2)), headers=headers)

    current = client.get("/api/v1/dashboard/current", headers=headers)
    assert current.status_code == 200
    grid = current.json()
    assert grid["week_start"] == monday.isoformat()
    assert grid["days"]["Wednesday"]["P1"][0]["employee_id"] == "E001"
    assert grid["summary"]["total_assignments"] == 1

    by_day = client.get(f"/api/v1/dashboard/week/{(monday + timedelta(days=3)).isoformat()}", headers=headers)
    assert by_day.status_code == 200
    assert by_day.json() == grid

    conflicts = client.get("/api/v1/dashboard/conflicts", headers=headers)
    assert conflicts.status_code == 200
    assert conflicts.json()["count"] == 0
    assert conflicts.json()["conflicts"] == []


def test_put_null_clears_optional_text(client: TestClient, crew: dict[str, object], manager: User) -> None:
    monday = week_start_for(utc_today())
    headers = _headers(manager)
    created = client.post(
        "/api/v1/assignments",
        json={**_payload("E001", "P1", monday), "notes": "Bring harness", "location": "Gate 4"},
        headers=headers,
    ).json()

    cleared = client.put(f"/api/v1/assignments/{created['assignment_id']}", json={"notes": None}, headers=headers)
    assert cleared.status_code == 200
    assert cleared.json()["notes"] is None
    assert cleared.json()["location"] == "Gate 4"

    required = client.put(
        f"/api/v1/assignments/{created['assignment_id']}", json={"project_id": None}, headers=headers
    )
    assert required.status_code == 422
    assert required.json()["errors"] == ["project_id cannot be cleared"]


def test_employee_history_endpoint(client: TestClient, crew: dict[str, object], manager: User) -> None:
    monday = week_start_for(utc_today())
    headers = _headers(manager)
    created = client.post("/api/v1/assignments", json=_payload("E001", "P1", monday), headers=headers).json()
    client.delete(f"/api/v1/assignments/{created['assignment_id']}", headers=headers)
    client.post("/api/v1/assignments", json=_payload("E002", "P1", monday), headers=headers)

    response = client.get("/api/v1/assignments/history", params={"employee_id": "E001"}, headers=headers)

    assert response.status_code == 200
    assert [entry["change_reason"] for entry in response.json()["items"]] == [
        "Assignment created",
        "Assignment deleted",
    ]
    missing = client.get("/api/v1/assignments/history", params={"employee_id": "E404"}, headers=headers)
    assert missing.status_code == 404


def test_partial_ranges_are_rejected(client: TestClient, crew: dict[str, object], manager: User) -> None:
    headers = _headers(manager)
    start_only = {"start_date": week_start_for(utc_today()).isoformat()}

    for path in ("/api/v1/assignments", "/api/v1/dashboard/conflicts", "/api/v1/dashboard/summary"):
        response = client.get(path, params=start_only, headers=headers)
        assert response.status_code == 422
        assert response.json()["detail"] == "start_date and end_date must be provided together."


def test_dashboard_summary_and_recent_activity(client: TestClient, crew: dict[str, object], manager: User) -> None:
    today = utc_today()
    monday = week_start_for(today)
    headers = _headers(manager)
    client.post("/api/v1/assignments", json=_payload("E001", "P1", monday), headers=headers)
    client.post("/api/v1/assignments", json=_payload("E002", "P1", today), headers=headers)

    summary = client.get(
        "/api/v1/dashboard/summary",
        params={"start_date": monday.isoformat(), "end_date": (monday + timedelta(days=6)).isoformat()},
        headers=headers,
    )
    assert summary.status_code == 200
    body = summary.json()
    assert body["assignments"]["total_assignments"] == 2
    assert body["assignments"]["by_project"]["P1"]["count"] == 2
    assert body["employees"]["Terminated"] == 1
    assert body["conflicts"] == []

    activity = client.get("/api/v1/dashboard/recent-activity", params={"limit": 5}, headers=headers)
    assert activity.status_code == 200
    names = [item["employee_name"] for item in activity.json()["activities"]]
    assert names[0] == "Ben Carter"
    assert activity.json()["date_range"]["end_date"] == today.isoformat()
    assert client.get("/api/v1/dashboard/recent-activity", params={"limit": 0}, headers=headers).status_code == 422


def test_conflicts_for_single_day(client: TestClient, crew: dict[str, object], manager: User) -> None:
    today = utc_today()

    response = client.get(f"/api/v1/dashboard/conflicts/{today.isoformat()}", headers=_headers(manager))

    assert response.status_code == 200
    assert response.json()["date_range"] == {"start_date": today.isoformat(), "end_date": today.isoformat()}
    assert response.json()["count"] == 0
