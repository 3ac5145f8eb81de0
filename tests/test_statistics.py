from __future__ import annotations

import uuid
from datetime import datetime

from fastapi.testclient import TestClient

from eventhub.models import User
from eventhub.services import statistics_service
from tests.helpers import auth_headers, create_event, make_admin, make_user


def _event_with_attendance(client: TestClient, org_token: str) -> str:
    event_id = create_event(client, org_token, title="Stats Night").json()["id"]
    for i, check_in in enumerate([True, False, False]):
        token, _ = make_user(client, f"fan{i}@example.com")
        ticket = client.post(f"/api/events/{event_id}/register", headers=auth_headers(token)).json()
        if check_in:
            client.post(
                "/api/events/tickets/check-in",
                json={"event_id": event_id, "ticket_code": ticket["ticket_code"]},
                headers=auth_headers(org_token),
            )
    return event_id


def test_event_statistics(client: TestClient, db_session):
    org_token, org_id = make_user(client, "org@example.com")
    fan_token, _ = make_user(client, "outsider@example.com")
    event_id = _event_with_attendance(client, org_token)

    resp = client.get(f"/api/events/{event_id}/statistics", headers=auth_headers(org_token))
    assert resp.status_code == 200
    assert resp.json() == {
        "event_id": event_id,
        "event_name": "Stats Night",
        "total_sold_tickets": 3,
        "checked_in_tickets": 1,
        "pending_tickets": 2,
        "no_show_tickets": 0,
    }

    assert client.get(f"/api/events/{event_id}/statistics", headers=auth_headers(fan_token)).status_code == 403


def test_pending_become_no_shows_after_the_event(client: TestClient, db_session):
    org_token, org_id = make_user(client, "org@example.com")
    event_id = _event_with_attendance(client, org_token)
    organizer = db_session.get(User, uuid.UUID(org_id))

    stats = statistics_service.event_statistics(
        db_session, organizer, uuid.UUID(event_id), now=datetime(2100, 1, 1)
    )
    assert stats["total_sold_tickets"] == 3
    assert stats["checked_in_tickets"] == 1
    assert stats["pending_tickets"] == 0
    assert stats["no_show_tickets"] == 2


def test_all_statistics_scoping(client: TestClient, db_session):
    admin_token, _ = make_admin(client, db_session, "admin@example.com")
    org_token, _ = make_user(client, "org@example.com")
    other_token, _ = make_user(client, "other@example.com")
    event_id = _event_with_attendance(client, org_token)
    create_event(client, other_token, title="Empty Room", room_number=9)

    mine = client.get("/api/events/statistics/all", headers=auth_headers(org_token)).json()
    assert mine == [
        {"event_id": event_id, "title": "Stats Night", "total_tickets": 3, "checked_in_count": 1}
    ]

    everything = client.get("/api/events/statistics/all", headers=auth_headers(admin_token)).json()
    by_title = {row["title"]: row for row in everything}
    assert set(by_title) == {"Stats Night", "Empty Room"}
    assert by_title["Empty Room"]["total_tickets"] == 0
    assert by_title["Empty Room"]["checked_in_count"] == 0
