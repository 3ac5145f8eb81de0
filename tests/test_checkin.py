from __future__ import annotations

import uuid
from datetime import date, datetime, time

from fastapi.testclient import TestClient
from sqlalchemy import select, update

from eventhub.models import Event, Ticket
from eventhub.models.ticket import CheckInStatus
from eventhub.services.checkin_service import effective_check_in_status
from tests.helpers import auth_headers, create_event, make_admin, make_user


def _registered(client: TestClient):
    org_token, _ = make_user(client, "org@example.com")
    fan_token, _ = make_user(client, "fan@example.com")
    event_id = create_event(client, org_token).json()["id"]
    ticket = client.post(f"/api/events/{event_id}/register", headers=auth_headers(fan_token)).json()
    return org_token, fan_token, event_id, ticket


def test_check_in_then_check_out(client: TestClient):
    org_token, _, event_id, ticket = _registered(client)
    body = {"event_id": event_id, "ticket_code": ticket["ticket_code"]}

    checked_in = client.post("/api/events/tickets/check-in", json=body, headers=auth_headers(org_token))
    assert checked_in.status_code == 200
    assert checked_in.json()["check_in_status"] == "checkedIn"
    assert checked_in.json()["check_in_time"] is not None
    assert checked_in.json()["attendee"]["email"] == "fan@example.com"

    checked_out = client.post("/api/events/tickets/check-out", json=body, headers=auth_headers(org_token))
    assert checked_out.status_code == 200
    assert checked_out.json()["check_in_status"] == "pending"
    assert checked_out.json()["check_in_time"] is None


def test_double_check_in_fails_without_side_effects(client: TestClient, db_session):
    org_token, _, event_id, ticket = _registered(client)
    body = {"event_id": event_id, "ticket_code": ticket["ticket_code"]}

    first = client.post("/api/events/tickets/check-in", json=body, headers=auth_headers(org_token)).json()
    second = client.post("/api/events/tickets/check-in", json=body, headers=auth_headers(org_token))
    assert second.status_code == 409
    assert second.json()["detail"]["code"] == "ALREADY_CHECKED_IN"

    stored = db_session.scalar(select(Ticket).where(Ticket.ticket_code == ticket["ticket_code"]))
    assert stored.check_in_status == CheckInStatus.CHECKED_IN
    assert stored.check_in_time is not None
    assert first["check_in_time"] is not None


def test_check_out_of_pending_ticket_fails(client: TestClient, db_session):
    org_token, _, event_id, ticket = _registered(client)
    resp = client.post(
        "/api/events/tickets/check-out",
        json={"event_id": event_id, "ticket_code": ticket["ticket_code"]},
        headers=auth_headers(org_token),
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "NOT_CHECKED_IN"

    stored = db_session.scalar(select(Ticket).where(Ticket.ticket_code == ticket["ticket_code"]))
    assert stored.check_in_status == CheckInStatus.PENDING


def test_only_organizer_or_admin_can_check_in(client: TestClient, db_session):
    _, fan_token, event_id, ticket = _registered(client)
    admin_token, _ = make_admin(client, db_session, "admin@example.com")
    body = {"event_id": event_id, "ticket_code": ticket["ticket_code"]}

    assert client.post("/api/events/tickets/check-in", json=body, headers=auth_headers(fan_token)).status_code == 403
    assert client.post("/api/events/tickets/check-in", json=body, headers=auth_headers(admin_token)).status_code == 200


def test_ticket_must_belong_to_the_event(client: TestClient):
    org_token, _, _, ticket = _registered(client)
    other_event = create_event(client, org_token, room_number=8).json()["id"]

    resp = client.post(
        "/api/events/tickets/check-in",
        json={"event_id": other_event, "ticket_code": ticket["ticket_code"]},
        headers=auth_headers(org_token),
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "TICKET_NOT_FOUND"


def test_pending_ticket_of_ended_event_reads_as_no_show(client: TestClient, db_session):
    _, fan_token, event_id, _ = _registered(client)
    db_session.execute(
        update(Event).where(Event.id == uuid.UUID(event_id)).values(date=date(2025, 6, 1))
    )
    db_session.commit()

    mine = client.get("/api/events/my-tickets", headers=auth_headers(fan_token)).json()
    assert mine[0]["check_in_status"] == "noShow"

    # The stored value is untouched
    stored = db_session.scalar(select(Ticket))
    assert stored.check_in_status == CheckInStatus.PENDING


def test_effective_status_projection():
    event = Event(date=date(2030, 1, 1), start_time=time(10, 0), end_time=time(12, 0))
    ticket = Ticket(check_in_status=CheckInStatus.PENDING)

    assert effective_check_in_status(ticket, event, now=datetime(2030, 1, 1, 11, 0)) == CheckInStatus.PENDING
    assert effective_check_in_status(ticket, event, now=datetime(2030, 1, 1, 12, 1)) == CheckInStatus.NO_SHOW

    ticket.check_in_status = CheckInStatus.CHECKED_IN
    assert effective_check_in_status(ticket, event, now=datetime(2030, 1, 2)) == CheckInStatus.CHECKED_IN
