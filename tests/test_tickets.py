from __future__ import annotations

import base64
import uuid

from fastapi.testclient import TestClient
from sqlalchemy import func, select, update

from eventhub.models import Event, Ticket
from eventhub.models.event import EventStatus
from eventhub.services.qr_codes import build_ticket_payload
from tests.helpers import auth_headers, create_event, make_user, paid_event


def _set_capacity(db_session, event_id: str, capacity: int) -> None:
    db_session.execute(update(Event).where(Event.id == uuid.UUID(event_id)).values(capacity=capacity))
    db_session.commit()


def test_free_event_fills_up(client: TestClient, db_session):
    org_token, _ = make_user(client, "org@example.com")
    a_token, a_id = make_user(client, "a@example.com")
    b_token, _ = make_user(client, "b@example.com")
    event_id = create_event(client, org_token).json()["id"]
    _set_capacity(db_session, event_id, 1)

    first = client.post(f"/api/events/{event_id}/register", headers=auth_headers(a_token))
    assert first.status_code == 201
    ticket = first.json()
    assert ticket["check_in_status"] == "pending"
    assert ticket["user_id"] == a_id
    assert ticket["is_free_ticket"] is True
    assert ticket["is_paid"] is False
    assert str(uuid.UUID(ticket["ticket_code"])) == ticket["ticket_code"]

    second = client.post(f"/api/events/{event_id}/register", headers=auth_headers(b_token))
    assert second.status_code == 409
    assert second.json()["detail"] == {"code": "EVENT_FULL", "message": "event is full"}


def test_duplicate_registration_is_rejected(client: TestClient, db_session):
    org_token, _ = make_user(client, "org@example.com")
    fan_token, _ = make_user(client, "fan@example.com")
    event_id = create_event(client, org_token).json()["id"]

    assert client.post(f"/api/events/{event_id}/register", headers=auth_headers(fan_token)).status_code == 201
    again = client.post(f"/api/events/{event_id}/register", headers=auth_headers(fan_token))
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "ALREADY_REGISTERED"

    count = db_session.scalar(select(func.count()).select_from(Ticket))
    assert count == 1


def test_ticket_qr_code_is_png_data_url(client: TestClient):
    org_token, _ = make_user(client, "org@example.com")
    fan_token, fan_id = make_user(client, "fan@example.com")
    event_id = create_event(client, org_token).json()["id"]

    ticket = client.post(f"/api/events/{event_id}/register", headers=auth_headers(fan_token)).json()
    prefix = "data:image/png;base64,"
    assert ticket["qr_code_url"].startswith(prefix)
    png = base64.b64decode(ticket["qr_code_url"][len(prefix):])
    assert png.startswith(b"\x89PNG")


def test_qr_payload_contents():
    payload = build_ticket_payload("code-1", "event-1", "user-1")
    assert payload == "Ticket code: code-1\nEvent ID: event-1\nUser ID: user-1"
    assert build_ticket_payload("c", "e", "u", paid=True).endswith("\nPaid: yes")


def test_event_type_must_match_the_call(client: TestClient):
    org_token, _ = make_user(client, "org@example.com")
    fan_token, _ = make_user(client, "fan@example.com")
    free_id = create_event(client, org_token).json()["id"]
    paid_id = paid_event(client, org_token, room_number=5).json()["id"]

    wrong_free = client.post(f"/api/events/{free_id}/purchase-ticket", headers=auth_headers(fan_token))
    assert wrong_free.status_code == 400
    assert wrong_free.json()["detail"]["code"] == "EVENT_NOT_PAID"

    wrong_paid = client.post(f"/api/events/{paid_id}/register", headers=auth_headers(fan_token))
    assert wrong_paid.status_code == 400
    assert wrong_paid.json()["detail"]["code"] == "EVENT_NOT_FREE"


def test_purchase_records_price(client: TestClient, sent_emails):
    org_token, _ = make_user(client, "org@example.com")
    fan_token, _ = make_user(client, "fan@example.com")
    event_id = paid_event(client, org_token, amount=150000).json()["id"]

    resp = client.post(f"/api/events/{event_id}/purchase-ticket", headers=auth_headers(fan_token))
    assert resp.status_code == 201
    body = resp.json()
    assert body["is_paid"] is True
    assert body["price_paid"] == 150000.0
    assert body["currency"] == "vnd"
    assert body["discount_code"] is None

    assert [mail["to"] for mail in sent_emails] == ["fan@example.com"]
    assert body["ticket_code"] in sent_emails[0]["text"]
    assert body["qr_code_url"] in sent_emails[0]["html"]


def test_cannot_register_for_cancelled_or_ended_events(client: TestClient, db_session):
    org_token, _ = make_user(client, "org@example.com")
    fan_token, _ = make_user(client, "fan@example.com")
    cancelled_id = create_event(client, org_token).json()["id"]
    ended_id = create_event(client, org_token, date="2025-06-01").json()["id"]
    db_session.execute(
        update(Event).where(Event.id == uuid.UUID(cancelled_id)).values(status=EventStatus.CANCELLED)
    )
    db_session.commit()

    cancelled = client.post(f"/api/events/{cancelled_id}/register", headers=auth_headers(fan_token))
    assert cancelled.status_code == 409
    assert cancelled.json()["detail"]["code"] == "EVENT_NOT_ACTIVE"

    ended = client.post(f"/api/events/{ended_id}/register", headers=auth_headers(fan_token))
    assert ended.status_code == 409
    assert ended.json()["detail"]["code"] == "EVENT_ENDED"


def test_unregister_frees_the_seat(client: TestClient, db_session):
    org_token, _ = make_user(client, "org@example.com")
    a_token, _ = make_user(client, "a@example.com")
    b_token, _ = make_user(client, "b@example.com")
    event_id = create_event(client, org_token).json()["id"]
    _set_capacity(db_session, event_id, 1)

    client.post(f"/api/events/{event_id}/register", headers=auth_headers(a_token))
    assert client.post(f"/api/events/{event_id}/unregister", headers=auth_headers(a_token)).status_code == 200
    assert client.post(f"/api/events/{event_id}/unregister", headers=auth_headers(a_token)).status_code == 404
    assert client.post(f"/api/events/{event_id}/register", headers=auth_headers(b_token)).status_code == 201


def test_my_tickets_and_event_tickets(client: TestClient):
    org_token, _ = make_user(client, "org@example.com")
    fan_token, _ = make_user(client, "fan@example.com")
    event_id = create_event(client, org_token, title="Launch").json()["id"]
    client.post(f"/api/events/{event_id}/register", headers=auth_headers(fan_token))

    mine = client.get("/api/events/my-tickets", headers=auth_headers(fan_token))
    assert mine.status_code == 200
    assert [t["event"]["title"] for t in mine.json()] == ["Launch"]

    assert client.get(f"/api/events/{event_id}/tickets", headers=auth_headers(fan_token)).status_code == 403

    listing = client.get(f"/api/events/{event_id}/tickets", headers=auth_headers(org_token))
    assert listing.status_code == 200
    body = listing.json()
    assert body["capacity"] == 300
    assert [t["attendee"]["email"] for t in body["tickets"]] == ["fan@example.com"]

    detail = client.get(f"/api/events/{event_id}").json()
    assert detail["tickets_sold"] == 1


def test_unknown_event_is_404(client: TestClient):
    fan_token, _ = make_user(client, "fan@example.com")
    resp = client.post(f"/api/events/{uuid.uuid4()}/register", headers=auth_headers(fan_token))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "EVENT_NOT_FOUND"
