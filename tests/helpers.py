from __future__ import annotations

from datetime import date, timedelta

from fastapi.testclient import TestClient
from sqlalchemy import update

from eventhub.models import User
from eventhub.models.user import SpeakerStatus, UserRole

PASSWORD = "StrongPass123"


def auth_headers(token: str) -> dict[str, str]:
    return {"x-auth-token": token}


def register(client: TestClient, email: str, username: str | None = None, password: str = PASSWORD):
    return client.post(
        "/api/auth/register",
        json={"username": username or email.split("@")[0], "email": email, "password": password},
    )


def login(client: TestClient, email: str, password: str = PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def make_user(client: TestClient, email: str) -> tuple[str, str]:
    body = register(client, email).json()
    return body["token"], body["user"]["id"]


def make_admin(client: TestClient, db_session, email: str) -> tuple[str, str]:
    token, user_id = make_user(client, email)
    db_session.execute(update(User).where(User.email == email).values(role=UserRole.ADMIN))
    db_session.commit()
    return token, user_id


def make_speaker(client: TestClient, db_session, email: str) -> tuple[str, str]:
    token, user_id = make_user(client, email)
    db_session.execute(
        update(User)
        .where(User.email == email)
        .values(speaker_status=SpeakerStatus.APPROVED, speaker_bio="Talks", speaker_topics=["python"])
    )
    db_session.commit()
    return token, user_id


def future_date(days: int = 30) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def event_payload(**overrides) -> dict:
    payload = {
        "title": "Python Meetup",
        "date": future_date(),
        "start_time": "10:00",
        "end_time": "12:00",
        "location": "Main Hall",
        "category": "Technology",
        "description": "Monthly meetup",
        "room_number": 3,
        "is_free": True,
    }
    payload.update(overrides)
    return payload


def create_event(client: TestClient, token: str, **overrides):
    return client.post("/api/events", json=event_payload(**overrides), headers=auth_headers(token))


def paid_event(client: TestClient, token: str, amount: int = 100000, currency: str = "VND", **overrides):
    return create_event(
        client,
        token,
        is_free=False,
        price={"amount": amount, "currency": currency},
        **overrides,
    )
