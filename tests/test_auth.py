from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy import select, update

from eventhub.auth.tokens import hash_reset_token
from eventhub.models import User
from tests.helpers import auth_headers, login, make_admin, make_user, register


def test_register_then_login_works(client: TestClient):
    resp = register(client, "reg1@example.com", username="reg1")
    assert resp.status_code == 201
    body = resp.json()
    assert body["token"]
    assert body["user"]["role"] == "user"

    resp2 = login(client, "reg1@example.com")
    assert resp2.status_code == 200
    assert resp2.json()["user"]["email"] == "reg1@example.com"


def test_register_duplicate_email_conflicts(client: TestClient):
    register(client, "dup@example.com")
    resp = register(client, "DUP@example.com")
    assert resp.status_code == 409


def test_login_with_wrong_password_is_rejected(client: TestClient):
    register(client, "wrong@example.com")
    resp = login(client, "wrong@example.com", password="not-the-password")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "invalid credentials"


def test_missing_or_bad_token_is_unauthorized(client: TestClient):
    assert client.get("/api/users/me").status_code == 401
    assert client.get("/api/users/me", headers=auth_headers("garbage")).status_code == 401


def test_bearer_header_is_accepted(client: TestClient):
    token, _ = make_user(client, "bearer@example.com")
    resp = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == "bearer@example.com"


def test_change_password(client: TestClient):
    token, _ = make_user(client, "change@example.com")

    bad = client.put(
        "/api/auth/change-password",
        json={"current_password": "nope-nope", "new_password": "NewPass12345"},
        headers=auth_headers(token),
    )
    assert bad.status_code == 400

    ok = client.put(
        "/api/auth/change-password",
        json={"current_password": "StrongPass123", "new_password": "NewPass12345"},
        headers=auth_headers(token),
    )
    assert ok.status_code == 200
    assert login(client, "change@example.com", password="NewPass12345").status_code == 200
    assert login(client, "change@example.com").status_code == 400


def test_forgot_password_is_generic_for_unknown_email(client: TestClient, sent_emails):
    resp = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert resp.status_code == 200
    assert sent_emails == []


def test_forgot_and_reset_password(client: TestClient, db_session, sent_emails):
    make_user(client, "forgot@example.com")

    resp = client.post("/api/auth/forgot-password", json={"email": "forgot@example.com"})
    assert resp.status_code == 200
    assert len(sent_emails) == 1
    link = sent_emails[0]["text"].split("Reset your password here: ")[1].split()[0]
    raw_token = link.rsplit("/", 1)[1]

    user = db_session.scalar(select(User).where(User.email == "forgot@example.com"))
    assert user.password_reset_token_hash == hash_reset_token(raw_token)

    reset = client.put(
        f"/api/auth/reset-password/{raw_token}", json={"new_password": "Fresh123456"}
    )
    assert reset.status_code == 200
    assert login(client, "forgot@example.com", password="Fresh123456").status_code == 200

    # Tokens are single use
    again = client.put(
        f"/api/auth/reset-password/{raw_token}", json={"new_password": "Other123456"}
    )
    assert again.status_code == 400


def test_expired_reset_token_is_rejected(client: TestClient, db_session):
    make_user(client, "expired@example.com")
    db_session.execute(
        update(User)
        .where(User.email == "expired@example.com")
        .values(
            password_reset_token_hash=hash_reset_token("stale-token"),
            password_reset_expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
    )
    db_session.commit()

    resp = client.put("/api/auth/reset-password/stale-token", json={"new_password": "Fresh123456"})
    assert resp.status_code == 400


def test_admin_routes_require_admin_role(client: TestClient, db_session):
    user_token, _ = make_user(client, "plain@example.com")
    admin_token, _ = make_admin(client, db_session, "admin@example.com")

    assert client.get("/api/discounts", headers=auth_headers(user_token)).status_code == 403
    assert client.get("/api/discounts", headers=auth_headers(admin_token)).status_code == 200
    assert (
        client.get("/api/users/speaker-requests", headers=auth_headers(user_token)).status_code
        == 403
    )


def test_request_validation_errors_are_400(client: TestClient):
    resp = client.post("/api/auth/register", json={"email": "not-an-email"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"
