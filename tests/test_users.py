from __future__ import annotations

from fastapi.testclient import TestClient

from tests.helpers import auth_headers, make_admin, make_user


def test_update_me(client: TestClient):
    token, _ = make_user(client, "me@example.com")
    make_user(client, "taken@example.com")

    resp = client.put("/api/users/me", json={"username": " renamed "}, headers=auth_headers(token))
    assert resp.status_code == 200
    assert resp.json()["username"] == "renamed"
    assert resp.json()["email"] == "me@example.com"

    clash = client.put("/api/users/me", json={"email": "TAKEN@example.com"}, headers=auth_headers(token))
    assert clash.status_code == 409
    assert clash.json()["detail"]["code"] == "EMAIL_IN_USE"

    moved = client.put("/api/users/me", json={"email": "New@Example.com"}, headers=auth_headers(token))
    assert moved.json()["email"] == "new@example.com"


def test_user_details_by_ids(client: TestClient):
    token, first_id = make_user(client, "first@example.com")
    _, second_id = make_user(client, "second@example.com")
    make_user(client, "third@example.com")

    resp = client.get("/api/users/details", params={"ids": f"{first_id},{second_id}"}, headers=auth_headers(token))
    assert resp.status_code == 200
    assert {u["email"] for u in resp.json()} == {"first@example.com", "second@example.com"}

    bad = client.get("/api/users/details", params={"ids": "not-a-uuid"}, headers=auth_headers(token))
    assert bad.status_code == 400


def test_profile_visibility(client: TestClient, db_session):
    admin_token, _ = make_admin(client, db_session, "admin@example.com")
    viewer_token, _ = make_user(client, "viewer@example.com")
    _, target_id = make_user(client, "target@example.com")

    public = client.get(f"/api/users/{target_id}/profile", headers=auth_headers(viewer_token)).json()
    assert public["username"] == "target"
    assert "email" not in public

    full = client.get(f"/api/users/{target_id}/profile", headers=auth_headers(admin_token)).json()
    assert full["email"] == "target@example.com"
    assert full["role"] == "user"
