"""Tests for /api/auth register, login and me."""
from unittest.mock import AsyncMock, MagicMock, patch

from auth import decode_access_token, hash_password


def _db(existing_user=None):
    db = MagicMock()
    db.users.find_one = AsyncMock(return_value=existing_user)
    db.users.insert_one = AsyncMock()
    db.users.update_one = AsyncMock()
    return db


def test_register_creates_user_and_returns_token(client):
    db = _db()

    with patch("routes.auth.database.get_db", return_value=db), \
         patch("routes.auth.create_audit_log", new_callable=AsyncMock):
        response = client.post(
            "/api/auth/register",
            json={"email": "Owner@Agencydesk.io", "password": "Sup3rSecret", "full_name": "Sam Owner"},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "owner@agencydesk.io"
    assert "password_hash" not in data["user"]
    payload = decode_access_token(data["access_token"])
    assert payload["user_id"] == data["user"]["user_id"]

    stored = db.users.insert_one.call_args.args[0]
    assert stored["password_hash"] != "Sup3rSecret"
    assert stored["status"] == "ACTIVE"


def test_register_rejects_weak_password(client):
    with patch("routes.auth.database.get_db", return_value=_db()):
        response = client.post("/api/auth/register", json={"email": "owner@agencydesk.io", "password": "short"})

    assert response.status_code == 400


def test_register_rejects_duplicate_email(client):
    with patch("routes.auth.database.get_db", return_value=_db(existing_user={"user_id": "u1"})):
        response = client.post("/api/auth/register", json={"email": "owner@agencydesk.io", "password": "Sup3rSecret"})

    assert response.status_code == 409


def test_login_with_wrong_password_is_401(client):
    user = {
        "user_id": "u1",
        "email": "owner@agencydesk.io",
        "password_hash": hash_password("Sup3rSecret"),
        "status": "ACTIVE",
    }

    with patch("routes.auth.database.get_db", return_value=_db(existing_user=user)), \
         patch("routes.auth.create_audit_log", new_callable=AsyncMock):
        response = client.post("/api/auth/login", json={"email": "owner@agencydesk.io", "password": "Wrong1234"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_returns_token(client):
    user = {
        "user_id": "u1",
        "email": "owner@agencydesk.io",
        "password_hash": hash_password("Sup3rSecret"),
        "status": "ACTIVE",
    }
    db = _db(existing_user=user)

    with patch("routes.auth.database.get_db", return_value=db), \
         patch("routes.auth.create_audit_log", new_callable=AsyncMock):
        response = client.post("/api/auth/login", json={"email": "owner@agencydesk.io", "password": "Sup3rSecret"})

    assert response.status_code == 200
    assert decode_access_token(response.json()["access_token"])["user_id"] == "u1"
    db.users.update_one.assert_awaited_once()


def test_me_returns_current_user(client, owner_headers):
    db = _db(existing_user={"user_id": "owner-1", "email": "owner@agencydesk.io", "status": "ACTIVE"})

    with patch("routes.auth.database.get_db", return_value=db):
        response = client.get("/api/auth/me", headers=owner_headers)

    assert response.status_code == 200
    assert response.json()["user_id"] == "owner-1"
    assert db.users.find_one.call_args.args[1]["password_hash"] == 0


def test_me_with_bad_token_is_401(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
