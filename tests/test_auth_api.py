from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

from conftest import auth_headers, make_user
from app.core.email import EmailDeliveryError


def signup(client, email, password="S3cure-pass!"):
    return client.post(
        "/auth/signup",
        json={"email": email, "password": password, "full_name": "Test User"},
    )


def login(client, email, password="S3cure-pass!"):
    return client.post("/auth/login", data={"username": email, "password": password})


# --------------------------------------------------------------------
# SIGNUP
# --------------------------------------------------------------------
def test_first_account_becomes_owner(client):
    first = signup(client, "first@example.com")
    second = signup(client, "second@example.com")

    assert first.status_code == 201
    assert first.json()["role"] == "owner"
    assert second.json()["role"] == "user"


def test_signup_rejects_weak_passwords(client):
    assert signup(client, "a@example.com", "Password123").status_code == 400
    assert signup(client, "b@example.com", "98765432").status_code == 400


def test_signup_rejects_duplicate_email(client):
    signup(client, "dup@example.com")
    assert signup(client, "dup@example.com").status_code == 409


# --------------------------------------------------------------------
# LOGIN
# --------------------------------------------------------------------
def test_login_and_me(client):
    signup(client, "me@example.com")

    response = login(client, "me@example.com")
    assert response.status_code == 200
    assert response.json()["role"] == "owner"
    token = response.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "me@example.com"


def test_login_with_wrong_password(client):
    signup(client, "me@example.com")
    assert login(client, "me@example.com", "not-the-password").status_code == 401


def test_blocked_account_cannot_login(client, db):
    make_user(db, "blocked@example.com", role="blocked")

    response = login(client, "blocked@example.com")
    assert response.status_code == 403


def test_garbage_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


# --------------------------------------------------------------------
# PASSWORD RESET
# --------------------------------------------------------------------
def test_password_reset_flow(client, db):
    make_user(db, "forgetful@example.com")

    with patch("app.routers.auth.send_password_reset_email") as send:
        response = client.post("/auth/forgot-password", json={"email": "forgetful@example.com"})

    assert response.status_code == 200
    to_email, reset_link = send.call_args.args
    assert to_email == "forgetful@example.com"
    token = parse_qs(urlparse(reset_link).query)["token"][0]

    response = client.post(
        "/auth/reset-password",
        json={"token": token, "new_password": "Another-pass-42"},
    )
    assert response.status_code == 200

    assert login(client, "forgetful@example.com", "Another-pass-42").status_code == 200
    assert login(client, "forgetful@example.com").status_code == 401

    # Links work once
    response = client.post(
        "/auth/reset-password",
        json={"token": token, "new_password": "Third-pass-99"},
    )
    assert response.status_code == 400


def test_forgot_password_does_not_reveal_accounts(client):
    with patch("app.routers.auth.send_password_reset_email") as send:
        response = client.post("/auth/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    send.assert_not_called()


def test_forgot_password_survives_email_failure(client, db):
    make_user(db, "forgetful@example.com")

    with patch(
        "app.routers.auth.send_password_reset_email",
        side_effect=EmailDeliveryError("Email sending failed"),
    ):
        response = client.post("/auth/forgot-password", json={"email": "forgetful@example.com"})

    assert response.status_code == 200


def test_reset_with_invalid_token(client):
    response = client.post(
        "/auth/reset-password",
        json={"token": "made-up", "new_password": "Another-pass-42"},
    )
    assert response.status_code == 400


def test_session_token_cannot_reset_password(client, db):
    user = make_user(db, "forgetful@example.com")
    session_token = auth_headers(user)["Authorization"].split()[1]

    response = client.post(
        "/auth/reset-password",
        json={"token": session_token, "new_password": "Another-pass-42"},
    )
    assert response.status_code == 400
