from conftest import auth_headers, make_user


def change_role(client, actor, user, role):
    return client.patch(
        f"/users/{user.id}/role",
        json={"role": role},
        headers=auth_headers(actor),
    )


def test_list_users_requires_admin(client, owner, staff):
    assert client.get("/users", headers=auth_headers(staff)).status_code == 403

    response = client.get("/users", headers=auth_headers(owner))
    assert response.status_code == 200
    assert {u["email"] for u in response.json()} == {"owner@example.com", "staff@example.com"}


def test_owner_grants_admin(client, owner, staff):
    response = change_role(client, owner, staff, "admin")

    assert response.status_code == 200
    assert response.json()["role"] == "admin"


def test_admin_cannot_grant_admin(client, owner, admin, staff):
    response = change_role(client, admin, staff, "admin")

    assert response.status_code == 403
    assert response.json()["detail"] == "Only the owner can grant or revoke admin"


def test_admin_cannot_demote_another_admin(client, owner, admin, db):
    other = make_user(db, "other-admin@example.com", role="admin")
    assert change_role(client, admin, other, "user").status_code == 403


def test_owner_role_is_fixed(client, owner, admin):
    response = change_role(client, admin, owner, "blocked")

    assert response.status_code == 403
    assert response.json()["detail"] == "The owner's role cannot be changed"


def test_nobody_changes_their_own_role(client, owner):
    response = change_role(client, owner, owner, "user")

    assert response.status_code == 400


def test_blocked_user_loses_access_immediately(client, owner, admin, staff):
    headers = auth_headers(staff)
    assert client.get("/auth/me", headers=headers).status_code == 200

    response = change_role(client, admin, staff, "blocked")
    assert response.status_code == 200

    # Same token, role re-read from the database
    assert client.get("/auth/me", headers=headers).status_code == 403


def test_owner_cannot_be_granted_through_the_api(client, owner, staff):
    assert change_role(client, owner, staff, "owner").status_code == 422


def test_unknown_user(client, owner):
    response = client.patch("/users/999/role", json={"role": "user"}, headers=auth_headers(owner))
    assert response.status_code == 404
