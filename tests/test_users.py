import pytest


def create_user(client, name="Marta", email="marta@example.com", role="STAFF", **extra):
    response = client.post("/api/users", json={"name": name, "email": email, "role": role, **extra})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def super_admin(client):
    return create_user(client, name="Root", email="root@example.com", role="SUPER_ADMIN")


def test_create_user(client):
    user = create_user(client, name="  Marta ", email="Marta@Example.com")

    assert user["name"] == "Marta"
    assert user["email"] == "marta@example.com"
    assert user["role"] == "STAFF"
    assert user["is_active"] is True


def test_create_user_duplicate_email(client):
    create_user(client)

    response = client.post("/api/users", json={"name": "Otra", "email": "marta@example.com"})

    assert response.status_code == 409


def test_create_user_unknown_role(client):
    response = client.post("/api/users", json={"name": "X", "email": "x@example.com", "role": "GOD"})

    assert response.status_code == 422


def test_list_users_filters(client, super_admin):
    create_user(client, name="Marta", email="marta@example.com", role="STAFF")
    create_user(client, name="Pablo", email="pablo@example.com", role="MANAGER", is_active=False)

    staff = client.get("/api/users", params={"role": "STAFF"}).json()
    inactive = client.get("/api/users", params={"is_active": False}).json()
    search = client.get("/api/users", params={"search": "pab"}).json()

    assert [u["email"] for u in staff["users"]] == ["marta@example.com"]
    assert [u["email"] for u in inactive["users"]] == ["pablo@example.com"]
    assert [u["name"] for u in search["users"]] == ["Pablo"]
    assert client.get("/api/users").json()["pagination"]["total"] == 3


def test_update_user_role(client):
    user = create_user(client)

    response = client.patch(f"/api/users/{user['id']}", json={"role": "MANAGER"})

    assert response.status_code == 200
    assert response.json()["role"] == "MANAGER"


def test_last_super_admin_cannot_be_demoted(client, super_admin):
    response = client.patch(f"/api/users/{super_admin['id']}", json={"role": "ADMIN"})

    assert response.status_code == 400
    assert response.json()["detail"] == "The last active super admin cannot be demoted or deactivated"


def test_last_super_admin_cannot_be_deleted(client, super_admin):
    assert client.delete(f"/api/users/{super_admin['id']}").status_code == 400


def test_super_admin_can_be_demoted_when_another_exists(client, super_admin):
    create_user(client, name="Second", email="second@example.com", role="SUPER_ADMIN")

    response = client.patch(f"/api/users/{super_admin['id']}", json={"role": "ADMIN"})

    assert response.status_code == 200


def test_delete_is_soft(client):
    user = create_user(client)

    response = client.delete(f"/api/users/{user['id']}")

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get(f"/api/users/{user['id']}").json()["is_active"] is False


def test_user_stats(client, super_admin):
    create_user(client)
    create_user(client, name="Pablo", email="pablo@example.com", is_active=False)

    stats = client.get("/api/users/stats").json()

    assert stats["total"] == 3
    assert stats["active"] == 2
    assert stats["inactive"] == 1
    assert stats["by_role"]["STAFF"] == {"total": 2, "active": 1}
    assert stats["by_role"]["SUPER_ADMIN"] == {"total": 1, "active": 1}


def test_user_not_found(client):
    assert client.get("/api/users/999").status_code == 404
