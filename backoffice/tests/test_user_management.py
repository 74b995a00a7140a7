"""
Integration tests for user management.

Reads are allowed for admins and managers, writes for admins only.
"""

import pytest

from backoffice.app.models.enums import UserRole
from backoffice.seed_users import normalize_email


NEW_USER = {"name": "Lucia", "email": "lucia@example.com", "password": "s3cret-pass", "role": "MANAGER"}


@pytest.mark.asyncio
async def test_admin_creates_user(client, admin_headers):
    response = await client.post("/api/users", json=NEW_USER, headers=admin_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["email"] == "lucia@example.com"
    assert data["role"] == "MANAGER"
    assert data["isActive"] is True
    assert "password" not in data
    assert "hashedPassword" not in data


@pytest.mark.asyncio
async def test_created_user_can_login(client, admin_headers):
    await client.post("/api/users", json=NEW_USER, headers=admin_headers)

    response = await client.post(
        "/api/auth/login",
        json={"email": "lucia@example.com", "password": "s3cret-pass"},
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(client, admin_headers):
    first = await client.post("/api/users", json=NEW_USER, headers=admin_headers)
    second = await client.post("/api/users", json={**NEW_USER, "name": "Other"}, headers=admin_headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["success"] is False


@pytest.mark.asyncio
async def test_invalid_role_rejected(client, admin_headers):
    response = await client.post("/api/users", json={**NEW_USER, "role": "SUPERUSER"}, headers=admin_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_manager_can_read_but_not_write(client, user_factory, headers_for):
    manager = await user_factory(email="manager@example.com", role=UserRole.MANAGER)
    headers = headers_for(manager)

    listing = await client.get("/api/users", headers=headers)
    create = await client.post("/api/users", json=NEW_USER, headers=headers)

    assert listing.status_code == 200
    assert [u["email"] for u in listing.json()["data"]] == ["manager@example.com"]
    assert create.status_code == 403


@pytest.mark.asyncio
async def test_plain_user_cannot_list(client, user_factory, headers_for):
    user = await user_factory(email="user@example.com", role=UserRole.USER)

    response = await client.get("/api/users", headers=headers_for(user))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_anonymous_request_rejected(client):
    response = await client.get("/api/users")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_user_by_id_and_alias(client, admin_headers, user_factory):
    user = await user_factory(email="lucia@example.com")

    canonical = await client.get(f"/api/users/{user.id}", headers=admin_headers)
    alias = await client.get(f"/api/user/{user.id}", headers=admin_headers)
    missing = await client.get("/api/users/does-not-exist", headers=admin_headers)

    assert canonical.status_code == 200
    assert canonical.json()["data"]["email"] == "lucia@example.com"
    assert alias.json() == canonical.json()
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_update_user(client, admin_headers, user_factory):
    user = await user_factory(email="lucia@example.com")

    response = await client.put(
        f"/api/users/{user.id}",
        json={"name": "Lucia F.", "role": "ADMIN", "isActive": False},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Lucia F."
    assert data["role"] == "ADMIN"
    assert data["isActive"] is False
    assert data["email"] == "lucia@example.com"


@pytest.mark.asyncio
async def test_update_password_is_rehashed(client, admin_headers, user_factory):
    user = await user_factory(email="lucia@example.com", password="old-password")

    await client.put(f"/api/users/{user.id}", json={"password": "new-password"}, headers=admin_headers)

    old = await client.post("/api/auth/login", json={"email": "lucia@example.com", "password": "old-password"})
    new = await client.post("/api/auth/login", json={"email": "lucia@example.com", "password": "new-password"})
    assert old.status_code == 401
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_update_to_taken_email_conflicts(client, admin_headers, user_factory):
    user = await user_factory(email="lucia@example.com")

    response = await client.put(
        f"/api/users/{user.id}",
        json={"email": "admin@example.com"},
        headers=admin_headers,
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_missing_user(client, admin_headers):
    response = await client.put("/api/users/nope", json={"name": "X"}, headers=admin_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_user(client, admin_headers, user_factory):
    user = await user_factory(email="lucia@example.com")

    deleted = await client.delete(f"/api/users/{user.id}", headers=admin_headers)
    again = await client.delete(f"/api/users/{user.id}", headers=admin_headers)

    assert deleted.status_code == 200
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_seeded_admin_email_matches_login_normalisation(client, user_factory):
    email = normalize_email("  Root@Logistics-Backoffice.COM ")
    await user_factory(email=email, password="bootstrap-pass", role=UserRole.ADMIN)

    response = await client.post(
        "/api/auth/login",
        json={"email": "Root@LOGISTICS-BACKOFFICE.com", "password": "bootstrap-pass"},
    )

    assert email == "Root@logistics-backoffice.com"
    assert response.status_code == 200
