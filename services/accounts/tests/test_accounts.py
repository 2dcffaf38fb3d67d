"""Tests for registration, login and the admin user listing."""

import pytest

from packages.common.storage import USERS


def _registration(direction_id: str, **overrides) -> dict:
    body = {
        "firstName": "Alice",
        "lastName": "Karimova",
        "direction": direction_id,
        "phone": "+998901112233",
        "telegram": "@alice",
        "login": "alice",
        "password": "wonderland",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_register_then_login(client, direction, store) -> None:
    r = await client.post("/api/register", json=_registration(direction.id))
    assert r.status_code == 200
    assert r.json()["success"] is True

    saved = store.load(USERS)[0]
    assert saved["password"] != "wonderland"
    assert saved["directionName"] == "Dasturlash"
    assert saved["isAdmin"] is False

    r = await client.post("/api/login", json={"login": "alice", "password": "wonderland"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["user"] == {
        "id": saved["id"],
        "firstName": "Alice",
        "lastName": "Karimova",
        "direction": direction.id,
        "directionName": "Dasturlash",
        "isAdmin": False,
    }

    tests = await client.get("/api/tests", headers={"Authorization": f"Bearer {body['token']}"})
    assert tests.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_login_is_rejected(client, direction) -> None:
    assert (await client.post("/api/register", json=_registration(direction.id))).status_code == 200
    r = await client.post("/api/register", json=_registration(direction.id, telegram="@other"))
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "This login is taken"}


@pytest.mark.asyncio
async def test_duplicate_telegram_is_rejected(client, direction) -> None:
    assert (await client.post("/api/register", json=_registration(direction.id))).status_code == 200
    r = await client.post("/api/register", json=_registration(direction.id, login="alice2"))
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "This telegram username is taken"}


@pytest.mark.asyncio
async def test_register_validates_fields_and_direction(client, direction) -> None:
    r = await client.post("/api/register", json=_registration(direction.id, phone=""))
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "All fields are required"}
    r = await client.post("/api/register", json=_registration("missing"))
    assert r.status_code == 400
    assert r.json()["message"] == "Unknown direction"


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials(client, learner) -> None:
    wrong = await client.post("/api/login", json={"login": "alice", "password": "nope"})
    unknown = await client.post("/api/login", json={"login": "bob", "password": "wonderland"})
    assert wrong.status_code == unknown.status_code == 400
    assert wrong.json() == unknown.json() == {"success": False, "message": "Invalid login or password"}


@pytest.mark.asyncio
async def test_login_without_password_names_the_missing_fields(client) -> None:
    r = await client.post("/api/login", json={"login": "alice"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Login and password are required"}


@pytest.mark.asyncio
async def test_admin_login_carries_privilege(client, admin) -> None:
    r = await client.post("/api/login", json={"login": "admin", "password": "admin-pass"})
    assert r.status_code == 200
    token = r.json()["token"]
    users = await client.get("/api/admin/users", headers={"Authorization": f"Bearer {token}"})
    assert users.status_code == 200


@pytest.mark.asyncio
async def test_admin_user_listing_hides_admins_and_passwords(client, learner, admin_headers) -> None:
    r = await client.get("/api/admin/users", headers=admin_headers)
    assert r.status_code == 200
    users = r.json()
    assert [u["login"] for u in users] == ["alice"]
    assert "password" not in users[0]
    assert users[0]["telegram"] == "@alice"
