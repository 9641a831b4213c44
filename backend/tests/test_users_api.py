import asyncio
import uuid

import pytest

from mass_translate.config.settings import settings
from mass_translate.services.user_service import user_service, UserServiceError

from tests.helpers import create_user, login, unique_email


def make_admin(sessionmaker, email="admin@example.com", password="admin123"):
    async def _create():
        async with sessionmaker() as session:
            return await user_service.create(session, email, password, is_admin=True)

    return asyncio.run(_create())


@pytest.fixture
def admin_headers(client, db):
    make_admin(db)
    return login(client, "admin@example.com", "admin123")


def test_non_admin_is_forbidden(client, db):
    email = unique_email()
    create_user(client, email)
    headers = login(client, email, "pass123")

    r = client.get("/api/users", headers=headers)
    assert r.status_code == 403
    assert client.get("/api/users").status_code == 401


def test_list_users_pagination(client, admin_headers):
    for i in range(3):
        create_user(client, f"user{i}@example.com")

    r = client.get("/api/users", headers=admin_headers)
    assert r.status_code == 200
    assert len(r.json()) == 4

    r = client.get("/api/users?limit=2", headers=admin_headers)
    assert len(r.json()) == 2

    r = client.get("/api/users?limit=2&offset=3", headers=admin_headers)
    assert len(r.json()) == 1


@pytest.mark.parametrize("query", ["limit=0", "limit=101", "limit=abc", "offset=-1", "offset=x"])
def test_bad_paging_values_fall_back_to_defaults(client, admin_headers, query):
    create_user(client, unique_email())
    r = client.get(f"/api/users?{query}", headers=admin_headers)
    assert r.status_code == 200
    assert len(r.json()) == 2


def test_get_user(client, admin_headers):
    created = create_user(client, "someone@example.com").json()

    r = client.get(f"/api/users/{created['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["email"] == "someone@example.com"

    r = client.get("/api/users/not-a-uuid", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "invalid ID"

    r = client.get(f"/api/users/{uuid.uuid4()}", headers=admin_headers)
    assert r.status_code == 404


def test_update_user(client, admin_headers):
    created = create_user(client, "promote@example.com").json()

    r = client.put(f"/api/users/{created['id']}", json={"is_admin": True}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["is_admin"] is True
    assert r.json()["email"] == "promote@example.com"

    # Promoted user can now manage accounts
    headers = login(client, "promote@example.com", "pass123")
    assert client.get("/api/users", headers=headers).status_code == 200


def test_update_password(client, admin_headers):
    created = create_user(client, "reset@example.com").json()

    r = client.put(f"/api/users/{created['id']}", json={"password": "newpass456"}, headers=admin_headers)
    assert r.status_code == 200
    login(client, "reset@example.com", "newpass456")


def test_update_to_taken_email(client, admin_headers):
    created = create_user(client, "first@example.com").json()

    r = client.put(f"/api/users/{created['id']}", json={"email": "admin@example.com"}, headers=admin_headers)
    assert r.status_code == 409


def test_delete_user(client, admin_headers):
    created = create_user(client, "gone@example.com").json()

    r = client.delete(f"/api/users/{created['id']}", headers=admin_headers)
    assert r.status_code == 204
    assert r.content == b""

    assert client.get(f"/api/users/{created['id']}", headers=admin_headers).status_code == 404
    assert client.delete(f"/api/users/{created['id']}", headers=admin_headers).status_code == 404


def test_ensure_admin_is_skipped_without_email(db, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAIL", "None")

    async def _run():
        async with db() as session:
            return await user_service.ensure_admin(session)

    assert asyncio.run(_run()) is None


def test_ensure_admin_creates_once(db, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAIL", "root@example.com")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "rootpass")

    async def _run():
        async with db() as session:
            first = await user_service.ensure_admin(session)
            second = await user_service.ensure_admin(session)
            return first, second

    first, second = asyncio.run(_run())
    assert first.is_admin is True
    assert second.id == first.id


def test_ensure_admin_needs_password(db, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAIL", "root@example.com")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")

    async def _run():
        async with db() as session:
            await user_service.ensure_admin(session)

    with pytest.raises(UserServiceError):
        asyncio.run(_run())
