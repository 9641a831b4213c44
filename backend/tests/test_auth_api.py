import asyncio

from sqlalchemy import delete

from mass_translate.models import User

from tests.helpers import create_user, login, unique_email


def test_register_login_and_me(client, db):
    email = unique_email()

    r = create_user(client, email, "password123")
    assert r.status_code == 201
    data = r.json()
    assert data["email"] == email
    assert data["is_admin"] is False
    assert "hashed_password" not in data

    r2 = client.post("/api/auth/login", json={"email": email, "password": "password123"})
    assert r2.status_code == 200
    data2 = r2.json()
    assert data2["id"] == data["id"]
    assert data2["token"]

    headers = {"Authorization": f"Bearer {data2['token']}"}
    r3 = client.get("/api/auth/me", headers=headers)
    assert r3.status_code == 200
    assert r3.json()["email"] == email


def test_duplicate_email_is_rejected(client, db):
    email = unique_email()
    assert create_user(client, email).status_code == 201

    r = create_user(client, email)
    assert r.status_code == 409
    assert r.json()["detail"] == "Email already in use"


def test_short_password_is_rejected(client, db):
    r = create_user(client, unique_email(), "123")
    assert r.status_code == 422


def test_wrong_password(client, db):
    email = unique_email()
    create_user(client, email, "password123")

    r = client.post("/api/auth/login", json={"email": email, "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Incorrect email or password"


def test_unknown_email(client, db):
    r = client.post("/api/auth/login", json={"email": unique_email(), "password": "password123"})
    assert r.status_code == 401


def test_me_requires_a_valid_token(client, db):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Basic abc"}).status_code == 401


def test_token_for_deleted_user_is_rejected(client, db):
    email = unique_email()
    create_user(client, email)
    headers = login(client, email, "pass123")

    async def _drop():
        async with db() as session:
            await session.execute(delete(User).where(User.email == email))
            await session.commit()

    asyncio.run(_drop())

    r = client.get("/api/auth/me", headers=headers)
    assert r.status_code == 401
    assert r.json()["detail"] == "User not found"
