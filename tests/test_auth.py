import pytest

from conftest import register


class TestRegistration:
    """Account creation and sign-in."""

    @pytest.mark.asyncio
    async def test_register_returns_token_and_profile(self, client):
        data = await register(client, "Jane@Example.com", "Jane")
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        user = data["user"]
        assert user["email"] == "jane@example.com"
        assert user["role"] == "user"
        assert user["status"] == "active"
        assert user["experienceLevel"] == "Newbie"
        assert "passwordHash" not in user

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, client):
        await register(client, "dup@example.com")
        r = await client.post(
            "/auth/register",
            json={"email": "DUP@example.com", "password": "secret123", "name": "Again"},
        )
        assert r.status_code == 409
        assert r.json()["detail"] == "An account with this email already exists"

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, client):
        r = await client.post(
            "/auth/register",
            json={"email": "short@example.com", "password": "123", "name": "Short"},
        )
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, client):
        r = await client.post(
            "/auth/register",
            json={"email": "not-an-email", "password": "secret123", "name": "Bad"},
        )
        assert r.status_code == 422


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_and_me(self, client):
        await register(client, "login@example.com", "Login User", password="hunter22")
        r = await client.post("/auth/login", json={"email": "login@example.com", "password": "hunter22"})
        assert r.status_code == 200
        token = r.json()["access_token"]

        me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["name"] == "Login User"
        assert me.json()["lastActive"]

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        await register(client, "wrong@example.com")
        r = await client.post("/auth/login", json={"email": "wrong@example.com", "password": "nope-nope"})
        assert r.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_email(self, client):
        r = await client.post("/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
        assert r.status_code == 401

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        r = await client.get("/auth/me")
        assert r.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        r = await client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_password_hash_roundtrip():
    from nomadnest.services.auth_service import check_password, hash_password

    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert check_password("correct horse", hashed)
    assert not check_password("wrong", hashed)
    assert not check_password("anything", None)
