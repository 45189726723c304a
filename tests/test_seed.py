import pytest

from nomadnest.config import settings
from nomadnest.services.seed_service import seed_if_empty


class TestSeeding:
    @pytest.mark.asyncio
    async def test_seeds_empty_database_once(self, store):
        seeded = await seed_if_empty(store)
        assert seeded == {
            "users": 1,
            "categories": 4,
            "topics": 7,
            "posts": 2,
            "hotels": 2,
            "flights": 2,
            "guides": 2,
            "adPlacements": 3,
            "travelGroups": 3,
            "communityEvents": 2,
        }

        admin = await store.find_one("users", {"email": settings.admin_email})
        assert admin["role"] == "admin"
        travel = await store.find_one("categories", {"name": "Travel"})
        assert travel["count"] == 1
        beach = await store.find_one("topics", {"name": "Beach"})
        assert beach["count"] == 1

        again = await seed_if_empty(store)
        assert set(again.values()) == {0}
        assert await store.count("posts") == 2

    @pytest.mark.asyncio
    async def test_promotes_existing_admin_email(self, store):
        from nomadnest.services.auth_service import register_user

        user = await register_user(store, settings.admin_email, "whatever1", "Existing")
        seeded = await seed_if_empty(store)
        assert seeded["users"] == 0
        assert (await store.get("users", user["id"]))["role"] == "admin"

    @pytest.mark.asyncio
    async def test_seeded_admin_can_log_in(self, client, store):
        await seed_if_empty(store)
        r = await client.post(
            "/auth/login", json={"email": settings.admin_email, "password": settings.admin_password})
        assert r.status_code == 200
        assert r.json()["user"]["role"] == "admin"
