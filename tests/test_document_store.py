"""Document store behaviour against the SQL backend."""
import pytest

from nomadnest.exceptions import DocumentNotFoundError, DuplicateDocumentError


class TestDocumentStore:
    @pytest.mark.asyncio
    async def test_insert_assigns_identity_and_timestamps(self, store):
        doc = await store.insert_one("places", {"name": "Kyoto"})
        assert doc["id"] == doc["_id"]
        assert doc["createdAt"] == doc["updatedAt"]
        assert await store.get("places", doc["id"]) == doc

    @pytest.mark.asyncio
    async def test_explicit_id_and_duplicates(self, store):
        await store.insert_one("places", {"id": "kyoto", "name": "Kyoto"})
        with pytest.raises(DuplicateDocumentError):
            await store.insert_one("places", {"id": "kyoto", "name": "Again"})

    @pytest.mark.asyncio
    async def test_collections_are_isolated(self, store):
        await store.insert_one("a", {"id": "same"})
        await store.insert_one("b", {"id": "same"})
        assert await store.count("a") == 1
        assert sorted(await store.list_collections()) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_find_sort_skip_limit(self, store):
        await store.insert_many("cities", [
            {"name": "Lima", "pop": 10},
            {"name": "Oslo", "pop": 1},
            {"name": "Rome", "pop": 3},
        ])
        names = [d["name"] for d in await store.find("cities", sort=[("pop", -1)], skip=1, limit=1)]
        assert names == ["Rome"]
        assert (await store.find_one("cities", {"pop": {"$lt": 5}}, sort=[("name", 1)]))["name"] == "Oslo"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, store):
        doc = await store.insert_one("cities", {"name": "Lima", "visits": 0})
        updated = await store.update_by_id("cities", doc["id"], {"$inc": {"visits": 2}})
        assert updated["visits"] == 2
        assert updated["createdAt"] == doc["createdAt"]

        assert await store.update_many("cities", {"visits": 2}, {"$set": {"hot": True}}) == 1
        assert (await store.get("cities", doc["id"]))["hot"] is True
        assert await store.update_by_id("cities", "missing", {"$set": {"x": 1}}) is None

        assert await store.delete_by_id("cities", doc["id"]) is True
        assert await store.delete_by_id("cities", doc["id"]) is False

    @pytest.mark.asyncio
    async def test_get_or_404(self, store):
        with pytest.raises(DocumentNotFoundError) as exc:
            await store.get_or_404("cities", "nope", "City")
        assert str(exc.value) == "City not found"

    @pytest.mark.asyncio
    async def test_replace_collection(self, store):
        await store.insert_many("cities", [{"name": "Lima"}, {"name": "Oslo"}])
        count = await store.replace_collection("cities", [{"id": "rome", "name": "Rome"}])
        assert count == 1
        assert [d["id"] for d in await store.find("cities")] == ["rome"]

    @pytest.mark.asyncio
    async def test_replace_collection_rejects_duplicate_ids(self, store):
        await store.insert_one("cities", {"id": "lima", "name": "Lima"})
        with pytest.raises(DuplicateDocumentError):
            await store.replace_collection("cities", [{"id": "x"}, {"id": "x"}])
        assert [d["id"] for d in await store.find("cities")] == ["lima"]

    @pytest.mark.asyncio
    async def test_replace_without_commit_can_be_rolled_back(self, store):
        await store.insert_one("cities", {"id": "lima", "name": "Lima"})
        await store.insert_one("rivers", {"id": "nile", "name": "Nile"})
        await store.replace_collection("cities", [{"id": "rome"}], commit=False)
        await store.replace_collection("rivers", [], commit=False)
        await store.rollback()
        assert [d["id"] for d in await store.find("cities")] == ["lima"]
        assert [d["id"] for d in await store.find("rivers")] == ["nile"]

    @pytest.mark.asyncio
    async def test_replace_without_commit_then_commit(self, store):
        await store.insert_one("cities", {"id": "lima", "name": "Lima"})
        await store.replace_collection("cities", [{"id": "rome"}], commit=False)
        await store.commit()
        assert [d["id"] for d in await store.find("cities")] == ["rome"]
