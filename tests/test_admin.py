import pytest


class TestAdminAccess:
    @pytest.mark.asyncio
    async def test_non_admin_rejected(self, client, user):
        r = await client.get("/admin/dashboard", headers=user["headers"])
        assert r.status_code == 403

    @pytest.mark.asyncio
    async def test_anonymous_rejected(self, client):
        r = await client.get("/admin/dashboard")
        assert r.status_code in (401, 403)


class TestDashboard:
    @pytest.mark.asyncio
    async def test_counts(self, client, admin, user):
        await client.post("/posts", json={"title": "Live"}, headers=admin["headers"])
        await client.post("/posts", json={"title": "Draft", "status": "draft"}, headers=admin["headers"])
        await client.post("/community/posts", json={"content": "nsfw"}, headers=user["headers"])

        stats = (await client.get("/admin/dashboard", headers=admin["headers"])).json()
        assert stats["posts"] == {"total": 2, "published": 1, "draft": 1}
        assert stats["users"] == {"total": 2, "blocked": 0}
        assert stats["communityPosts"] == {"total": 1, "moderated": 1}
        assert stats["warnings"] == {"unacknowledged": 1}

    @pytest.mark.asyncio
    async def test_admin_post_listing_includes_drafts(self, client, admin):
        await client.post("/posts", json={"title": "Live"}, headers=admin["headers"])
        await client.post("/posts", json={"title": "Draft", "status": "draft"}, headers=admin["headers"])
        everything = (await client.get("/admin/posts", headers=admin["headers"])).json()
        drafts = (await client.get("/admin/posts", params={"status": "draft"}, headers=admin["headers"])).json()
        assert everything["total"] == 2
        assert [p["title"] for p in drafts["items"]] == ["Draft"]


class TestSettings:
    @pytest.mark.asyncio
    async def test_defaults_and_partial_save(self, client, admin):
        current = (await client.get("/admin/settings", headers=admin["headers"])).json()
        assert current["general"]["siteTitle"] == "NomadNest"

        r = await client.put(
            "/admin/settings",
            json={"general": {"siteTitle": "Nomads United"}, "security": {"passwordPolicy": "high"}},
            headers=admin["headers"],
        )
        assert r.status_code == 200
        saved = r.json()
        assert saved["general"]["siteTitle"] == "Nomads United"
        assert saved["general"]["contactEmail"] == "hello@nomadnest.example"
        assert saved["security"]["passwordPolicy"] == "high"
        assert saved["createdAt"] and saved["updatedAt"]

        r = await client.get("/admin/settings/general.siteTitle", headers=admin["headers"])
        assert r.json() == {"path": "general.siteTitle", "value": "Nomads United"}
        r = await client.get("/admin/settings/general.nothing", headers=admin["headers"])
        assert r.json()["value"] is None

    @pytest.mark.asyncio
    async def test_rejects_unknown_section_and_bad_value(self, client, admin):
        r = await client.put("/admin/settings", json={"plugins": {"x": "y"}}, headers=admin["headers"])
        assert r.status_code == 409
        r = await client.put(
            "/admin/settings", json={"backup": {"backupFrequency": "hourly"}}, headers=admin["headers"])
        assert r.status_code == 409

    @pytest.mark.asyncio
    async def test_public_settings(self, client, admin):
        await client.put("/admin/settings", json={"api": {"rateLimit": "5"}}, headers=admin["headers"])
        public = (await client.get("/settings/public")).json()
        assert set(public) == {"general", "social", "cookieConsent", "appearance"}


class TestTheme:
    @pytest.mark.asyncio
    async def test_site_theme_defaults_and_brand_lock(self, client, admin):
        theme = (await client.get("/appearance/theme")).json()
        assert theme["theme"] == "light"
        assert theme["darkThemeColors"]["header"] == "#111827"

        r = await client.put(
            "/admin/theme",
            json={"theme": "dark", "lightThemeColors": {"primary": "#ff0000", "background": "#fafafa"}},
            headers=admin["headers"],
        )
        assert r.status_code == 200
        saved = (await client.get("/admin/theme", headers=admin["headers"])).json()
        assert saved["theme"] == "dark"
        assert saved["lightThemeColors"]["background"] == "#fafafa"
        assert saved["lightThemeColors"]["primary"] == "#065f46"

    @pytest.mark.asyncio
    async def test_invalid_colour(self, client, admin):
        r = await client.put(
            "/admin/theme", json={"lightThemeColors": {"card": "purple"}}, headers=admin["headers"])
        assert r.status_code == 409

    @pytest.mark.asyncio
    async def test_presets(self, client, admin):
        presets = (await client.get("/admin/theme/presets", headers=admin["headers"])).json()
        assert "ocean" in [p["id"] for p in presets]

        r = await client.post("/admin/theme/presets/ocean", headers=admin["headers"])
        assert r.json()["lightThemeColors"]["background"] == "#ffffff"
        assert r.json()["darkThemeColors"]["card"] == "#1e293b"

        r = await client.post("/admin/theme/presets/rainbow", headers=admin["headers"])
        assert r.status_code == 404

    @pytest.mark.asyncio
    async def test_user_theme_is_separate(self, client, admin, user):
        await client.put("/users/me/theme", json={"theme": "system"}, headers=user["headers"])
        assert (await client.get("/users/me/theme", headers=user["headers"])).json()["theme"] == "system"
        assert (await client.get("/appearance/theme")).json()["theme"] == "light"

    @pytest.mark.asyncio
    async def test_appearance_and_stylesheet(self, client, admin):
        r = await client.put(
            "/admin/appearance",
            json={"fontFamily": "Lato", "animationSpeed": "slow", "customCss": ".x { margin: 0; }"},
            headers=admin["headers"],
        )
        assert r.status_code == 200
        assert r.json()["fontFamily"] == "Lato"
        assert r.json()["headerFont"] == "Poppins"

        r = await client.get("/appearance/stylesheet.css")
        assert r.headers["content-type"].startswith("text/css")
        assert "--font-family: 'Lato', sans-serif;" in r.text
        assert "--animation-duration: 500ms;" in r.text
        assert r.text.endswith(".x { margin: 0; }\n")

    @pytest.mark.asyncio
    async def test_unknown_font_rejected(self, client, admin):
        r = await client.put("/admin/appearance", json={"fontFamily": "Comic Sans"}, headers=admin["headers"])
        assert r.status_code == 422


class TestBackups:
    @pytest.mark.asyncio
    async def test_create_list_download_delete(self, client, admin):
        await client.post("/posts", json={"title": "Keep me"}, headers=admin["headers"])
        r = await client.post("/admin/backups", headers=admin["headers"])
        assert r.status_code == 201
        record = r.json()
        assert record["collections"] == ["posts", "categories", "topics", "settings", "comments"]
        assert record["filename"].startswith("nomadnest-backup-")
        assert record["size"] > 0

        r = await client.get("/admin/backups/download", headers=admin["headers"])
        assert "attachment; filename=\"nomadnest-backup-" in r.headers["content-disposition"]
        payload = r.json()
        assert [p["title"] for p in payload["collections"]["posts"]] == ["Keep me"]

        backups = (await client.get("/admin/backups", headers=admin["headers"])).json()
        assert len(backups) == 2
        r = await client.delete(f"/admin/backups/{record['id']}", headers=admin["headers"])
        assert r.status_code == 204
        assert len((await client.get("/admin/backups", headers=admin["headers"])).json()) == 1

    @pytest.mark.asyncio
    async def test_restore_replaces_collections(self, client, admin):
        await client.post("/posts", json={"title": "Original"}, headers=admin["headers"])
        payload = (await client.get("/admin/backups/download", headers=admin["headers"])).json()
        await client.post("/posts", json={"title": "Added later"}, headers=admin["headers"])

        r = await client.post("/admin/backups/restore", json=payload, headers=admin["headers"])
        assert r.status_code == 200
        assert r.json()["restored"]["posts"] == 1

        titles = [p["title"] for p in (await client.get("/posts")).json()["items"]]
        assert titles == ["Original"]

    @pytest.mark.asyncio
    async def test_restore_rejects_bad_payload(self, client, admin):
        await client.post("/posts", json={"title": "Untouched"}, headers=admin["headers"])
        for bad in ([], {"timestamp": "x"}, {"collections": {"users": []}}, {"collections": {"posts": [1]}}):
            r = await client.post("/admin/backups/restore", json=bad, headers=admin["headers"])
            assert r.status_code == 400
        assert (await client.get("/posts")).json()["total"] == 1

    @pytest.mark.asyncio
    async def test_restore_with_duplicate_ids_writes_nothing(self, client, admin):
        await client.post("/posts", json={"title": "Survivor"}, headers=admin["headers"])
        await client.post("/categories", json={"name": "Travel"}, headers=admin["headers"])
        payload = {"collections": {"posts": [], "categories": [{"id": "dup"}, {"_id": "dup"}]}}

        r = await client.post("/admin/backups/restore", json=payload, headers=admin["headers"])
        assert r.status_code == 400
        assert "duplicate id" in r.json()["detail"]
        assert [p["title"] for p in (await client.get("/posts")).json()["items"]] == ["Survivor"]
        assert [c["name"] for c in (await client.get("/categories")).json()] == ["Travel"]

    @pytest.mark.asyncio
    async def test_restore_leaves_absent_collections_untouched(self, client, admin):
        await client.post("/topics", json={"name": "Hiking"}, headers=admin["headers"])
        await client.post("/posts", json={"title": "Stays put"}, headers=admin["headers"])
        payload = {"collections": {"categories": [{"id": "food", "name": "Food", "slug": "food", "count": 0}]}}

        r = await client.post("/admin/backups/restore", json=payload, headers=admin["headers"])
        assert r.status_code == 200
        assert r.json()["restored"] == {"categories": 1}
        assert [c["name"] for c in (await client.get("/categories")).json()] == ["Food"]
        assert [p["title"] for p in (await client.get("/posts")).json()["items"]] == ["Stays put"]
        assert [t["name"] for t in (await client.get("/topics")).json()] == ["Hiking"]


class TestModeration:
    @pytest.mark.asyncio
    async def test_warnings_and_moderated_posts(self, client, admin, user):
        post = (await client.post(
            "/community/posts", json={"content": "explicit stuff"}, headers=user["headers"])).json()

        warnings = (await client.get("/admin/moderation/warnings", headers=admin["headers"])).json()
        assert warnings[0]["userName"] == "Jane Traveler"
        assert warnings[0]["userEmail"] == "traveler@example.com"

        moderated = (await client.get("/admin/moderation/posts", headers=admin["headers"])).json()
        assert [p["id"] for p in moderated] == [post["id"]]

        r = await client.post(f"/admin/moderation/posts/{post['id']}/approve", headers=admin["headers"])
        assert r.json()["moderated"] is False
        assert "moderationReason" not in r.json()
        assert [p["id"] for p in (await client.get("/community/posts")).json()] == [post["id"]]

    @pytest.mark.asyncio
    async def test_remove_post(self, client, admin, user):
        post = (await client.post("/community/posts", json={"content": "nsfw"}, headers=user["headers"])).json()
        r = await client.delete(f"/admin/moderation/posts/{post['id']}", headers=admin["headers"])
        assert r.status_code == 204
        all_posts = (await client.get("/admin/community/posts", headers=admin["headers"])).json()
        assert all_posts == []

    @pytest.mark.asyncio
    async def test_warning_for_deleted_user(self, client, store, admin, user):
        await client.post("/community/posts", json={"content": "nsfw"}, headers=user["headers"])
        await store.delete_by_id("users", user["user"]["id"])
        warnings = (await client.get("/admin/moderation/warnings", headers=admin["headers"])).json()
        assert warnings[0]["userName"] == "Unknown User"

    @pytest.mark.asyncio
    async def test_block_and_unblock(self, client, admin, user):
        user_id = user["user"]["id"]
        r = await client.post(
            f"/admin/users/{user_id}/block", json={"reason": "Spam"}, headers=admin["headers"])
        assert r.status_code == 200
        assert r.json()["status"] == "blocked"
        assert "passwordHash" not in r.json()

        blocked = (await client.get("/admin/users", params={"status": "blocked"}, headers=admin["headers"])).json()
        assert [u["id"] for u in blocked] == [user_id]

        r = await client.post("/community/posts", json={"content": "hi"}, headers=user["headers"])
        assert r.status_code == 403

        r = await client.post(f"/admin/users/{user_id}/unblock", headers=admin["headers"])
        assert r.json()["status"] == "active"
        assert "blockReason" not in r.json()
        r = await client.post("/community/posts", json={"content": "hi"}, headers=user["headers"])
        assert r.status_code == 201

    @pytest.mark.asyncio
    async def test_block_unknown_user(self, client, admin):
        r = await client.post("/admin/users/ghost/block", json={"reason": "x"}, headers=admin["headers"])
        assert r.status_code == 404
