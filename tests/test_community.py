import pytest


async def _post(client, who, content="Sunrise over Bagan", **extra):
    r = await client.post("/community/posts", json={"content": content, **extra}, headers=who["headers"])
    assert r.status_code == 201, r.text
    return r.json()


class TestProfiles:
    @pytest.mark.asyncio
    async def test_update_own_profile(self, client, user):
        r = await client.put(
            "/community/profile",
            json={
                "bio": "Slow traveller",
                "experienceLevel": "Regular",
                "visitedCountries": [{"name": "Peru", "year": 2023}],
                "notificationPreferences": {"connections": False},
            },
            headers=user["headers"],
        )
        assert r.status_code == 200
        profile = r.json()
        assert profile["bio"] == "Slow traveller"
        assert profile["experienceLevel"] == "Regular"
        assert profile["visitedCountries"] == [{"name": "Peru", "year": 2023}]
        assert profile["notificationPreferences"]["connections"] is False
        assert profile["notificationPreferences"]["messages"] is True
        assert "passwordHash" not in profile

    @pytest.mark.asyncio
    async def test_invalid_experience_level(self, client, user):
        r = await client.put("/community/profile", json={"experienceLevel": "Astronaut"}, headers=user["headers"])
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_get_public_profile(self, client, user):
        r = await client.get(f"/community/profiles/{user['user']['id']}")
        assert r.status_code == 200
        assert r.json()["name"] == "Jane Traveler"
        assert (await client.get("/community/profiles/nobody")).status_code == 404

    @pytest.mark.asyncio
    async def test_connect_is_mutual_and_notifies_once(self, client, user, other_user):
        other_id = other_user["user"]["id"]
        for _ in range(2):
            r = await client.post(f"/community/connect/{other_id}", headers=user["headers"])
            assert r.status_code == 200

        mine = (await client.get("/community/connections", headers=user["headers"])).json()
        theirs = (await client.get("/community/connections", headers=other_user["headers"])).json()
        assert [u["id"] for u in mine] == [other_id]
        assert [u["id"] for u in theirs] == [user["user"]["id"]]

        notifications = (await client.get("/notifications", headers=other_user["headers"])).json()
        assert [n["type"] for n in notifications] == ["connection_request"]

    @pytest.mark.asyncio
    async def test_cannot_connect_with_self(self, client, user):
        r = await client.post(f"/community/connect/{user['user']['id']}", headers=user["headers"])
        assert r.status_code == 409


class TestFeed:
    @pytest.mark.asyncio
    async def test_visibility_rules(self, client, user, other_user):
        await _post(client, user, "Public post")
        await _post(client, user, "Friends only", visibility="connections")
        await _post(client, user, "Just me", visibility="private")

        anonymous = [p["content"] for p in (await client.get("/community/posts")).json()]
        assert anonymous == ["Public post"]

        stranger = [p["content"] for p in (await client.get(
            "/community/posts", headers=other_user["headers"])).json()]
        assert stranger == ["Public post"]

        await client.post(f"/community/connect/{user['user']['id']}", headers=other_user["headers"])
        friend = [p["content"] for p in (await client.get(
            "/community/posts", headers=other_user["headers"])).json()]
        assert set(friend) == {"Public post", "Friends only"}

        owner = (await client.get("/community/posts", headers=user["headers"])).json()
        assert len(owner) == 3

    @pytest.mark.asyncio
    async def test_tag_filter(self, client, user):
        await _post(client, user, "Tacos", tags=["food"])
        await _post(client, user, "Summit", tags=["hiking"])
        r = await client.get("/community/posts", params={"tag": "food"})
        assert [p["content"] for p in r.json()] == ["Tacos"]

    @pytest.mark.asyncio
    async def test_moderated_post_is_hidden_and_warns(self, client, user):
        post = await _post(client, user, "Selling NSFW pictures")
        assert post["wasModerated"] is True
        assert post["moderated"] is True
        assert post["warningCount"] == 1
        assert (await client.get("/community/posts")).json() == []

        warnings = (await client.get("/community/warnings", headers=user["headers"])).json()
        assert len(warnings) == 1
        notifications = (await client.get("/notifications", headers=user["headers"])).json()
        assert notifications[0]["type"] == "content_warning"
        assert notifications[0]["message"].startswith("Warning 1/3")

    @pytest.mark.asyncio
    async def test_repeated_violations_block_account(self, client, user):
        for _ in range(3):
            await _post(client, user, "nsfw again")
        me = (await client.get("/auth/me", headers=user["headers"])).json()
        assert me["status"] == "blocked"

        r = await client.post("/community/posts", json={"content": "hello"}, headers=user["headers"])
        assert r.status_code == 403

    @pytest.mark.asyncio
    async def test_like_save_and_comment(self, client, user, other_user):
        post = await _post(client, user)
        r = await client.post(f"/community/posts/{post['id']}/like", headers=other_user["headers"])
        assert r.json() == {"liked": True, "likes": 1}

        r = await client.post(f"/community/posts/{post['id']}/save", headers=other_user["headers"])
        assert r.json() == {"saved": True}
        saved = (await client.get("/community/saved", headers=other_user["headers"])).json()
        assert [p["id"] for p in saved] == [post["id"]]
        r = await client.post(f"/community/posts/{post['id']}/save", headers=other_user["headers"])
        assert r.json() == {"saved": False}

        r = await client.post(
            f"/community/posts/{post['id']}/comments", json={"content": "Stunning!"}, headers=other_user["headers"])
        assert r.status_code == 201
        comments = (await client.get(f"/community/posts/{post['id']}/comments")).json()
        assert [c["content"] for c in comments] == ["Stunning!"]

    @pytest.mark.asyncio
    async def test_inappropriate_comment_rejected(self, client, user, other_user):
        post = await _post(client, user)
        r = await client.post(
            f"/community/posts/{post['id']}/comments", json={"content": "so explicit"}, headers=other_user["headers"])
        assert r.status_code == 403
        assert (await client.get(f"/community/posts/{post['id']}/comments")).json() == []
        warnings = (await client.get("/community/warnings", headers=other_user["headers"])).json()
        assert len(warnings) == 1

    @pytest.mark.asyncio
    async def test_acknowledge_warning(self, client, user, other_user):
        await _post(client, user, "nude beach guide")
        warning = (await client.get("/community/warnings", headers=user["headers"])).json()[0]

        r = await client.post(f"/community/warnings/{warning['id']}/acknowledge", headers=other_user["headers"])
        assert r.status_code == 404
        r = await client.post(f"/community/warnings/{warning['id']}/acknowledge", headers=user["headers"])
        assert r.status_code == 200
        assert r.json()["acknowledgedAt"]


class TestGroupsEventsBuddies:
    @pytest.mark.asyncio
    async def test_group_lifecycle(self, client, user, other_user):
        r = await client.post(
            "/community/groups", json={"name": "Van Life", "category": "Lifestyle"}, headers=user["headers"])
        assert r.status_code == 201
        group = r.json()
        assert group["slug"] == "van-life"
        assert group["memberCount"] == 1

        r = await client.post("/community/groups", json={"name": "Van Life"}, headers=other_user["headers"])
        assert r.status_code == 409

        joined = (await client.post(f"/community/groups/{group['id']}/join", headers=other_user["headers"])).json()
        assert joined["memberCount"] == 2
        again = (await client.post(f"/community/groups/{group['id']}/join", headers=other_user["headers"])).json()
        assert again["memberCount"] == 2
        left = (await client.post(f"/community/groups/{group['id']}/leave", headers=other_user["headers"])).json()
        assert left["memberCount"] == 1

        assert (await client.get("/community/groups/van-life")).json()["id"] == group["id"]
        listed = (await client.get("/community/groups", params={"category": "Lifestyle"})).json()
        assert [g["name"] for g in listed] == ["Van Life"]

    @pytest.mark.asyncio
    async def test_event_capacity(self, client, user, other_user, admin):
        r = await client.post(
            "/community/events",
            json={"title": "Sunset Swim", "date": "2026-08-01T18:00:00Z", "capacity": 2},
            headers=user["headers"],
        )
        assert r.status_code == 201
        event = r.json()
        assert event["status"] == "upcoming"
        assert event["host"]["name"] == "Jane Traveler"

        for who in (user, user, other_user):
            r = await client.post(f"/community/events/{event['id']}/attend", headers=who["headers"])
            assert r.status_code == 200
        assert len(r.json()["attendees"]) == 2

        r = await client.post(f"/community/events/{event['id']}/attend", headers=admin["headers"])
        assert r.status_code == 409

    @pytest.mark.asyncio
    async def test_event_dates_validated(self, client, user):
        r = await client.post(
            "/community/events",
            json={"title": "Backwards", "date": "2026-08-02T10:00:00Z", "endDate": "2026-08-01T10:00:00Z"},
            headers=user["headers"],
        )
        assert r.status_code == 409

    @pytest.mark.asyncio
    async def test_buddy_requests(self, client, user, other_user):
        r = await client.post(
            "/community/buddy-requests",
            json={"destination": "Patagonia", "startDate": "2026-11-01", "endDate": "2026-11-20"},
            headers=user["headers"],
        )
        assert r.status_code == 201
        request = r.json()

        found = (await client.get("/community/buddy-requests", params={"destination": "patag"})).json()
        assert [b["id"] for b in found] == [request["id"]]

        r = await client.post(f"/community/buddy-requests/{request['id']}/close", headers=other_user["headers"])
        assert r.status_code == 403
        r = await client.post(f"/community/buddy-requests/{request['id']}/close", headers=user["headers"])
        assert r.json()["status"] == "completed"
        assert (await client.get("/community/buddy-requests")).json() == []


class TestMatching:
    @pytest.mark.asyncio
    async def test_find_and_respond(self, client, user, other_user):
        prefs = {"destinations": ["Japan", "Peru"], "travelStyles": ["Backpacking"], "interests": ["Food"]}
        await client.put("/community/matching/preferences", json=prefs, headers=user["headers"])
        await client.put("/community/matching/preferences", json=prefs, headers=other_user["headers"])

        matches = (await client.get("/community/matching/matches", headers=user["headers"])).json()
        assert len(matches) == 1
        assert matches[0]["userId"] == other_user["user"]["id"]
        assert matches[0]["compatibilityScore"] == 100
        assert matches[0]["name"] == "Sam Buddy"
        assert matches[0]["status"] == "pending"

        r = await client.post(
            f"/community/matching/matches/{other_user['user']['id']}",
            json={"accepted": True},
            headers=user["headers"],
        )
        assert r.status_code == 200
        assert r.json()["potentialMatches"][0]["status"] == "accepted"

    @pytest.mark.asyncio
    async def test_respond_to_unknown_match(self, client, user):
        await client.put("/community/matching/preferences", json={"destinations": ["Chile"]}, headers=user["headers"])
        r = await client.post("/community/matching/matches/nobody", json={"accepted": False}, headers=user["headers"])
        assert r.status_code == 404
