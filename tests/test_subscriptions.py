from datetime import timedelta

import pytest

from nomadnest.utils import utcnow


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_subscribe_records_payment(self, client, user):
        r = await client.post(
            "/subscriptions",
            json={
                "planType": "annual",
                "payment": {"method": "card", "cardNumber": "4111 1111 1111 9876", "cvv": "123"},
            },
            headers=user["headers"],
        )
        assert r.status_code == 201
        data = r.json()
        assert data["payment"]["amount"] == 99.99
        assert data["payment"]["paymentId"].startswith("pay_")
        assert data["payment"]["cardLastFour"] == "9876"
        assert "cvv" not in str(data)
        assert data["subscription"]["status"] == "active"

        me = (await client.get("/subscriptions/me", headers=user["headers"])).json()
        assert me["active"] is True

        payments = (await client.get("/subscriptions/payments", headers=user["headers"])).json()
        assert len(payments) == 1

    @pytest.mark.asyncio
    async def test_unknown_plan(self, client, user):
        r = await client.post("/subscriptions", json={"planType": "weekly"}, headers=user["headers"])
        assert r.status_code == 409

    @pytest.mark.asyncio
    async def test_cancel(self, client, user):
        r = await client.post("/subscriptions/cancel", headers=user["headers"])
        assert r.status_code == 404

        await client.post("/subscriptions", json={"planType": "monthly"}, headers=user["headers"])
        r = await client.post("/subscriptions/cancel", headers=user["headers"])
        assert r.json()["status"] == "cancelled"
        assert r.json()["autoRenew"] is False
        me = (await client.get("/subscriptions/me", headers=user["headers"])).json()
        assert me["active"] is False

    @pytest.mark.asyncio
    async def test_expired_subscription_flips_on_read(self, client, store, user):
        await client.post("/subscriptions", json={"planType": "monthly"}, headers=user["headers"])
        subscription = await store.find_one("subscriptions", {"userId": user["user"]["id"]})
        await store.update_by_id("subscriptions", subscription["id"], {
            "$set": {"endDate": (utcnow() - timedelta(days=1)).isoformat()},
        })

        me = (await client.get("/subscriptions/me", headers=user["headers"])).json()
        assert me["active"] is False
        assert me["subscription"]["status"] == "expired"
