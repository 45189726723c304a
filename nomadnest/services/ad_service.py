"""
Ad placements and their daily performance figures.

A placement describes an ad-network slot rendered in one page region
(header, sidebar, between posts, ...) on one site section or on every page.
Impressions and clicks are counted as the front end reports them; revenue
comes from the ad network's daily report and is recorded by an admin.
"""
import logging
from datetime import date, timedelta
from typing import Optional

from ..utils import utcnow
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

AD_PLACEMENTS = "adPlacements"
AD_STATS = "adStats"

ALL_PAGES = "all-pages"


def _ctr(impressions: int, clicks: int) -> float:
    return round(clicks / impressions * 100, 2) if impressions else 0.0


def _since(days: int) -> str:
    return (utcnow().date() - timedelta(days=days)).isoformat()


# Placements

async def list_placements(
    store: DocumentStore,
    ad_type: Optional[str] = None,
    location: Optional[str] = None,
    enabled: Optional[bool] = None,
) -> list[dict]:
    query = {}
    if ad_type:
        query["type"] = ad_type
    if location:
        query["location"] = location
    if enabled is not None:
        query["isEnabled"] = enabled
    return await store.find(AD_PLACEMENTS, query, sort=[("name", 1)])


async def get_placement(store: DocumentStore, placement_id: str) -> dict:
    return await store.get_or_404(AD_PLACEMENTS, placement_id, "Ad placement")


async def create_placement(store: DocumentStore, data: dict) -> dict:
    placement = await store.insert_one(AD_PLACEMENTS, {
        "name": data["name"].strip(),
        "slot": data["slot"],
        "type": data["type"],
        "format": data.get("format") or "auto",
        "location": data.get("location") or ALL_PAGES,
        "isEnabled": data.get("isEnabled", True),
        "position": data.get("position"),
        "responsive": data.get("responsive", True),
        "customCode": data.get("customCode"),
    })
    logger.info(f"Created ad placement {placement['id']} ({placement['type']} on {placement['location']})")
    return placement


async def update_placement(store: DocumentStore, placement_id: str, data: dict) -> dict:
    await get_placement(store, placement_id)
    changes = {k: v for k, v in data.items() if v is not None}
    return await store.update_by_id(AD_PLACEMENTS, placement_id, {"$set": changes})


async def set_enabled(store: DocumentStore, placement_id: str, is_enabled: bool) -> dict:
    await get_placement(store, placement_id)
    placement = await store.update_by_id(AD_PLACEMENTS, placement_id, {"$set": {"isEnabled": is_enabled}})
    logger.info(f"Ad placement {placement_id} {'enabled' if is_enabled else 'disabled'}")
    return placement


async def delete_placement(store: DocumentStore, placement_id: str) -> None:
    await get_placement(store, placement_id)
    await store.delete_by_id(AD_PLACEMENTS, placement_id)
    removed = await store.delete_many(AD_STATS, {"placementId": placement_id})
    logger.info(f"Deleted ad placement {placement_id} and {removed} stat rows")


async def active_placements(
    store: DocumentStore, location: Optional[str] = None, ad_type: Optional[str] = None
) -> list[dict]:
    """Enabled placements shown on `location`, including the all-pages ones."""
    query = {"isEnabled": True}
    if location:
        query["location"] = {"$in": [location, ALL_PAGES]}
    if ad_type:
        query["type"] = ad_type
    return await store.find(AD_PLACEMENTS, query, sort=[("position", 1), ("name", 1)])


# Stats

def _stat_id(placement_id: str, day: str) -> str:
    return f"{placement_id}:{day}"


async def _daily_row(store: DocumentStore, placement_id: str, day: str) -> dict:
    row = await store.get(AD_STATS, _stat_id(placement_id, day))
    if row is None:
        row = await store.insert_one(AD_STATS, {
            "_id": _stat_id(placement_id, day),
            "placementId": placement_id,
            "date": day,
            "impressions": 0,
            "clicks": 0,
            "ctr": 0.0,
            "revenue": 0.0,
        })
    return row


async def record_event(store: DocumentStore, placement_id: str, kind: str) -> dict:
    """Count one impression or click against today's row for the placement."""
    await get_placement(store, placement_id)
    row = await _daily_row(store, placement_id, utcnow().date().isoformat())
    field = "clicks" if kind == "click" else "impressions"
    row = await store.update_by_id(AD_STATS, row["id"], {"$inc": {field: 1}})
    return await store.update_by_id(
        AD_STATS, row["id"], {"$set": {"ctr": _ctr(row["impressions"], row["clicks"])}})


async def record_daily_stats(
    store: DocumentStore,
    placement_id: str,
    day: date,
    impressions: int,
    clicks: int,
    revenue: float,
) -> dict:
    """Overwrite one day's figures for a placement with the ad network's report."""
    await get_placement(store, placement_id)
    row = await _daily_row(store, placement_id, day.isoformat())
    return await store.update_by_id(AD_STATS, row["id"], {"$set": {
        "impressions": impressions,
        "clicks": clicks,
        "ctr": _ctr(impressions, clicks),
        "revenue": round(revenue, 2),
    }})


async def placement_stats(store: DocumentStore, placement_id: str, days: int = 7) -> list[dict]:
    await get_placement(store, placement_id)
    return await store.find(
        AD_STATS,
        {"placementId": placement_id, "date": {"$gte": _since(days)}},
        sort=[("date", 1)],
    )


async def all_stats(store: DocumentStore, days: int = 7) -> dict:
    """
    Totals and per-day sums across every placement.

    Args:
        days: how many days back to include

    Returns:
        dict with totalImpressions, totalClicks, totalCtr, totalRevenue and
        dailyStats keyed by ISO date
    """
    rows = await store.find(AD_STATS, {"date": {"$gte": _since(days)}}, sort=[("date", 1)])
    daily = {}
    for row in rows:
        bucket = daily.setdefault(row["date"], {"date": row["date"], "impressions": 0, "clicks": 0, "revenue": 0.0})
        bucket["impressions"] += row.get("impressions") or 0
        bucket["clicks"] += row.get("clicks") or 0
        bucket["revenue"] = round(bucket["revenue"] + (row.get("revenue") or 0), 2)

    impressions = sum(b["impressions"] for b in daily.values())
    clicks = sum(b["clicks"] for b in daily.values())
    return {
        "totalImpressions": impressions,
        "totalClicks": clicks,
        "totalCtr": _ctr(impressions, clicks),
        "totalRevenue": round(sum(b["revenue"] for b in daily.values()), 2),
        "dailyStats": daily,
    }
