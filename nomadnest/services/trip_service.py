import logging
from typing import Optional

from ..config import settings
from ..exceptions import ConflictError, PermissionDeniedError, QuotaExceededError
from ..utils import parse_datetime
from .document_store import DocumentStore
from .payment_service import has_active_subscription

logger = logging.getLogger(__name__)

TRIPS = "trips"


def _check_dates(details: dict) -> None:
    start = parse_datetime(details.get("startDate"))
    end = parse_datetime(details.get("endDate"))
    if start is not None and end is not None and end < start:
        raise ConflictError("End date cannot be before start date")


def _counted_trips_query(user_id: str) -> dict:
    # Trips mirrored from bookings carry a bookingReference and are not counted
    return {"userId": user_id, "status": {"$ne": "cancelled"}, "bookingReference": None}


async def list_trips(store: DocumentStore, user_id: str, status: Optional[str] = None) -> list[dict]:
    query = {"userId": user_id}
    if status:
        query["status"] = status
    return await store.find(TRIPS, query, sort=[("details.startDate", 1)])


async def get_trip(store: DocumentStore, trip_id: str, user_id: str) -> dict:
    trip = await store.get_or_404(TRIPS, trip_id, "Trip")
    if trip.get("userId") != user_id:
        raise PermissionDeniedError("You do not have permission to access this trip")
    return trip


async def check_create_permission(store: DocumentStore, user_id: str) -> bool:
    if await has_active_subscription(store, user_id):
        return True
    return await store.count(TRIPS, _counted_trips_query(user_id)) < settings.free_trip_limit


async def check_edit_permission(store: DocumentStore, user_id: str, trip: dict) -> bool:
    if await has_active_subscription(store, user_id):
        return True
    return (trip.get("editCount") or 0) < settings.free_trip_edit_limit


async def create_trip(store: DocumentStore, user_id: str, data: dict) -> dict:
    if not await check_create_permission(store, user_id):
        raise QuotaExceededError(
            "You have reached the maximum number of trips for your free account. "
            "Please upgrade your subscription."
        )
    details = dict(data.get("details") or {})
    _check_dates(details)
    if details.get("currency") is None:
        details["currency"] = settings.currency
    if details.get("guests") is None:
        details["guests"] = 1
    trip = await store.insert_one(TRIPS, {
        "userId": user_id,
        "type": data["type"],
        "status": data.get("status") or "planned",
        "bookingReference": None,
        "editCount": 0,
        "details": details,
    })
    logger.info(f"User {user_id} created trip {trip['id']}")
    return trip


async def update_trip(store: DocumentStore, trip_id: str, user_id: str, detail_updates: dict) -> dict:
    trip = await get_trip(store, trip_id, user_id)
    if trip.get("status") == "cancelled":
        raise ConflictError("A cancelled trip cannot be edited")
    if not await check_edit_permission(store, user_id, trip):
        raise QuotaExceededError(
            "You have reached the maximum number of edits for your free account. "
            "Please upgrade your subscription."
        )
    details = {**(trip.get("details") or {}), **{k: v for k, v in detail_updates.items() if v is not None}}
    _check_dates(details)
    return await store.update_by_id(TRIPS, trip_id, {
        "$set": {"details": details},
        "$inc": {"editCount": 1},
    })


async def cancel_trip(store: DocumentStore, trip_id: str, user_id: str) -> dict:
    await get_trip(store, trip_id, user_id)
    return await store.update_by_id(TRIPS, trip_id, {"$set": {"status": "cancelled"}})


async def delete_trip(store: DocumentStore, trip_id: str, user_id: str) -> None:
    await get_trip(store, trip_id, user_id)
    await store.delete_by_id(TRIPS, trip_id)


async def get_trip_quota(store: DocumentStore, user_id: str) -> dict:
    subscribed = await has_active_subscription(store, user_id)
    return {
        "subscribed": subscribed,
        "tripsUsed": await store.count(TRIPS, _counted_trips_query(user_id)),
        "tripLimit": None if subscribed else settings.free_trip_limit,
        "editLimit": None if subscribed else settings.free_trip_edit_limit,
    }
