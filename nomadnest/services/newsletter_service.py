import logging

from ..exceptions import DocumentNotFoundError
from ..utils import utcnow_iso
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

NEWSLETTER = "newsletter"


async def subscribe(store: DocumentStore, data: dict) -> dict:
    """Add a subscriber, or reactivate one while keeping the first subscribedAt."""
    email = data["email"].strip().lower()
    existing = await store.find_one(NEWSLETTER, {"email": email})
    if existing:
        changes = {"active": True}
        for key in ("firstName", "lastName"):
            if data.get(key):
                changes[key] = data[key]
        tags = list(existing.get("tags") or [])
        tags.extend(t for t in data.get("tags") or [] if t not in tags)
        changes["tags"] = tags
        return await store.update_by_id(NEWSLETTER, existing["id"], {"$set": changes})

    subscriber = await store.insert_one(NEWSLETTER, {
        "email": email,
        "firstName": data.get("firstName"),
        "lastName": data.get("lastName"),
        "tags": list(data.get("tags") or []),
        "subscribedAt": utcnow_iso(),
        "active": True,
    })
    logger.info(f"New newsletter subscriber {subscriber['id']}")
    return subscriber


async def unsubscribe(store: DocumentStore, email: str) -> dict:
    email = email.strip().lower()
    subscriber = await store.find_one(NEWSLETTER, {"email": email})
    if subscriber is None:
        raise DocumentNotFoundError(NEWSLETTER, email, "Subscriber")
    return await store.update_by_id(NEWSLETTER, subscriber["id"], {"$set": {"active": False}})


async def delete_subscriber(store: DocumentStore, subscriber_id: str) -> None:
    await store.get_or_404(NEWSLETTER, subscriber_id, "Subscriber")
    await store.delete_by_id(NEWSLETTER, subscriber_id)


async def list_subscribers(store: DocumentStore, active_only: bool = False) -> list[dict]:
    query = {"active": True} if active_only else None
    return await store.find(NEWSLETTER, query, sort=[("subscribedAt", -1)])
