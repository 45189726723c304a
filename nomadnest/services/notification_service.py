import logging
from typing import Optional

from ..exceptions import PermissionDeniedError
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

NOTIFICATIONS = "notifications"

# notification type -> notificationPreferences key that gates it
PREFERENCE_FOR_TYPE = {
    "content_warning": "contentWarnings",
    "message": "messages",
    "connection_request": "connections",
}


def is_enabled(user: Optional[dict], notification_type: str) -> bool:
    """Return True if the user's preferences allow this notification type."""
    pref_key = PREFERENCE_FOR_TYPE.get(notification_type)
    if pref_key is None or user is None:
        return True
    prefs = user.get("notificationPreferences") or {}
    return prefs.get(pref_key, True) is not False


async def create_notification(
    store: DocumentStore,
    user_id: str,
    notification_type: str,
    message: str,
    related_id: Optional[str] = None,
) -> Optional[dict]:
    user = await store.get("users", user_id)
    if not is_enabled(user, notification_type):
        logger.debug(f"Suppressed {notification_type} notification for user {user_id}")
        return None
    return await store.insert_one(NOTIFICATIONS, {
        "userId": user_id,
        "type": notification_type,
        "message": message,
        "relatedContentId": related_id,
        "read": False,
    })


async def list_notifications(store: DocumentStore, user_id: str, unread_only: bool = False) -> list[dict]:
    query = {"userId": user_id}
    if unread_only:
        query["read"] = False
    return await store.find(NOTIFICATIONS, query, sort=[("createdAt", -1)])


async def unread_count(store: DocumentStore, user_id: str) -> int:
    return await store.count(NOTIFICATIONS, {"userId": user_id, "read": False})


async def _get_owned(store: DocumentStore, notification_id: str, user_id: str) -> dict:
    notification = await store.get_or_404(NOTIFICATIONS, notification_id, "Notification")
    if notification.get("userId") != user_id:
        raise PermissionDeniedError("You can only modify your own notifications")
    return notification


async def mark_read(store: DocumentStore, notification_id: str, user_id: str) -> dict:
    await _get_owned(store, notification_id, user_id)
    return await store.update_by_id(NOTIFICATIONS, notification_id, {"$set": {"read": True}})


async def mark_all_read(store: DocumentStore, user_id: str) -> int:
    return await store.update_many(
        NOTIFICATIONS, {"userId": user_id, "read": False}, {"$set": {"read": True}})


async def delete_notification(store: DocumentStore, notification_id: str, user_id: str) -> None:
    await _get_owned(store, notification_id, user_id)
    await store.delete_by_id(NOTIFICATIONS, notification_id)
