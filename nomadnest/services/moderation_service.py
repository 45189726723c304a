"""
Content moderation for community posts and comments.

Text is scanned against a keyword list. Each hit records a warning against the
author; reaching the configured threshold blocks the account.
"""
import logging
from typing import NamedTuple, Optional

from ..config import settings
from ..exceptions import DocumentNotFoundError
from ..utils import utcnow_iso
from .document_store import DocumentStore
from .notification_service import create_notification

logger = logging.getLogger(__name__)

WARNINGS = "contentWarnings"
USERS = "users"
COMMUNITY_POSTS = "communityPosts"

PROHIBITED_KEYWORDS = (
    "xxx",
    "porn",
    "adult content",
    "explicit content",
    "explicit",
    "nsfw",
    "sexual",
    "naked",
    "nude",
    "18+",
    "adult only",
)


class ScanResult(NamedTuple):
    is_inappropriate: bool
    reason: Optional[str] = None


def scan_content(text: Optional[str]) -> ScanResult:
    lowered = (text or "").lower()
    for keyword in PROHIBITED_KEYWORDS:
        if keyword in lowered:
            return ScanResult(True, f"Content contains prohibited term: {keyword}")
    return ScanResult(False)


async def add_warning_to_user(store: DocumentStore, user_id: str, content_id: Optional[str], reason: str) -> dict:
    await store.insert_one(WARNINGS, {
        "userId": user_id,
        "contentId": content_id,
        "reason": reason,
        "acknowledgedAt": None,
    })
    warning_count = await store.count(WARNINGS, {"userId": user_id})
    threshold = settings.moderation_block_threshold

    if warning_count >= threshold:
        await store.update_by_id(USERS, user_id, {"$set": {
            "status": "blocked",
            "blockReason": f"Received {warning_count} content warnings",
            "blockedAt": utcnow_iso(),
        }})
        await create_notification(
            store, user_id, "account_blocked",
            "Your account has been blocked after repeated content warnings.",
            content_id,
        )
        logger.info(f"Blocked user {user_id} after {warning_count} warnings")
        return {"warningCount": warning_count, "blocked": True}

    await create_notification(
        store, user_id, "content_warning",
        f"Warning {warning_count}/{threshold}: {reason}",
        content_id,
    )
    logger.warning(f"Content warning {warning_count}/{threshold} for user {user_id}")
    return {"warningCount": warning_count, "blocked": False}


async def list_warnings(store: DocumentStore) -> list[dict]:
    warnings = await store.find(WARNINGS, sort=[("createdAt", -1)])
    users = {}
    for warning in warnings:
        user_id = warning.get("userId")
        if user_id not in users:
            users[user_id] = await store.get(USERS, user_id)
        user = users[user_id]
        warning["userName"] = user.get("name") if user else "Unknown User"
        warning["userEmail"] = user.get("email") if user else None
        warning["userStatus"] = user.get("status") if user else None
    return warnings


async def user_warnings(store: DocumentStore, user_id: str) -> list[dict]:
    return await store.find(WARNINGS, {"userId": user_id}, sort=[("createdAt", -1)])


async def acknowledge_warning(store: DocumentStore, warning_id: str, user_id: str) -> dict:
    warning = await store.get_or_404(WARNINGS, warning_id, "Warning")
    if warning.get("userId") != user_id:
        raise DocumentNotFoundError(WARNINGS, warning_id, "Warning")
    return await store.update_by_id(WARNINGS, warning_id, {"$set": {"acknowledgedAt": utcnow_iso()}})


async def block_user(store: DocumentStore, user_id: str, reason: str) -> dict:
    await store.get_or_404(USERS, user_id, "User")
    user = await store.update_by_id(USERS, user_id, {"$set": {
        "status": "blocked",
        "blockReason": reason,
        "blockedAt": utcnow_iso(),
    }})
    await create_notification(store, user_id, "account_blocked", f"Your account has been blocked: {reason}")
    logger.info(f"Admin blocked user {user_id}")
    return user


async def unblock_user(store: DocumentStore, user_id: str) -> dict:
    await store.get_or_404(USERS, user_id, "User")
    logger.info(f"Admin unblocked user {user_id}")
    return await store.update_by_id(USERS, user_id, {
        "$set": {"status": "active"},
        "$unset": {"blockReason": "", "blockedAt": ""},
    })


async def list_moderated_posts(store: DocumentStore) -> list[dict]:
    return await store.find(COMMUNITY_POSTS, {"moderated": True}, sort=[("moderatedAt", -1)])


async def approve_post(store: DocumentStore, post_id: str) -> dict:
    await store.get_or_404(COMMUNITY_POSTS, post_id, "Post")
    return await store.update_by_id(COMMUNITY_POSTS, post_id, {
        "$set": {"moderated": False},
        "$unset": {"moderationReason": "", "moderatedAt": ""},
    })


async def remove_post(store: DocumentStore, post_id: str) -> None:
    await store.get_or_404(COMMUNITY_POSTS, post_id, "Post")
    await store.delete_by_id(COMMUNITY_POSTS, post_id)
    await store.delete_many("communityComments", {"postId": post_id})
    logger.info(f"Removed moderated community post {post_id}")
