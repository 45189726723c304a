"""
Community features: traveller profiles, the social feed, groups, events and
travel buddy requests.
"""
import logging
import re
from typing import Optional

from ..exceptions import ConflictError, DocumentNotFoundError, PermissionDeniedError
from ..utils import parse_datetime, public_user, slugify, utcnow_iso
from .document_store import DocumentStore
from .moderation_service import add_warning_to_user, scan_content
from .notification_service import create_notification

logger = logging.getLogger(__name__)

USERS = "users"
COMMUNITY_POSTS = "communityPosts"
COMMUNITY_COMMENTS = "communityComments"
SAVED_POSTS = "savedPosts"
GROUPS = "travelGroups"
EVENTS = "communityEvents"
BUDDY_REQUESTS = "travelBuddyRequests"

PROFILE_FIELDS = (
    "name", "username", "avatar", "bio", "location", "experienceLevel",
    "travelStyles", "interests", "wishlistDestinations", "visitedCountries",
    "socialProfiles",
)


def _ensure_not_blocked(user: dict) -> None:
    if user.get("status") == "blocked":
        raise PermissionDeniedError("Your account has been blocked")


# Profiles

async def get_profile(store: DocumentStore, user_id: str) -> dict:
    user = await store.get_or_404(USERS, user_id, "User")
    return public_user(user)


async def update_profile(store: DocumentStore, user_id: str, data: dict) -> dict:
    await store.get_or_404(USERS, user_id, "User")
    changes = {k: v for k, v in data.items() if k in PROFILE_FIELDS and v is not None}
    prefs = data.get("notificationPreferences") or {}
    for key, value in prefs.items():
        if value is not None:
            changes[f"notificationPreferences.{key}"] = value
    updated = await store.update_by_id(USERS, user_id, {"$set": changes})
    return public_user(updated)


async def connect(store: DocumentStore, user: dict, other_id: str) -> dict:
    if user["id"] == other_id:
        raise ConflictError("You cannot connect with yourself")
    other = await store.get_or_404(USERS, other_id, "User")
    already = other_id in (user.get("connections") or [])

    await store.update_by_id(USERS, user["id"], {"$addToSet": {"connections": other_id}})
    await store.update_by_id(USERS, other_id, {"$addToSet": {"connections": user["id"]}})
    if not already:
        await create_notification(
            store, other_id, "connection_request",
            f"{user.get('name') or 'A traveler'} connected with you",
            user["id"],
        )
    return {"connected": True, "userId": other["id"]}


async def list_connections(store: DocumentStore, user_id: str) -> list[dict]:
    user = await store.get_or_404(USERS, user_id, "User")
    ids = user.get("connections") or []
    if not ids:
        return []
    return [public_user(u) for u in await store.find(USERS, {"id": {"$in": ids}})]


# Feed

def can_view(post: dict, viewer_id: Optional[str], owner_connections: list) -> bool:
    visibility = post.get("visibility", "public")
    if visibility == "public":
        return True
    if viewer_id is None:
        return False
    if post.get("userId") == viewer_id:
        return True
    return visibility == "connections" and viewer_id in owner_connections


async def create_community_post(store: DocumentStore, user: dict, data: dict) -> dict:
    _ensure_not_blocked(user)
    post = {
        "userId": user["id"],
        "userName": user.get("name"),
        "userAvatar": user.get("avatar"),
        "content": data["content"],
        "images": list(data.get("images") or []),
        "location": data.get("location"),
        "tags": list(data.get("tags") or []),
        "visibility": data.get("visibility") or "public",
        "likes": 0,
        "comments": 0,
        "likedBy": [],
        "moderated": False,
    }
    scan = scan_content(data["content"])
    if scan.is_inappropriate:
        post.update({
            "moderated": True,
            "moderationReason": scan.reason,
            "moderatedAt": utcnow_iso(),
        })
    created = await store.insert_one(COMMUNITY_POSTS, post)

    if scan.is_inappropriate:
        result = await add_warning_to_user(store, user["id"], created["id"], scan.reason)
        logger.warning(f"Community post {created['id']} moderated: {scan.reason}")
        created["warningCount"] = result["warningCount"]
    created["wasModerated"] = scan.is_inappropriate
    return created


async def list_feed(
    store: DocumentStore,
    viewer_id: Optional[str],
    tag: Optional[str] = None,
    include_moderated: bool = False,
) -> list[dict]:
    query = {}
    if not include_moderated:
        query["moderated"] = {"$ne": True}
    if tag:
        query["tags"] = tag
    posts = await store.find(COMMUNITY_POSTS, query, sort=[("createdAt", -1)])

    connections_by_owner = {}
    visible = []
    for post in posts:
        owner_id = post.get("userId")
        if post.get("visibility") == "connections" and owner_id not in connections_by_owner:
            owner = await store.get(USERS, owner_id)
            connections_by_owner[owner_id] = (owner or {}).get("connections") or []
        if can_view(post, viewer_id, connections_by_owner.get(owner_id, [])):
            visible.append(post)
    return visible


async def toggle_like(store: DocumentStore, post_id: str, user_id: str) -> dict:
    post = await store.get_or_404(COMMUNITY_POSTS, post_id, "Post")
    if user_id in (post.get("likedBy") or []):
        likes = max(0, (post.get("likes") or 0) - 1)
        await store.update_by_id(COMMUNITY_POSTS, post_id, {"$pull": {"likedBy": user_id}, "$set": {"likes": likes}})
        return {"liked": False, "likes": likes}
    likes = (post.get("likes") or 0) + 1
    await store.update_by_id(COMMUNITY_POSTS, post_id, {"$addToSet": {"likedBy": user_id}, "$set": {"likes": likes}})
    return {"liked": True, "likes": likes}


async def toggle_save(store: DocumentStore, post_id: str, user_id: str) -> dict:
    await store.get_or_404(COMMUNITY_POSTS, post_id, "Post")
    query = {"userId": user_id, "postId": post_id}
    if await store.delete_one(SAVED_POSTS, query):
        return {"saved": False}
    await store.insert_one(SAVED_POSTS, query)
    return {"saved": True}


async def list_saved(store: DocumentStore, user_id: str) -> list[dict]:
    saved = await store.find(SAVED_POSTS, {"userId": user_id}, sort=[("createdAt", -1)])
    posts = []
    for entry in saved:
        post = await store.get(COMMUNITY_POSTS, entry["postId"])
        if post is not None:
            posts.append(post)
    return posts


async def list_post_comments(store: DocumentStore, post_id: str) -> list[dict]:
    return await store.find(COMMUNITY_COMMENTS, {"postId": post_id}, sort=[("createdAt", 1)])


async def add_post_comment(store: DocumentStore, post_id: str, user: dict, content: str) -> dict:
    _ensure_not_blocked(user)
    await store.get_or_404(COMMUNITY_POSTS, post_id, "Post")
    scan = scan_content(content)
    if scan.is_inappropriate:
        await add_warning_to_user(store, user["id"], post_id, scan.reason)
        raise PermissionDeniedError(f"Comment rejected: {scan.reason}")

    comment = await store.insert_one(COMMUNITY_COMMENTS, {
        "postId": post_id,
        "userId": user["id"],
        "userName": user.get("name"),
        "userAvatar": user.get("avatar"),
        "content": content,
    })
    await store.update_by_id(COMMUNITY_POSTS, post_id, {"$inc": {"comments": 1}})
    return comment


# Groups

def _with_member_count(group: dict) -> dict:
    group["memberCount"] = len(group.get("members") or [])
    return group


async def list_groups(store: DocumentStore, category: Optional[str] = None, featured: Optional[bool] = None) -> list[dict]:
    query = {"status": "active"}
    if category:
        query["category"] = category
    if featured is not None:
        query["featuredStatus"] = featured
    return await store.find(GROUPS, query, sort=[("memberCount", -1), ("name", 1)])


async def get_group(store: DocumentStore, group_id: str) -> dict:
    group = await store.get(GROUPS, group_id)
    if group is None:
        group = await store.find_one(GROUPS, {"slug": group_id})
    if group is None:
        raise DocumentNotFoundError(GROUPS, group_id, "Group")
    return group


async def create_group(store: DocumentStore, user: dict, data: dict) -> dict:
    _ensure_not_blocked(user)
    slug = slugify(data["name"])
    if await store.find_one(GROUPS, {"slug": slug}):
        raise ConflictError(f"A group with slug '{slug}' already exists")
    group = {
        "name": data["name"],
        "slug": slug,
        "description": data.get("description") or "",
        "category": data.get("category"),
        "creator": user["id"],
        "image": data.get("image"),
        "members": [user["id"]],
        "topics": list(data.get("topics") or []),
        "status": "active",
        "featuredStatus": False,
        "dateCreated": utcnow_iso(),
    }
    return await store.insert_one(GROUPS, _with_member_count(group))


async def join_group(store: DocumentStore, group_id: str, user_id: str) -> dict:
    group = await store.get_or_404(GROUPS, group_id, "Group")
    members = group.get("members") or []
    if user_id not in members:
        members.append(user_id)
    return await store.update_by_id(GROUPS, group_id, {"$set": {"members": members, "memberCount": len(members)}})


async def leave_group(store: DocumentStore, group_id: str, user_id: str) -> dict:
    group = await store.get_or_404(GROUPS, group_id, "Group")
    members = [m for m in group.get("members") or [] if m != user_id]
    return await store.update_by_id(GROUPS, group_id, {"$set": {"members": members, "memberCount": len(members)}})


# Events

async def list_events(store: DocumentStore, status: Optional[str] = None) -> list[dict]:
    query = {"status": status} if status else None
    return await store.find(EVENTS, query, sort=[("date", 1)])


async def create_event(store: DocumentStore, user: dict, data: dict) -> dict:
    _ensure_not_blocked(user)
    start, end = parse_datetime(data.get("date")), parse_datetime(data.get("endDate"))
    if start is None:
        raise ConflictError("Event date is not a valid date")
    if end is not None and end < start:
        raise ConflictError("End date cannot be before start date")
    event = dict(data)
    event.update({
        "host": {"id": user["id"], "name": user.get("name"), "avatar": user.get("avatar")},
        "attendees": [],
        "status": "upcoming",
        "tags": list(data.get("tags") or []),
    })
    return await store.insert_one(EVENTS, event)


async def attend_event(store: DocumentStore, event_id: str, user: dict) -> dict:
    event = await store.get_or_404(EVENTS, event_id, "Event")
    attendees = event.get("attendees") or []
    if any(a.get("id") == user["id"] for a in attendees):
        return event
    capacity = event.get("capacity")
    if capacity is not None and len(attendees) >= capacity:
        raise ConflictError("This event is at full capacity")
    return await store.update_by_id(EVENTS, event_id, {"$push": {"attendees": {"id": user["id"], "name": user.get("name")}}})


# Travel buddies

async def create_buddy_request(store: DocumentStore, user: dict, data: dict) -> dict:
    _ensure_not_blocked(user)
    start, end = parse_datetime(data.get("startDate")), parse_datetime(data.get("endDate"))
    if start is None or end is None:
        raise ConflictError("Start and end dates are required")
    if end < start:
        raise ConflictError("End date cannot be before start date")
    return await store.insert_one(BUDDY_REQUESTS, {
        "userId": user["id"],
        "userName": user.get("name"),
        "userAvatar": user.get("avatar"),
        "destination": data["destination"],
        "startDate": data["startDate"],
        "endDate": data["endDate"],
        "travelStyle": list(data.get("travelStyle") or []),
        "description": data.get("description") or "",
        "status": "active",
    })


async def list_buddy_requests(store: DocumentStore, destination: Optional[str] = None) -> list[dict]:
    query = {"status": "active"}
    if destination:
        query["destination"] = {"$regex": re.escape(destination), "$options": "i"}
    return await store.find(BUDDY_REQUESTS, query, sort=[("startDate", 1)])


async def close_buddy_request(store: DocumentStore, request_id: str, user_id: str, status: str = "completed") -> dict:
    request = await store.get_or_404(BUDDY_REQUESTS, request_id, "Buddy request")
    if request.get("userId") != user_id:
        raise PermissionDeniedError("You can only close your own buddy requests")
    return await store.update_by_id(BUDDY_REQUESTS, request_id, {"$set": {"status": status}})
