"""
Blog posts and their comments.

Posts reference their category and topics by name; the post counts stored on
categories and topics follow every create, update and delete.
"""
import logging
import re
from typing import Optional, Tuple

from ..exceptions import ConflictError, DocumentNotFoundError
from ..utils import estimate_read_time, slugify, utcnow_iso
from .document_store import DocumentStore
from .taxonomy_service import CATEGORIES, TOPICS, adjust_count

logger = logging.getLogger(__name__)

POSTS = "posts"
COMMENTS = "comments"


def build_post_query(
    category: Optional[str] = None,
    search: Optional[str] = None,
    topic: Optional[str] = None,
    status: Optional[str] = None,
) -> dict:
    query = {}
    if category and category != "All":
        query["category"] = category
    if topic:
        query["topics"] = topic
    if status:
        query["status"] = status
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"excerpt": {"$regex": pattern, "$options": "i"}},
        ]
    return query


async def list_posts(
    store: DocumentStore,
    category: Optional[str] = None,
    search: Optional[str] = None,
    topic: Optional[str] = None,
    status: Optional[str] = "published",
    limit: int = 20,
    offset: int = 0,
) -> Tuple[list[dict], int]:
    query = build_post_query(category, search, topic, status)
    total = await store.count(POSTS, query)
    items = await store.find(POSTS, query, sort=[("date", -1)], skip=offset, limit=limit)
    return items, total


async def get_post(store: DocumentStore, id_or_slug: str) -> dict:
    post = await store.get(POSTS, id_or_slug)
    if post is None:
        post = await store.find_one(POSTS, {"slug": id_or_slug})
    if post is None:
        raise DocumentNotFoundError(POSTS, id_or_slug, "Post")
    return post


async def related_posts(store: DocumentStore, post: dict, limit: int = 3) -> list[dict]:
    query = {
        "category": post.get("category"),
        "status": "published",
        "id": {"$ne": post["id"]},
    }
    return await store.find(POSTS, query, sort=[("date", -1)], limit=limit)


async def _unique_slug(store: DocumentStore, base: str, exclude_id: str = None) -> str:
    slug = base
    suffix = 2
    while True:
        existing = await store.find_one(POSTS, {"slug": slug})
        if existing is None or existing["id"] == exclude_id:
            return slug
        slug = f"{base}-{suffix}"
        suffix += 1


async def create_post(store: DocumentStore, data: dict) -> dict:
    slug = await _unique_slug(store, data.get("slug") or slugify(data["title"]))
    post = dict(data)
    post.update({
        "slug": slug,
        "excerpt": data.get("excerpt") or "",
        "readTime": data.get("readTime") or estimate_read_time(data.get("content")),
        "date": data.get("date") or utcnow_iso(),
        "topics": list(data.get("topics") or []),
        "mediaItems": list(data.get("mediaItems") or []),
        "status": data.get("status") or "published",
        "likes": 0,
        "comments": 0,
        "likedBy": [],
    })
    created = await store.insert_one(POSTS, post)

    await adjust_count(store, CATEGORIES, created.get("category"), 1)
    for topic in created["topics"]:
        await adjust_count(store, TOPICS, topic, 1)
    logger.info(f"Created post {created['id']} ({slug})")
    return created


async def update_post(store: DocumentStore, post_id: str, data: dict) -> dict:
    post = await store.get_or_404(POSTS, post_id, "Post")
    changes = {k: v for k, v in data.items() if v is not None}

    if "slug" in changes and changes["slug"] != post.get("slug"):
        existing = await store.find_one(POSTS, {"slug": changes["slug"]})
        if existing and existing["id"] != post["id"]:
            raise ConflictError(f"Slug '{changes['slug']}' is already in use")
    if "content" in changes and "readTime" not in changes:
        changes["readTime"] = estimate_read_time(changes["content"])

    updated = await store.update_by_id(POSTS, post["id"], {"$set": changes})

    if "category" in changes and changes["category"] != post.get("category"):
        await adjust_count(store, CATEGORIES, post.get("category"), -1)
        await adjust_count(store, CATEGORIES, changes["category"], 1)
    if "topics" in changes:
        old_topics = set(post.get("topics") or [])
        new_topics = set(changes["topics"])
        for topic in old_topics - new_topics:
            await adjust_count(store, TOPICS, topic, -1)
        for topic in new_topics - old_topics:
            await adjust_count(store, TOPICS, topic, 1)
    return updated


async def delete_post(store: DocumentStore, post_id: str) -> None:
    post = await store.get_or_404(POSTS, post_id, "Post")
    await store.delete_by_id(POSTS, post["id"])
    await adjust_count(store, CATEGORIES, post.get("category"), -1)
    for topic in post.get("topics") or []:
        await adjust_count(store, TOPICS, topic, -1)
    removed = await store.delete_many(COMMENTS, {"postId": post["id"]})
    logger.info(f"Deleted post {post['id']} and {removed} comments")


async def toggle_post_like(store: DocumentStore, post_id: str, user_id: str) -> dict:
    post = await store.get_or_404(POSTS, post_id, "Post")
    liked_by = post.get("likedBy") or []
    if user_id in liked_by:
        likes = max(0, (post.get("likes") or 0) - 1)
        await store.update_by_id(POSTS, post_id, {"$pull": {"likedBy": user_id}, "$set": {"likes": likes}})
        return {"liked": False, "likes": likes}
    likes = (post.get("likes") or 0) + 1
    await store.update_by_id(POSTS, post_id, {"$addToSet": {"likedBy": user_id}, "$set": {"likes": likes}})
    return {"liked": True, "likes": likes}


# Comments

def _comment_author(user: dict) -> dict:
    return {"id": user["id"], "name": user.get("name"), "avatar": user.get("avatar")}


async def list_comments(store: DocumentStore, post_id: str) -> list[dict]:
    return await store.find(COMMENTS, {"postId": post_id}, sort=[("date", 1)])


async def list_all_comments(store: DocumentStore, post_id: Optional[str] = None) -> list[dict]:
    query = {"postId": post_id} if post_id else None
    return await store.find(COMMENTS, query, sort=[("date", -1)])


async def add_comment(store: DocumentStore, post_id: str, user: dict, content: str) -> dict:
    await store.get_or_404(POSTS, post_id, "Post")
    comment = await store.insert_one(COMMENTS, {
        "postId": post_id,
        "author": _comment_author(user),
        "content": content,
        "date": utcnow_iso(),
        "likes": 0,
        "replies": [],
    })
    await store.update_by_id(POSTS, post_id, {"$inc": {"comments": 1}})
    return comment


async def add_reply(store: DocumentStore, comment_id: str, user: dict, content: str) -> dict:
    await store.get_or_404(COMMENTS, comment_id, "Comment")
    reply = {
        "author": _comment_author(user),
        "content": content,
        "date": utcnow_iso(),
        "likes": 0,
    }
    return await store.update_by_id(COMMENTS, comment_id, {"$push": {"replies": reply}})


async def like_comment(store: DocumentStore, comment_id: str) -> dict:
    await store.get_or_404(COMMENTS, comment_id, "Comment")
    return await store.update_by_id(COMMENTS, comment_id, {"$inc": {"likes": 1}})


async def delete_comment(store: DocumentStore, comment_id: str) -> None:
    comment = await store.get_or_404(COMMENTS, comment_id, "Comment")
    await store.delete_by_id(COMMENTS, comment_id)
    post = await store.get(POSTS, comment.get("postId"))
    if post is not None:
        count = max(0, (post.get("comments") or 0) - 1)
        await store.update_by_id(POSTS, post["id"], {"$set": {"comments": count}})
