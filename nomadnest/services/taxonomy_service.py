import logging
import re
from typing import Optional

from ..exceptions import ConflictError, DocumentNotFoundError
from ..utils import slugify
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

CATEGORIES = "categories"
TOPICS = "topics"
POSTS = "posts"


def _name_query(name: str) -> dict:
    return {"name": {"$regex": f"^{re.escape(name)}$", "$options": "i"}}


async def _ensure_unique(store: DocumentStore, collection: str, name: str, slug: str, exclude_id: str = None) -> None:
    for query in (_name_query(name), {"slug": slug}):
        existing = await store.find_one(collection, query)
        if existing and existing["id"] != exclude_id:
            raise ConflictError(f"A {collection[:-1]} named '{name}' or with slug '{slug}' already exists")


async def adjust_count(store: DocumentStore, collection: str, name: Optional[str], delta: int) -> None:
    """Shift the post count of the category or topic called `name`, floored at 0."""
    if not name:
        return
    doc = await store.find_one(collection, _name_query(name))
    if doc is None:
        return
    new_count = max(0, (doc.get("count") or 0) + delta)
    await store.update_by_id(collection, doc["id"], {"$set": {"count": new_count}})


# Categories

async def list_categories(store: DocumentStore) -> list[dict]:
    return await store.find(CATEGORIES, sort=[("name", 1)])


async def get_category(store: DocumentStore, category_id: str) -> dict:
    category = await store.get(CATEGORIES, category_id)
    if category is None:
        category = await store.find_one(CATEGORIES, {"slug": category_id})
    if category is None:
        raise DocumentNotFoundError(CATEGORIES, category_id, "Category")
    return category


async def create_category(store: DocumentStore, data: dict) -> dict:
    name = data["name"].strip()
    slug = data.get("slug") or slugify(name)
    await _ensure_unique(store, CATEGORIES, name, slug)
    category = await store.insert_one(CATEGORIES, {
        "name": name,
        "slug": slug,
        "icon": data.get("icon") or "📁",
        "image": data.get("image"),
        "count": 0,
    })
    logger.info(f"Created category {name}")
    return category


async def update_category(store: DocumentStore, category_id: str, data: dict) -> dict:
    category = await store.get_or_404(CATEGORIES, category_id, "Category")
    changes = {k: v for k, v in data.items() if v is not None}
    if "name" in changes and "slug" not in changes:
        changes["slug"] = slugify(changes["name"])
    name = changes.get("name", category["name"])
    slug = changes.get("slug", category["slug"])
    await _ensure_unique(store, CATEGORIES, name, slug, exclude_id=category["id"])

    updated = await store.update_by_id(CATEGORIES, category["id"], {"$set": changes})
    if name != category["name"]:
        moved = await store.update_many(POSTS, {"category": category["name"]}, {"$set": {"category": name}})
        logger.info(f"Renamed category {category['name']} to {name} on {moved} posts")
    return updated


async def delete_category(store: DocumentStore, category_id: str) -> None:
    category = await store.get_or_404(CATEGORIES, category_id, "Category")
    await store.delete_by_id(CATEGORIES, category["id"])


# Topics

async def list_topics(store: DocumentStore) -> list[dict]:
    return await store.find(TOPICS, sort=[("name", 1)])


async def trending_topics(store: DocumentStore, limit: int = 10) -> list[dict]:
    return await store.find(TOPICS, sort=[("count", -1), ("name", 1)], limit=limit)


async def create_topic(store: DocumentStore, data: dict) -> dict:
    name = data["name"].strip()
    slug = data.get("slug") or slugify(name)
    await _ensure_unique(store, TOPICS, name, slug)
    return await store.insert_one(TOPICS, {"name": name, "slug": slug, "count": 0})


async def update_topic(store: DocumentStore, topic_id: str, data: dict) -> dict:
    topic = await store.get_or_404(TOPICS, topic_id, "Topic")
    changes = {k: v for k, v in data.items() if v is not None}
    if "name" in changes and "slug" not in changes:
        changes["slug"] = slugify(changes["name"])
    name = changes.get("name", topic["name"])
    slug = changes.get("slug", topic["slug"])
    await _ensure_unique(store, TOPICS, name, slug, exclude_id=topic["id"])

    updated = await store.update_by_id(TOPICS, topic["id"], {"$set": changes})
    if name != topic["name"]:
        for post in await store.find(POSTS, {"topics": topic["name"]}):
            topics = [name if t == topic["name"] else t for t in post.get("topics", [])]
            await store.update_by_id(POSTS, post["id"], {"$set": {"topics": topics}})
    return updated


async def delete_topic(store: DocumentStore, topic_id: str) -> None:
    topic = await store.get_or_404(TOPICS, topic_id, "Topic")
    await store.delete_by_id(TOPICS, topic["id"])
