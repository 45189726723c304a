from .document_store import DocumentStore


async def dashboard_stats(store: DocumentStore) -> dict:
    """Headline counts for the admin dashboard."""
    confirmed = await store.find("bookings", {"status": "confirmed"})
    return {
        "posts": {
            "total": await store.count("posts"),
            "published": await store.count("posts", {"status": "published"}),
            "draft": await store.count("posts", {"status": "draft"}),
        },
        "comments": await store.count("comments"),
        "categories": await store.count("categories"),
        "topics": await store.count("topics"),
        "users": {
            "total": await store.count("users"),
            "blocked": await store.count("users", {"status": "blocked"}),
        },
        "communityPosts": {
            "total": await store.count("communityPosts"),
            "moderated": await store.count("communityPosts", {"moderated": True}),
        },
        "trips": await store.count("trips"),
        "bookings": {
            "total": await store.count("bookings"),
            "revenue": round(sum(b.get("amount") or 0 for b in confirmed), 2),
        },
        "subscriptions": {
            "active": await store.count("subscriptions", {"status": "active"}),
        },
        "newsletter": {
            "active": await store.count("newsletter", {"active": True}),
        },
        "warnings": {
            "unacknowledged": await store.count("contentWarnings", {"acknowledgedAt": None}),
        },
    }
