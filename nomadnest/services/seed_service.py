"""
Demo content seeding.

Runs at startup and fills each collection only while it is still empty, so
restarting the service never duplicates content.
"""
import logging

from ..config import settings
from ..utils import slugify, utcnow_iso
from .ad_service import create_placement
from .auth_service import get_user_by_email, new_user_document
from .blog_service import create_post
from .document_store import DocumentStore
from .taxonomy_service import create_category, create_topic

logger = logging.getLogger(__name__)

CATEGORIES = [
    {"name": "Travel", "icon": "✈️"},
    {"name": "Food", "icon": "🍴"},
    {"name": "Adventure", "icon": "🧗"},
    {"name": "Culture", "icon": "🏛️"},
]

TOPICS = ["Adventure", "Nature", "Recipes", "Cooking", "Hiking", "Beach", "Mountains"]

POSTS = [
    {
        "title": "The Hidden Beaches of Thailand You Need to Visit",
        "excerpt": "Discover untouched paradises away from the tourist crowds where crystal clear waters meet pristine white sand.",
        "content": "Thailand's coastline hides dozens of quiet coves far from the party islands. "
                   "Take a longtail boat from Krabi and you can have a beach to yourself by mid-morning.",
        "author": {"name": "Sarah Johnson", "avatar": "https://i.pravatar.cc/150?img=1"},
        "category": "Travel",
        "coverImage": "https://images.unsplash.com/photo-1519451241324-20b4ea2c4220",
        "date": "2025-05-15T09:00:00+00:00",
        "topics": ["Beach", "Nature"],
        "status": "published",
    },
    {
        "title": "A Foodie's Guide to Authentic Italian Cuisine",
        "excerpt": "Beyond pizza and pasta: regional specialties that will transform your understanding of Italian food.",
        "content": "Every Italian region cooks differently. From Ligurian pesto to Sicilian arancini, "
                   "eat where the locals queue and order whatever is in season.",
        "author": {"name": "Marco Rossi", "avatar": "https://i.pravatar.cc/150?img=3"},
        "category": "Food",
        "coverImage": "https://images.unsplash.com/photo-1498579150354-977475b7ea0b",
        "date": "2025-04-28T09:00:00+00:00",
        "topics": ["Recipes", "Cooking"],
        "status": "published",
    },
]

HOTELS = [
    {
        "id": "hotel-1",
        "name": "Grand Plaza Hotel",
        "location": "New York, USA",
        "price": 199,
        "currency": "USD",
        "rating": 4.8,
        "image": "https://images.unsplash.com/photo-1566073771259-6a8506099945",
        "amenities": ["Free WiFi", "Pool", "Spa", "Restaurant"],
        "slug": "grand-plaza",
    },
    {
        "id": "hotel-2",
        "name": "Ocean View Resort",
        "location": "Miami, USA",
        "price": 299,
        "currency": "USD",
        "rating": 4.9,
        "image": "https://images.unsplash.com/photo-1520250497591-112f2f40a3f4",
        "amenities": ["Beach Access", "Free WiFi", "Pool", "Gym"],
        "slug": "ocean-view-resort",
    },
]

FLIGHTS = [
    {
        "id": "flight-1",
        "airline": "American Airlines",
        "flightNumber": "AA123",
        "departure": {"code": "JFK", "city": "New York", "time": "08:45"},
        "arrival": {"code": "LAX", "city": "Los Angeles", "time": "13:15"},
        "duration": "5h 30m",
        "stops": 0,
        "price": 350,
        "currency": "USD",
    },
    {
        "id": "flight-2",
        "airline": "Delta",
        "flightNumber": "DL456",
        "departure": {"code": "JFK", "city": "New York", "time": "10:20"},
        "arrival": {"code": "LAX", "city": "Los Angeles", "time": "14:55"},
        "duration": "5h 35m",
        "stops": 0,
        "price": 395,
        "currency": "USD",
    },
]

GUIDES = [
    {
        "id": "guide-1",
        "name": "Elena Martinez",
        "location": "Barcelona, Spain",
        "languages": ["English", "Spanish", "Catalan"],
        "price": 75,
        "currency": "USD",
        "rating": 4.9,
        "reviewCount": 127,
        "specialties": ["Architecture", "Food", "History"],
        "availability": ["Monday", "Tuesday", "Thursday", "Friday", "Saturday"],
    },
    {
        "id": "guide-2",
        "name": "Hiroshi Tanaka",
        "location": "Kyoto, Japan",
        "languages": ["English", "Japanese"],
        "price": 89,
        "currency": "USD",
        "rating": 4.8,
        "reviewCount": 92,
        "specialties": ["Traditional Culture", "Gardens", "Tea Ceremony"],
        "availability": ["Tuesday", "Wednesday", "Friday", "Sunday"],
    },
]

GROUPS = [
    {"name": "Digital Nomads", "description": "Remote workers trading tips on visas, coworking and long stays.",
     "category": "Lifestyle", "topics": ["remote-work", "visas"], "featuredStatus": True},
    {"name": "Budget Backpackers", "description": "Hostels, night buses and stretching every dollar.",
     "category": "Budget", "topics": ["backpacking", "hostels"], "featuredStatus": False},
    {"name": "Mountain Trekkers", "description": "Planning multi-day hikes and high-altitude routes.",
     "category": "Adventure", "topics": ["hiking", "mountains"], "featuredStatus": True},
]

EVENTS = [
    {
        "title": "Virtual Meetup: Working From Lisbon",
        "description": "Nomads who have lived in Lisbon share neighbourhoods, costs and coworking picks.",
        "type": "meetup",
        "date": "2026-12-05T18:00:00+00:00",
        "endDate": "2026-12-05T19:30:00+00:00",
        "location": {"type": "online", "details": "Video call link sent to attendees"},
        "capacity": 100,
        "category": "Lifestyle",
        "tags": ["lisbon", "remote-work"],
    },
    {
        "title": "Barcelona Photo Walk",
        "description": "A relaxed morning walk through the Gothic Quarter with a local photographer.",
        "type": "tour",
        "date": "2026-11-21T09:00:00+00:00",
        "endDate": "2026-11-21T12:00:00+00:00",
        "location": {"type": "physical", "details": "Plaça Nova, Barcelona"},
        "capacity": 15,
        "category": "Culture",
        "tags": ["photography", "barcelona"],
    },
]


AD_PLACEMENTS = [
    {"name": "Header Banner", "slot": "1234567890", "type": "header", "format": "horizontal",
     "location": "all-pages", "isEnabled": True, "responsive": True},
    {"name": "Sidebar Ad", "slot": "0987654321", "type": "sidebar", "format": "vertical",
     "location": "blog", "isEnabled": True, "responsive": True},
    {"name": "Between Posts", "slot": "1122334455", "type": "between-posts", "format": "auto",
     "location": "blog", "isEnabled": True, "responsive": True},
]

async def _seed_admin(store: DocumentStore) -> int:
    if await store.count("users", {"role": "admin"}):
        return 0
    existing = await get_user_by_email(store, settings.admin_email)
    if existing:
        await store.update_by_id("users", existing["id"], {"$set": {"role": "admin"}})
        logger.info(f"Promoted existing user {existing['id']} to admin")
        return 0
    await store.insert_one("users", new_user_document(
        settings.admin_email, settings.admin_password, settings.admin_name, role="admin"))
    return 1


async def _seed_with(store: DocumentStore, collection: str, items: list, create) -> int:
    if await store.count(collection):
        return 0
    for item in items:
        await create(store, dict(item))
    return len(items)


async def _insert_all(store: DocumentStore, collection: str, items: list) -> int:
    if await store.count(collection):
        return 0
    await store.insert_many(collection, items)
    return len(items)


async def seed_if_empty(store: DocumentStore) -> dict:
    seeded = {"users": await _seed_admin(store)}
    admin = await store.find_one("users", {"role": "admin"})

    seeded["categories"] = await _seed_with(store, "categories", CATEGORIES, create_category)
    seeded["topics"] = await _seed_with(
        store, "topics", [{"name": name} for name in TOPICS], create_topic)
    seeded["posts"] = await _seed_with(store, "posts", POSTS, create_post)
    seeded["hotels"] = await _insert_all(store, "hotels", HOTELS)
    seeded["flights"] = await _insert_all(store, "flights", FLIGHTS)
    seeded["guides"] = await _insert_all(store, "guides", GUIDES)
    seeded["adPlacements"] = await _seed_with(store, "adPlacements", AD_PLACEMENTS, create_placement)

    owner_id = admin["id"] if admin else None
    seeded["travelGroups"] = await _insert_all(store, "travelGroups", [
        {
            **group,
            "slug": slugify(group["name"]),
            "creator": owner_id,
            "members": [owner_id] if owner_id else [],
            "memberCount": 1 if owner_id else 0,
            "status": "active",
            "dateCreated": utcnow_iso(),
        }
        for group in GROUPS
    ])
    seeded["communityEvents"] = await _insert_all(store, "communityEvents", [
        {
            **event,
            "host": {"id": owner_id, "name": admin.get("name") if admin else settings.admin_name},
            "attendees": [],
            "status": "upcoming",
        }
        for event in EVENTS
    ])

    logger.info(f"Seeding finished: {seeded}")
    return seeded
