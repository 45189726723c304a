import logging
from typing import Optional

import bcrypt

from ..config import settings
from ..exceptions import AuthenticationError, ConflictError
from ..utils import utcnow_iso
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

USERS = "users"

DEFAULT_NOTIFICATION_PREFERENCES = {
    "contentWarnings": True,
    "messages": True,
    "connections": True,
}


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.password_hash_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode()


def check_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def new_user_document(email: str, password: str, name: str, role: str = "user") -> dict:
    """Build a user document with the community profile defaults."""
    return {
        "email": email.strip().lower(),
        "name": name,
        "username": email.split("@")[0].lower(),
        "passwordHash": hash_password(password),
        "role": role,
        "status": "active",
        "joinDate": utcnow_iso(),
        "experienceLevel": "Newbie",
        "travelStyles": [],
        "interests": [],
        "wishlistDestinations": [],
        "visitedCountries": [],
        "badges": [],
        "reputation": 0,
        "socialProfiles": {},
        "notificationPreferences": dict(DEFAULT_NOTIFICATION_PREFERENCES),
        "connections": [],
    }


async def get_user_by_email(store: DocumentStore, email: str) -> Optional[dict]:
    return await store.find_one(USERS, {"email": email.strip().lower()})


async def register_user(store: DocumentStore, email: str, password: str, name: str, role: str = "user") -> dict:
    if await get_user_by_email(store, email):
        raise ConflictError("An account with this email already exists")
    user = await store.insert_one(USERS, new_user_document(email, password, name, role))
    logger.info(f"Registered user {user['id']} with role {role}")
    return user


async def authenticate(store: DocumentStore, email: str, password: str) -> dict:
    user = await get_user_by_email(store, email)
    if not user or not check_password(password, user.get("passwordHash")):
        logger.warning(f"Failed login attempt for {email}")
        raise AuthenticationError()
    await store.update_by_id(USERS, user["id"], {"$set": {"lastActive": utcnow_iso()}})
    return user


async def list_users(store: DocumentStore, status: Optional[str] = None) -> list[dict]:
    query = {"status": status} if status else None
    return await store.find(USERS, query, sort=[("createdAt", -1)])
