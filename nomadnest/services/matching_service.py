import logging
import math
from typing import Iterable, Optional

from ..exceptions import DocumentNotFoundError
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

TRAVEL_MATCHES = "travelMatches"
USERS = "users"

DESTINATION_WEIGHT = 0.5
STYLE_WEIGHT = 0.25
INTEREST_WEIGHT = 0.25
MIN_MATCH_SCORE = 30


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, unlike round()."""
    return int(math.floor(value + 0.5))


def calculate_compatibility(a: Optional[Iterable[str]], b: Optional[Iterable[str]]) -> int:
    """Percentage overlap of two preference lists."""
    a = list(a or [])
    b = list(b or [])
    if not a or not b:
        return 0
    matched = sum(1 for item in a if item in b)
    union = set(a) | set(b)
    return round_half_up(100 * matched / len(union))


def generate_intelligent_matches(prefs: dict, candidates: list[dict]) -> list[dict]:
    """
    Score candidates against a traveller's preferences.

    Args:
        prefs: dict with destinations, travelStyles and interests lists
        candidates: dicts with userId and a preferences dict of the same shape

    Returns:
        Candidates scoring above MIN_MATCH_SCORE, best first
    """
    results = []
    for candidate in candidates:
        other = candidate.get("preferences") or {}
        destination_score = calculate_compatibility(prefs.get("destinations"), other.get("destinations"))
        style_score = calculate_compatibility(prefs.get("travelStyles"), other.get("travelStyles"))
        interest_score = calculate_compatibility(prefs.get("interests"), other.get("interests"))
        overall = round_half_up(
            DESTINATION_WEIGHT * destination_score
            + STYLE_WEIGHT * style_score
            + INTEREST_WEIGHT * interest_score
        )
        if overall > MIN_MATCH_SCORE:
            results.append({
                "userId": candidate.get("userId"),
                "compatibilityScore": overall,
                "destinationScore": destination_score,
                "styleScore": style_score,
                "interestScore": interest_score,
            })
    results.sort(key=lambda r: r["compatibilityScore"], reverse=True)
    return results


def preferences_from_profile(user: dict) -> dict:
    return {
        "destinations": list(user.get("wishlistDestinations") or []),
        "travelStyles": list(user.get("travelStyles") or []),
        "interests": list(user.get("interests") or []),
    }


async def save_preferences(store: DocumentStore, user_id: str, prefs: dict) -> dict:
    existing = await store.find_one(TRAVEL_MATCHES, {"userId": user_id})
    if existing:
        return await store.update_by_id(TRAVEL_MATCHES, existing["id"], {"$set": {"preferences": prefs, "status": "active"}})
    return await store.insert_one(TRAVEL_MATCHES, {
        "userId": user_id,
        "preferences": prefs,
        "potentialMatches": [],
        "status": "active",
    })


async def find_matches(store: DocumentStore, user_id: str) -> list[dict]:
    own = await store.find_one(TRAVEL_MATCHES, {"userId": user_id})
    if own is None:
        user = await store.get_or_404(USERS, user_id, "User")
        prefs = preferences_from_profile(user)
    else:
        prefs = own.get("preferences") or {}

    candidates = await store.find(TRAVEL_MATCHES, {"userId": {"$ne": user_id}, "status": "active"})
    ranked = generate_intelligent_matches(prefs, candidates)

    previous = {m["userId"]: m.get("status") for m in (own or {}).get("potentialMatches") or []}
    for match in ranked:
        other = await store.get(USERS, match["userId"])
        match["name"] = other.get("name") if other else None
        match["avatar"] = other.get("avatar") if other else None
        match["status"] = previous.get(match["userId"], "pending")

    if own is not None:
        await store.update_by_id(TRAVEL_MATCHES, own["id"], {"$set": {"potentialMatches": [
            {"userId": m["userId"], "compatibilityScore": m["compatibilityScore"], "status": m["status"]}
            for m in ranked
        ]}})
    logger.info(f"Found {len(ranked)} travel matches for user {user_id}")
    return ranked


async def respond_to_match(store: DocumentStore, user_id: str, other_id: str, accepted: bool) -> dict:
    own = await store.find_one(TRAVEL_MATCHES, {"userId": user_id})
    if own is None:
        raise DocumentNotFoundError(TRAVEL_MATCHES, user_id, "Match profile")
    status = "accepted" if accepted else "declined"
    matches = own.get("potentialMatches") or []
    if not any(m.get("userId") == other_id for m in matches):
        raise DocumentNotFoundError(TRAVEL_MATCHES, other_id, "Match")
    for match in matches:
        if match.get("userId") == other_id:
            match["status"] = status
    return await store.update_by_id(TRAVEL_MATCHES, own["id"], {"$set": {"potentialMatches": matches}})
