import copy
import logging
from typing import Any

from ..exceptions import ConflictError
from .document_store import DocumentStore
from .query_engine import MISSING, get_path

logger = logging.getLogger(__name__)

SETTINGS = "settings"
SETTINGS_ID = "site"

DEFAULT_SETTINGS = {
    "general": {
        "siteTitle": "NomadNest",
        "siteDescription": "Travel stories, guides and a community of nomads",
        "contactEmail": "hello@nomadnest.example",
        "footerText": "© NomadNest. All rights reserved.",
        "maintenanceMode": False,
    },
    "seo": {
        "metaTitle": "NomadNest - Travel Blog & Community",
        "metaDescription": "Travel stories, destination guides and trip planning.",
        "keywords": "travel, blog, nomad, guides",
        "ogImageUrl": "",
    },
    "social": {
        "facebookUrl": "",
        "twitterUrl": "",
        "instagramUrl": "",
        "pinterestUrl": "",
    },
    "notifications": {
        "enableEmailNotifications": True,
        "adminEmailNotifications": True,
        "commentNotifications": True,
        "subscriptionNotifications": True,
    },
    "analytics": {
        "googleAnalyticsId": "",
        "facebookPixelId": "",
        "enableAnalytics": False,
    },
    "cookieConsent": {
        "requireCookieConsent": True,
        "message": "We use cookies to improve your experience on our site.",
    },
    "api": {
        "apiKeysEnabled": False,
        "rateLimit": "100",
    },
    "security": {
        "twoFactorAuth": False,
        "passwordPolicy": "medium",
        "sessionTimeout": "60",
    },
    "backup": {
        "autoBackup": False,
        "backupFrequency": "weekly",
    },
    "appearance": {
        "fontFamily": "Open Sans",
        "headerFont": "Poppins",
        "borderRadius": "0.5rem",
        "animationSpeed": "normal",
        "customCss": "",
    },
}

PUBLIC_SECTIONS = ("general", "social", "cookieConsent", "appearance")

ALLOWED_VALUES = {
    ("security", "passwordPolicy"): ("low", "medium", "high"),
    ("backup", "backupFrequency"): ("daily", "weekly", "monthly"),
}


def deep_merge(base: dict, override: dict) -> dict:
    """Return `base` with `override` merged in recursively."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _validate(partial: dict) -> None:
    for section, values in partial.items():
        if section not in DEFAULT_SETTINGS:
            raise ConflictError(f"Unknown settings section: {section}")
        if not isinstance(values, dict):
            raise ConflictError(f"Settings section {section} must be an object")
        for key, value in values.items():
            allowed = ALLOWED_VALUES.get((section, key))
            if allowed and value not in allowed:
                raise ConflictError(f"{section}.{key} must be one of: {', '.join(allowed)}")


async def get_settings(store: DocumentStore) -> dict:
    stored = await store.get(SETTINGS, SETTINGS_ID) or {}
    merged = deep_merge(DEFAULT_SETTINGS, {k: v for k, v in stored.items() if k in DEFAULT_SETTINGS})
    for key in ("createdAt", "updatedAt"):
        if key in stored:
            merged[key] = stored[key]
    return merged


async def save_settings(store: DocumentStore, partial: dict) -> dict:
    _validate(partial)
    stored = await store.get(SETTINGS, SETTINGS_ID)
    if stored is None:
        await store.insert_one(SETTINGS, {"id": SETTINGS_ID, **deep_merge({}, partial)})
    else:
        sections = {k: v for k, v in stored.items() if k in DEFAULT_SETTINGS}
        merged = deep_merge(sections, partial)
        await store.update_by_id(SETTINGS, SETTINGS_ID, {"$set": {k: merged[k] for k in partial}})
    logger.info(f"Saved settings sections: {', '.join(partial) or 'none'}")
    return await get_settings(store)


async def get_setting(store: DocumentStore, path: str) -> Any:
    value = get_path(await get_settings(store), path)
    return None if value is MISSING else value


async def get_public_settings(store: DocumentStore) -> dict:
    current = await get_settings(store)
    return {section: current[section] for section in PUBLIC_SECTIONS}
