"""
Site and per-user colour themes, and the generated stylesheet.

Colours are kept per mode (light and dark) in the order the front end renders
them. With the brand lock enabled, primary and footer always use the brand colour.
"""
import copy
import logging
import re
from typing import Optional

from ..config import settings
from ..exceptions import ConflictError, DocumentNotFoundError
from .document_store import DocumentStore
from .settings_service import get_settings, save_settings

logger = logging.getLogger(__name__)

USER_SETTINGS = "userSettings"
SITE_OWNER = "site"

COLOR_KEYS = ("background", "foreground", "primary", "footer", "header", "card")
BRANDED_KEYS = ("primary", "footer")

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

DEFAULT_THEME = {
    "theme": "light",
    "lightThemeColors": {
        "background": "#ffffff",
        "foreground": "#222222",
        "primary": "#065f46",
        "footer": "#065f46",
        "header": "#ffffff",
        "card": "#f8f9fa",
    },
    "darkThemeColors": {
        "background": "#1f2937",
        "foreground": "#f8f9fa",
        "primary": "#065f46",
        "footer": "#065f46",
        "header": "#111827",
        "card": "#374151",
    },
}


def _preset(preset_id, name, description, light, dark):
    return {
        "id": preset_id,
        "name": name,
        "description": description,
        "lightTheme": dict(zip(COLOR_KEYS, light)),
        "darkTheme": dict(zip(COLOR_KEYS, dark)),
    }


# Colours in COLOR_KEYS order
THEME_PRESETS = [
    _preset("default", "Default", "The standard NomadNest look",
            ("#ffffff", "#222222", "#065f46", "#065f46", "#ffffff", "#f8f9fa"),
            ("#1A1F2C", "#f8f9fa", "#10B981", "#222222", "#222222", "#2D3748")),
    _preset("ocean", "Ocean Blue", "Calm blues inspired by the sea",
            ("#ffffff", "#333333", "#0EA5E9", "#0c4a6e", "#f0f9ff", "#f0f9ff"),
            ("#0f172a", "#e2e8f0", "#38bdf8", "#1e3a5f", "#1e3a5f", "#1e293b")),
    _preset("sunset", "Sunset Orange", "Warm oranges of a summer evening",
            ("#ffffff", "#422006", "#ea580c", "#9a3412", "#fff7ed", "#ffedd5"),
            ("#27272a", "#fafafa", "#f97316", "#7c2d12", "#7c2d12", "#3f3f46")),
    _preset("lavender", "Lavender Dreams", "Soft purples",
            ("#ffffff", "#3b0764", "#9333ea", "#7e22ce", "#faf5ff", "#f3e8ff"),
            ("#1c1033", "#e9d5ff", "#a855f7", "#6b21a8", "#6b21a8", "#3b0764")),
    _preset("forest", "Forest Green", "Natural greens of the woods",
            ("#ffffff", "#14532d", "#16a34a", "#15803d", "#f0fdf4", "#dcfce7"),
            ("#0f1f0f", "#dcfce7", "#22c55e", "#166534", "#166534", "#14532d")),
    _preset("cherry", "Cherry Blossom", "Pinks and reds of spring",
            ("#ffffff", "#881337", "#e11d48", "#be123c", "#fff1f2", "#ffe4e6"),
            ("#1c1033", "#fecdd3", "#f43f5e", "#9f1239", "#9f1239", "#881337")),
    _preset("midnight", "Midnight", "Deep indigo for night owls",
            ("#ffffff", "#1e1b4b", "#4338ca", "#3730a3", "#eef2ff", "#e0e7ff"),
            ("#0f172a", "#e0e7ff", "#6366f1", "#312e81", "#312e81", "#1e1b4b")),
    _preset("coffee", "Coffee", "Warm browns inspired by coffee tones",
            ("#ffffff", "#44403c", "#92400e", "#78350f", "#fef3c7", "#fef3c7"),
            ("#1c1917", "#e7e5e4", "#d97706", "#78350f", "#78350f", "#44403c")),
    _preset("slate", "Modern Slate", "Professional gray tones for a modern look",
            ("#f8fafc", "#334155", "#64748b", "#475569", "#f1f5f9", "#f1f5f9"),
            ("#0f172a", "#e2e8f0", "#94a3b8", "#334155", "#334155", "#1e293b")),
    _preset("neon", "Neon Future", "Bold neon colors for a futuristic look",
            ("#ffffff", "#18181b", "#3b82f6", "#1d4ed8", "#eff6ff", "#dbeafe"),
            ("#09090b", "#e4e4e7", "#8b5cf6", "#4c1d95", "#4c1d95", "#18181b")),
]

ANIMATION_DURATIONS = {"slow": "500ms", "normal": "300ms", "fast": "150ms"}


def is_valid_color(value: str) -> bool:
    return isinstance(value, str) and bool(_COLOR_RE.match(value))


def enforce_brand_colors(theme: dict) -> dict:
    if not settings.theme_enforce_brand_colors:
        return theme
    for mode in ("lightThemeColors", "darkThemeColors"):
        colors = theme.get(mode)
        if colors is not None:
            for key in BRANDED_KEYS:
                colors[key] = settings.brand_color
    return theme


def normalize_theme(theme: dict) -> dict:
    """Fill missing colours from the defaults, validate and apply the brand lock."""
    result = {"theme": theme.get("theme") or DEFAULT_THEME["theme"]}
    if result["theme"] not in ("light", "dark", "system"):
        raise ConflictError(f"Unknown theme mode: {result['theme']}")
    for mode in ("lightThemeColors", "darkThemeColors"):
        colors = dict(DEFAULT_THEME[mode])
        for key, value in (theme.get(mode) or {}).items():
            if value is None:
                continue
            if not is_valid_color(value):
                raise ConflictError(f"Invalid colour for {mode}.{key}: {value}")
            colors[key] = value
        result[mode] = colors
    return enforce_brand_colors(result)


def generate_css_variables(light: dict, dark: dict) -> str:
    light_vars = "\n".join(f"  --light-{key}: {value};" for key, value in light.items())
    dark_vars = "\n".join(f"  --dark-{key}: {value};" for key, value in dark.items())
    return f":root {{\n{light_vars}\n}}\n\n.dark {{\n{dark_vars}\n}}"


def render_stylesheet(theme: dict, appearance: Optional[dict] = None) -> str:
    appearance = appearance or {}
    css = generate_css_variables(theme["lightThemeColors"], theme["darkThemeColors"])
    duration = ANIMATION_DURATIONS.get(appearance.get("animationSpeed") or "normal", "300ms")
    css += (
        "\n\n:root {\n"
        f"  --font-family: '{appearance.get('fontFamily') or 'Open Sans'}', sans-serif;\n"
        f"  --header-font: '{appearance.get('headerFont') or 'Poppins'}', sans-serif;\n"
        f"  --radius: {appearance.get('borderRadius') or '0.5rem'};\n"
        f"  --animation-duration: {duration};\n"
        "}"
    )
    custom = (appearance.get("customCss") or "").strip()
    if custom:
        css += f"\n\n{custom}"
    return css + "\n"


async def get_theme(store: DocumentStore, owner: str = SITE_OWNER) -> dict:
    stored = await store.find_one(USER_SETTINGS, {"userId": owner})
    if stored is None or not stored.get("theme"):
        return enforce_brand_colors(copy.deepcopy(DEFAULT_THEME))
    return normalize_theme(stored["theme"])


async def save_theme(store: DocumentStore, owner: str, theme: dict) -> dict:
    normalized = normalize_theme(theme)
    existing = await store.find_one(USER_SETTINGS, {"userId": owner})
    if existing:
        await store.update_by_id(USER_SETTINGS, existing["id"], {"$set": {"theme": normalized}})
    else:
        await store.insert_one(USER_SETTINGS, {"userId": owner, "theme": normalized})
    logger.info(f"Saved theme for {owner}")
    return normalized


def get_preset(preset_id: str) -> dict:
    for preset in THEME_PRESETS:
        if preset["id"] == preset_id:
            return preset
    raise DocumentNotFoundError("themePresets", preset_id, "Theme preset")


async def apply_preset(store: DocumentStore, owner: str, preset_id: str) -> dict:
    preset = get_preset(preset_id)
    current = await get_theme(store, owner)
    return await save_theme(store, owner, {
        "theme": current["theme"],
        "lightThemeColors": preset["lightTheme"],
        "darkThemeColors": preset["darkTheme"],
    })


async def get_appearance(store: DocumentStore) -> dict:
    return (await get_settings(store))["appearance"]


async def save_appearance(store: DocumentStore, appearance: dict) -> dict:
    changes = {k: v for k, v in appearance.items() if v is not None}
    speed = changes.get("animationSpeed")
    if speed is not None and speed not in ANIMATION_DURATIONS:
        raise ConflictError(f"Unknown animation speed: {speed}")
    return (await save_settings(store, {"appearance": changes}))["appearance"]


async def site_stylesheet(store: DocumentStore) -> str:
    return render_stylesheet(await get_theme(store, SITE_OWNER), await get_appearance(store))
