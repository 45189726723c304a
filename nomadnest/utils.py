import re
import secrets
import string
import unicodedata
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    """Current UTC time as an ISO-8601 string, the timestamp format stored in documents."""
    return utcnow().isoformat()


def parse_datetime(value) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime string into an aware UTC datetime.

    Args:
        value: ISO string, datetime, or None

    Returns:
        Aware datetime, or None when the value is empty or unparseable
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def slugify(value: str) -> str:
    """Lowercase ASCII slug with hyphen separators."""
    normalized = unicodedata.normalize("NFKD", value or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-zA-Z0-9]+", "-", ascii_text).strip("-").lower()
    return slug or "item"


def estimate_read_time(content: Optional[str], words_per_minute: int = 200) -> str:
    words = len(re.findall(r"\S+", re.sub(r"<[^>]+>", " ", content or "")))
    minutes = max(1, round(words / words_per_minute))
    return f"{minutes} min read"


def random_token(length: int, alphabet: str = string.ascii_lowercase + string.digits) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def public_user(user: dict) -> dict:
    """Strip credentials from a user document before returning it."""
    return {k: v for k, v in user.items() if k != "passwordHash"}
