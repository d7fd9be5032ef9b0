"""Shared utility functions."""
import re
import uuid
from datetime import datetime, timezone
from urllib.parse import urlparse


def generate_article_id() -> str:
    """Generate a unique article ID."""
    return f"news_{uuid.uuid4().hex[:12]}"


def generate_source_id() -> str:
    """Generate a unique news source ID."""
    return f"src_{uuid.uuid4().hex[:12]}"


def generate_log_id() -> str:
    """Generate a unique pipeline log ID."""
    return f"log_{uuid.uuid4().hex[:12]}"


def get_utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def validate_url(url: str) -> bool:
    """Validate that a URL is properly formatted."""
    try:
        result = urlparse(url)
        return all([result.scheme in ('http', 'https'), result.netloc])
    except Exception:
        return False


def slugify(text: str, max_length: int = 80) -> str:
    """Build a URL slug from a title."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:max_length].rstrip("-")


def truncate(text: str, max_length: int) -> str:
    """Cut text to at most max_length characters."""
    if len(text) <= max_length:
        return text
    return text[:max_length]
