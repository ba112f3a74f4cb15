"""
Utility functions for URL handling and post content normalization.

All utilities are stateless and lightweight.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

__all__ = [
    # URLs
    "is_valid_url",
    "canonical_thread_url",
    "thread_json_url",
    # Content
    "normalize_content",
    "iso_date",
]

logger = logging.getLogger(__name__)

# ══════════════════════════════════════════════════════════════════════════════
# URL Helpers
# ══════════════════════════════════════════════════════════════════════════════


def is_valid_url(url: Optional[str]) -> bool:
    """Return True for well-formed http(s) URLs with a host."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def canonical_thread_url(url: str) -> str:
    """Strip the query string and a trailing slash from a topic URL."""
    return url.strip().split("?")[0].split("#")[0].rstrip("/")


def thread_json_url(url: str, page: Optional[int] = None) -> str:
    """
    Build the Discourse JSON endpoint for a topic URL.

    Example:
        >>> thread_json_url("https://forum.example.com/t/slug/42/?u=me", page=3)
        'https://forum.example.com/t/slug/42.json?page=3'
    """
    json_url = f"{canonical_thread_url(url)}.json"
    if page is not None:
        json_url += f"?page={page}"
    return json_url


# ══════════════════════════════════════════════════════════════════════════════
# Content Normalization
# ══════════════════════════════════════════════════════════════════════════════

_BLANK_RUN = re.compile(r"\n{3,}")


def normalize_content(html: Optional[str]) -> str:
    """
    Strip markup from a cooked post body into plain text.

    Entities are decoded, runs of blank lines collapsed and the result
    trimmed, so display and search both see the same text.
    """
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text()
    return _BLANK_RUN.sub("\n\n", text).strip()


def iso_date(timestamp: Optional[str]) -> str:
    """Truncate an ISO 8601 timestamp to its calendar date (YYYY-MM-DD)."""
    if not timestamp or not isinstance(timestamp, str):
        return "unknown"
    value = timestamp.strip()
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable timestamp {value!r}, truncating")
        return value[:10]
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()
