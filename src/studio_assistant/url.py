"""URL handling utilities."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """Normalize a canonical URL for deduplication.

    Args:
        url: The URL to normalize.

    Returns:
        Lower-cased URL without query string, fragment or trailing slash.
        An empty string is returned unchanged.
    """
    url = url.strip()
    if not url:
        return ""
    try:
        parsed = urlparse(url.lower())
    except ValueError:
        logger.warning(f"Could not parse url {url}")
        return url.lower().rstrip("/")
    netloc = parsed.netloc
    # Remove www. prefix
    if netloc.startswith("www."):
        netloc = netloc[4:]
    path = parsed.path.rstrip("/")
    if not netloc:
        return path
    return f"{netloc}{path}"


def url_slug(url: str) -> str:
    """Return the last path segment of a URL, or an empty string."""
    path = urlparse(url.strip()).path.rstrip("/")
    return path.rsplit("/", 1)[-1].lower() if path else ""


def slug_keywords(url_or_path: str) -> list[str]:
    """Split a page URL or path into lower-case keyword tokens.

    Used to turn page context like ``/photography-workshops/bluebell-woodlands``
    into ``["photography", "workshops", "bluebell", "woodlands"]``.
    """
    path = urlparse(url_or_path.strip()).path or url_or_path
    return [t for t in re.split(r"[^a-z0-9]+", path.lower()) if len(t) > 2]
