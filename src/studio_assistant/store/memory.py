"""In-process content store used by tests and the offline CLI."""

import json
from collections.abc import Callable
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import yaml

_SEARCH_FIELDS = (
    "title",
    "event_title",
    "description",
    "page_url",
    "url",
    "event_url",
    "event_location",
)


def _matches(row: dict[str, Any], keywords: list[str]) -> bool:
    if not keywords:
        return True
    haystack = " ".join(str(row.get(f) or "") for f in _SEARCH_FIELDS).lower()
    return any(k.lower() in haystack for k in keywords)


def _start_day(row: dict[str, Any]) -> date | None:
    raw = row.get("date_start")
    if raw in (None, ""):
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    return datetime.fromisoformat(str(raw)).date()


class InMemoryContentStore:
    """Content store over in-memory row dicts with substring (ILIKE-style) matching.

    Args:
        articles: Article rows.
        events: Event rows (``v_events_for_chat`` shape).
        products: Product rows.
        services: Service rows.
        clock: Returns "now"; events starting before today are not returned.
    """

    def __init__(
        self,
        *,
        articles: list[dict[str, Any]] | None = None,
        events: list[dict[str, Any]] | None = None,
        products: list[dict[str, Any]] | None = None,
        services: list[dict[str, Any]] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._articles = list(articles or [])
        self._events = list(events or [])
        self._products = list(products or [])
        self._services = list(services or [])
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    @classmethod
    def from_file(
        cls, path: Path | str, *, clock: Callable[[], datetime] | None = None
    ) -> "InMemoryContentStore":
        """Load a catalog with ``articles/events/products/services`` lists from YAML or JSON."""
        path = Path(path)
        with path.open() as f:
            raw = json.load(f) if path.suffix == ".json" else yaml.safe_load(f)
        raw = raw or {}
        return cls(
            articles=raw.get("articles"),
            events=raw.get("events"),
            products=raw.get("products"),
            services=raw.get("services"),
            clock=clock,
        )

    async def fetch_articles(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return [r for r in self._articles if _matches(r, keywords)][:limit]

    async def fetch_events(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        today = self._clock().date()
        upcoming = [
            r
            for r in self._events
            if _matches(r, keywords) and (_start_day(r) or date.min) >= today
        ]
        upcoming.sort(key=lambda r: str(r.get("date_start") or ""))
        return upcoming[:limit]

    async def fetch_products(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return [r for r in self._products if _matches(r, keywords)][:limit]

    async def fetch_services(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return [r for r in self._services if _matches(r, keywords)][:limit]
