"""Read-only content store over a Supabase (PostgREST) project."""

import logging
import os
import re
from datetime import UTC, datetime
from typing import Any

import httpx

EVENTS_VIEW = "v_events_for_chat"
ENTITIES_TABLE = "page_entities"

logger = logging.getLogger(__name__)

# Characters with meaning in the PostgREST filter grammar.
_UNSAFE_RE = re.compile(r"[,()*:.\"'\\%]")


def sanitize_keyword(keyword: str) -> str:
    """Make a keyword safe to embed in an ``ilike`` filter."""
    return " ".join(_UNSAFE_RE.sub(" ", keyword).split())


def ilike_filter(columns: list[str], keywords: list[str]) -> str | None:
    """Build a PostgREST ``or=(...)`` expression matching any keyword in any column."""
    clauses = [
        f"{column}.ilike.*{kw}*"
        for kw in (sanitize_keyword(k) for k in keywords)
        if kw
        for column in columns
    ]
    if not clauses:
        return None
    return f"({','.join(clauses)})"


class SupabaseContentStore:
    """Read-only content store backed by a Supabase (PostgREST) project.

    Args:
        url: Project URL (defaults to SUPABASE_URL env var).
        api_key: Service or anon key (defaults to SUPABASE_SERVICE_ROLE_KEY,
            then SUPABASE_ANON_KEY env vars).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._url = (url or os.environ.get("SUPABASE_URL") or "").rstrip("/")
        if not self._url:
            raise ValueError("Supabase URL required. Pass url or set SUPABASE_URL env var.")
        self._api_key = (
            api_key
            or os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
            or os.environ.get("SUPABASE_ANON_KEY")
        )
        if not self._api_key:
            raise ValueError(
                "Supabase API key required. Pass api_key or set SUPABASE_SERVICE_ROLE_KEY env var."
            )
        self._timeout = timeout

    async def fetch_articles(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return await self._fetch_entities("article", keywords, limit=limit, order="last_seen.desc")

    async def fetch_products(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return await self._fetch_entities("product", keywords, limit=limit)

    async def fetch_services(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return await self._fetch_entities("service", keywords, limit=limit)

    async def fetch_events(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        params: dict[str, str | int] = {
            "select": "*",
            "date_start": f"gte.{datetime.now(tz=UTC).date().isoformat()}",
            "order": "date_start.asc",
            "limit": limit,
        }
        expr = ilike_filter(["event_title", "event_url", "event_location"], keywords)
        if expr:
            params["or"] = expr
        return await self._get(EVENTS_VIEW, params)

    async def _fetch_entities(
        self,
        kind: str,
        keywords: list[str],
        *,
        limit: int,
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, str | int] = {
            "select": "*",
            "kind": f"eq.{kind}",
            "limit": limit,
        }
        expr = ilike_filter(["title", "description", "page_url"], keywords)
        if expr:
            params["or"] = expr
        if order:
            params["order"] = order
        return await self._get(ENTITIES_TABLE, params)

    async def _get(self, table: str, params: dict[str, str | int]) -> list[dict[str, Any]]:
        headers = {
            "apikey": self._api_key,  # type: ignore[dict-item]
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(
                f"{self._url}/rest/v1/{table}", params=params, headers=headers
            )
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, list):
            logger.warning(f"Unexpected payload from {table}: {type(data).__name__}")
            return []
        return [row for row in data if isinstance(row, dict)]
