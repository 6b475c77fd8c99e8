"""Protocol for the read-only content store."""

from typing import Any, Protocol


class ContentStore(Protocol):
    """Interface for keyword-filterable, read-only content lookups.

    Each fetch returns raw row dicts (see ``studio_assistant.store.rows``) and
    must never write to the backing store.
    """

    async def fetch_articles(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        """Fetch article rows whose title/description/URL match any keyword."""
        ...

    async def fetch_events(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        """Fetch upcoming event rows matching any keyword, ordered by start date."""
        ...

    async def fetch_products(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        """Fetch product/price rows matching any keyword."""
        ...

    async def fetch_services(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        """Fetch service page rows matching any keyword."""
        ...
