"""Protocol for the clarification session store."""

from typing import Any, Protocol


class SessionStore(Protocol):
    """Key-value store for per-session dialogue state.

    Values are JSON-compatible dicts. Reads and writes are last-write-wins;
    entries expire after the store's TTL.
    """

    async def get(self, session_id: str) -> dict[str, Any] | None:
        """Return the stored record, or None if absent or expired."""
        ...

    async def set(self, session_id: str, value: dict[str, Any]) -> None:
        """Store (or replace) the record for a session."""
        ...

    async def delete(self, session_id: str) -> None:
        """Remove the record for a session if present."""
        ...
