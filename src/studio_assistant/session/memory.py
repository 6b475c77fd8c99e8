"""In-process session store with per-entry expiry."""

import copy
import time
from collections.abc import Callable
from typing import Any


class MemorySessionStore:
    """Dict-backed session store.

    Args:
        ttl_seconds: Lifetime of an entry after its last write.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[session_id]
            return None
        return copy.deepcopy(value)

    async def set(self, session_id: str, value: dict[str, Any]) -> None:
        now = self._clock()
        self._purge(now)
        self._entries[session_id] = (now + self._ttl, copy.deepcopy(value))

    async def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    def _purge(self, now: float) -> None:
        # Expired entries go on write too; abandoned sessions are never read again.
        expired = [sid for sid, (expires_at, _) in self._entries.items() if now >= expires_at]
        for sid in expired:
            del self._entries[sid]

    def __len__(self) -> int:
        return len(self._entries)
