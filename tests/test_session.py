"""Tests for MemorySessionStore."""

import pytest

from studio_assistant.session import MemorySessionStore


class FakeMonotonic:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def ticker() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def sessions(ticker: FakeMonotonic) -> MemorySessionStore:
    return MemorySessionStore(ttl_seconds=60, clock=ticker)


async def test_set_and_get(sessions: MemorySessionStore) -> None:
    await sessions.set("s1", {"depth": 1})
    assert await sessions.get("s1") == {"depth": 1}
    assert await sessions.get("missing") is None


async def test_values_are_copied(sessions: MemorySessionStore) -> None:
    value = {"offered_labels": ["a"]}
    await sessions.set("s1", value)
    value["offered_labels"].append("b")
    stored = await sessions.get("s1")
    assert stored == {"offered_labels": ["a"]}
    assert stored is not None
    stored["offered_labels"].append("c")
    assert await sessions.get("s1") == {"offered_labels": ["a"]}


async def test_entries_expire(sessions: MemorySessionStore, ticker: FakeMonotonic) -> None:
    await sessions.set("s1", {"depth": 1})
    ticker.now += 59
    assert await sessions.get("s1") is not None
    ticker.now += 1
    assert await sessions.get("s1") is None
    assert len(sessions) == 0


async def test_write_refreshes_expiry(sessions: MemorySessionStore, ticker: FakeMonotonic) -> None:
    await sessions.set("s1", {"depth": 1})
    ticker.now += 50
    await sessions.set("s1", {"depth": 2})
    ticker.now += 50
    assert await sessions.get("s1") == {"depth": 2}


async def test_delete(sessions: MemorySessionStore) -> None:
    await sessions.set("s1", {"depth": 1})
    await sessions.delete("s1")
    await sessions.delete("never-set")
    assert await sessions.get("s1") is None


async def test_write_purges_abandoned_entries(
    sessions: MemorySessionStore, ticker: FakeMonotonic
) -> None:
    await sessions.set("abandoned", {"depth": 1})
    await sessions.set("active", {"depth": 1})
    ticker.now += 30
    await sessions.set("active", {"depth": 2})
    ticker.now += 30
    await sessions.set("new", {"depth": 1})
    assert len(sessions) == 2
    assert await sessions.get("active") == {"depth": 2}
