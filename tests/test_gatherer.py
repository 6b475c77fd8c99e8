"""Tests for EvidenceGatherer."""

import asyncio
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any

import httpx
import pytest

from studio_assistant.data import (
    ArticleCandidate,
    ClassificationResult,
    ContentKind,
    DateWindow,
    DurationBand,
    EventCandidate,
    Intent,
)
from studio_assistant.evidence import EvidenceGatherer, dedupe
from studio_assistant.store import InMemoryContentStore


class FlakyStore:
    """Wraps a store; named kinds raise or hang, and catalog loads are counted."""

    def __init__(
        self,
        inner: InMemoryContentStore,
        *,
        failing: tuple[str, ...] = (),
        hanging: tuple[str, ...] = (),
        catalog_fails: bool = False,
    ) -> None:
        self._inner = inner
        self._failing = failing
        self._hanging = hanging
        self._catalog_fails = catalog_fails
        self.catalog_loads = 0

    async def _call(self, kind: str, keywords: list[str], limit: int) -> list[dict[str, Any]]:
        if kind in self._failing:
            raise httpx.ConnectError("connection refused")
        if kind in self._hanging:
            await asyncio.sleep(10)
        fetch = getattr(self._inner, f"fetch_{kind}")
        return await fetch(keywords, limit=limit)

    async def fetch_articles(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return await self._call("articles", keywords, limit)

    async def fetch_events(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return await self._call("events", keywords, limit)

    async def fetch_products(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        if not keywords:
            self.catalog_loads += 1
            if self._catalog_fails:
                raise httpx.ReadTimeout("catalog timed out")
        return await self._call("products", keywords, limit)

    async def fetch_services(self, keywords: list[str], *, limit: int) -> list[dict[str, Any]]:
        return await self._call("services", keywords, limit)


def events_query(*keywords: str, **kwargs: Any) -> ClassificationResult:
    return ClassificationResult(intent=Intent.EVENTS, keywords=keywords, **kwargs)


@pytest.fixture
def gatherer(
    catalog_store: InMemoryContentStore, clock: Callable[[], datetime]
) -> EvidenceGatherer:
    return EvidenceGatherer(catalog_store, clock=clock)


class TestGather:
    async def test_snapshot_for_bluebells(self, gatherer: EvidenceGatherer) -> None:
        snapshot = await gatherer.gather(events_query("bluebell"))

        assert [a.id for a in snapshot.articles] == ["art-bluebells"]
        assert len(snapshot.events) == 2
        assert [p.title for p in snapshot.products] == ["Bluebell Woodlands Photography Workshops"]
        assert snapshot.services == ()

    async def test_events_carry_their_product(self, gatherer: EvidenceGatherer) -> None:
        snapshot = await gatherer.gather(events_query("bluebell"))
        first = snapshot.events[0]
        assert first.start is not None
        assert first.start.date() == date(2027, 4, 24)
        assert first.product_title == "Bluebell Woodlands Photography Workshops"
        assert first.price_gbp == 125.0
        assert first.has_sessions
        assert first.session == ""

    async def test_short_band_returns_sessions(self, gatherer: EvidenceGatherer) -> None:
        snapshot = await gatherer.gather(
            events_query("bluebell", duration_bands=frozenset({DurationBand.SHORT}))
        )
        assert [e.session for e in snapshot.events] == ["early", "late", "early", "late"]
        assert all(e.duration_hours == 4.0 for e in snapshot.events)
        assert snapshot.events[0].title.endswith("(Early Session)")

    async def test_day_bands_keep_whole_listing(self, gatherer: EvidenceGatherer) -> None:
        snapshot = await gatherer.gather(
            events_query(
                "bluebell",
                duration_bands=frozenset({DurationBand.HALF_DAY, DurationBand.FULL_DAY}),
            )
        )
        assert [e.session for e in snapshot.events] == ["", ""]

    async def test_date_window(self, gatherer: EvidenceGatherer) -> None:
        window = DateWindow(date(2027, 4, 1), date(2027, 4, 30))
        snapshot = await gatherer.gather(events_query("workshop", date_window=window))
        assert [e.title for e in snapshot.events] == ["Bluebell Woodland Photography Workshop"]

    async def test_past_events_are_dropped(self, catalog_store: InMemoryContentStore) -> None:
        gatherer = EvidenceGatherer(
            catalog_store, clock=lambda: datetime(2027, 4, 30, 12, 0, tzinfo=UTC)
        )
        snapshot = await gatherer.gather(events_query("bluebell"))
        assert [e.start.date() for e in snapshot.events if e.start] == [date(2027, 5, 1)]

    async def test_keyword_override(self, gatherer: EvidenceGatherer) -> None:
        snapshot = await gatherer.gather(events_query("bluebell"), keywords=["mentoring"])
        assert [s.title for s in snapshot.services] == [
            "Photography Mentoring",
            "RPS Mentoring Course",
        ]
        assert snapshot.events == ()

    async def test_limits_are_capped(self, catalog_store: InMemoryContentStore) -> None:
        gatherer = EvidenceGatherer(
            catalog_store, limits={ContentKind.ARTICLE: 1, ContentKind.EVENT: 500}
        )
        assert gatherer._limits[ContentKind.EVENT] == 60
        snapshot = await gatherer.gather(
            ClassificationResult(intent=Intent.TECHNICAL, keywords=("aperture",))
        )
        assert len(snapshot.articles) == 1


class TestFailures:
    async def test_failing_kind_is_empty(
        self, catalog_store: InMemoryContentStore, clock: Callable[[], datetime]
    ) -> None:
        store = FlakyStore(catalog_store, failing=("articles",))
        gatherer = EvidenceGatherer(store, clock=clock)
        snapshot = await gatherer.gather(events_query("bluebell"))
        assert snapshot.articles == ()
        assert len(snapshot.events) == 2

    async def test_slow_kind_times_out(
        self, catalog_store: InMemoryContentStore, clock: Callable[[], datetime]
    ) -> None:
        store = FlakyStore(catalog_store, hanging=("services",))
        gatherer = EvidenceGatherer(store, timeout_seconds=0.05, clock=clock)
        snapshot = await gatherer.gather(events_query("mentoring"))
        assert snapshot.services == ()

    async def test_everything_failing_gives_empty_snapshot(
        self, catalog_store: InMemoryContentStore, clock: Callable[[], datetime]
    ) -> None:
        store = FlakyStore(
            catalog_store,
            failing=("articles", "events", "products", "services"),
            catalog_fails=True,
        )
        gatherer = EvidenceGatherer(store, clock=clock)
        snapshot = await gatherer.gather(events_query("bluebell"))
        assert snapshot.is_empty

    async def test_catalog_is_loaded_once(
        self, catalog_store: InMemoryContentStore, clock: Callable[[], datetime]
    ) -> None:
        store = FlakyStore(catalog_store)
        gatherer = EvidenceGatherer(store, clock=clock)
        await gatherer.gather(events_query("bluebell"))
        await gatherer.gather(events_query("batsford"))
        assert store.catalog_loads == 1

    async def test_catalog_failure_falls_back_to_snapshot_products(
        self, catalog_store: InMemoryContentStore, clock: Callable[[], datetime]
    ) -> None:
        store = FlakyStore(catalog_store, catalog_fails=True)
        gatherer = EvidenceGatherer(store, clock=clock)
        snapshot = await gatherer.gather(events_query("bluebell"))
        assert store.catalog_loads == 1
        assert all(e.product_title for e in snapshot.events)


class TestDedupe:
    def test_trailing_slash_and_host_case(self) -> None:
        a = ArticleCandidate(id="1", title="ISO", url="https://www.alanranger.com/iso")
        b = ArticleCandidate(id="2", title="ISO again", url="https://alanranger.com/iso/")
        assert dedupe([a, b]) == [a]

    def test_events_on_different_dates_survive(self) -> None:
        url = "https://x.com/bluebells"
        first = EventCandidate(id="1", title="B", url=url, start=datetime(2027, 4, 24, tzinfo=UTC))
        second = EventCandidate(id="2", title="B", url=url, start=datetime(2027, 5, 1, tzinfo=UTC))
        repeat = EventCandidate(id="3", title="B", url=url, start=datetime(2027, 4, 24, tzinfo=UTC))
        assert dedupe([first, second, repeat]) == [first, second]

    def test_idempotent(self) -> None:
        items = [
            ArticleCandidate(id=str(i), title="T", url=f"https://x.com/{i % 3}/")
            for i in range(7)
        ]
        once = dedupe(items)
        assert dedupe(once) == once
        assert [c.id for c in once] == ["0", "1", "2"]
