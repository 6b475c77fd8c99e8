"""Evidence gathering across the four content kinds."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, TypeVar

from studio_assistant.data import (
    ArticleCandidate,
    Candidate,
    ClassificationResult,
    ContentKind,
    EventCandidate,
    EvidenceSnapshot,
    MappingStatus,
    ProductCandidate,
    ServiceCandidate,
)
from studio_assistant.evidence.matching import matches_any
from studio_assistant.mapping import EventProductMapper, band_for_hours
from studio_assistant.query.vocabulary import event_keywords, fold_plural
from studio_assistant.store.base import ContentStore
from studio_assistant.store.rows import DEFAULT_TIMEZONE, parse_rows

logger = logging.getLogger(__name__)

MAX_ROWS_PER_KIND = 60

C = TypeVar("C", bound=Candidate)


def dedupe(candidates: Iterable[C]) -> list[C]:
    """Drop later duplicates by normalized canonical URL, keeping first-seen order.

    Events are keyed by URL, start time and session so that the dated
    occurrences of one listing survive. Applying this twice is a no-op.
    """
    seen: set[tuple[str, ...]] = set()
    unique: list[C] = []
    for candidate in candidates:
        key = candidate.dedupe_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def dedupe_snapshot(snapshot: EvidenceSnapshot) -> EvidenceSnapshot:
    return EvidenceSnapshot(
        articles=tuple(dedupe(snapshot.articles)),
        events=tuple(dedupe(snapshot.events)),
        products=tuple(dedupe(snapshot.products)),
        services=tuple(dedupe(snapshot.services)),
    )


class EvidenceGatherer:
    """Fetches a bounded, deduplicated evidence snapshot for a classified query.

    Each store call runs under its own timeout; a failing or slow content
    kind contributes an empty collection instead of failing the snapshot.

    Args:
        store: Read-only content store.
        limits: Maximum rows per content kind (each capped at 60).
        timeout_seconds: Timeout applied to every store call.
        mapper: Pre-built event-product mapper. When omitted, the full product
            catalog is loaded once on first use, falling back to the products
            of the current snapshot if that fails.
        timezone: Local timezone of event rows.
        clock: Returns "now"; only events starting today or later are kept.
    """

    def __init__(
        self,
        store: ContentStore,
        *,
        limits: dict[ContentKind, int] | None = None,
        timeout_seconds: float = 5.0,
        mapper: EventProductMapper | None = None,
        catalog_limit: int = 500,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        defaults = {
            ContentKind.ARTICLE: 30,
            ContentKind.EVENT: 60,
            ContentKind.PRODUCT: 60,
            ContentKind.SERVICE: 24,
        }
        defaults.update(limits or {})
        self._limits = {k: min(v, MAX_ROWS_PER_KIND) for k, v in defaults.items()}
        self._store = store
        self._timeout = timeout_seconds
        self._mapper = mapper
        self._catalog_limit = catalog_limit
        self._catalog_attempted = mapper is not None
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    async def gather(
        self,
        classification: ClassificationResult,
        keywords: Sequence[str] | None = None,
    ) -> EvidenceSnapshot:
        """Build the evidence snapshot for one query.

        Args:
            classification: Classifier output; supplies date window and duration hints.
            keywords: Keywords to search with (defaults to the classifier's keywords).

        Returns:
            Snapshot with at most the configured number of rows per kind.
        """
        words = list(keywords if keywords is not None else classification.keywords)
        event_words = event_keywords(words)

        articles = await self._fetch_kind(ContentKind.ARTICLE, self._store.fetch_articles, words)
        events = await self._fetch_kind(ContentKind.EVENT, self._store.fetch_events, event_words)
        products = await self._fetch_kind(ContentKind.PRODUCT, self._store.fetch_products, words)
        services = await self._fetch_kind(ContentKind.SERVICE, self._store.fetch_services, words)

        articles = [c for c in articles if matches_any(c, words)]
        products = [c for c in products if matches_any(c, words)]
        services = [c for c in services if matches_any(c, words)]
        events = [c for c in events if matches_any(c, event_words)]

        mapper = await self._event_mapper(products)
        events = self._expand_events(events, classification, mapper)

        return EvidenceSnapshot(
            articles=tuple(dedupe(articles)[: self._limits[ContentKind.ARTICLE]]),
            events=tuple(dedupe(events)[: self._limits[ContentKind.EVENT]]),
            products=tuple(dedupe(products)[: self._limits[ContentKind.PRODUCT]]),
            services=tuple(dedupe(services)[: self._limits[ContentKind.SERVICE]]),
        )

    async def load_product_catalog(self) -> EventProductMapper:
        """Fetch the whole product catalog and build the event-product mapper."""
        rows = await asyncio.wait_for(
            self._store.fetch_products([], limit=self._catalog_limit), timeout=self._timeout
        )
        products = [
            c
            for c in parse_rows(ContentKind.PRODUCT, rows, timezone=self._timezone)
            if isinstance(c, ProductCandidate)
        ]
        self._mapper = EventProductMapper(products)
        logger.info(f"Loaded {len(products)} products for event mapping")
        return self._mapper

    async def _event_mapper(self, products: list[ProductCandidate]) -> EventProductMapper:
        if self._mapper is None and not self._catalog_attempted:
            self._catalog_attempted = True
            try:
                return await self.load_product_catalog()
            except Exception as e:
                logger.warning(f"Error loading product catalog: {e}")
        if self._mapper is not None:
            return self._mapper
        return EventProductMapper(products)

    async def _fetch_kind(
        self,
        kind: ContentKind,
        fetch: Callable[..., Awaitable[list[dict[str, Any]]]],
        keywords: list[str],
    ) -> list[Any]:
        """Run one store call; any error or timeout yields an empty list."""
        store_keywords = list(dict.fromkeys(fold_plural(k) for k in keywords))
        try:
            rows = await asyncio.wait_for(
                fetch(store_keywords, limit=self._limits[kind]), timeout=self._timeout
            )
        except Exception as e:
            logger.warning(f"Error fetching {kind} evidence: {e!r}")
            return []
        candidates = parse_rows(kind, rows[: self._limits[kind]], timezone=self._timezone)
        expected = {
            ContentKind.ARTICLE: ArticleCandidate,
            ContentKind.EVENT: EventCandidate,
            ContentKind.PRODUCT: ProductCandidate,
            ContentKind.SERVICE: ServiceCandidate,
        }[kind]
        return [c for c in candidates if isinstance(c, expected)]

    def _expand_events(
        self,
        events: list[EventCandidate],
        classification: ClassificationResult,
        mapper: EventProductMapper,
    ) -> list[EventCandidate]:
        """Keep upcoming events in the date window, attach products, apply band hints.

        Split listings contribute their early/late sessions when short events
        are requested; the whole listing stands for every other band.
        """
        now = self._clock()
        bands = classification.duration_bands
        window = classification.date_window
        expanded: list[EventCandidate] = []

        for event in events:
            if event.start is None or event.start.date() < now.date():
                continue
            if window is not None and not window.contains(event.start.date()):
                continue

            mapping = mapper.map_event(event)
            primary = mapping.primary
            if primary is not None:
                price = primary.price_gbp if primary.price_gbp is not None else event.price_gbp
                event = replace(
                    event,
                    product_url=primary.url,
                    product_title=primary.title,
                    price_gbp=price,
                    has_sessions=mapping.status == MappingStatus.SPLIT,
                )

            variants = [event]
            if mapping.status == MappingStatus.SPLIT and bands:
                sessions = [
                    replace(
                        s,
                        product_url=ref.url,
                        product_title=ref.title,
                        price_gbp=ref.price_gbp if ref.price_gbp is not None else s.price_gbp,
                    )
                    for s, ref in zip(mapping.sessions, mapping.products, strict=True)
                ]
                variants.extend(sessions)

            for variant in variants:
                hours = variant.duration_hours
                if bands and (hours is None or band_for_hours(hours) not in bands):
                    continue
                expanded.append(variant)

        expanded.sort(key=lambda e: (e.start or now, e.url.lower(), e.session))
        return expanded
