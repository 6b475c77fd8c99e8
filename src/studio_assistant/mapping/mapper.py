"""Map calendar events to the product/price records that sell them."""

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import date

from studio_assistant.data import (
    DurationBand,
    EventCandidate,
    EventProductMapping,
    MappingStatus,
    ProductCandidate,
    ProductRef,
)
from studio_assistant.mapping.durations import (
    DAY_GROUP,
    PRICE_BANDS,
    band_for_hours,
    band_for_price,
    bands_compatible,
    parse_declared_hours,
    special_case_for,
)
from studio_assistant.mapping.sessions import SessionSplit, find_session_split, split_event
from studio_assistant.query.vocabulary import STOPWORDS, fold_plural, tokenize
from studio_assistant.url import normalize_url, url_slug

logger = logging.getLogger(__name__)

# Words every listing shares; they say nothing about which listing it is.
_GENERIC_TOKENS = frozenset(
    {
        "workshop", "course", "class", "session", "day", "hr", "hrs", "hour", "photography",
        "photo", "photographic", "event", "product", "uk", "early", "late", "morning",
        "afternoon", "half", "full", "one", "2", "3", "4", "1",
    }
)  # fmt: skip


def specific_tokens(text: str) -> set[str]:
    """Location/activity tokens used to match an event title to a product title."""
    return {
        fold_plural(t)
        for t in tokenize(text.replace("-", " "))
        if t not in STOPWORDS and fold_plural(t) not in _GENERIC_TOKENS and len(t) > 2
    }


@dataclass(frozen=True)
class _ProductProfile:
    product: ProductCandidate
    bands: frozenset[DurationBand]
    split: SessionSplit | None
    tokens: frozenset[str]


def _profile(product: ProductCandidate) -> _ProductProfile:
    text = f"{product.title} {product.description}"
    split = find_session_split(text)
    hours = product.duration_hours or parse_declared_hours(text)
    if hours is not None:
        bands = {band_for_hours(hours)}
    elif product.price_gbp is not None:
        bands = {band_for_price(product.price_gbp)}
    else:
        bands = set()
    if split is not None:
        # One listing sells both the short sub-sessions and the whole day.
        bands |= {DurationBand.SHORT, *DAY_GROUP}
    tokens = specific_tokens(f"{product.title} {url_slug(product.url)} {product.location}")
    return _ProductProfile(product, frozenset(bands), split, frozenset(tokens))


def _ref(product: ProductCandidate, *, session: str = "", price: float | None = None) -> ProductRef:
    return ProductRef(
        url=product.url,
        title=product.title,
        price_gbp=price if price is not None else product.price_gbp,
        session=session,
    )


class EventProductMapper:
    """Matches each calendar event to one product, or two for split sessions.

    Order of evidence: fixed special-case listings, the product the event row
    links to, then the band-compatible product sharing the most specific
    title tokens. Ties go to listings that spell out session times, then to
    the lexically smallest URL. Events with no match stay unmapped.

    Args:
        products: The product/price catalog to match against.
    """

    def __init__(self, products: Sequence[ProductCandidate] = ()) -> None:
        self._profiles = [_profile(p) for p in products if p.is_well_formed]
        self._by_url = {normalize_url(p.product.url): p for p in self._profiles}

    def map_event(self, event: EventCandidate) -> EventProductMapping:
        hours = event.duration_hours
        band = band_for_hours(hours) if hours is not None else None

        special = special_case_for(event.url)
        if special is not None:
            profile = next(
                (p for p in self._profiles if special.url_fragment in p.product.url.lower()),
                None,
            )
            if profile is not None:
                return self._mapped(
                    event, profile, band, method="special_case", price=special.price_gbp
                )
            return EventProductMapping(
                event_url=event.url,
                event_date=event.start_date,
                status=MappingStatus.MAPPED,
                method="special_case",
                products=(ProductRef(event.url, event.title, special.price_gbp),),
                band=band,
            )

        if event.product_url:
            profile = self._by_url.get(normalize_url(event.product_url))
            if profile is not None:
                return self._mapped(event, profile, band, method="linked")
            return EventProductMapping(
                event_url=event.url,
                event_date=event.start_date,
                status=MappingStatus.MAPPED,
                method="linked",
                products=(
                    ProductRef(
                        event.product_url, event.product_title or event.title, event.price_gbp
                    ),
                ),
                band=band,
            )

        if band is None:
            return self._unmapped(event, None, "event has no determinable duration")

        event_tokens = specific_tokens(f"{event.title} {url_slug(event.url)} {event.location}")
        ranked: list[tuple[int, int, str, _ProductProfile]] = []
        for profile in self._profiles:
            if not any(bands_compatible(band, b) for b in profile.bands):
                continue
            overlap = len(event_tokens & profile.tokens)
            if overlap == 0:
                continue
            ranked.append(
                (-overlap, 0 if profile.split else 1, normalize_url(profile.product.url), profile)
            )
        if not ranked:
            return self._unmapped(event, band, f"no product in the {band} band shares its title")

        ranked.sort(key=lambda r: r[:3])
        return self._mapped(event, ranked[0][3], band, method="band_match")

    def build_table(self, events: Iterable[EventCandidate]) -> "MappingTable":
        table = MappingTable()
        for event in events:
            table.add(self.map_event(event))
        return table

    @staticmethod
    def _mapped(
        event: EventCandidate,
        profile: _ProductProfile,
        band: DurationBand | None,
        *,
        method: str,
        price: float | None = None,
    ) -> EventProductMapping:
        if profile.split is not None and band in DAY_GROUP and event.start is not None:
            early, late = split_event(event, profile.split)
            return EventProductMapping(
                event_url=event.url,
                event_date=event.start_date,
                status=MappingStatus.SPLIT,
                method=method,
                products=(
                    _ref(profile.product, session=early.session, price=price),
                    _ref(profile.product, session=late.session, price=price),
                ),
                sessions=(early, late),
                band=band,
            )
        return EventProductMapping(
            event_url=event.url,
            event_date=event.start_date,
            status=MappingStatus.MAPPED,
            method=method,
            products=(_ref(profile.product, price=price),),
            band=band,
        )

    @staticmethod
    def _unmapped(
        event: EventCandidate, band: DurationBand | None, reason: str
    ) -> EventProductMapping:
        logger.info(f"Unmapped event {event.url} ({event.start_date}): {reason}")
        return EventProductMapping(
            event_url=event.url,
            event_date=event.start_date,
            status=MappingStatus.UNMAPPED,
            method="none",
            band=band,
            reason=reason,
        )


@dataclass
class MappingTable:
    """Event-to-product mappings addressable by event URL and start date."""

    _entries: dict[tuple[str, date | None], EventProductMapping] = field(default_factory=dict)

    def add(self, mapping: EventProductMapping) -> None:
        key = (normalize_url(mapping.event_url), mapping.event_date)
        existing = self._entries.get(key)
        if existing is not None and existing.is_mapped and existing != mapping:
            logger.warning(f"Replacing mapping for {mapping.event_url} on {mapping.event_date}")
        self._entries[key] = mapping

    def lookup(self, event_url: str, event_date: date | None) -> EventProductMapping | None:
        return self._entries.get((normalize_url(event_url), event_date))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[EventProductMapping]:
        return iter(self._entries.values())

    @property
    def unmapped(self) -> list[EventProductMapping]:
        return [m for m in self._entries.values() if not m.is_mapped]


def audit_mapping(mapping: EventProductMapping, event: EventCandidate) -> list[str]:
    """Re-check a stored mapping with the same bands the mapper uses.

    Returns:
        Human-readable issues; an empty list means the mapping looks right.
    """
    if not mapping.is_mapped:
        return [f"unmapped: {mapping.reason or 'no matching product'}"]

    issues: list[str] = []
    hours = event.duration_hours
    band = band_for_hours(hours) if hours is not None else None
    if band != mapping.band:
        issues.append(f"band drift: mapping recorded {mapping.band}, event is {band}")

    special = special_case_for(event.url)
    for ref in mapping.products:
        if ref.price_gbp is None:
            issues.append(f"no price for {ref.url}")
            continue
        if special is not None:
            if ref.price_gbp != special.price_gbp:
                issues.append(
                    f"special case {special.url_fragment} expects £{special.price_gbp:g}, "
                    f"got £{ref.price_gbp:g}"
                )
            continue
        ref_band = DurationBand.SHORT if ref.session else band
        if ref_band is None:
            continue
        price_band = PRICE_BANDS[ref_band]
        if not price_band.contains(ref.price_gbp):
            issues.append(f"price £{ref.price_gbp:g} outside the {ref_band} band for {ref.url}")

    urls = {normalize_url(ref.url) for ref in mapping.products}
    if len(urls) > 1:
        issues.append(f"event mapped to {len(urls)} different products")
    return issues
