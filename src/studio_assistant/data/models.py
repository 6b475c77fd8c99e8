"""Core data models for the studio assistant."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any, ClassVar

from studio_assistant.url import normalize_url


class ContentKind(StrEnum):
    """The four kinds of content the assistant can answer from."""

    ARTICLE = "article"
    EVENT = "event"
    PRODUCT = "product"
    SERVICE = "service"


class Intent(StrEnum):
    """Closed set of query intents produced by the classifier."""

    EVENTS = "events"
    TECHNICAL = "technical_advice"
    SERVICES = "services"
    ABOUT = "about"
    EQUIPMENT = "equipment"
    ADVICE = "advice"


class DurationBand(StrEnum):
    """Duration buckets shared by clarification, filtering and product mapping.

    - ``SHORT``: up to 4 hours
    - ``HALF_DAY``: more than 4 and up to 8 hours
    - ``FULL_DAY``: more than 8 and up to 24 hours
    - ``MULTI_DAY``: more than 24 hours
    """

    SHORT = "short"
    HALF_DAY = "half_day"
    FULL_DAY = "full_day"
    MULTI_DAY = "multi_day"


class Decision(StrEnum):
    """Coarse routing decision made by the confidence calibrator."""

    DIRECT = "direct"
    EVENTS = "events"
    CLARIFICATION = "clarification"


class MappingStatus(StrEnum):
    MAPPED = "mapped"
    SPLIT = "split"
    UNMAPPED = "unmapped"


@dataclass(frozen=True)
class Query:
    """One user turn. Immutable for the lifetime of the turn."""

    text: str
    previous_query: str | None = None
    session_id: str | None = None
    page_context: dict[str, Any] | None = field(default=None, compare=False)


# ============================================================
# Candidates
# ============================================================


@dataclass(frozen=True)
class Candidate:
    """Base type for any evidence row, discriminated by ``kind``."""

    kind: ClassVar[ContentKind]

    id: str
    title: str
    url: str
    description: str = ""
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    publish_date: datetime | None = None
    last_seen: datetime | None = None

    @property
    def is_well_formed(self) -> bool:
        """Rows without a title or URL cannot be scored or shown."""
        return bool(self.title.strip()) and bool(self.url.strip())

    @property
    def most_recent_date(self) -> datetime | None:
        dates = [d for d in (self.publish_date, self.last_seen) if d is not None]
        return max(dates) if dates else None

    def dedupe_key(self) -> tuple[str, ...]:
        return (normalize_url(self.url),)


@dataclass(frozen=True)
class ArticleCandidate(Candidate):
    """A blog post or guide."""

    kind: ClassVar[ContentKind] = ContentKind.ARTICLE


@dataclass(frozen=True)
class EventCandidate(Candidate):
    """A dated calendar event (workshop, course session, photo walk).

    Several events share one listing URL, so the dedupe key includes the start
    time and the session label of split sub-sessions.
    """

    kind: ClassVar[ContentKind] = ContentKind.EVENT

    start: datetime | None = None
    end: datetime | None = None
    location: str = ""
    price_gbp: float | None = None
    product_url: str = ""
    product_title: str = ""
    session: str = ""
    has_sessions: bool = False

    @property
    def duration_hours(self) -> float | None:
        if self.start is None or self.end is None or self.end <= self.start:
            return None
        return round((self.end - self.start).total_seconds() / 3600, 2)

    @property
    def start_date(self) -> date | None:
        return self.start.date() if self.start else None

    def dedupe_key(self) -> tuple[str, ...]:
        started = self.start.isoformat() if self.start else ""
        return (normalize_url(self.url), started, self.session)


@dataclass(frozen=True)
class ProductCandidate(Candidate):
    """A sellable product/price record describing one or more events."""

    kind: ClassVar[ContentKind] = ContentKind.PRODUCT

    price_gbp: float | None = None
    duration_hours: float | None = None
    location: str = ""


@dataclass(frozen=True)
class ServiceCandidate(Candidate):
    """A service page (private lessons, mentoring, feedback)."""

    kind: ClassVar[ContentKind] = ContentKind.SERVICE


@dataclass(frozen=True)
class EvidenceSnapshot:
    """Bounded candidate sets fetched for one query. Never mutated after creation."""

    articles: tuple[ArticleCandidate, ...] = ()
    events: tuple[EventCandidate, ...] = ()
    products: tuple[ProductCandidate, ...] = ()
    services: tuple[ServiceCandidate, ...] = ()

    @property
    def total(self) -> int:
        return len(self.articles) + len(self.events) + len(self.products) + len(self.services)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def of_kind(self, kind: ContentKind) -> tuple[Candidate, ...]:
        return {
            ContentKind.ARTICLE: self.articles,
            ContentKind.EVENT: self.events,
            ContentKind.PRODUCT: self.products,
            ContentKind.SERVICE: self.services,
        }[kind]

    def counts(self) -> "EvidenceCounts":
        return EvidenceCounts(
            articles=len(self.articles),
            events=len(self.events),
            products=len(self.products),
            services=len(self.services),
        )


@dataclass(frozen=True)
class EvidenceCounts:
    articles: int = 0
    events: int = 0
    products: int = 0
    services: int = 0

    @property
    def total(self) -> int:
        return self.articles + self.events + self.products + self.services


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate with its rank score and recency tie-breaker.

    ``score = rank * multiplier + recency_bonus``; the bonus is always smaller
    than the multiplier so recency only orders candidates within one rank tier.
    """

    candidate: Candidate
    rank: int
    recency_bonus: int = 0
    multiplier: int = 1000

    @property
    def score(self) -> int:
        return self.rank * self.multiplier + self.recency_bonus

    def sort_key(self) -> tuple[int, str, str, str]:
        """Strict total order: score descending, then stable text keys."""
        url_key = self.candidate.dedupe_key()[0]
        return (-self.score, url_key, self.candidate.title, self.candidate.id)


@dataclass(frozen=True)
class RankedEvidence:
    """Scored candidates per kind, each tuple in descending score order."""

    articles: tuple[ScoredCandidate, ...] = ()
    events: tuple[ScoredCandidate, ...] = ()
    products: tuple[ScoredCandidate, ...] = ()
    services: tuple[ScoredCandidate, ...] = ()

    def top(self, n: int) -> list[Candidate]:
        """Best ``n`` candidates across all kinds."""
        merged = sorted(
            (*self.articles, *self.events, *self.products, *self.services),
            key=ScoredCandidate.sort_key,
        )
        return [s.candidate for s in merged[:n]]


# ============================================================
# Classification & confidence
# ============================================================


@dataclass(frozen=True)
class DateWindow:
    """Inclusive date range extracted from the query."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class ClassificationResult:
    """Intent label plus structured hints extracted from a query."""

    intent: Intent
    keywords: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    duration_bands: frozenset[DurationBand] = frozenset()
    date_window: DateWindow | None = None
    equipment: tuple[str, ...] = ()
    genres: tuple[str, ...] = ()
    concepts: tuple[str, ...] = ()
    themes: tuple[str, ...] = ()
    ambiguous: bool = False
    confidence: float = 0.5
    reason: str = ""

    @property
    def has_qualifier(self) -> bool:
        """True when the query narrows beyond a bare category noun."""
        return bool(
            self.locations
            or self.duration_bands
            or self.date_window
            or self.equipment
            or self.concepts
            or self.themes
            or self.genres
        )


@dataclass(frozen=True)
class ConfidenceResult:
    confidence: float
    decision: Decision
    counts: EvidenceCounts
    relevance: float = 0.0
    rule: str = ""


# ============================================================
# Dialogue
# ============================================================


@dataclass(frozen=True)
class ClarificationOption:
    text: str
    query: str


@dataclass(frozen=True)
class ClarificationState:
    """Per-session dialogue record, owned by the dialogue manager."""

    session_id: str
    original_query: str
    depth: int = 0
    offered_labels: tuple[str, ...] = ()
    offered_queries: tuple[str, ...] = ()
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "original_query": self.original_query,
            "depth": self.depth,
            "offered_labels": list(self.offered_labels),
            "offered_queries": list(self.offered_queries),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClarificationState":
        return cls(
            session_id=data["session_id"],
            original_query=data.get("original_query", ""),
            depth=int(data.get("depth", 0)),
            offered_labels=tuple(data.get("offered_labels", ())),
            offered_queries=tuple(data.get("offered_queries", ())),
            updated_at=datetime.fromisoformat(data["updated_at"])
            if data.get("updated_at")
            else datetime.now(tz=UTC),
        )


# ============================================================
# Event-product mapping
# ============================================================


@dataclass(frozen=True)
class ProductRef:
    """Reference to the product/price record an event (or session) sells through."""

    url: str
    title: str
    price_gbp: float | None = None
    session: str = ""


@dataclass(frozen=True)
class EventProductMapping:
    """Links one calendar event (URL + start date) to zero, one or two products."""

    event_url: str
    event_date: date | None
    status: MappingStatus
    method: str
    products: tuple[ProductRef, ...] = ()
    sessions: tuple[EventCandidate, ...] = ()
    band: DurationBand | None = None
    reason: str = ""

    @property
    def is_mapped(self) -> bool:
        return self.status != MappingStatus.UNMAPPED

    @property
    def primary(self) -> ProductRef | None:
        return self.products[0] if self.products else None
