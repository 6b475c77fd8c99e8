"""Rule-based query classifier."""

import calendar
import logging
import re
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

from studio_assistant.data import ClassificationResult, DateWindow, DurationBand, Intent, Query
from studio_assistant.mapping.durations import band_for_hours
from studio_assistant.query import vocabulary as vocab
from studio_assistant.url import slug_keywords

logger = logging.getLogger(__name__)

_HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*-?\s*(?:hr|hrs|hour|hours)\b")
_DAYS_RE = re.compile(r"\b(\d+|two|three|four|five)\s*-?\s*days?\b")
_DURATION_TOKEN_RE = re.compile(
    r"^(\d+(\.\d+)?)?(hr|hrs|hour|hours|day|days|multi|half|full)$|^\d+$"
)
_MAY_RE = re.compile(r"\b(?:in|during|early|late|mid|this|next)\s+may\b|\bmay\s+\d")

_WORD_NUMBERS = {"two": 2, "three": 3, "four": 4, "five": 5}

# Nouns that name a category without narrowing it.
_GENERIC_TOPIC_WORDS = frozenset(
    {"photography", "photographer", "photo", "photos", "one", "any", "some", "all", "uk"}
)


def _parse_duration_bands(text: str) -> frozenset[DurationBand]:
    bands: set[DurationBand] = set()

    hours = [float(h) for h in _HOURS_RE.findall(text)]
    if hours:
        bands.add(band_for_hours(max(hours)))

    if re.search(r"\bmulti[\s-]?day\b|\bresidential\b|\bweekend (?:workshop|course|trip)", text):
        bands.add(DurationBand.MULTI_DAY)
    for raw in _DAYS_RE.findall(text):
        n = _WORD_NUMBERS.get(raw) or int(raw)
        if n >= 2:
            bands.add(DurationBand.MULTI_DAY)
        elif n == 1:
            bands.update({DurationBand.HALF_DAY, DurationBand.FULL_DAY})
    if re.search(r"\b(?:one|full|whole)[\s-]day\b", text):
        bands.update({DurationBand.HALF_DAY, DurationBand.FULL_DAY})
    if re.search(r"\bhalf[\s-]day\b", text):
        bands.update({DurationBand.SHORT, DurationBand.HALF_DAY})

    return frozenset(bands)


def _month_window(month: int, today: date) -> DateWindow:
    year = today.year if month >= today.month else today.year + 1
    last = calendar.monthrange(year, month)[1]
    start = date(year, month, 1)
    return DateWindow(start=max(start, today), end=date(year, month, last))


def _parse_date_window(text: str, today: date) -> DateWindow | None:
    """Extract a date range from relative or month-name phrasing."""
    if "this weekend" in text:
        if today.weekday() == 6:
            return DateWindow(start=today, end=today)
        saturday = today + timedelta(days=5 - today.weekday())
        return DateWindow(start=saturday, end=saturday + timedelta(days=1))
    if "next week" in text:
        monday = today + timedelta(days=7 - today.weekday())
        return DateWindow(start=monday, end=monday + timedelta(days=6))
    if "this month" in text:
        return _month_window(today.month, today)
    if "next month" in text:
        month = today.month % 12 + 1
        year = today.year + (1 if month == 1 else 0)
        last = calendar.monthrange(year, month)[1]
        return DateWindow(start=date(year, month, 1), end=date(year, month, last))
    if "tomorrow" in text:
        return DateWindow(start=today + timedelta(days=1), end=today + timedelta(days=1))

    for i, name in enumerate(vocab.MONTHS, start=1):
        if name == "may":
            if _MAY_RE.search(text):
                return _month_window(i, today)
            continue
        if vocab.contains_term(text, name):
            return _month_window(i, today)
    return None


class QueryClassifier:
    """Assigns an intent and structured hints to a query by lexical rules.

    Precedence, first match wins: about, bare equipment, strong service,
    event/course wording, specific equipment, technical concept (upgraded to
    events when a location or date cue is present), location/date cue alone,
    weak service wording, then the low-confidence advice fallback.

    Args:
        clock: Returns "now"; injected so date windows are testable.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def classify(self, query: Query) -> ClassificationResult:
        """Classify a query. Never raises; unknown patterns fall back to advice."""
        try:
            result = self._classify_text(query.text, query.page_context)
            if result.intent == Intent.ADVICE and query.previous_query:
                combined = self._classify_text(
                    f"{query.previous_query} {query.text}", query.page_context
                )
                if combined.intent != Intent.ADVICE:
                    return combined
            return result
        except Exception as e:
            logger.warning(f"Error classifying query {query.text!r}: {e}")
            return ClassificationResult(intent=Intent.ADVICE, confidence=0.1, reason="error")

    def _classify_text(
        self, raw_text: str, page_context: dict | None = None
    ) -> ClassificationResult:
        text = " ".join(raw_text.lower().split())
        today = self._clock().date()

        keywords = [k for k in vocab.extract_keywords(text) if not _DURATION_TOKEN_RE.match(k)]
        topic = [
            k
            for k in keywords
            if k not in vocab.EVENT_STOPWORDS and k not in _GENERIC_TOPIC_WORDS
        ]
        if not topic and page_context:
            page_keywords = [k for k in self._page_keywords(page_context) if k not in keywords]
            keywords.extend(page_keywords)
            topic.extend(page_keywords)

        concepts = vocab.find_terms(text, vocab.CORE_CONCEPTS)
        # "shutter speed" is a concept, not a question about the shutter itself
        equipment = [
            e
            for e in vocab.find_terms(text, vocab.EQUIPMENT_TERMS)
            if not any(e != c and e in c for c in concepts)
        ]

        hints = {
            "keywords": tuple(keywords),
            "locations": tuple(vocab.find_terms(text, vocab.LOCATIONS)),
            "duration_bands": _parse_duration_bands(text),
            "date_window": _parse_date_window(text, today),
            "equipment": tuple(equipment),
            "genres": tuple(vocab.find_terms(text, vocab.GENRE_TERMS)),
            "concepts": tuple(concepts),
            "themes": tuple(vocab.find_terms(text, vocab.THEME_TERMS)),
        }
        has_course_qualifier = bool(vocab.find_terms(text, vocab.COURSE_QUALIFIERS))

        def result(
            intent: Intent, confidence: float, reason: str, *, ambiguous: bool = False
        ) -> ClassificationResult:
            return ClassificationResult(
                intent=intent, confidence=confidence, reason=reason, ambiguous=ambiguous, **hints
            )

        if vocab.find_terms(text, vocab.ABOUT_TERMS):
            return result(Intent.ABOUT, 0.8, "about")

        if vocab.find_terms(text, vocab.BARE_EQUIPMENT_TERMS):
            if has_course_qualifier:
                return result(Intent.EQUIPMENT, 0.6, "equipment for a course")
            if not hints["equipment"]:
                return result(Intent.EQUIPMENT, 0.3, "bare equipment", ambiguous=True)

        if vocab.find_terms(text, vocab.STRONG_SERVICE_TERMS):
            return result(Intent.SERVICES, 0.8, "service")

        if vocab.find_terms(text, vocab.EVENT_TERMS) or hints["duration_bands"]:
            events = result(Intent.EVENTS, 0.7, "events")
            if events.has_qualifier or topic:
                return events
            return result(Intent.EVENTS, 0.4, "broad events", ambiguous=True)

        if hints["equipment"]:
            return result(Intent.EQUIPMENT, 0.7, "equipment")

        if hints["concepts"]:
            if hints["locations"] or hints["date_window"]:
                return result(Intent.EVENTS, 0.6, "concept with location/date")
            return result(Intent.TECHNICAL, 0.7, "technical concept")

        if hints["locations"] or hints["date_window"]:
            return result(Intent.EVENTS, 0.6, "location/date")

        if vocab.find_terms(text, vocab.SERVICE_TERMS):
            return result(Intent.SERVICES, 0.5, "service (weak)")

        return result(Intent.ADVICE, 0.2, "fallback")

    @staticmethod
    def _page_keywords(page_context: dict) -> list[str]:
        raw = page_context.get("url") or page_context.get("pageUrl") or page_context.get("path")
        if not isinstance(raw, str):
            return []
        return [
            k
            for k in slug_keywords(raw)
            if k not in vocab.STOPWORDS and k not in _GENERIC_TOPIC_WORDS and not k.isdigit()
        ]
