"""Derive clarification options from the evidence at hand.

Event options always take precedence: service-derived options are only built
when the events yield nothing, so a generic service menu can never replace
more specific event groupings.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from studio_assistant.data import (
    Candidate,
    ClarificationOption,
    ClassificationResult,
    DurationBand,
    EventCandidate,
    EvidenceSnapshot,
    Intent,
)
from studio_assistant.mapping import DAY_GROUP, band_for_hours
from studio_assistant.mapping.mapper import specific_tokens
from studio_assistant.query import vocabulary as vocab


@dataclass(frozen=True)
class DurationOption:
    label: str
    query: str
    bands: frozenset[DurationBand]


DURATION_OPTIONS: tuple[DurationOption, ...] = (
    DurationOption(
        "2.5hr - 4hr workshops", "2.5hr - 4hr workshops", frozenset({DurationBand.SHORT})
    ),
    DurationOption("1 day workshops", "1 day workshops", DAY_GROUP),
    DurationOption(
        "Multi day residential workshops",
        "multi day residential workshops",
        frozenset({DurationBand.MULTI_DAY}),
    ),
)

SERVICE_OPTIONS: tuple[tuple[tuple[str, ...], ClarificationOption], ...] = (
    (
        ("private", "1-2-1", "one to one"),
        ClarificationOption("Private photography lessons", "private photography lessons"),
    ),
    (
        ("mentoring", "mentor"),
        ClarificationOption("Photography mentoring", "photography mentoring"),
    ),
    (("rps",), ClarificationOption("RPS mentoring course", "RPS mentoring course")),
    (
        ("feedback", "critique", "review"),
        ClarificationOption("Image feedback and critique", "image feedback and critique"),
    ),
    (("voucher", "gift"), ClarificationOption("Gift vouchers", "photography gift vouchers")),
)

GENERIC_OPTIONS: tuple[ClarificationOption, ...] = (
    ClarificationOption("Photography equipment advice", "photography equipment advice"),
    ClarificationOption("Photography courses and workshops", "photography courses and workshops"),
    ClarificationOption("Photography services and mentoring", "photography services and mentoring"),
    ClarificationOption("General photography advice", "general photography advice"),
    ClarificationOption("About Alan Ranger", "about alan ranger"),
)

# Recurring title words that never make a useful option on their own.
_NOT_THEMES = frozenset(vocab.MONTHS) | {"beginner", "introduction", "session", "sessions"}


def _event_bands(events: Iterable[EventCandidate]) -> set[DurationBand]:
    bands: set[DurationBand] = set()
    for event in events:
        hours = event.duration_hours
        if hours is None:
            continue
        bands.add(band_for_hours(hours))
        if event.has_sessions:
            bands.add(DurationBand.SHORT)
    return bands


def duration_options(events: Sequence[EventCandidate]) -> list[ClarificationOption]:
    bands = _event_bands(events)
    return [
        ClarificationOption(o.label, o.query) for o in DURATION_OPTIONS if o.bands & bands
    ]


def theme_options(events: Sequence[EventCandidate]) -> list[ClarificationOption]:
    """Vocabulary themes in event titles, then title words recurring across listings."""
    options: list[ClarificationOption] = []
    labels: set[str] = set()
    for term, label in vocab.THEME_TERMS.items():
        if label in labels:
            continue
        if any(vocab.contains_term(e.title.lower(), term) for e in events):
            labels.add(label)
            options.append(ClarificationOption(label, f"{term} workshops"))

    listings: dict[str, str] = {}
    for event in events:
        listings.setdefault(event.url.lower().rstrip("/"), event.title)
    counts: Counter[str] = Counter()
    for title in listings.values():
        counts.update(specific_tokens(title))
    known = {t for term in vocab.THEME_TERMS for t in specific_tokens(term)}
    places = {t for loc in vocab.LOCATIONS for t in specific_tokens(loc)}
    for word, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        if n < 2 or word in known or word in places or word in _NOT_THEMES:
            continue
        label = f"{word.capitalize()} workshops"
        if label not in labels:
            labels.add(label)
            options.append(ClarificationOption(label, f"{word} workshops"))
    return options


def location_options(events: Sequence[EventCandidate]) -> list[ClarificationOption]:
    counts: Counter[str] = Counter()
    for event in events:
        text = f"{event.title} {event.location}".lower()
        found = vocab.find_terms(text, vocab.LOCATIONS)
        # Prefer "north devon" over "devon" when both match.
        found = [f for f in found if not any(f != g and f in g for g in found)]
        counts.update(set(found))
    if len(counts) < 2:
        return []
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:3]
    return [
        ClarificationOption(f"Workshops in {loc.title()}", f"workshops in {loc}")
        for loc, _ in ranked
    ]


def month_options(events: Sequence[EventCandidate]) -> list[ClarificationOption]:
    months = sorted({(e.start.year, e.start.month) for e in events if e.start is not None})
    if len(months) < 2:
        return []
    options = []
    for _, month in months[:3]:
        name = vocab.MONTHS[month - 1]
        label = f"Workshops in {name.capitalize()}"
        options.append(ClarificationOption(label, f"workshops in {name}"))
    return options


def service_options(candidates: Sequence[Candidate]) -> list[ClarificationOption]:
    options = []
    for terms, option in SERVICE_OPTIONS:
        if any(any(t in c.title.lower() for t in terms) for c in candidates):
            options.append(option)
    return options


def equipment_options(candidates: Sequence[Candidate]) -> list[ClarificationOption]:
    options = []
    seen: set[str] = set()
    for candidate in candidates:
        for term in vocab.find_terms(candidate.title, vocab.EQUIPMENT_TERMS):
            singular = vocab.fold_plural(term)
            if singular in seen:
                continue
            seen.add(singular)
            label = f"{singular.capitalize()} advice"
            options.append(ClarificationOption(label, f"{singular} advice"))
    return options


def title_options(candidates: Sequence[Candidate]) -> list[ClarificationOption]:
    options = []
    seen: set[str] = set()
    for candidate in candidates:
        title = candidate.title.strip()
        if title and title.lower() not in seen:
            seen.add(title.lower())
            options.append(ClarificationOption(title, title))
    return options


def build_options(
    classification: ClassificationResult,
    snapshot: EvidenceSnapshot,
    *,
    top_candidates: Sequence[Candidate] = (),
    exclude: Iterable[str] = (),
    max_options: int = 6,
) -> list[ClarificationOption]:
    """Build the clarification options for one turn.

    Args:
        classification: Classifier output; groupings the query already narrowed are skipped.
        snapshot: Evidence for this turn.
        top_candidates: Best-scored candidates, used when nothing else applies.
        exclude: Labels offered at an earlier depth.
        max_options: Cap on the number of options.

    Returns:
        Never empty: falls back to the generic menu when evidence yields nothing.
    """
    excluded = {label.lower() for label in exclude}

    def fresh(options: Iterable[ClarificationOption]) -> list[ClarificationOption]:
        unique: list[ClarificationOption] = []
        for option in options:
            key = option.text.lower()
            if key not in excluded and all(key != o.text.lower() for o in unique):
                unique.append(option)
        return unique

    events = snapshot.events
    groups: list[ClarificationOption] = []
    if events:
        if not classification.duration_bands:
            groups.extend(duration_options(events))
        if not classification.themes:
            groups.extend(theme_options(events))
        if not classification.locations:
            groups.extend(location_options(events))
        if not classification.date_window:
            groups.extend(month_options(events))
    options = fresh(groups)

    if not options and classification.intent == Intent.EQUIPMENT:
        options = fresh(equipment_options([*snapshot.articles, *snapshot.products]))
    if not options and snapshot.services:
        options = fresh(service_options(snapshot.services))
    if not options and not snapshot.is_empty:
        pool = list(top_candidates) or [
            *snapshot.articles,
            *snapshot.services,
            *snapshot.products,
            *snapshot.events,
        ]
        options = fresh(title_options(pool))
    if not options:
        options = fresh(GENERIC_OPTIONS) or list(GENERIC_OPTIONS)
    return options[:max_options]
