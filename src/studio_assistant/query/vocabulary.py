"""Curated keyword sets used by the classifier, scorer and dialogue manager.

All sets are lower-case. Multi-word entries are matched as phrases before the
query is split into single-word tokens.
"""

import re

STOPWORDS: frozenset[str] = frozenset(
    {
        "a", "about", "an", "and", "any", "are", "at", "be", "can", "cost", "costs",
        "do", "does", "for", "from", "get", "have", "how", "i", "in", "is", "it",
        "me", "my", "of", "on", "or", "please", "should", "show", "tell", "the",
        "there", "to", "uk", "use", "want", "what", "whats", "which", "with",
        "you", "your", "photo", "photography", "photographic",
    }
)  # fmt: skip

# Removed from event keyword lists; they describe *when*, not *what*.
EVENT_STOPWORDS: frozenset[str] = frozenset(
    {
        "next", "upcoming", "soon", "nearest", "closest", "near", "available",
        "availability", "dates", "date", "when", "whens", "workshop", "workshops",
        "event", "events", "course", "courses", "class", "classes",
    }
)  # fmt: skip

EVENT_TERMS: frozenset[str] = frozenset(
    {
        "workshop", "workshops", "event", "events", "course", "courses", "class",
        "classes", "photo walk", "walk", "walks", "residential", "book", "booking",
        "when", "whens", "next", "upcoming", "dates", "schedule",
    }
)  # fmt: skip

COURSE_QUALIFIERS: frozenset[str] = frozenset(
    {"course", "courses", "workshop", "workshops", "class", "classes", "lesson", "lessons"}
)

# Unambiguous service wording; wins over event wording.
STRONG_SERVICE_TERMS: frozenset[str] = frozenset(
    {
        "private", "1-2-1", "one to one", "1 to 1", "mentoring", "mentor", "feedback",
        "critique", "review my", "gift voucher", "voucher", "rps",
    }
)  # fmt: skip

SERVICE_TERMS: frozenset[str] = frozenset(
    {"service", "services", "lesson", "lessons", "tuition", "hire", "commission", "training"}
)

ABOUT_TERMS: frozenset[str] = frozenset(
    {
        "who is", "who are you", "about alan", "alan ranger", "your background",
        "qualifications", "contact", "phone number", "email address", "where are you based",
        "where is alan",
    }
)  # fmt: skip

BARE_EQUIPMENT_TERMS: frozenset[str] = frozenset(
    {"equipment", "gear", "kit", "what to bring", "what should i bring"}
)

# Hardware only; concepts like "iso" live in CORE_CONCEPTS.
EQUIPMENT_TERMS: frozenset[str] = frozenset(
    {
        "tripod", "tripods", "lens", "lenses", "filter", "filters", "flash", "monopod",
        "ball head", "geared head", "memory card", "battery", "batteries", "sensor",
        "shutter", "camera bag", "remote release", "camera", "cameras",
    }
)  # fmt: skip

CORE_CONCEPTS: tuple[str, ...] = (
    "iso", "aperture", "shutter speed", "white balance", "depth of field",
    "metering", "exposure", "composition", "macro", "landscape", "portrait",
    "street", "wildlife", "raw", "jpeg", "hdr", "focal length", "long exposure",
)  # fmt: skip

GENRE_TERMS: frozenset[str] = frozenset(
    {
        "landscape", "portrait", "street", "wildlife", "macro", "seascape", "architecture",
        "woodland", "night", "astro", "abstract", "urban",
    }
)  # fmt: skip

# Seasonal / subject words that become their own clarification option when
# they recur in event titles.
THEME_TERMS: dict[str, str] = {
    "bluebell": "Bluebell workshops",
    "woodland": "Woodland workshops",
    "autumn": "Autumn workshops",
    "macro": "Macro & abstract workshops",
    "abstract": "Macro & abstract workshops",
    "seascape": "Seascape workshops",
    "long exposure": "Long exposure workshops",
    "waterfall": "Waterfall workshops",
    "lavender": "Lavender workshops",
    "sunset": "Sunset workshops",
}

LOCATIONS: tuple[str, ...] = (
    "coventry", "kenilworth", "warwickshire", "warwick", "leamington", "balsall common",
    "midlands", "batsford", "north devon", "devon", "exmoor", "dartmoor", "hartland quay",
    "lynmouth", "snowdonia", "betws-y-coed", "fairy glen", "lake district", "peak district",
    "yorkshire dales", "northumberland", "norfolk", "anglesey", "chesterton",
)  # fmt: skip

MONTHS: tuple[str, ...] = (
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december",
)  # fmt: skip

# Words whose presence makes a short query "specific" to the calibrator.
SPECIFIC_KEYWORDS: frozenset[str] = frozenset(
    {
        "camera", "lens", "tripod", "filter", "bag", "memory card", "beginner", "advanced",
        "rps", "lightroom", "online", "private", "course", "workshop", "mentoring",
        "feedback", "critique", "lessons", "training", "service", "iso", "aperture",
        "shutter", "exposure", "composition", "lighting", "white balance",
        "depth of field", "framing", "macro", "portrait", "landscape", "street", "alan",
        "ranger", "about", "who is", "where is", "contact", "devon", "when", "next",
        "date", "time", "location", "1 day", "hour", "hours", "bluebell",
        "woodland", "autumn", "residential",
    }
)  # fmt: skip

MULTI_WORD_PHRASES: tuple[str, ...] = tuple(
    sorted(
        {p for p in (*CORE_CONCEPTS, *LOCATIONS, *EQUIPMENT_TERMS, *THEME_TERMS) if " " in p},
        key=lambda p: (-len(p), p),
    )
)

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9\-']*")


def contains_term(text: str, term: str) -> bool:
    """Whole-word (or whole-phrase) containment test on lower-cased text."""
    return re.search(rf"(?<![a-z0-9]){re.escape(term)}(?![a-z0-9])", text) is not None


def find_terms(text: str, terms: "frozenset[str] | tuple[str, ...] | dict[str, str]") -> list[str]:
    """Return the terms present in ``text``, in a stable (sorted) order."""
    lowered = text.lower()
    return sorted(t for t in terms if contains_term(lowered, t))


def fold_plural(token: str) -> str:
    """Cheap singularisation for matching ("workshops" -> "workshop")."""
    if len(token) > 4 and token.endswith("ies"):
        return token[:-3] + "y"
    if len(token) > 3 and token.endswith("s") and not token.endswith("ss"):
        return token[:-1]
    return token


def tokenize(text: str) -> list[str]:
    """Lower-case word tokens, stripping trailing apostrophes and dashes."""
    return [t.strip("-'") for t in _TOKEN_RE.findall(text.lower()) if t.strip("-'")]


def extract_keywords(text: str) -> list[str]:
    """Extract matching keywords: vocabulary phrases first, then single tokens.

    Stopwords are dropped, order of first appearance is kept and duplicates are
    removed. Tokens already covered by a phrase are not repeated.
    """
    lowered = " ".join(text.lower().split())
    keywords: list[str] = []
    for phrase in MULTI_WORD_PHRASES:
        if contains_term(lowered, phrase):
            keywords.append(phrase)
            lowered = re.sub(rf"(?<![a-z0-9]){re.escape(phrase)}(?![a-z0-9])", " ", lowered)
    for token in tokenize(lowered):
        if token in STOPWORDS or len(token) < 2 or token in keywords:
            continue
        keywords.append(token)
    return keywords


def event_keywords(keywords: list[str]) -> list[str]:
    """Drop scheduling words; fall back to the full list when nothing remains."""
    filtered = [k for k in keywords if k not in EVENT_STOPWORDS]
    return filtered or list(keywords)
