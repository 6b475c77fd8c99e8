"""Duration and price bands shared by the mapper, the audit and the dialogue."""

import re
from dataclasses import dataclass

from studio_assistant.data import DurationBand

# Half-day and full-day listings are sold as "1 day" products interchangeably.
DAY_GROUP: frozenset[DurationBand] = frozenset({DurationBand.HALF_DAY, DurationBand.FULL_DAY})


@dataclass(frozen=True)
class PriceBand:
    """Expected price range (GBP) for a duration band."""

    band: DurationBand
    low: float | None
    high: float | None

    def contains(self, price: float) -> bool:
        if self.low is not None and price < self.low:
            return False
        return self.high is None or price <= self.high


PRICE_BANDS: dict[DurationBand, PriceBand] = {
    DurationBand.SHORT: PriceBand(DurationBand.SHORT, None, 200.0),
    DurationBand.HALF_DAY: PriceBand(DurationBand.HALF_DAY, 100.0, 300.0),
    DurationBand.FULL_DAY: PriceBand(DurationBand.FULL_DAY, 150.0, 500.0),
    DurationBand.MULTI_DAY: PriceBand(DurationBand.MULTI_DAY, 300.0, None),
}


@dataclass(frozen=True)
class SpecialCase:
    """A named listing whose price is fixed regardless of the band heuristic."""

    url_fragment: str
    price_gbp: float


SPECIAL_CASES: tuple[SpecialCase, ...] = (
    SpecialCase("fairy-glen", 125.0),
    SpecialCase("landscape-photography-snowdonia", 595.0),
)


def band_for_hours(hours: float) -> DurationBand:
    """Bucket a duration in hours. Total over all non-negative inputs."""
    if hours <= 4:
        return DurationBand.SHORT
    if hours <= 8:
        return DurationBand.HALF_DAY
    if hours <= 24:
        return DurationBand.FULL_DAY
    return DurationBand.MULTI_DAY


def bands_compatible(a: DurationBand, b: DurationBand) -> bool:
    return a == b or (a in DAY_GROUP and b in DAY_GROUP)


def band_for_price(price: float) -> DurationBand:
    """Infer a duration band from price when a product declares no duration."""
    if price <= 125:
        return DurationBand.SHORT
    if price <= 175:
        return DurationBand.HALF_DAY
    if price <= 300:
        return DurationBand.FULL_DAY
    return DurationBand.MULTI_DAY


_HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*-?\s*(?:hr|hrs|hour|hours)\b")
_DAYS_RE = re.compile(r"\b(\d+)\s*-?\s*days?\b")


def parse_declared_hours(text: str) -> float | None:
    """Read a declared duration from product text ("4hrs", "1 day", "3 days").

    The first duration phrase wins, matching how listings lead with their
    headline duration. Residential listings without a number count as two days.
    """
    lowered = text.lower()
    hours_match = _HOURS_RE.search(lowered)
    days_match = _DAYS_RE.search(lowered)
    if hours_match and (not days_match or hours_match.start() < days_match.start()):
        return float(hours_match.group(1))
    if days_match:
        return float(days_match.group(1)) * 24
    if re.search(r"\b(?:one|full)[\s-]day\b", lowered):
        return 24.0
    if "residential" in lowered or re.search(r"\bmulti[\s-]day\b", lowered):
        return 48.0
    return None


def special_case_for(url: str) -> SpecialCase | None:
    lowered = url.lower()
    for case in SPECIAL_CASES:
        if case.url_fragment in lowered:
            return case
    return None
