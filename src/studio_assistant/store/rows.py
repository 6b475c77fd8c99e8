"""Convert raw content-store rows into typed candidates.

Rows come from the ``page_entities`` table and the ``v_events_for_chat`` view.
Parsing is lenient: missing fields become empty values, and a row that cannot
be parsed at all is dropped with a warning instead of failing the batch.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime, time
from typing import Any
from zoneinfo import ZoneInfo

from studio_assistant.data import (
    ArticleCandidate,
    Candidate,
    ContentKind,
    EventCandidate,
    ProductCandidate,
    ServiceCandidate,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/London"


def _text(row: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _labels(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        cleaned = value.strip().strip("[]{}")
        parts = cleaned.split(",")
    else:
        parts = [str(v) for v in value]
    return tuple(p.strip().strip('"').lower() for p in parts if p.strip().strip('"'))


def _price(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace("£", "").replace(",", "").strip())
    except ValueError:
        return None


def parse_datetime(value: Any, tz: ZoneInfo | None = None) -> datetime | None:
    """Parse an ISO date or timestamp; naive values are taken as ``tz`` (default UTC)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    else:
        parsed = datetime.fromisoformat(str(value).strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz or UTC)
    return parsed


def _parse_time(value: Any) -> time | None:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value).strip())


def _combine(day_value: Any, time_value: Any, tz: ZoneInfo) -> datetime | None:
    moment = parse_datetime(day_value, tz)
    clock = _parse_time(time_value)
    if moment is None:
        return None
    if clock is not None:
        moment = moment.astimezone(tz).replace(hour=clock.hour, minute=clock.minute, second=0)
    return moment


def _common(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": _text(row, "id", "page_url", "url", "event_url"),
        "title": _text(row, "title", "event_title"),
        "url": _text(row, "page_url", "url", "event_url", "source_url"),
        "description": _text(row, "description", "excerpt", "body"),
        "categories": _labels(row.get("categories")),
        "tags": _labels(row.get("tags")),
        "publish_date": parse_datetime(row.get("publish_date")),
        "last_seen": parse_datetime(row.get("last_seen")),
    }


def parse_article(row: dict[str, Any]) -> ArticleCandidate:
    return ArticleCandidate(**_common(row))


def parse_service(row: dict[str, Any]) -> ServiceCandidate:
    return ServiceCandidate(**_common(row))


def parse_product(row: dict[str, Any]) -> ProductCandidate:
    duration = row.get("duration_hours")
    return ProductCandidate(
        **_common(row),
        price_gbp=_price(row.get("price_gbp", row.get("price"))),
        duration_hours=float(duration) if duration not in (None, "") else None,
        location=_text(row, "location", "location_name"),
    )


def parse_event(row: dict[str, Any], tz: ZoneInfo | None = None) -> EventCandidate:
    """Parse an event row; start/end combine ``date_start``/``start_time`` in local time."""
    tz = tz or ZoneInfo(DEFAULT_TIMEZONE)
    start = _combine(row.get("date_start"), row.get("start_time"), tz)
    end = _combine(row.get("date_end") or row.get("date_start"), row.get("end_time"), tz)
    common = _common(row)
    if not row.get("id"):
        # One listing URL carries many dated events.
        common["id"] = f"{common['url']}@{start.isoformat() if start else ''}"
    return EventCandidate(
        **common,
        start=start,
        end=end,
        location=_text(row, "event_location", "location"),
        price_gbp=_price(row.get("price_gbp", row.get("price"))),
        product_url=_text(row, "product_url"),
        product_title=_text(row, "product_title"),
    )


def parse_rows(
    kind: ContentKind,
    rows: Iterable[dict[str, Any]],
    *,
    timezone: str = DEFAULT_TIMEZONE,
) -> list[Candidate]:
    """Parse a batch of rows of one kind, skipping rows that cannot be read."""
    tz = ZoneInfo(timezone)
    candidates: list[Candidate] = []
    for row in rows:
        try:
            if kind == ContentKind.EVENT:
                candidates.append(parse_event(row, tz))
            elif kind == ContentKind.PRODUCT:
                candidates.append(parse_product(row))
            elif kind == ContentKind.SERVICE:
                candidates.append(parse_service(row))
            else:
                candidates.append(parse_article(row))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping malformed {kind} row {row.get('id') or row.get('url')}: {e}")
    return candidates
