"""Detect early/late sub-sessions described in product text and split events."""

import re
from dataclasses import dataclass, replace
from datetime import datetime, time

from studio_assistant.data import EventCandidate

# A sub-session is at most this long; longer ranges describe the whole day.
MAX_SESSION_HOURS = 4.5

EARLY = "early"
LATE = "late"
_SUFFIX = {EARLY: " (Early Session)", LATE: " (Late Session)"}

_TIME = r"(\d{1,2})(?:[:.](\d{2}))?\s*(am|pm)"
_RANGE_RE = re.compile(rf"{_TIME}\s*(?:to|until|-|–)\s*{_TIME}", re.IGNORECASE)


@dataclass(frozen=True)
class TimeRange:
    start: time
    end: time

    @property
    def hours(self) -> float:
        end = self.end.hour * 60 + self.end.minute
        start = self.start.hour * 60 + self.start.minute
        return (end - start) / 60


@dataclass(frozen=True)
class SessionSplit:
    """Early and late sub-session times read from one listing."""

    early: TimeRange
    late: TimeRange


def _to_time(hour: str, minute: str | None, meridiem: str) -> time:
    h = int(hour) % 12
    if meridiem.lower() == "pm":
        h += 12
    return time(h, int(minute or 0))


def parse_time_ranges(text: str) -> list[TimeRange]:
    """All "8 am to 11.30 am" style ranges in order of appearance."""
    ranges: list[TimeRange] = []
    for m in _RANGE_RE.finditer(text):
        start = _to_time(m.group(1), m.group(2), m.group(3))
        end = _to_time(m.group(4), m.group(5), m.group(6))
        if end > start:
            ranges.append(TimeRange(start, end))
    return ranges


def find_session_split(text: str) -> SessionSplit | None:
    """Return the early/late split if the text describes two short sessions.

    Recognises both listing conventions, e.g. "4hrs - 5:45 am to 9:45 am or
    10:30 am to 2:30 pm OR 1 day - 5:45 am to 2:30 pm" and "morning workshops
    are 8 am to 11.30 am ... afternoon workshops are from 12:00 pm to 3:30 pm".
    """
    short: list[TimeRange] = []
    for r in parse_time_ranges(text):
        if r.hours <= MAX_SESSION_HOURS and r not in short:
            short.append(r)
    if len(short) < 2:
        return None
    short.sort(key=lambda r: r.start)
    early, late = short[0], short[1]
    if late.start < early.end:
        return None
    return SessionSplit(early=early, late=late)


def _at(day: datetime, t: time) -> datetime:
    return day.replace(hour=t.hour, minute=t.minute, second=0, microsecond=0)


def split_event(
    event: EventCandidate, split: SessionSplit
) -> tuple[EventCandidate, EventCandidate]:
    """Synthesize the two sub-session events of a split listing.

    Start/end keep the parent event's date and timezone; titles get an
    "(Early Session)" / "(Late Session)" suffix.
    """
    if event.start is None:
        raise ValueError(f"Cannot split event without a start time: {event.url}")
    sessions = []
    for label, span in ((EARLY, split.early), (LATE, split.late)):
        sessions.append(
            replace(
                event,
                id=f"{event.id}#{label}",
                title=f"{event.title}{_SUFFIX[label]}",
                start=_at(event.start, span.start),
                end=_at(event.start, span.end),
                session=label,
            )
        )
    return sessions[0], sessions[1]
