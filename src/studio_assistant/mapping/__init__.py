"""Event-to-product mapping."""

from studio_assistant.mapping.durations import (
    DAY_GROUP,
    PRICE_BANDS,
    SPECIAL_CASES,
    band_for_hours,
    bands_compatible,
    parse_declared_hours,
)
from studio_assistant.mapping.mapper import EventProductMapper, MappingTable, audit_mapping
from studio_assistant.mapping.sessions import SessionSplit, find_session_split, split_event

__all__ = [
    "DAY_GROUP",
    "EventProductMapper",
    "MappingTable",
    "PRICE_BANDS",
    "SPECIAL_CASES",
    "SessionSplit",
    "audit_mapping",
    "band_for_hours",
    "bands_compatible",
    "find_session_split",
    "parse_declared_hours",
    "split_event",
]
