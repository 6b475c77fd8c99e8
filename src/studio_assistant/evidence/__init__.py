"""Evidence gathering."""

from studio_assistant.evidence.gatherer import EvidenceGatherer, dedupe, dedupe_snapshot
from studio_assistant.evidence.matching import candidate_text, matched_keywords, matches_any

__all__ = [
    "EvidenceGatherer",
    "candidate_text",
    "dedupe",
    "dedupe_snapshot",
    "matched_keywords",
    "matches_any",
]
