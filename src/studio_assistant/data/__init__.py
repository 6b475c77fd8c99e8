"""Data models for the studio assistant."""

from studio_assistant.data.contract import (
    ChatRequest,
    ChatResponse,
    OptionPayload,
    StructuredResults,
)
from studio_assistant.data.models import (
    ArticleCandidate,
    Candidate,
    ClarificationOption,
    ClarificationState,
    ClassificationResult,
    ConfidenceResult,
    ContentKind,
    DateWindow,
    Decision,
    DurationBand,
    EventCandidate,
    EventProductMapping,
    EvidenceCounts,
    EvidenceSnapshot,
    Intent,
    MappingStatus,
    ProductCandidate,
    ProductRef,
    Query,
    RankedEvidence,
    ScoredCandidate,
    ServiceCandidate,
)

__all__ = [
    "ArticleCandidate",
    "Candidate",
    "ChatRequest",
    "ChatResponse",
    "ClarificationOption",
    "ClarificationState",
    "ClassificationResult",
    "ConfidenceResult",
    "ContentKind",
    "DateWindow",
    "Decision",
    "DurationBand",
    "EventCandidate",
    "EventProductMapping",
    "EvidenceCounts",
    "EvidenceSnapshot",
    "Intent",
    "MappingStatus",
    "OptionPayload",
    "ProductCandidate",
    "ProductRef",
    "Query",
    "RankedEvidence",
    "ScoredCandidate",
    "ServiceCandidate",
    "StructuredResults",
]
