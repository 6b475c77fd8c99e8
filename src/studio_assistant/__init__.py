"""Studio Assistant: question answering over a photography business's content."""

from studio_assistant.composer import AnswerComposer
from studio_assistant.confidence import ConfidenceCalibrator, Thresholds
from studio_assistant.config import AssistantConfig, create_from_config, load_config
from studio_assistant.data import (
    ArticleCandidate,
    Candidate,
    ChatRequest,
    ChatResponse,
    ClarificationOption,
    ClarificationState,
    ClassificationResult,
    ConfidenceResult,
    ContentKind,
    Decision,
    DurationBand,
    EventCandidate,
    EventProductMapping,
    EvidenceSnapshot,
    Intent,
    ProductCandidate,
    Query,
    RankedEvidence,
    ScoredCandidate,
    ServiceCandidate,
)
from studio_assistant.dialogue import ClarificationManager, DialogueState
from studio_assistant.evidence import EvidenceGatherer
from studio_assistant.mapping import EventProductMapper, MappingTable, audit_mapping
from studio_assistant.pipeline import AnswerPipeline, AssistantPipeline
from studio_assistant.query import QueryClassifier
from studio_assistant.ranker import CandidateRanker, RelevanceScorer, ScoringRules
from studio_assistant.run_logger import TurnLogger
from studio_assistant.session import MemorySessionStore, SessionStore
from studio_assistant.store import ContentStore, InMemoryContentStore, SupabaseContentStore
from studio_assistant.url import normalize_url

__all__ = [
    # Models
    "ArticleCandidate",
    "Candidate",
    "ChatRequest",
    "ChatResponse",
    "ClarificationOption",
    "ClarificationState",
    "ClassificationResult",
    "ConfidenceResult",
    "ContentKind",
    "Decision",
    "DurationBand",
    "EventCandidate",
    "EventProductMapping",
    "EvidenceSnapshot",
    "Intent",
    "ProductCandidate",
    "Query",
    "RankedEvidence",
    "ScoredCandidate",
    "ServiceCandidate",
    # Functions
    "audit_mapping",
    "normalize_url",
    # Protocols
    "AssistantPipeline",
    "CandidateRanker",
    "ContentStore",
    "SessionStore",
    # Stores
    "InMemoryContentStore",
    "MemorySessionStore",
    "SupabaseContentStore",
    # Components
    "AnswerComposer",
    "ClarificationManager",
    "ConfidenceCalibrator",
    "DialogueState",
    "EventProductMapper",
    "EvidenceGatherer",
    "MappingTable",
    "QueryClassifier",
    "RelevanceScorer",
    "ScoringRules",
    "Thresholds",
    # Pipelines
    "AnswerPipeline",
    # Logging
    "TurnLogger",
    # Config
    "AssistantConfig",
    "create_from_config",
    "load_config",
]
