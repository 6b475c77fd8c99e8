"""Candidate ranking."""

from studio_assistant.ranker.base import CandidateRanker
from studio_assistant.ranker.rules import RecencyTier, ScoringRules
from studio_assistant.ranker.scorer import RelevanceScorer, active_keywords

__all__ = [
    "CandidateRanker",
    "RecencyTier",
    "RelevanceScorer",
    "ScoringRules",
    "active_keywords",
]
