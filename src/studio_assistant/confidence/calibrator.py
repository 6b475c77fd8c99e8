"""Confidence calibration: answer directly or ask a clarifying question."""

import logging
from dataclasses import dataclass

from studio_assistant.data import (
    ClassificationResult,
    ConfidenceResult,
    Decision,
    EvidenceCounts,
    Intent,
)
from studio_assistant.query.vocabulary import SPECIFIC_KEYWORDS, contains_term

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Thresholds:
    """Empirically tuned calibration constants."""

    clarify_below: float = 0.5
    short_query_chars: int = 10
    negligible_items: int = 1
    negligible_relevance: float = 0.3
    rich_items: int = 3
    rich_relevance: float = 0.6
    medium_items: int = 2
    medium_relevance: float = 0.5
    low_confidence: float = 0.1
    default_confidence: float = 0.3
    medium_confidence: float = 0.7
    high_confidence: float = 0.85
    max_confidence: float = 0.95
    per_item_bonus: float = 0.01


def is_clarification_prompt(text: str) -> bool:
    """True when the text reads like one of our own clarifying questions."""
    lowered = text.lower()
    return (
        "what type of" in lowered and "are you planning" in lowered and "this will help" in lowered
    )


def has_specific_keyword(text: str) -> bool:
    """Substring match, except very short keywords which must be whole words."""
    lowered = text.lower()
    for keyword in SPECIFIC_KEYWORDS:
        if len(keyword) <= 3:
            if contains_term(lowered, keyword):
                return True
        elif keyword in lowered:
            return True
    return False


class ConfidenceCalibrator:
    """Turns classification and evidence richness into a confidence and a decision.

    Rules are evaluated in order and the first match wins:

    1. clarification-shaped or ambiguous query: low
    2. very short query without a specific keyword: low
    3. negligible evidence with low relevance: low
    4. rich evidence with high relevance: high, plus a small per-item bonus
    5. events query with a specific keyword and at least one event: high
    6. medium evidence, decent relevance and a specific keyword: medium
    7. otherwise: default (below the clarification threshold)

    Confidence never decreases when evidence counts grow at equal relevance.

    Args:
        thresholds: Calibration constants.
    """

    def __init__(self, thresholds: Thresholds | None = None) -> None:
        self._t = thresholds or Thresholds()

    @property
    def thresholds(self) -> Thresholds:
        return self._t

    def calibrate(
        self,
        query_text: str,
        classification: ClassificationResult,
        counts: EvidenceCounts,
        relevance: float,
    ) -> ConfidenceResult:
        confidence, rule = self._confidence(query_text, classification, counts, relevance)
        confidence = min(max(confidence, 0.0), 1.0)

        if confidence < self._t.clarify_below:
            decision = Decision.CLARIFICATION
        elif classification.intent == Intent.EVENTS and counts.events > 0:
            decision = Decision.EVENTS
        else:
            decision = Decision.DIRECT

        logger.debug(f"Calibrated {query_text!r}: {confidence:.2f} ({rule}) -> {decision}")
        return ConfidenceResult(
            confidence=round(confidence, 4),
            decision=decision,
            counts=counts,
            relevance=relevance,
            rule=rule,
        )

    def _confidence(
        self,
        query_text: str,
        classification: ClassificationResult,
        counts: EvidenceCounts,
        relevance: float,
    ) -> tuple[float, str]:
        t = self._t
        specific = has_specific_keyword(query_text)
        total = counts.total

        if is_clarification_prompt(query_text):
            return t.low_confidence, "clarification_prompt"
        if classification.ambiguous:
            return t.low_confidence, "ambiguous_query"
        if len(query_text.strip()) <= t.short_query_chars and not specific:
            return t.low_confidence, "short_generic"
        if total <= t.negligible_items and relevance < t.negligible_relevance:
            return t.low_confidence, "negligible_evidence"
        if total >= t.rich_items and relevance > t.rich_relevance:
            bonus = t.per_item_bonus * (total - t.rich_items)
            return min(t.high_confidence + bonus, t.max_confidence), "rich_evidence"
        if classification.intent == Intent.EVENTS and specific and counts.events > 0:
            return t.high_confidence, "specific_events"
        if total >= t.medium_items and relevance > t.medium_relevance and specific:
            return t.medium_confidence, "medium_evidence"
        return t.default_confidence, "default"
