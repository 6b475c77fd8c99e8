"""The answer pipeline: classify, gather, score, calibrate, then answer or clarify."""

import logging
import time
from collections.abc import Sequence

from studio_assistant.composer import AnswerComposer
from studio_assistant.confidence import ConfidenceCalibrator
from studio_assistant.data import (
    Candidate,
    ChatRequest,
    ChatResponse,
    ClassificationResult,
    Decision,
    EvidenceSnapshot,
    Query,
    RankedEvidence,
    ScoredCandidate,
)
from studio_assistant.dialogue import ClarificationManager
from studio_assistant.evidence import EvidenceGatherer
from studio_assistant.query import QueryClassifier, event_keywords
from studio_assistant.ranker import RelevanceScorer
from studio_assistant.run_logger import TurnLogger, TurnRecord

logger = logging.getLogger(__name__)


class AnswerPipeline:
    """Answers one turn by running every component in sequence.

    Flow:
    1. The dialogue manager maps a selected clarification option back to its query
    2. The classifier assigns intent and hints
    3. The gatherer fetches an evidence snapshot (the only I/O)
    4. The scorer ranks every content kind
    5. The calibrator decides between answering and clarifying
    6. The composer builds the answer, or the dialogue manager offers options

    Any unexpected error yields the generic clarification menu; the turn
    logger's failures never affect the response.

    Args:
        classifier: Query classifier.
        gatherer: Evidence gatherer.
        scorer: Relevance scorer.
        calibrator: Confidence calibrator.
        dialogue: Clarification dialogue manager.
        composer: Answer composer.
        turn_logger: Optional TurnLogger for the interaction log.
        top_options: Number of top candidates offered when evidence yields no grouping.
    """

    def __init__(
        self,
        classifier: QueryClassifier,
        gatherer: EvidenceGatherer,
        scorer: RelevanceScorer,
        calibrator: ConfidenceCalibrator,
        dialogue: ClarificationManager,
        composer: AnswerComposer,
        turn_logger: TurnLogger | None = None,
        top_options: int = 6,
    ) -> None:
        self._classifier = classifier
        self._gatherer = gatherer
        self._scorer = scorer
        self._calibrator = calibrator
        self._dialogue = dialogue
        self._composer = composer
        self._turn_logger = turn_logger
        self._top_options = top_options

    async def answer(self, request: ChatRequest) -> ChatResponse:
        """Answer one turn. Never raises."""
        query = Query(
            text=request.query,
            previous_query=request.previous_query,
            session_id=request.session_id,
            page_context=request.page_context,
        )
        started = time.monotonic()
        record = self._turn_logger.start_turn(query) if self._turn_logger else None

        try:
            response = await self._answer(query, record)
        except Exception as e:
            logger.warning(f"Error answering {query.text!r}: {e}")
            response = self._composer.generic_clarification()

        if self._turn_logger:
            try:
                self._turn_logger.finish_turn(record, response, time.monotonic() - started)
            except Exception as e:
                logger.warning(f"Error writing interaction log: {e}")
        return response

    async def _answer(self, query: Query, record: TurnRecord | None) -> ChatResponse:
        # Step 1: Resolve a selected clarification option
        t0 = time.monotonic()
        resolution = await self._dialogue.resolve(query)
        query = resolution.query
        self._log_stage(record, "dialogue", self._dialogue, resolution, t0)

        # Step 2: Classify
        t0 = time.monotonic()
        classification = self._classifier.classify(query)
        self._log_stage(record, "classification", self._classifier, classification, t0)

        # Step 3: Gather evidence
        t0 = time.monotonic()
        snapshot = await self._gatherer.gather(classification)
        self._log_stage(record, "evidence", self._gatherer, snapshot.counts(), t0)

        # Step 4: Rank
        t0 = time.monotonic()
        ranked = self._rank(classification, snapshot)
        merged = sorted(
            (*ranked.articles, *ranked.services, *ranked.products, *ranked.events),
            key=ScoredCandidate.sort_key,
        )
        relevance = self._scorer.relevance(merged, list(classification.keywords))
        self._log_stage(
            record,
            "ranking",
            self._scorer,
            {"relevance": relevance, "top": [c.title for c in ranked.top(5)]},
            t0,
        )

        # Step 5: Calibrate
        t0 = time.monotonic()
        confidence = self._calibrator.calibrate(
            query.text, classification, snapshot.counts(), relevance
        )
        self._log_stage(record, "confidence", self._calibrator, confidence, t0)

        # Step 6: Answer or clarify
        t0 = time.monotonic()
        if confidence.decision == Decision.CLARIFICATION:
            turn = await self._dialogue.offer(
                query,
                classification,
                snapshot,
                top_candidates=ranked.top(self._top_options),
            )
            response = self._composer.clarification(
                turn.question, turn.options, confidence.confidence, ranked
            )
            self._log_stage(record, "clarification", self._dialogue, turn, t0)
            return response

        response = self._composer.compose(query.text, classification, confidence, ranked)
        await self._dialogue.complete(query.session_id)
        self._log_stage(record, "composition", self._composer, response.type, t0)
        return response

    def _rank(
        self, classification: ClassificationResult, snapshot: EvidenceSnapshot
    ) -> RankedEvidence:
        keywords = list(classification.keywords)

        def rank(candidates: Sequence[Candidate], words: list[str]) -> tuple[ScoredCandidate, ...]:
            scored = self._scorer.rank(
                candidates,
                words,
                concepts=classification.concepts,
                genres=classification.genres,
                equipment=classification.equipment,
            )
            return tuple(scored)

        return RankedEvidence(
            articles=rank(snapshot.articles, keywords),
            events=rank(snapshot.events, event_keywords(keywords)),
            products=rank(snapshot.products, keywords),
            services=rank(snapshot.services, keywords),
        )

    def _log_stage(
        self, record: TurnRecord | None, stage: str, component: object, summary: object, t0: float
    ) -> None:
        if self._turn_logger:
            self._turn_logger.log_stage(
                record, stage, type(component).__name__, summary, time.monotonic() - t0
            )
