"""Clarification dialogue state machine."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum

from studio_assistant.data import (
    Candidate,
    ClarificationOption,
    ClarificationState,
    ClassificationResult,
    EvidenceSnapshot,
    Intent,
    Query,
)
from studio_assistant.dialogue.options import GENERIC_OPTIONS, build_options
from studio_assistant.session.base import SessionStore

logger = logging.getLogger(__name__)


class DialogueState(StrEnum):
    IDLE = "idle"
    OFFERED = "offered"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class ClarificationTurn:
    """What the manager decided for one clarifying turn."""

    state: DialogueState
    question: str
    options: list[ClarificationOption] = field(default_factory=list)
    depth: int = 0


@dataclass(frozen=True)
class Resolution:
    """An incoming query, possibly rewritten from a selected option."""

    query: Query
    state: DialogueState


_QUESTIONS: dict[Intent, str] = {
    Intent.EVENTS: (
        "What type of workshop are you planning? This will help me show the right dates."
    ),
    Intent.SERVICES: "What type of service are you looking for?",
    Intent.EQUIPMENT: (
        "I'd be happy to help with equipment recommendations. "
        "Which of these is closest to what you need?"
    ),
}
_DEFAULT_QUESTION = "Could you tell me a bit more about what you're looking for?"
_EXHAUSTED_QUESTION = "Let's start from the top. Which of these areas can I help with?"


def _norm(text: str) -> str:
    return " ".join(text.lower().split())


class ClarificationManager:
    """Owns ``ClarificationState``; no other component writes it.

    Transitions: ``Idle -> Offered`` when a turn needs clarification;
    ``Offered -> Resolved`` when the next query selects an offered option;
    ``Offered -> Exhausted`` once ``max_depth`` clarifying turns have been
    used, which answers with the generic menu and discards the state;
    ``Resolved -> Idle`` via ``complete`` after a terminal answer.

    Args:
        store: Session store holding state records as dicts.
        max_depth: Clarifying turns allowed before falling back to the generic menu.
        max_options: Cap on options per turn.
        clock: Returns "now" for state timestamps.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        max_depth: int = 3,
        max_options: int = 6,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._max_depth = max_depth
        self._max_options = max_options
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    async def load(self, session_id: str | None) -> ClarificationState | None:
        if not session_id:
            return None
        raw = await self._store.get(session_id)
        if raw is None:
            return None
        try:
            return ClarificationState.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable clarification state for {session_id}: {e}")
            await self._store.delete(session_id)
            return None

    async def resolve(self, query: Query) -> Resolution:
        """Map a selected option back to its refined query.

        If the session has options on offer and the text matches one of them
        (by label or query), the option's query becomes the turn's text and the
        dialogue's original query is carried as ``previous_query``.
        """
        state = await self.load(query.session_id)
        if state is None or not state.offered_labels:
            return Resolution(query=query, state=DialogueState.IDLE)

        text = _norm(query.text)
        for label, option_query in zip(state.offered_labels, state.offered_queries, strict=False):
            if text in (_norm(label), _norm(option_query)):
                logger.info(f"Session {query.session_id} selected option {label!r}")
                return Resolution(
                    query=replace(
                        query,
                        text=option_query,
                        previous_query=query.previous_query or state.original_query,
                    ),
                    state=DialogueState.RESOLVED,
                )
        return Resolution(query=query, state=DialogueState.OFFERED)

    async def offer(
        self,
        query: Query,
        classification: ClassificationResult,
        snapshot: EvidenceSnapshot,
        *,
        top_candidates: Sequence[Candidate] = (),
    ) -> ClarificationTurn:
        """Produce the next clarifying question and record it in the session."""
        state = await self.load(query.session_id)
        if state is None:
            state = ClarificationState(
                session_id=query.session_id or "",
                original_query=query.previous_query or query.text,
                updated_at=self._clock(),
            )

        if state.depth >= self._max_depth:
            logger.info(f"Clarification exhausted for session {query.session_id}")
            if query.session_id:
                await self._store.delete(query.session_id)
            return ClarificationTurn(
                state=DialogueState.EXHAUSTED,
                question=_EXHAUSTED_QUESTION,
                options=list(GENERIC_OPTIONS)[: self._max_options],
                depth=state.depth,
            )

        options = build_options(
            classification,
            snapshot,
            top_candidates=top_candidates,
            exclude=state.offered_labels,
            max_options=self._max_options,
        )
        state = replace(
            state,
            depth=state.depth + 1,
            offered_labels=state.offered_labels + tuple(o.text for o in options),
            offered_queries=state.offered_queries + tuple(o.query for o in options),
            updated_at=self._clock(),
        )
        if query.session_id:
            await self._store.set(query.session_id, state.to_dict())

        return ClarificationTurn(
            state=DialogueState.OFFERED,
            question=_QUESTIONS.get(classification.intent, _DEFAULT_QUESTION),
            options=options,
            depth=state.depth,
        )

    async def complete(self, session_id: str | None) -> None:
        """Discard the session's dialogue once a terminal answer was produced."""
        if session_id:
            await self._store.delete(session_id)
