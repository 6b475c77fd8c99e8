"""Protocol for candidate ranking."""

from collections.abc import Sequence
from typing import Protocol

from studio_assistant.data import Candidate, ScoredCandidate


class CandidateRanker(Protocol):
    """Interface for ranking evidence candidates against a query."""

    def rank(
        self,
        candidates: Sequence[Candidate],
        keywords: Sequence[str],
        *,
        concepts: Sequence[str] = (),
        genres: Sequence[str] = (),
        equipment: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[ScoredCandidate]:
        """Score and order candidates.

        Args:
            candidates: Evidence entries of any kind.
            keywords: Active query keywords.
            concepts: Core concepts named by the query.
            genres: Genre words named by the query.
            equipment: Equipment keywords; when present, entries that mention
                none of them are demoted.
            limit: Truncate after scoring.

        Returns:
            Scored candidates in descending score order.
        """
        ...
