"""Heuristic relevance scorer."""

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from studio_assistant.data import Candidate, ScoredCandidate
from studio_assistant.evidence.matching import matched_keywords
from studio_assistant.query.vocabulary import GENRE_TERMS, fold_plural
from studio_assistant.ranker.rules import ScoringRules

logger = logging.getLogger(__name__)


def active_keywords(keywords: Sequence[str], equipment: Sequence[str]) -> list[str]:
    """Drop genre words when the query names equipment, so they don't dilute the score."""
    if not equipment:
        return list(keywords)
    return [k for k in keywords if k not in GENRE_TERMS]


def _singular_forms(term: str) -> set[str]:
    # "lenses" folds to "lense", so also try dropping "es"
    forms = {fold_plural(term)}
    if term.endswith("es") and len(term) > 4:
        forms.add(term[:-2])
    return forms


class RelevanceScorer:
    """Scores candidates with keyword, concept, category, equipment and recency rules.

    Rules are applied in a fixed order: base keyword hits, foundational concept
    boosts, category boosts, the equipment gate, then the recency tie-break
    added after multiplying the rank so it only orders entries within a tier.

    Args:
        rules: Scoring weights (defaults to ``ScoringRules()``).
        clock: Returns "now" for recency tiers.
    """

    def __init__(
        self,
        rules: ScoringRules | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._rules = rules or ScoringRules()
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    @property
    def rules(self) -> ScoringRules:
        return self._rules

    def score(
        self,
        candidate: Candidate,
        keywords: Sequence[str],
        *,
        concepts: Sequence[str] = (),
        genres: Sequence[str] = (),
        equipment: Sequence[str] = (),
    ) -> ScoredCandidate | None:
        """Score one candidate; returns None for rows missing a title or URL."""
        if not candidate.is_well_formed:
            return None

        r = self._rules
        title = candidate.title.lower()
        url = candidate.url.lower()
        categories = {c.lower() for c in candidate.categories}
        query_concepts = [c for c in concepts if c in r.core_concepts]
        rank = 0

        # Equipment gate
        gated = False
        if equipment:
            forms = {f for eq in equipment for f in _singular_forms(eq.lower())}
            if not any(f in title or f in url for f in forms):
                rank += r.equipment_penalty
                gated = True

        # Base keyword hits
        for keyword in active_keywords(keywords, equipment):
            needle = fold_plural(keyword.lower())
            if needle in title:
                rank += r.title_keyword
            if needle in url or needle.replace(" ", "-") in url:
                rank += r.url_keyword

        # Foundational concept boosts
        if query_concepts and not gated:
            if r.foundational_category in categories:
                rank += r.foundational_boost
                for concept in r.core_concepts:
                    if f"what is {concept}" in title or f"{concept} in photography" in title:
                        rank += r.concept_phrase_boost
                if any(term in title for term in r.resource_terms):
                    rank += r.resource_boost
            for concept in query_concepts:
                slug = concept.replace(" ", "-")
                if title.startswith(f"what is {concept}"):
                    rank += r.concept_title_prefix
                if f"what is {concept}" in title:
                    rank += r.concept_title_contains
                if f"/what-is-{slug}" in url:
                    rank += r.concept_url_what_is
                if slug in url:
                    rank += r.concept_url_slug
            if any(term in title or term in url for term in r.off_topic_terms):
                rank += r.off_topic_penalty

        # Category boosts
        if query_concepts:
            for category, boost in r.category_boosts.items():
                if category in categories:
                    rank += boost

        # Genre boost
        if genres and not gated:
            text = f"{title} {' '.join(sorted(categories))}"
            if any(g in text for g in genres):
                rank += r.genre_boost

        return ScoredCandidate(
            candidate=candidate,
            rank=rank,
            recency_bonus=r.recency_bonus(self._age_days(candidate)),
            multiplier=r.rank_multiplier,
        )

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
        """Score every candidate, order by descending score, then truncate."""
        scored: list[ScoredCandidate] = []
        skipped = 0
        for candidate in candidates:
            result = self.score(
                candidate, keywords, concepts=concepts, genres=genres, equipment=equipment
            )
            if result is None:
                skipped += 1
                continue
            scored.append(result)
        if skipped:
            logger.warning(f"Skipped {skipped} malformed candidates without title or URL")

        scored.sort(key=ScoredCandidate.sort_key)
        return scored if limit is None else scored[:limit]

    def relevance(
        self, ranked: Sequence[ScoredCandidate], keywords: Sequence[str], *, top_n: int = 3
    ) -> float:
        """Best fraction of keywords matched by any of the top-ranked candidates."""
        if not keywords or not ranked:
            return 0.0
        best = 0.0
        for item in ranked[:top_n]:
            found = matched_keywords(item.candidate, keywords)
            best = max(best, len(found) / len(keywords))
        return round(best, 4)

    def _age_days(self, candidate: Candidate) -> float | None:
        recent = candidate.most_recent_date
        if recent is None:
            return None
        delta = self._clock() - recent
        return max(delta.total_seconds() / 86400, 0.0)
