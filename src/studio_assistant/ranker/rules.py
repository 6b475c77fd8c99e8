"""Declarative scoring weights for the relevance scorer."""

from dataclasses import dataclass, field

from studio_assistant.query.vocabulary import CORE_CONCEPTS


@dataclass(frozen=True)
class RecencyTier:
    max_days: int
    bonus: int


@dataclass(frozen=True)
class ScoringRules:
    """Every weight the scorer applies, in one table.

    ``category_boosts`` maps a category label to the boost an entry in that
    category earns when the query names a core concept; the label in
    ``foundational_category`` additionally unlocks the phrase and resource
    boosts. Recency bonuses must stay below ``rank_multiplier``.
    """

    title_keyword: int = 3
    url_keyword: int = 1

    core_concepts: tuple[str, ...] = CORE_CONCEPTS
    foundational_category: str = "online photography course"
    foundational_boost: int = 25
    concept_phrase_boost: int = 15
    resource_terms: tuple[str, ...] = ("pdf", "checklist", "guide")
    resource_boost: int = 10

    concept_title_prefix: int = 20
    concept_title_contains: int = 10
    concept_url_what_is: int = 12
    concept_url_slug: int = 3

    off_topic_terms: tuple[str, ...] = ("lightroom", "what's new", "whats new", "whats-new")
    off_topic_penalty: int = -12

    category_boosts: dict[str, int] = field(default_factory=lambda: {"photography-tips": 5})
    genre_boost: int = 5
    equipment_penalty: int = -50

    recency_tiers: tuple[RecencyTier, ...] = (
        RecencyTier(7, 20),
        RecencyTier(30, 10),
        RecencyTier(90, 5),
    )
    rank_multiplier: int = 1000

    def __post_init__(self) -> None:
        top = max((t.bonus for t in self.recency_tiers), default=0)
        if top >= self.rank_multiplier:
            msg = f"Recency bonus {top} must be below the rank multiplier {self.rank_multiplier}"
            raise ValueError(msg)

    def recency_bonus(self, age_days: float | None) -> int:
        if age_days is None:
            return 0
        for tier in sorted(self.recency_tiers, key=lambda t: t.max_days):
            if age_days <= tier.max_days:
                return tier.bonus
        return 0
