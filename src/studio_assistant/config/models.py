"""Pydantic configuration models for the studio assistant."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from studio_assistant.confidence import Thresholds
from studio_assistant.data import ContentKind
from studio_assistant.ranker import RecencyTier, ScoringRules
from studio_assistant.store.rows import DEFAULT_TIMEZONE

# ============================================================
# Store Configs
# ============================================================


class SupabaseStoreConfig(BaseModel):
    """Configuration for SupabaseContentStore.

    The API key is never read from config; the store reads it from the
    environment.
    """

    type: Literal["supabase"] = "supabase"
    url: str | None = None
    timeout_seconds: float = 10.0

    model_config = {"frozen": True}


class MemoryStoreConfig(BaseModel):
    """Configuration for InMemoryContentStore loaded from a catalog file."""

    type: Literal["memory"] = "memory"
    catalog_path: str | None = None

    model_config = {"frozen": True}


StoreConfig = Annotated[
    SupabaseStoreConfig | MemoryStoreConfig,
    Field(discriminator="type"),
]


# ============================================================
# Component Configs
# ============================================================


class EvidenceConfig(BaseModel):
    """Configuration for EvidenceGatherer."""

    max_articles: int = Field(default=30, ge=0, le=60)
    max_events: int = Field(default=60, ge=0, le=60)
    max_products: int = Field(default=60, ge=0, le=60)
    max_services: int = Field(default=24, ge=0, le=60)
    timeout_seconds: float = Field(default=5.0, gt=0)
    catalog_limit: int = 500
    timezone: str = DEFAULT_TIMEZONE

    model_config = {"frozen": True}

    def limits(self) -> dict[ContentKind, int]:
        return {
            ContentKind.ARTICLE: self.max_articles,
            ContentKind.EVENT: self.max_events,
            ContentKind.PRODUCT: self.max_products,
            ContentKind.SERVICE: self.max_services,
        }


class RecencyTierConfig(BaseModel):
    max_days: int
    bonus: int

    model_config = {"frozen": True}


class ScoringConfig(BaseModel):
    """Scoring weights. Unset fields keep the ScoringRules defaults."""

    title_keyword: int = 3
    url_keyword: int = 1
    foundational_boost: int = 25
    concept_phrase_boost: int = 15
    resource_boost: int = 10
    concept_title_prefix: int = 20
    concept_title_contains: int = 10
    concept_url_what_is: int = 12
    concept_url_slug: int = 3
    off_topic_penalty: int = -12
    category_boosts: dict[str, int] = Field(default_factory=lambda: {"photography-tips": 5})
    genre_boost: int = 5
    equipment_penalty: int = -50
    recency_tiers: list[RecencyTierConfig] = Field(
        default_factory=lambda: [
            RecencyTierConfig(max_days=7, bonus=20),
            RecencyTierConfig(max_days=30, bonus=10),
            RecencyTierConfig(max_days=90, bonus=5),
        ]
    )
    rank_multiplier: int = 1000

    model_config = {"frozen": True}

    def to_rules(self) -> ScoringRules:
        """Build the scorer's rule table.

        Raises:
            ValueError: If a recency bonus is not below the rank multiplier.
        """
        fields = self.model_dump(exclude={"recency_tiers"})
        return ScoringRules(
            **fields,
            recency_tiers=tuple(RecencyTier(t.max_days, t.bonus) for t in self.recency_tiers),
        )


class ConfidenceConfig(BaseModel):
    """Calibrator thresholds; see ``Thresholds`` for their meaning."""

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

    model_config = {"frozen": True}

    def to_thresholds(self) -> Thresholds:
        return Thresholds(**self.model_dump())


class DialogueConfig(BaseModel):
    """Configuration for the clarification dialogue and its session store."""

    max_depth: int = Field(default=3, ge=1)
    max_options: int = Field(default=6, ge=1)
    session_ttl_seconds: float = 1800.0

    model_config = {"frozen": True}


class ComposerConfig(BaseModel):
    """Configuration for AnswerComposer."""

    max_articles: int = 5
    max_events: int = 8
    max_products: int = 5
    max_services: int = 5
    max_pills: int = 5
    caveat_below: float = 0.8

    model_config = {"frozen": True}

    def display_limits(self) -> dict[ContentKind, int]:
        return {
            ContentKind.ARTICLE: self.max_articles,
            ContentKind.EVENT: self.max_events,
            ContentKind.PRODUCT: self.max_products,
            ContentKind.SERVICE: self.max_services,
        }


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for the interaction log."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class AssistantConfig(BaseModel):
    """Root configuration for the studio assistant."""

    store: StoreConfig = Field(default_factory=MemoryStoreConfig)
    evidence: EvidenceConfig = Field(default_factory=EvidenceConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    confidence: ConfidenceConfig = Field(default_factory=ConfidenceConfig)
    dialogue: DialogueConfig = Field(default_factory=DialogueConfig)
    composer: ComposerConfig = Field(default_factory=ComposerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
