"""Factory functions to create components from configuration."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from studio_assistant.composer import AnswerComposer
from studio_assistant.config.models import (
    AssistantConfig,
    MemoryStoreConfig,
    StoreConfig,
    SupabaseStoreConfig,
)
from studio_assistant.confidence import ConfidenceCalibrator
from studio_assistant.dialogue import ClarificationManager
from studio_assistant.evidence import EvidenceGatherer
from studio_assistant.pipeline.assistant import AnswerPipeline
from studio_assistant.pipeline.base import AssistantPipeline
from studio_assistant.query import QueryClassifier
from studio_assistant.ranker import RelevanceScorer
from studio_assistant.run_logger import TurnLogger
from studio_assistant.session import MemorySessionStore, SessionStore
from studio_assistant.store import ContentStore, InMemoryContentStore, SupabaseContentStore


def create_store(
    config: StoreConfig,
    *,
    clock: Callable[[], datetime] | None = None,
) -> ContentStore:
    """Create a content store from config.

    Uses explicit type matching rather than getattr.
    """
    if isinstance(config, SupabaseStoreConfig):
        return SupabaseContentStore(url=config.url, timeout=config.timeout_seconds)
    if isinstance(config, MemoryStoreConfig):
        if config.catalog_path is None:
            return InMemoryContentStore(clock=clock)
        return InMemoryContentStore.from_file(config.catalog_path, clock=clock)
    msg = f"Unknown store config type: {type(config)}"
    raise ValueError(msg)


def create_pipeline(
    config: AssistantConfig,
    store: ContentStore,
    sessions: SessionStore,
    turn_logger: TurnLogger | None = None,
    clock: Callable[[], datetime] | None = None,
) -> AssistantPipeline:
    """Wire every component of the answer pipeline."""
    return AnswerPipeline(
        classifier=QueryClassifier(clock=clock),
        gatherer=EvidenceGatherer(
            store,
            limits=config.evidence.limits(),
            timeout_seconds=config.evidence.timeout_seconds,
            catalog_limit=config.evidence.catalog_limit,
            timezone=config.evidence.timezone,
            clock=clock,
        ),
        scorer=RelevanceScorer(config.scoring.to_rules(), clock=clock),
        calibrator=ConfidenceCalibrator(config.confidence.to_thresholds()),
        dialogue=ClarificationManager(
            sessions,
            max_depth=config.dialogue.max_depth,
            max_options=config.dialogue.max_options,
            clock=clock,
        ),
        composer=AnswerComposer(
            display_limits=config.composer.display_limits(),
            max_pills=config.composer.max_pills,
            caveat_below=config.composer.caveat_below,
        ),
        turn_logger=turn_logger,
        top_options=config.dialogue.max_options,
    )


def create_from_config(
    config: AssistantConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
    store: ContentStore | None = None,
    sessions: SessionStore | None = None,
    clock: Callable[[], datetime] | None = None,
) -> tuple[AssistantPipeline, TurnLogger | None]:
    """Create a complete pipeline from root config.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.
        store: Content store to use instead of the configured one.
        sessions: Session store to use instead of a fresh in-memory one.
        clock: Returns "now"; injected for deterministic runs.

    Returns:
        Tuple of (pipeline, turn_logger).
        turn_logger is None if logging is disabled.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    turn_logger: TurnLogger | None = None
    if log_enabled:
        turn_logger = TurnLogger(log_dir=log_dir, enabled=True)

    if store is None:
        store = create_store(config.store, clock=clock)
    if sessions is None:
        sessions = MemorySessionStore(ttl_seconds=config.dialogue.session_ttl_seconds)
    pipeline = create_pipeline(config, store, sessions, turn_logger=turn_logger, clock=clock)
    return (pipeline, turn_logger)
