"""Configuration module for the studio assistant."""

from studio_assistant.config.factory import create_from_config, create_pipeline, create_store
from studio_assistant.config.loader import get_default_config_path, load_config
from studio_assistant.config.models import (
    AssistantConfig,
    ComposerConfig,
    ConfidenceConfig,
    DialogueConfig,
    EvidenceConfig,
    LoggingConfig,
    MemoryStoreConfig,
    RecencyTierConfig,
    ScoringConfig,
    StoreConfig,
    SupabaseStoreConfig,
)

__all__ = [
    "AssistantConfig",
    "ComposerConfig",
    "ConfidenceConfig",
    "DialogueConfig",
    "EvidenceConfig",
    "LoggingConfig",
    "MemoryStoreConfig",
    "RecencyTierConfig",
    "ScoringConfig",
    "StoreConfig",
    "SupabaseStoreConfig",
    "create_from_config",
    "create_pipeline",
    "create_store",
    "get_default_config_path",
    "load_config",
]
