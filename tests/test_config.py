"""Tests for configuration loading and factory functions."""

from pathlib import Path
from tempfile import NamedTemporaryFile

import pytest
from pydantic import ValidationError

from studio_assistant.config import (
    AssistantConfig,
    ComposerConfig,
    EvidenceConfig,
    MemoryStoreConfig,
    ScoringConfig,
    SupabaseStoreConfig,
    create_from_config,
    create_store,
    get_default_config_path,
    load_config,
)
from studio_assistant.data import ChatRequest, ContentKind
from studio_assistant.pipeline import AnswerPipeline
from studio_assistant.run_logger import TurnLogger
from studio_assistant.session import MemorySessionStore
from studio_assistant.store import InMemoryContentStore, SupabaseContentStore


class TestConfigModels:
    """Tests for Pydantic config models."""

    def test_memory_store_config_defaults(self) -> None:
        config = MemoryStoreConfig()
        assert config.type == "memory"
        assert config.catalog_path is None

    def test_supabase_store_config_defaults(self) -> None:
        config = SupabaseStoreConfig()
        assert config.type == "supabase"
        assert config.url is None
        assert config.timeout_seconds == 10.0

    def test_evidence_config_limits(self) -> None:
        limits = EvidenceConfig().limits()
        assert limits[ContentKind.ARTICLE] == 30
        assert limits[ContentKind.EVENT] == 60
        assert limits[ContentKind.SERVICE] == 24

    def test_evidence_limit_above_cap_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EvidenceConfig(max_events=61)

    def test_composer_config_limits(self) -> None:
        config = ComposerConfig()
        assert config.display_limits()[ContentKind.EVENT] == 8
        assert config.max_pills == 5
        assert config.caveat_below == 0.8

    def test_scoring_config_to_rules(self) -> None:
        rules = ScoringConfig(foundational_boost=30).to_rules()
        assert rules.foundational_boost == 30
        assert rules.recency_bonus(3) == 20
        assert rules.category_boosts == {"photography-tips": 5}

    def test_scoring_config_rejects_large_recency_bonus(self) -> None:
        config = ScoringConfig.model_validate(
            {"recency_tiers": [{"max_days": 7, "bonus": 5000}], "rank_multiplier": 1000}
        )
        with pytest.raises(ValueError):
            config.to_rules()

    def test_assistant_config_defaults(self) -> None:
        config = AssistantConfig()
        assert isinstance(config.store, MemoryStoreConfig)
        assert config.dialogue.max_depth == 3
        assert config.logging.enabled is False

    def test_store_discriminator(self) -> None:
        config = AssistantConfig.model_validate(
            {"store": {"type": "supabase", "url": "https://p.supabase.co"}}
        )
        assert isinstance(config.store, SupabaseStoreConfig)

    def test_unknown_store_type(self) -> None:
        with pytest.raises(ValidationError):
            AssistantConfig.model_validate({"store": {"type": "sqlite"}})

    def test_config_is_frozen(self) -> None:
        config = AssistantConfig()
        with pytest.raises(ValidationError):
            config.logging = None  # type: ignore[assignment,misc]


class TestLoadConfig:
    def test_load_config(self) -> None:
        yaml_content = """
store:
  type: supabase
  timeout_seconds: 3
dialogue:
  max_depth: 2
logging:
  enabled: true
  log_dir: /tmp/assistant-logs
"""
        with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            f.flush()
            config = load_config(Path(f.name))

        assert isinstance(config.store, SupabaseStoreConfig)
        assert config.store.timeout_seconds == 3
        assert config.dialogue.max_depth == 2
        assert config.logging.enabled is True
        assert config.composer.max_events == 8

    def test_load_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == AssistantConfig()

    def test_get_default_config_path(self) -> None:
        path = get_default_config_path()
        assert path.name == "default.yaml"
        assert path.exists()

    def test_load_default_config(self) -> None:
        config = load_config(get_default_config_path())
        assert isinstance(config.store, MemoryStoreConfig)
        assert config.store.catalog_path == "configs/sample_catalog.yaml"
        assert config.scoring.to_rules().rank_multiplier == 1000


class TestFactory:
    def test_create_memory_store(self) -> None:
        assert isinstance(create_store(MemoryStoreConfig()), InMemoryContentStore)

    def test_create_memory_store_from_catalog(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(get_default_config_path().parent.parent)
        store = create_store(MemoryStoreConfig(catalog_path="configs/sample_catalog.yaml"))
        assert isinstance(store, InMemoryContentStore)

    def test_create_supabase_store(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "test-key")
        store = create_store(SupabaseStoreConfig(url="https://p.supabase.co"))
        assert isinstance(store, SupabaseContentStore)

    def test_create_supabase_store_without_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        with pytest.raises(ValueError):
            create_store(SupabaseStoreConfig(url="https://p.supabase.co"))

    def test_create_store_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown store config type"):
            create_store("memory")  # type: ignore[arg-type]

    def test_create_from_config(self) -> None:
        pipeline, turn_logger = create_from_config(AssistantConfig())
        assert isinstance(pipeline, AnswerPipeline)
        assert turn_logger is None

    def test_create_from_config_log_override(self, tmp_path: Path) -> None:
        pipeline, turn_logger = create_from_config(
            AssistantConfig(), log_override=True, log_dir_override=str(tmp_path)
        )
        assert isinstance(turn_logger, TurnLogger)
        assert turn_logger.enabled

    async def test_created_pipeline_answers(
        self, tmp_path: Path, catalog_store: InMemoryContentStore
    ) -> None:
        pipeline, turn_logger = create_from_config(
            AssistantConfig(),
            log_override=True,
            log_dir_override=str(tmp_path),
            store=catalog_store,
            sessions=MemorySessionStore(),
        )
        response = await pipeline.answer(ChatRequest(query="what is aperture"))
        assert response.ok
        assert turn_logger is not None
        assert turn_logger.last_log_path == tmp_path / "interactions.jsonl"
