"""Tests for configuration models and YAML loading."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from src.core.config import (
    AnalysisConfig,
    DatabaseConfig,
    LLMConfig,
    RankingConfig,
    Settings,
    WeightsConfig,
)

_SHIPPED_SETTINGS = Path(__file__).resolve().parents[2] / "config" / "settings.yaml"


class TestWeightsConfig:
    def test_defaults(self) -> None:
        w = WeightsConfig()
        assert w.quality == 0.34
        assert w.reliability == 0.33
        assert w.value == 0.33

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WeightsConfig(quality=-0.1)

    def test_all_zero_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not all be zero"):
            WeightsConfig(quality=0, reliability=0, value=0)


class TestRankingConfig:
    def test_defaults(self) -> None:
        r = RankingConfig()
        assert r.default_limit == 5
        assert r.max_limit == 10
        assert r.warn_unfiltered is True

    def test_limit_bounds(self) -> None:
        with pytest.raises(ValidationError):
            RankingConfig(default_limit=0)
        with pytest.raises(ValidationError):
            RankingConfig(max_limit=11)


class TestAnalysisConfig:
    def test_defaults(self) -> None:
        a = AnalysisConfig()
        assert a.default_sample_size == 20
        assert (a.min_sample_size, a.max_sample_size) == (5, 50)
        assert a.fallback_threshold == 3
        assert a.max_search_terms == 5

    def test_bounds_ordered(self) -> None:
        with pytest.raises(ValidationError, match="min_sample_size"):
            AnalysisConfig(min_sample_size=60, max_sample_size=50)


class TestLLMConfig:
    def test_provider_lowercased(self) -> None:
        assert LLMConfig(provider="  Gemini ").provider == "gemini"

    def test_empty_provider_rejected(self) -> None:
        with pytest.raises(ValidationError, match="provider must not be empty"):
            LLMConfig(provider="  ")


class TestDatabaseConfig:
    def test_default_path(self) -> None:
        assert DatabaseConfig().path == "data/painters.db"


class TestSettings:
    def test_load_from_yaml(self, tmp_path: Path) -> None:
        yaml_content = dedent("""\
            database:
              path: data/test.db
            ranking:
              default_limit: 3
              default_weights:
                quality: 0.5
                reliability: 0.25
                value: 0.25
            analysis:
              default_sample_size: 10
            llm:
              provider: anthropic
              model: claude-test
        """)
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml_content)

        settings = Settings.from_yaml(config_file)

        assert settings.database.path == "data/test.db"
        assert settings.ranking.default_limit == 3
        assert settings.ranking.default_weights.quality == 0.5
        assert settings.analysis.default_sample_size == 10
        assert settings.llm.provider == "anthropic"
        assert settings.llm.model == "claude-test"
        assert settings.documents.root == "resources"

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")
        settings = Settings.from_yaml(config_file)
        assert settings.ranking.default_limit == 5
        assert settings.llm.provider == "openai"

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("ranking:\n  default_limit: 25\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(config_file)

    def test_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml("/nonexistent/path.yaml")

    def test_load_shipped_settings(self) -> None:
        """The shipped config/settings.yaml must be valid."""
        settings = Settings.from_yaml(_SHIPPED_SETTINGS)
        assert settings.database.path == "data/painters.db"
        assert settings.ranking.max_limit == 10
        assert settings.analysis.fallback_threshold == 3
