"""
Tests for settings and engine configuration loading.
"""

import pytest
import yaml

from codectx.shared.domain.exceptions import ConfigurationError
from codectx.shared.infrastructure.config import (
    EngineConfig,
    Settings,
    load_engine_config,
    save_engine_config,
)


class TestSettings:
    """Test environment-backed settings."""

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("CODECTX_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CODECTX_APP_ENV", "production")

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.is_production
        assert not settings.is_development


class TestLoadEngineConfig:
    """Test YAML loading."""

    def test_defaults_without_file(self, project_root):
        config = load_engine_config(project_root=project_root)
        assert config == EngineConfig()
        assert config.retrieval.chars_per_token == 4
        assert config.analyzer.file_chunk_chars == 1000
        assert config.retrieval.step_timeout_seconds * config.retrieval.query_embedding_timeout_ratio == 5.0

    def test_camel_case_keys(self, project_root):
        """Test camelCase keys are accepted."""
        config_dir = project_root / ".codectx"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(
            yaml.safe_dump(
                {
                    "scanner": {"excludeDirs": ["out"], "includeExtensions": [".PY"]},
                    "retrieval": {"maxRelatedFiles": 5, "defaultMaxTokens": 2000, "queryEmbeddingTimeoutRatio": 0.25},
                }
            )
        )

        config = load_engine_config(project_root=project_root)

        assert config.scanner.exclude_dirs == ["out"]
        assert config.scanner.include_extensions == ["py"]
        assert config.retrieval.max_related_files == 5
        assert config.retrieval.default_max_tokens == 2000
        assert config.retrieval.query_embedding_timeout_ratio == 0.25

    def test_invalid_yaml_raises(self, project_root):
        path = project_root / "config.yaml"
        path.write_text("scanner: [unclosed")

        with pytest.raises(ConfigurationError):
            load_engine_config(config_path=path)

    def test_validation_error_raises(self, project_root):
        path = project_root / "config.yaml"
        path.write_text("indexing:\n  concurrency: 0\n")

        with pytest.raises(ConfigurationError):
            load_engine_config(config_path=path)

    def test_query_embedding_ratio_must_leave_room(self, project_root):
        path = project_root / "config.yaml"
        path.write_text("retrieval:\n  queryEmbeddingTimeoutRatio: 1.0\n")

        with pytest.raises(ConfigurationError):
            load_engine_config(config_path=path)

    def test_save_and_reload(self, project_root):
        config = EngineConfig()
        config.indexing.concurrency = 8
        path = project_root / ".codectx" / "config.yaml"

        save_engine_config(config, path)

        assert load_engine_config(config_path=path).indexing.concurrency == 8
