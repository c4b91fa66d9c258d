"""
Application configuration.

Two layers:
- Settings: process-level values from environment variables and .env
  (pydantic-settings), e.g. log level, database path, provider credentials.
- EngineConfig: per-workspace tuning loaded from .codectx/config.yaml and
  passed explicitly into the scanner, analyzer, embedding generator, indexer
  and retriever.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codectx.shared.domain.base_model import to_snake_case
from codectx.shared.domain.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

CONFIG_DIR = ".codectx"
CONFIG_FILE = "config.yaml"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="CODECTX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="codectx-core", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="INFO", description="Logging level")

    # Index storage
    database_path: str = Field(
        default=".codectx/index.sqlite3",
        description="SQLite database holding indexed files and chunks",
    )

    # Embedding provider (OpenAI-compatible)
    embedding_api_key: str | None = Field(default=None, description="Embedding provider API key")
    embedding_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Embedding provider base URL",
    )
    embedding_model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model id",
    )
    embedding_timeout_seconds: float = Field(default=30.0, description="Provider call timeout")

    # Logging / Privacy
    log_redaction_enabled: bool = Field(default=True, description="Enable secret redaction in logs")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"


DEFAULT_EXCLUDE_DIRS = [
    "node_modules",
    "vendor",
    ".git",
    "dist",
    "build",
    "coverage",
    ".next",
    ".nuxt",
    "__pycache__",
    ".pytest_cache",
    "target",
    "bin",
    "obj",
    ".vs",
    ".vscode",
    ".idea",
    "tmp",
    "temp",
    CONFIG_DIR,
]

DEFAULT_INCLUDE_EXTENSIONS = [
    "js", "jsx", "ts", "tsx", "py", "php", "java", "cs", "cpp", "c", "h", "hpp",
    "go", "rs", "rb", "swift", "kt", "scala", "clj", "hs", "ml", "fs", "vb",
    "vue", "sql", "html", "css", "scss", "sass", "less", "xml", "json", "yaml",
    "yml", "md",
]


class ScannerConfig(BaseModel):
    """Workspace scanner rules."""

    exclude_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    include_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE_EXTENSIONS))
    exclude_globs: list[str] = Field(default_factory=list)
    ignore_file: str = ".codectxignore"
    max_file_size_bytes: int = Field(default=2_000_000, ge=1)

    @model_validator(mode="after")
    def _normalize_extensions(self) -> "ScannerConfig":
        self.include_extensions = [ext.lower().lstrip(".") for ext in self.include_extensions]
        return self


class AnalyzerConfig(BaseModel):
    """Analyzer thresholds and chunk bounds."""

    design_pattern_min_hits: int = Field(default=2, ge=1)
    security_min_occurrences: int = Field(default=1, ge=1)
    performance_min_occurrences: int = Field(default=1, ge=1)
    diagnostic_min_occurrences: int = Field(default=1, ge=1)
    file_chunk_chars: int = Field(default=1000, ge=1)
    max_chunk_chars: int = Field(default=4000, ge=1)


class EmbeddingConfig(BaseModel):
    """Embedding generator tuning."""

    model: str | None = None
    api_key: str | None = None
    base_url: str | None = None
    timeout_seconds: float | None = None
    max_text_chars: int = Field(default=8000, ge=1)
    batch_size: int = Field(default=100, ge=1)
    cache_ttl_seconds: float = Field(default=86400.0, gt=0)
    cache_size: int = Field(default=10_000, ge=1)
    fallback_dimensions: int = Field(default=384, ge=256)
    failure_threshold: int = Field(default=5, ge=1)
    cooldown_seconds: float = Field(default=60.0, ge=0)


class IndexingConfig(BaseModel):
    """Workspace indexer tuning."""

    concurrency: int = Field(default=4, ge=1)
    file_timeout_seconds: float = Field(default=120.0, gt=0)


class RetrievalConfig(BaseModel):
    """Context retrieval tuning."""

    default_max_tokens: int = Field(default=8000, ge=1)
    chars_per_token: int = Field(default=4, ge=1)
    similar_top_k: int = Field(default=10, ge=1)
    min_similarity: float = Field(default=0.0, ge=-1.0, le=1.0)
    fallback_weight: float = Field(default=1.0, ge=0.0, le=1.0)
    max_related_files: int = Field(default=10, ge=0)
    max_candidates_per_symbol: int = Field(default=3, ge=1)
    key_functions_per_dependency: int = Field(default=3, ge=0)
    content_preview_chars: int = Field(default=500, ge=0)
    step_timeout_seconds: float = Field(default=10.0, gt=0)
    # Share of step_timeout_seconds the query embedding may spend on the provider
    query_embedding_timeout_ratio: float = Field(default=0.5, gt=0.0, lt=1.0)
    file_context_ttl_seconds: float = Field(default=300.0, gt=0)
    project_context_ttl_seconds: float = Field(default=1800.0, gt=0)
    dependency_cache_ttl_seconds: float = Field(default=3600.0, gt=0)
    focus_boost: float = Field(default=1.25, ge=1.0)


class EngineConfig(BaseModel):
    """Complete engine configuration, one section per component."""

    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    embeddings: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    indexing: IndexingConfig = Field(default_factory=IndexingConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)


def _convert_keys_to_snake_case(data: Any) -> Any:
    """Recursively convert dictionary keys from camelCase to snake_case."""
    if isinstance(data, dict):
        return {to_snake_case(str(key)): _convert_keys_to_snake_case(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_convert_keys_to_snake_case(item) for item in data]
    return data


def load_engine_config(
    config_path: Path | None = None,
    project_root: Path | None = None,
) -> EngineConfig:
    """
    Load engine configuration from YAML.

    Args:
        config_path: Explicit path to a config.yaml file
        project_root: Workspace root (uses .codectx/config.yaml)

    Returns:
        EngineConfig loaded from file, or defaults when no file exists

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    if config_path is None:
        if project_root is None:
            return EngineConfig()
        config_path = Path(project_root) / CONFIG_DIR / CONFIG_FILE

    config_path = Path(config_path)
    if not config_path.exists():
        logger.debug("engine_config_not_found", path=str(config_path))
        return EngineConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}", {"path": str(config_path)}) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping", {"path": str(config_path)})

    try:
        config = EngineConfig.model_validate(_convert_keys_to_snake_case(raw))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}", {"path": str(config_path)}) from e

    logger.info("engine_config_loaded", path=str(config_path))
    return config


def save_engine_config(config: EngineConfig, config_path: Path) -> None:
    """Write configuration as YAML (snake_case keys)."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.model_dump(exclude_none=True), f, sort_keys=False)


# Global settings instance
settings = Settings()
