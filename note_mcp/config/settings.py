"""Centralized configuration management for the Note MCP system.

This module provides a single source of truth for all configuration
including the notes root, the collection name, API credentials, backup
retention and translation limits.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices
from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Centralized settings for the Note MCP system."""

    # === Collection Configuration ===
    notes_root_dir: str | None = Field(
        default=None,
        validation_alias=AliasChoices("NOTES_ROOT_DIR", "OBSIDIAN_VAULT_PATH"),
        description="Root directory of the note collection",
    )
    collection_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("NOTES_COLLECTION_NAME", "OBSIDIAN_VAULT_NAME"),
        description="Collection identifier accepted in note URLs (defaults to the root's folder name)",
    )
    backup_retention_days: int = Field(default=30, ge=0, description="Days to keep automatic backups")

    # === API Keys ===
    anthropic_api_key: str | None = Field(default=None, description="Anthropic API key")

    # === Translation Configuration ===
    default_target_language: str = Field(default="Japanese", description="Language used when none is given")
    translation_model: str = Field(default="claude-3-haiku-20240307", description="Model used for translation")
    max_output_tokens: int = Field(default=4000, gt=0, description="Output token limit per translation")
    translation_timeout: float = Field(default=120.0, gt=0, description="Deadline for one translation call (seconds)")
    batch_concurrency: int = Field(default=3, ge=1, description="Pipelines run at once by batch translation")

    # === HTTP SSE Server Configuration ===
    sse_host: str = Field(default="localhost", description="SSE server host")
    sse_port: int = Field(default=3001, description="SSE server port")

    # === Logging Configuration ===
    log_level: str = Field(default="INFO", description="Logging level")

    # === Metrics Configuration ===
    enable_metrics: bool = Field(default=True, description="Enable metrics collection")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def notes_root_path(self) -> Path:
        """Get the notes root as a resolved Path."""
        if not self.notes_root_dir:
            raise ValueError("NOTES_ROOT_DIR is not configured")
        return Path(self.notes_root_dir).expanduser().resolve()

    @property
    def configured_collection(self) -> str:
        """Collection name, derived from the root's final path segment when unset."""
        if self.collection_name:
            return self.collection_name
        if self.notes_root_dir:
            name = Path(self.notes_root_dir).expanduser().resolve().name
            if name:
                return name
        return "DefaultVault"

    @property
    def anthropic_configured(self) -> bool:
        """Check if Anthropic is properly configured."""
        return bool(self.anthropic_api_key and self.anthropic_api_key.strip())

    def missing_required(self) -> list[str]:
        """Names of required settings that are not set."""
        missing = []
        if not self.notes_root_dir:
            missing.append("NOTES_ROOT_DIR")
        if not self.anthropic_configured:
            missing.append("ANTHROPIC_API_KEY")
        return missing

    def validate_required(self) -> None:
        """Fail fast when the server cannot operate."""
        missing = self.missing_required()
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        load_dotenv()
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (primarily for testing)."""
    global _settings
    _settings = None
