"""Unit tests for centralized configuration."""

import pytest

from note_mcp.config import Settings
from note_mcp.config import get_settings
from note_mcp.config import reset_settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove configuration variables and run from a directory without .env."""
    for name in [
        "NOTES_ROOT_DIR",
        "OBSIDIAN_VAULT_PATH",
        "NOTES_COLLECTION_NAME",
        "OBSIDIAN_VAULT_NAME",
        "ANTHROPIC_API_KEY",
        "BACKUP_RETENTION_DAYS",
        "LOG_LEVEL",
    ]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestSettings:
    """Tests for the Settings model."""

    def test_defaults(self, clean_env):
        settings = Settings()

        assert settings.backup_retention_days == 30
        assert settings.default_target_language == "Japanese"
        assert settings.translation_model == "claude-3-haiku-20240307"
        assert settings.max_output_tokens == 4000
        assert settings.batch_concurrency == 3
        assert settings.anthropic_configured is False

    def test_legacy_vault_variables(self, clean_env, monkeypatch, tmp_path):
        monkeypatch.setenv("OBSIDIAN_VAULT_PATH", str(tmp_path))
        monkeypatch.setenv("OBSIDIAN_VAULT_NAME", "Legacy")

        settings = Settings()

        assert settings.notes_root_path == tmp_path.resolve()
        assert settings.configured_collection == "Legacy"

    def test_collection_defaults_to_root_folder_name(self, clean_env, monkeypatch, tmp_path):
        root = tmp_path / "Research Notes"
        monkeypatch.setenv("NOTES_ROOT_DIR", str(root))

        assert Settings().configured_collection == "Research Notes"

    def test_collection_fallback_without_root(self, clean_env):
        assert Settings().configured_collection == "DefaultVault"

    def test_log_level_is_normalized(self, clean_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_notes_root_path_requires_configuration(self, clean_env):
        with pytest.raises(ValueError, match="NOTES_ROOT_DIR"):
            _ = Settings().notes_root_path

    def test_validate_required_lists_missing_variables(self, clean_env):
        settings = Settings()

        assert settings.missing_required() == ["NOTES_ROOT_DIR", "ANTHROPIC_API_KEY"]
        with pytest.raises(ValueError, match="NOTES_ROOT_DIR, ANTHROPIC_API_KEY"):
            settings.validate_required()

    def test_blank_api_key_is_not_configured(self, clean_env, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "   ")

        assert Settings().anthropic_configured is False

    def test_invalid_retention_is_rejected(self, clean_env, monkeypatch):
        monkeypatch.setenv("BACKUP_RETENTION_DAYS", "-1")

        with pytest.raises(ValueError):
            Settings()

    def test_env_file_is_read(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("NOTES_COLLECTION_NAME=FromFile\n", encoding="utf-8")

        assert Settings().configured_collection == "FromFile"


class TestSettingsSingleton:
    """Tests for get_settings/reset_settings."""

    def test_get_settings_is_cached(self, clean_env):
        assert get_settings() is get_settings()

    def test_reset_settings(self, clean_env, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("NOTES_COLLECTION_NAME", "Changed")
        reset_settings()

        second = get_settings()

        assert second is not first
        assert second.configured_collection == "Changed"
