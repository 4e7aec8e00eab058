"""Unit tests for SettingsManager."""

import os
from pathlib import Path

import pytest

from text_annotator.services import EngineConfig, SettingsManager

ENGINE_VARS = [
    "ANNOTATOR_HOVER_DELAY_MS",
    "ANNOTATOR_TOOLTIP_DURATION_MS",
    "ANNOTATOR_CONTEXT_WINDOW",
    "ANNOTATOR_VOCABULARY_MAX_WORDS",
    "ANNOTATOR_SENTENCE_MIN_LENGTH",
    "ANNOTATOR_TRANSLATION_TIMEOUT",
    "ANNOTATOR_TARGET_LANGUAGE",
    "ANNOTATOR_DATABASE_PATH",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the settings manager reads."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    for name in ENGINE_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ; drop what the test's .env added
    os.environ.pop("GEMINI_API_KEY", None)
    for name in ENGINE_VARS:
        os.environ.pop(name, None)


@pytest.fixture
def settings(tmp_path, clean_env):
    """Provide a SettingsManager with an empty .env file."""
    (tmp_path / ".env").write_text("GEMINI_API_KEY=\n")
    return SettingsManager(project_root=tmp_path)


class TestSettingsManagerAPIKey:
    """Tests for API key management from .env file."""

    def test_get_api_key_returns_none_when_empty(self, settings):
        """API key should be None when .env has empty value."""
        assert settings.get_gemini_api_key() is None

    def test_get_api_key_reads_env_file(self, tmp_path, clean_env):
        """API key should be read from .env file."""
        (tmp_path / ".env").write_text("GEMINI_API_KEY=test-key-123\n")

        settings = SettingsManager(project_root=tmp_path)
        assert settings.get_gemini_api_key() == "test-key-123"

    def test_get_api_key_strips_whitespace(self, tmp_path, clean_env, monkeypatch):
        """API key should strip leading/trailing whitespace."""
        monkeypatch.setenv("GEMINI_API_KEY", "  test-key  ")

        settings = SettingsManager(project_root=tmp_path)
        assert settings.get_gemini_api_key() == "test-key"

    def test_reload_env_updates_api_key(self, tmp_path, clean_env):
        """reload_env should pick up changes to .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_API_KEY=old-key\n")
        settings = SettingsManager(project_root=tmp_path)
        assert settings.get_gemini_api_key() == "old-key"

        env_file.write_text("GEMINI_API_KEY=new-key\n")
        settings.reload_env()
        assert settings.get_gemini_api_key() == "new-key"


class TestSettingsManagerEngineConfig:
    """Tests for ANNOTATOR_* engine configuration."""

    def test_defaults_when_unset(self, settings):
        config = settings.get_engine_config()
        assert config == EngineConfig()
        assert config.hover_delay_ms == 400
        assert config.tooltip_duration_ms == 2000
        assert config.vocabulary_max_words == 3
        assert config.sentence_min_length == 10
        assert config.database_path is None

    def test_values_from_env_file(self, tmp_path, clean_env):
        (tmp_path / ".env").write_text(
            "ANNOTATOR_HOVER_DELAY_MS=250\n"
            "ANNOTATOR_CONTEXT_WINDOW=40\n"
            "ANNOTATOR_TRANSLATION_TIMEOUT=12.5\n"
            "ANNOTATOR_TARGET_LANGUAGE=Spanish\n"
            "ANNOTATOR_DATABASE_PATH=/tmp/annotations.db\n"
        )

        config = SettingsManager(project_root=tmp_path).get_engine_config()

        assert config.hover_delay_ms == 250
        assert config.context_window == 40
        assert config.translation_timeout_seconds == 12.5
        assert config.target_language == "Spanish"
        assert config.database_path == Path("/tmp/annotations.db")

    def test_invalid_numbers_fall_back_to_defaults(self, settings, monkeypatch):
        monkeypatch.setenv("ANNOTATOR_HOVER_DELAY_MS", "soon")
        monkeypatch.setenv("ANNOTATOR_TRANSLATION_TIMEOUT", "never")

        config = settings.get_engine_config()

        assert config.hover_delay_ms == 400
        assert config.translation_timeout_seconds == 30.0
