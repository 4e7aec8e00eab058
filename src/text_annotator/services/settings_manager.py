"""Settings Manager - Handles API key and engine configuration."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Tunable limits and delays of the annotation engine."""

    hover_delay_ms: int = 400
    tooltip_duration_ms: int = 2000
    context_window: int = 100
    vocabulary_max_words: int = 3
    sentence_min_length: int = 10
    translation_timeout_seconds: float = 30.0
    target_language: str = "English"
    database_path: Optional[Path] = None


class SettingsManager:
    """
    Manages settings and API key configuration.

    Reads values from a .env file in the project root, falling back to the
    process environment and then to EngineConfig defaults.
    """

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            project_root: Path to project root where .env is located.
                         If None, searches upward from current file.
        """
        if project_root is None:
            current = Path(__file__).resolve()
            project_root = current.parent.parent.parent.parent

        env_path = project_root / ".env"
        load_dotenv(dotenv_path=env_path)

        self._project_root = project_root

    def get_gemini_api_key(self) -> Optional[str]:
        """Get the Gemini API key from environment."""
        key = os.getenv("GEMINI_API_KEY")
        return key.strip() if key and key.strip() else None

    def get_engine_config(self) -> EngineConfig:
        """Build the engine configuration from ANNOTATOR_* variables."""
        defaults = EngineConfig()
        database_path = os.getenv("ANNOTATOR_DATABASE_PATH")
        return EngineConfig(
            hover_delay_ms=self._get_int("ANNOTATOR_HOVER_DELAY_MS", defaults.hover_delay_ms),
            tooltip_duration_ms=self._get_int("ANNOTATOR_TOOLTIP_DURATION_MS", defaults.tooltip_duration_ms),
            context_window=self._get_int("ANNOTATOR_CONTEXT_WINDOW", defaults.context_window),
            vocabulary_max_words=self._get_int("ANNOTATOR_VOCABULARY_MAX_WORDS", defaults.vocabulary_max_words),
            sentence_min_length=self._get_int("ANNOTATOR_SENTENCE_MIN_LENGTH", defaults.sentence_min_length),
            translation_timeout_seconds=self._get_float(
                "ANNOTATOR_TRANSLATION_TIMEOUT", defaults.translation_timeout_seconds
            ),
            target_language=os.getenv("ANNOTATOR_TARGET_LANGUAGE", "").strip() or defaults.target_language,
            database_path=Path(database_path.strip()) if database_path and database_path.strip() else None,
        )

    def reload_env(self) -> None:
        """Reload environment variables from .env file."""
        env_path = self._project_root / ".env"
        load_dotenv(dotenv_path=env_path, override=True)

    @staticmethod
    def _get_int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
            return default

    @staticmethod
    def _get_float(name: str, default: float) -> float:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            return float(raw)
        except ValueError:
            logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
            return default
