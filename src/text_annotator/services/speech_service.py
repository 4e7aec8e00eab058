"""Speech Service - fire-and-forget pronunciation of annotated text."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class SpeechService(ABC):
    """Abstract pronunciation collaborator. Failures never reach the caller."""

    @abstractmethod
    def speak(self, text: str, language_hint: str = "") -> None:
        pass


class QtSpeechService(SpeechService):
    """Speech through Qt's text-to-speech engine."""

    def __init__(self):
        from PySide6.QtTextToSpeech import QTextToSpeech

        self._engine = QTextToSpeech()

    def speak(self, text: str, language_hint: str = "") -> None:
        from PySide6.QtCore import QLocale

        try:
            if language_hint:
                self._engine.setLocale(QLocale(language_hint))
            self._engine.say(text)
        except RuntimeError as e:
            logger.warning("Text-to-speech failed for %r: %s", text[:50], e)
