"""Translation services - abstract interface and Gemini implementation."""

from text_annotator.services.translation.translation_service import TranslationService, TranslationResult
from text_annotator.services.translation.gemini_translation_service import GeminiTranslationService

__all__ = [
    "TranslationService",
    "TranslationResult",
    "GeminiTranslationService",
]
