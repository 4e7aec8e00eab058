"""Services layer - annotation state, markup binding and external integrations."""

from text_annotator.services.annotation_store import AnnotationStore
from text_annotator.services.visual_binder import VisualBinder
from text_annotator.services.settings_manager import EngineConfig, SettingsManager
from text_annotator.services.speech_service import QtSpeechService, SpeechService
from text_annotator.services.api_workers import PersistenceWorker, TranslationWorker, WorkerSignals

# Translation services
from text_annotator.services.translation import TranslationService, TranslationResult, GeminiTranslationService

# Persistence services
from text_annotator.services.persistence import (
	AnnotationRepository,
	InMemoryAnnotationRepository,
	SqliteAnnotationRepository,
)

__all__ = [
	"AnnotationStore",
	"VisualBinder",
	"EngineConfig",
	"SettingsManager",
	"SpeechService",
	"QtSpeechService",
	"TranslationService",
	"TranslationResult",
	"GeminiTranslationService",
	"AnnotationRepository",
	"InMemoryAnnotationRepository",
	"SqliteAnnotationRepository",
	"TranslationWorker",
	"PersistenceWorker",
	"WorkerSignals",
]
