"""Annotation Engine - composition root for one document's annotation components."""

import logging
from typing import Optional

from PySide6.QtCore import QThreadPool

from text_annotator.coordinators import (
    BulkDeleteCoordinator,
    HoverPopupCoordinator,
    LifecycleManager,
    SelectionController,
)
from text_annotator.core import AnnotationMode, Document
from text_annotator.exc import StaleRangeError
from text_annotator.services import (
    AnnotationRepository,
    AnnotationStore,
    EngineConfig,
    GeminiTranslationService,
    SettingsManager,
    SpeechService,
    SqliteAnnotationRepository,
    TranslationService,
    VisualBinder,
)

logger = logging.getLogger(__name__)


class AnnotationEngine:
    """
    Wires the store, binder and coordinators for a single document.

    This is the only place that knows how to instantiate and connect the
    components. Each engine owns its own instances, so several documents can
    be annotated side by side.
    """

    def __init__(
        self,
        document: Document,
        config: Optional[EngineConfig] = None,
        translation_service: Optional[TranslationService] = None,
        repository: Optional[AnnotationRepository] = None,
        speech_service: Optional[SpeechService] = None,
        thread_pool: Optional[QThreadPool] = None,
        initial_mode: AnnotationMode = AnnotationMode.VOCABULARY,
    ):
        self.document = document
        self.config = config or EngineConfig()

        self.store = AnnotationStore(document)
        self.binder = VisualBinder(document)
        self.lifecycle = LifecycleManager(
            document=document,
            store=self.store,
            binder=self.binder,
            config=self.config,
            translation_service=translation_service,
            repository=repository,
            thread_pool=thread_pool,
        )
        self.bulk_delete = BulkDeleteCoordinator(self.lifecycle, self.binder)
        self.popup = HoverPopupCoordinator(
            delay_ms=self.config.hover_delay_ms,
            is_live=lambda annotation_id: annotation_id in self.store,
        )
        self.controller = SelectionController(
            lifecycle=self.lifecycle,
            bulk_delete=self.bulk_delete,
            popup=self.popup,
            speech_service=speech_service,
            initial_mode=initial_mode,
            tooltip_duration_ms=self.config.tooltip_duration_ms,
        )

    @classmethod
    def from_settings(
        cls,
        document: Document,
        settings_manager: SettingsManager,
        speech_service: Optional[SpeechService] = None,
    ) -> "AnnotationEngine":
        """Build an engine with Gemini translation and SQLite storage when configured."""
        config = settings_manager.get_engine_config()

        translation_service = None
        api_key = settings_manager.get_gemini_api_key()
        if api_key:
            translation_service = GeminiTranslationService(
                api_key=api_key,
                target_language=config.target_language,
                timeout_seconds=config.translation_timeout_seconds,
            )
        else:
            logger.warning("GEMINI_API_KEY not configured; annotations will have no translations")

        repository = None
        if config.database_path is not None:
            repository = SqliteAnnotationRepository(config.database_path)
            repository.ensure_schema()

        return cls(
            document,
            config=config,
            translation_service=translation_service,
            repository=repository,
            speech_service=speech_service,
        )

    def restore(self) -> int:
        """Re-create the document's persisted annotations."""
        return self.lifecycle.restore()

    def annotation_at(self, block_id: str, offset: int) -> Optional[str]:
        """Innermost annotation covering a character, for mapping pointer hits to ids."""
        try:
            position = self.document.position(block_id, offset)
        except StaleRangeError:
            return None
        ids = self.binder.annotations_at(position)
        return ids[0] if ids else None

    def render_html(self) -> str:
        return "\n".join(block.to_html() for block in self.document.blocks)

    def shutdown(self) -> None:
        """Cancel hover timers and drop transient interaction state."""
        self.controller.pause()
