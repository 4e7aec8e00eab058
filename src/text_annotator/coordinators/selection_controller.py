"""Selection Controller - routes pointer and keyboard input by annotation mode."""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

from PySide6.QtCore import QObject, Signal, Slot

from text_annotator.core import AnnotationMode, BulkRemovalSummary, TextRange
from text_annotator.exc import OverlapConflictError, ValidationError
from text_annotator.services import SpeechService

from .bulk_delete_coordinator import BulkDeleteCoordinator
from .hover_popup import HoverPopupCoordinator
from .lifecycle_manager import LifecycleManager

logger = logging.getLogger(__name__)

DELETE_KEYS = ("Delete", "Backspace")
MODE_SHORTCUTS = {
    "1": AnnotationMode.VOCABULARY,
    "2": AnnotationMode.SENTENCE,
    "0": AnnotationMode.NONE,
    "3": AnnotationMode.NONE,
}
MODE_NAMES = {
    AnnotationMode.VOCABULARY: "Vocabulary",
    AnnotationMode.SENTENCE: "Sentences",
    AnnotationMode.NONE: "None",
}


@dataclass
class SelectionState:
    """Ephemeral interaction state. Never persisted."""

    active_mode: AnnotationMode = AnnotationMode.VOCABULARY
    selected_annotation_id: Optional[str] = None


class SelectionController(QObject):
    """
    Mode state machine between raw input events and the annotation engine.

    Responsibilities:
    - Track the active mode and the single selected annotation.
    - Send selections to the create path, or to bulk preview in none mode.
    - Handle delete/escape/mode-shortcut keys.
    - Drive the hover popup and pronunciation.

    It never touches the store or the markup itself; all mutation goes through
    the LifecycleManager and the BulkDeleteCoordinator.
    """

    mode_changed = Signal(str)
    selection_changed = Signal(object)  # Optional[str]
    feedback_requested = Signal(str, int)  # message, duration ms
    popup_shown = Signal(str, object)  # id, translation (None while unresolved)
    popup_hidden = Signal(str)

    def __init__(
        self,
        lifecycle: LifecycleManager,
        bulk_delete: BulkDeleteCoordinator,
        popup: HoverPopupCoordinator,
        speech_service: Optional[SpeechService] = None,
        initial_mode: AnnotationMode = AnnotationMode.VOCABULARY,
        tooltip_duration_ms: int = 2000,
        language_hint: str = "",
    ):
        super().__init__()

        self._lifecycle = lifecycle
        self._bulk_delete = bulk_delete
        self._popup = popup
        self._speech_service = speech_service
        self._tooltip_duration_ms = tooltip_duration_ms
        self._language_hint = language_hint

        self._state = SelectionState(active_mode=initial_mode)
        self._paused = False

        self._lifecycle.annotation_removed.connect(self._on_annotation_removed)
        self._lifecycle.bulk_removed.connect(self._on_bulk_removed)
        self._lifecycle.annotation_metadata_updated.connect(self._on_metadata_updated)
        self._popup.popup_requested.connect(self._on_popup_requested)
        self._popup.popup_dismissed.connect(self.popup_hidden)

    @property
    def mode(self) -> AnnotationMode:
        return self._state.active_mode

    @property
    def selected_annotation_id(self) -> Optional[str]:
        return self._state.selected_annotation_id

    @property
    def pending_bulk_targets(self) -> FrozenSet[str]:
        return self._bulk_delete.pending_targets

    @property
    def is_paused(self) -> bool:
        return self._paused

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    def set_mode(self, mode: AnnotationMode) -> None:
        """Switch modes. Selection, bulk preview, hover timer and popup never carry over."""
        if mode is self._state.active_mode:
            return
        self._reset_interaction()
        self._state.active_mode = mode
        logger.debug("Annotation mode -> %s", mode.value)
        self.mode_changed.emit(mode.value)
        self._feedback(f"Highlight mode: {MODE_NAMES[mode]}")

    def pause(self) -> None:
        """Ignore gestures while the host edits content."""
        self._reset_interaction()
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def handle_selection_completed(self, selection: TextRange) -> None:
        """A text selection gesture finished."""
        if self._paused:
            return

        # A collapsed selection encloses nothing, so it clears any preview
        if self._state.active_mode is AnnotationMode.NONE:
            self._bulk_delete.preview(selection)
            return
        if selection.is_collapsed:
            return

        kind = self._state.active_mode.kind
        try:
            self._lifecycle.create_annotation(selection, kind)
        except (ValidationError, OverlapConflictError) as e:
            logger.info("Rejected %s selection: %s", kind.value, e)
            self._feedback(str(e))

    def handle_annotation_clicked(self, annotation_id: str) -> None:
        if self._paused:
            return
        record = self._lifecycle.get_annotation(annotation_id)
        if record is None:
            return

        self._speak(record.primary_text)
        self._lifecycle.ensure_metadata(annotation_id)
        if self._state.active_mode is not AnnotationMode.NONE:
            self._select(annotation_id)

    def handle_pointer_entered(self, annotation_id: str) -> None:
        if self._paused:
            return
        self._popup.pointer_entered(annotation_id)

    def handle_pointer_left(self, annotation_id: str) -> None:
        self._popup.pointer_left(annotation_id)
        if self._state.selected_annotation_id == annotation_id:
            self._select(None)

    def handle_pointer_moved(self, annotation_id_under_pointer: Optional[str]) -> None:
        """Global pointer-move: the innermost annotation under the topmost element, or None."""
        self._popup.pointer_moved(annotation_id_under_pointer)

    def handle_key(self, key: str) -> bool:
        """Handle a key press. Returns True if the key was consumed."""
        if self._paused:
            return False

        if key in DELETE_KEYS:
            if self._bulk_delete.pending_targets:
                self._bulk_delete.confirm()
                return True
            selected = self._state.selected_annotation_id
            if selected is not None:
                self._lifecycle.remove_annotation(selected)
                return True
            return False

        if key == "Escape":
            if self._bulk_delete.pending_targets:
                self._bulk_delete.clear()
                return True
            if self._state.selected_annotation_id is not None:
                self._select(None)
                return True
            if self._state.active_mode is not AnnotationMode.NONE:
                self.set_mode(AnnotationMode.NONE)
                return True
            return False

        mode = MODE_SHORTCUTS.get(key)
        if mode is not None:
            self.set_mode(mode)
            return True
        return False

    def handle_context_action(self, annotation_id: str, action: str) -> bool:
        """Context menu actions on an annotation: "remove" or "pronounce"."""
        if self._paused:
            return False
        if action == "remove":
            return self._lifecycle.remove_annotation(annotation_id)
        if action == "pronounce":
            record = self._lifecycle.get_annotation(annotation_id)
            if record is None:
                return False
            self._speak(record.primary_text)
            return True
        logger.warning("Unknown context action %r for %s", action, annotation_id)
        return False

    # ------------------------------------------------------------------
    # Engine notifications
    # ------------------------------------------------------------------

    @Slot(str, str)
    def _on_annotation_removed(self, annotation_id: str, kind: str) -> None:
        self._forget(annotation_id)

    @Slot(object)
    def _on_bulk_removed(self, summary: BulkRemovalSummary) -> None:
        for annotation_id in summary.annotation_ids:
            self._forget(annotation_id)
        parts = [f"{count} {kind}" for kind, count in summary.by_kind.items() if count]
        self._feedback(f"Removed {' and '.join(parts)} annotation(s)")

    @Slot(str)
    def _on_metadata_updated(self, annotation_id: str) -> None:
        if self._popup.active_id == annotation_id:
            record = self._lifecycle.get_annotation(annotation_id)
            self.popup_shown.emit(annotation_id, record.translation)

    @Slot(str)
    def _on_popup_requested(self, annotation_id: str) -> None:
        record = self._lifecycle.get_annotation(annotation_id)
        if record is None:
            self._popup.dismiss()
            return
        # Emit first so a synchronous metadata result refreshes an already open popup
        self.popup_shown.emit(annotation_id, record.translation)
        if not record.has_metadata:
            self._lifecycle.ensure_metadata(annotation_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _select(self, annotation_id: Optional[str]) -> None:
        if self._state.selected_annotation_id == annotation_id:
            return
        self._state.selected_annotation_id = annotation_id
        self.selection_changed.emit(annotation_id)

    def _forget(self, annotation_id: str) -> None:
        if self._state.selected_annotation_id == annotation_id:
            self._select(None)
        self._bulk_delete.discard(annotation_id)
        if self._popup.active_id == annotation_id:
            self._popup.dismiss()

    def _reset_interaction(self) -> None:
        self._select(None)
        self._bulk_delete.clear()
        self._popup.dismiss()

    def _speak(self, text: str) -> None:
        if self._speech_service is not None:
            self._speech_service.speak(text, self._language_hint)

    def _feedback(self, message: str) -> None:
        self.feedback_requested.emit(message, self._tooltip_duration_ms)
