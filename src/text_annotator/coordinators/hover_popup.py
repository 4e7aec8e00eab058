"""Hover Popup Coordinator - delayed translation popup with a global dismissal watcher."""

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal, Slot

logger = logging.getLogger(__name__)


class _PopupWatcher:
    """Global pointer-move check scoped to one open popup.

    Keeps the popup only while the pointer's topmost element lies inside some
    live annotation. Catches missed pointer-leave events.
    """

    def __init__(self, source_id: str, is_live: Callable[[str], bool]):
        self.source_id = source_id
        self._is_live = is_live

    def should_dismiss(self, annotation_id_under_pointer: Optional[str]) -> bool:
        if annotation_id_under_pointer is None:
            return True
        if annotation_id_under_pointer == self.source_id:
            return False
        return not self._is_live(annotation_id_under_pointer)


class HoverPopupCoordinator(QObject):
    """
    Manages the pointer-enter → delay → popup → dismissal workflow.

    A single-shot timer delays the popup so a quick pass over an annotation
    does not open it. Every enter/leave cancels the outstanding timer.
    """

    popup_requested = Signal(str)
    popup_dismissed = Signal(str)

    def __init__(self, delay_ms: int, is_live: Callable[[str], bool]):
        super().__init__()

        self._is_live = is_live
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._on_timeout)

        self._pending_id: Optional[str] = None
        self._watcher: Optional[_PopupWatcher] = None

    @property
    def active_id(self) -> Optional[str]:
        return self._watcher.source_id if self._watcher is not None else None

    @property
    def pending_id(self) -> Optional[str]:
        return self._pending_id if self._timer.isActive() else None

    def pointer_entered(self, annotation_id: str) -> None:
        self.cancel_timer()
        if self.active_id == annotation_id:
            return
        self._pending_id = annotation_id
        self._timer.start()

    def pointer_left(self, annotation_id: str) -> None:
        self.cancel_timer()
        if self.active_id == annotation_id:
            self.dismiss()

    def pointer_moved(self, annotation_id_under_pointer: Optional[str]) -> None:
        """Global pointer-move hook. A no-op unless a popup is open."""
        if self._watcher is None:
            return
        if self._watcher.should_dismiss(annotation_id_under_pointer):
            logger.debug(
                "Pointer left annotations (under pointer: %s); hiding popup for %s",
                annotation_id_under_pointer, self._watcher.source_id,
            )
            self.dismiss()

    def cancel_timer(self) -> None:
        self._timer.stop()
        self._pending_id = None

    def dismiss(self) -> None:
        """Hide the popup (if any), tear down its watcher and cancel the timer."""
        self.cancel_timer()
        if self._watcher is None:
            return
        source_id = self._watcher.source_id
        self._watcher = None
        self.popup_dismissed.emit(source_id)

    @Slot()
    def _on_timeout(self) -> None:
        annotation_id = self._pending_id
        self.cancel_timer()
        if annotation_id is None or not self._is_live(annotation_id):
            return
        if self._watcher is not None:
            self.dismiss()
        self._watcher = _PopupWatcher(annotation_id, self._is_live)
        self.popup_requested.emit(annotation_id)
