"""Async workers for non-blocking translation and persistence using Qt threading."""

from typing import Callable

from PySide6.QtCore import QObject, QRunnable, Signal, Slot

from text_annotator.services.translation import TranslationService


class WorkerSignals(QObject):
    """
    Signal holder shared by the translation and persistence workers.

    Emitted from the pool thread; connected slots on main-thread objects are
    queued back to the Qt event loop.
    """
    finished = Signal()
    error = Signal(str)
    translation_result = Signal(object)  # TranslationResult


class TranslationWorker(QRunnable):
    """
    Worker that runs the translate(text, context) call in a background thread.

    Emits signals when translation completes or fails.
    """

    def __init__(self, translation_service: TranslationService, text: str, context: str):
        super().__init__()
        self.translation_service = translation_service
        self.text = text
        self.context = context
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self):
        """Execute the translation call in background thread."""
        try:
            result = self.translation_service.translate(text=self.text, context=self.context)
            self.signals.translation_result.emit(result)
        except Exception as e:
            # Catch any unexpected exceptions not handled by service
            self.signals.error.emit(f"Unexpected translation error: {str(e)}")
        finally:
            self.signals.finished.emit()


class PersistenceWorker(QRunnable):
    """
    Worker that runs one repository write in a background thread.

    The engine does not wait for it; failures are reported through
    signals.error and never retried.
    """

    def __init__(self, operation: str, write: Callable[[], None]):
        super().__init__()
        self.operation = operation
        self.write = write
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self):
        """Execute the repository write in background thread."""
        try:
            self.write()
        except Exception as e:
            self.signals.error.emit(f"{type(e).__name__}: {e}")
        finally:
            self.signals.finished.emit()
