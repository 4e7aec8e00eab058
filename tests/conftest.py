"""Shared fixtures: a Qt core application and thread pools that run workers on demand."""

import pytest
from PySide6.QtCore import QCoreApplication

from text_annotator.core import Document, TextRange
from text_annotator.services import TranslationResult, TranslationService


class InlineThreadPool:
    """Stands in for QThreadPool: runs each worker synchronously on start()."""

    def __init__(self):
        self.started = []

    def start(self, runnable):
        self.started.append(type(runnable).__name__)
        runnable.run()


class DeferredThreadPool:
    """Stands in for QThreadPool: queues workers until run_all() is called."""

    def __init__(self):
        self.queue = []

    def start(self, runnable):
        self.queue.append(runnable)

    def run_all(self):
        queued, self.queue = self.queue, []
        for runnable in queued:
            runnable.run()


class FakeTranslationService(TranslationService):
    """Answers "<text>" for every request, or fails while ``error`` is set."""

    def __init__(self):
        self.calls = []
        self.error = None

    def translate(self, text, context):
        self.calls.append((text, context))
        if self.error:
            return TranslationResult(translation="", model="fake", error=self.error)
        return TranslationResult(translation=f"<{text}>", model="fake", examples=[f"{text}!"])


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Ensure a QCoreApplication exists for timers."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def inline_pool():
    return InlineThreadPool()


@pytest.fixture
def deferred_pool():
    return DeferredThreadPool()


@pytest.fixture
def find_range():
    """Return a helper locating the n-th occurrence of a phrase in a block."""

    def _find(document: Document, phrase: str, block_index: int = 0, occurrence: int = 0) -> TextRange:
        text = document.blocks[block_index].text
        start = -1
        for _ in range(occurrence + 1):
            start = text.index(phrase, start + 1)
        return TextRange.within_block(block_index, start, start + len(phrase))

    return _find


@pytest.fixture
def translation_service():
    return FakeTranslationService()
