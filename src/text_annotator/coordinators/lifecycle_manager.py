"""Lifecycle Manager - creates, consolidates and removes annotations."""

import copy
import logging
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from text_annotator.core import (
    Annotation,
    AnnotationKind,
    BulkRemovalSummary,
    Document,
    TextRange,
    contains,
    generate_annotation_id,
    overlaps,
)
from text_annotator.exc import (
    MetadataFetchError,
    OverlapConflictError,
    PersistenceError,
    StaleRangeError,
    ValidationError,
)
from text_annotator.services import (
    AnnotationRepository,
    AnnotationStore,
    EngineConfig,
    PersistenceWorker,
    TranslationService,
    TranslationWorker,
    VisualBinder,
)

logger = logging.getLogger(__name__)


class _MetadataRequest(QObject):
    """Holds the annotation id a translation worker is working for."""

    def __init__(self, request_id: int, annotation_id: str, parent: "LifecycleManager"):
        super().__init__()
        self.request_id = request_id
        self.annotation_id = annotation_id
        self.parent_ref = parent

    @Slot(object)
    def on_translation_result(self, result):
        self.parent_ref._handle_translation_result(self.annotation_id, result)

    @Slot(str)
    def on_translation_error(self, error: str):
        self.parent_ref._handle_translation_error(self.annotation_id, error)

    @Slot()
    def on_finished(self):
        self.parent_ref._release_request(self.request_id)


class _PersistenceRequest(QObject):
    """Holds the operation name a persistence worker is running."""

    def __init__(self, request_id: int, operation: str, parent: "LifecycleManager"):
        super().__init__()
        self.request_id = request_id
        self.operation = operation
        self.parent_ref = parent

    @Slot(str)
    def on_error(self, error: str):
        self.parent_ref._handle_persistence_error(self.operation, error)

    @Slot()
    def on_finished(self):
        self.parent_ref._release_request(self.request_id)


class LifecycleManager(QObject):
    """
    Owns every mutation of the annotation store and the annotation markup.

    Responsibilities:
    - Validate selections and consolidate enclosed same-kind annotations.
    - Bind markup and store the record as one synchronous unit.
    - Fetch translation metadata in the background and attach it.
    - Remove annotations singly or in batches.
    - Write changes to the repository last, without waiting for it.
    """

    annotation_created = Signal(str, str)  # id, kind
    annotation_removed = Signal(str, str)  # id, kind
    annotation_metadata_updated = Signal(str)
    metadata_failed = Signal(str, str)  # id, reason
    bulk_removed = Signal(object)  # BulkRemovalSummary
    persistence_failed = Signal(str)

    def __init__(
        self,
        document: Document,
        store: AnnotationStore,
        binder: VisualBinder,
        config: EngineConfig,
        translation_service: Optional[TranslationService] = None,
        repository: Optional[AnnotationRepository] = None,
        thread_pool: Optional[QThreadPool] = None,
    ):
        super().__init__()

        self._document = document
        self._store = store
        self._binder = binder
        self._config = config
        self._translation_service = translation_service
        self._repository = repository
        self._thread_pool = thread_pool or QThreadPool.globalInstance()

        self._pending_metadata: Set[str] = set()

        # Keep references to helper objects so they don't get garbage collected
        # while workers are running in background threads
        self._requests: Dict[int, QObject] = {}
        self._request_counter = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_annotation(self, annotation_id: str) -> Optional[Annotation]:
        return self._store.get(annotation_id)

    def annotations(self) -> List[Annotation]:
        return self._store.all()

    def resolve_range(self, annotation_id: str) -> Optional[TextRange]:
        record = self._store.get(annotation_id)
        return self._store.try_resolve(record) if record is not None else None

    def is_metadata_pending(self, annotation_id: str) -> bool:
        return annotation_id in self._pending_metadata

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_annotation(self, selection: TextRange, kind: AnnotationKind) -> Optional[Annotation]:
        """Turn a selection into a bound annotation.

        Returns the new annotation, or None if the selection no longer
        resolves in the document.

        Raises:
            ValidationError: the selection is not a valid span for ``kind``.
            OverlapConflictError: the selection partially overlaps an annotation.
        """
        try:
            text_range, text = self._validate(selection, kind)
            superseded = self._plan_consolidation(text_range, kind)
            context = self._document.context_for(text_range, self._config.context_window)
            anchors = self._document.anchors_for(text_range)
        except StaleRangeError as exc:
            logger.warning("Ignoring %s selection: %s", kind.value, exc)
            return None

        annotation = Annotation(
            id=generate_annotation_id(),
            kind=kind,
            primary_text=text,
            context=context,
            anchors=anchors,
            document_id=self._document.document_id,
        )

        try:
            self._binder.bind(text_range, annotation.id, kind)
        except StaleRangeError as exc:
            logger.warning("Could not bind %s annotation: %s", kind.value, exc)
            return None
        self._store.put(annotation)

        # Superseded annotations go only after the new markup exists
        for old in superseded:
            self._detach(old)
            self.annotation_removed.emit(old.id, old.kind.value)

        logger.info(
            "Created %s annotation %s over %r (consolidated %d)",
            kind.value, annotation.id, text, len(superseded),
        )
        self.annotation_created.emit(annotation.id, kind.value)

        snapshot = copy.deepcopy(annotation)
        superseded_ids = [old.id for old in superseded]

        def write():
            if superseded_ids:
                self._repository.unpersist_batch(superseded_ids)
            self._repository.persist(snapshot)

        self._persist("create", write)
        self._request_metadata(annotation)
        return annotation

    def _validate(self, selection: TextRange, kind: AnnotationKind) -> Tuple[TextRange, str]:
        text_range = self._document.trim(selection)
        text = self._document.text_in(text_range)
        if not text:
            raise ValidationError("Selection is empty")
        if not text_range.is_single_block:
            raise ValidationError("Please keep the selection within one paragraph")

        if kind is AnnotationKind.VOCABULARY:
            max_words = self._config.vocabulary_max_words
            if len(text.split()) > max_words:
                raise ValidationError(f"Please select 1-{max_words} words for vocabulary")
        elif len(text) < self._config.sentence_min_length:
            raise ValidationError("Please select a complete sentence")
        return text_range, text

    def _plan_consolidation(self, text_range: TextRange, kind: AnnotationKind) -> List[Annotation]:
        """Return the same-kind annotations the new range replaces.

        Raises:
            OverlapConflictError: on any partial overlap.
        """
        superseded = []
        for record in self._store.all_overlapping(text_range):
            existing = self._store.resolve(record)
            if record.kind is kind and contains(text_range, existing):
                superseded.append(record)
            elif overlaps(text_range, existing):
                if record.kind is kind:
                    message = f"Selection partially overlaps an existing {kind.value} annotation"
                else:
                    message = f"Selection would split an existing {record.kind.value} annotation"
                raise OverlapConflictError(message, record.id)
        return superseded

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def remove_annotation(self, annotation_id: str) -> bool:
        """Remove one annotation. Returns False if it did not exist."""
        record = self._store.get(annotation_id)
        if record is None:
            return False

        self._detach(record)
        logger.info("Removed %s annotation %s", record.kind.value, annotation_id)
        self.annotation_removed.emit(annotation_id, record.kind.value)
        self._persist("remove", lambda: self._repository.unpersist(annotation_id))
        return True

    def remove_many(self, annotation_ids: Iterable[str]) -> BulkRemovalSummary:
        """Remove several annotations as one batch with a single summary signal."""
        records: List[Annotation] = []
        for annotation_id in dict.fromkeys(annotation_ids):
            record = self._store.get(annotation_id)
            if record is not None:
                records.append(record)

        removed_ids = [record.id for record in records]
        for record in records:
            self._store.delete(record.id)

        if removed_ids:
            self._persist("bulk remove", lambda: self._repository.unpersist_batch(removed_ids))

        for record in records:
            self._unbind_quietly(record.id)

        counts = Counter(record.kind.value for record in records)
        summary = BulkRemovalSummary(
            count=len(records),
            by_kind={kind.value: counts.get(kind.value, 0) for kind in AnnotationKind},
            annotation_ids=tuple(removed_ids),
        )
        if records:
            logger.info("Bulk removed %d annotations %s", summary.count, summary.by_kind)
            self.bulk_removed.emit(summary)
        return summary

    def _detach(self, record: Annotation) -> None:
        self._unbind_quietly(record.id)
        self._store.delete(record.id)

    def _unbind_quietly(self, annotation_id: str) -> None:
        try:
            self._binder.unbind(annotation_id)
        except StaleRangeError as exc:
            logger.warning("Markup already gone for %s: %s", annotation_id, exc)

    # ------------------------------------------------------------------
    # Restore / reconcile
    # ------------------------------------------------------------------

    def restore(self) -> int:
        """Re-bind the document's persisted annotations. Returns how many were restored."""
        if self._repository is None:
            return 0
        try:
            records = self._repository.load(self._document.document_id)
        except Exception as e:
            logger.warning("%s", PersistenceError("load", str(e)))
            self.persistence_failed.emit(f"Could not load annotations: {e}")
            return 0

        resolved = []
        for record in records:
            if record.id in self._store:
                continue
            text_range = self._store.try_resolve(record)
            if text_range is not None:
                resolved.append((text_range, record))

        # Outer spans first so inner ones descend into existing markup
        resolved.sort(key=lambda item: (item[0].start, tuple(-v for v in item[0].end)))

        restored = 0
        for text_range, record in resolved:
            try:
                self._binder.bind(text_range, record.id, record.kind)
            except (StaleRangeError, OverlapConflictError, ValueError) as exc:
                logger.warning("Skipping persisted annotation %s: %s", record.id, exc)
                continue
            self._store.put(record)
            self.annotation_created.emit(record.id, record.kind.value)
            restored += 1
        logger.info("Restored %d of %d persisted annotations", restored, len(records))
        return restored

    def reconcile(self) -> List[str]:
        """Repair record/markup pairing after host content changed.

        Records without markup are dropped from memory; markup without a record
        is unwrapped. Persisted records are left alone.
        """
        live = self._binder.live_ids()
        dropped = []
        for record in self._store.all():
            if record.id not in live:
                self._store.delete(record.id)
                self._pending_metadata.discard(record.id)
                dropped.append(record.id)
                logger.warning("Dropped %s annotation %s: markup no longer present", record.kind.value, record.id)
                self.annotation_removed.emit(record.id, record.kind.value)

        for annotation_id in live:
            if annotation_id not in self._store:
                logger.warning("Unwrapping orphaned markup %s", annotation_id)
                self._unbind_quietly(annotation_id)
        return dropped

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def ensure_metadata(self, annotation_id: str) -> bool:
        """Retry a missing translation. Returns True if a request was started."""
        record = self._store.get(annotation_id)
        if record is None or record.has_metadata or annotation_id in self._pending_metadata:
            return False
        return self._request_metadata(record)

    def _request_metadata(self, annotation: Annotation) -> bool:
        if self._translation_service is None:
            logger.debug("No translation service configured; %s stays without metadata", annotation.id)
            return False

        self._pending_metadata.add(annotation.id)
        request_id = self._next_request_id()
        worker = TranslationWorker(
            translation_service=self._translation_service,
            text=annotation.primary_text,
            context=annotation.context,
        )
        helper = _MetadataRequest(request_id, annotation.id, self)
        self._requests[request_id] = helper

        worker.signals.translation_result.connect(helper.on_translation_result)
        worker.signals.error.connect(helper.on_translation_error)
        worker.signals.finished.connect(helper.on_finished)
        self._thread_pool.start(worker)
        return True

    def _handle_translation_result(self, annotation_id: str, result) -> None:
        """Attach a translation result (runs in main thread)."""
        self._pending_metadata.discard(annotation_id)
        record = self._store.get(annotation_id)
        if record is None:
            logger.debug("Discarding late translation for removed annotation %s", annotation_id)
            return
        if result.is_error:
            self._report_metadata_failure(annotation_id, result.error or "Unknown error")
            return

        record.translation = result.translation
        record.examples = list(result.examples)
        self.annotation_metadata_updated.emit(annotation_id)

        snapshot = copy.deepcopy(record)
        self._persist("update metadata", lambda: self._repository.persist(snapshot))

    def _handle_translation_error(self, annotation_id: str, error: str) -> None:
        self._pending_metadata.discard(annotation_id)
        if annotation_id not in self._store:
            return
        self._report_metadata_failure(annotation_id, error)

    def _report_metadata_failure(self, annotation_id: str, reason: str) -> None:
        logger.warning("%s", MetadataFetchError(annotation_id, reason))
        self.metadata_failed.emit(annotation_id, reason)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist(self, operation: str, write: Callable[[], None]) -> None:
        if self._repository is None:
            return
        request_id = self._next_request_id()
        worker = PersistenceWorker(operation, write)
        helper = _PersistenceRequest(request_id, operation, self)
        self._requests[request_id] = helper

        worker.signals.error.connect(helper.on_error)
        worker.signals.finished.connect(helper.on_finished)
        self._thread_pool.start(worker)

    def _handle_persistence_error(self, operation: str, error: str) -> None:
        exc = PersistenceError(operation, error)
        logger.warning("%s", exc)
        self.persistence_failed.emit(str(exc))

    def _next_request_id(self) -> int:
        self._request_counter += 1
        return self._request_counter

    def _release_request(self, request_id: int) -> None:
        self._requests.pop(request_id, None)
