"""Bulk Delete Coordinator - previews and removes every annotation inside a selection."""

import logging
from typing import FrozenSet, Optional

from PySide6.QtCore import QObject, Signal

from text_annotator.core import BulkRemovalSummary, TextRange, contains
from text_annotator.services import VisualBinder

from .lifecycle_manager import LifecycleManager

logger = logging.getLogger(__name__)


class BulkDeleteCoordinator(QObject):
    """
    Orchestrates selection → preview → confirm for multi-annotation removal.

    Only annotations fully enclosed by the selection are targeted. The preview
    only flags markup; nothing is removed until confirm().
    """

    preview_changed = Signal(object)  # frozenset of annotation ids

    def __init__(self, lifecycle: LifecycleManager, binder: VisualBinder):
        super().__init__()

        self._lifecycle = lifecycle
        self._binder = binder
        self._targets: FrozenSet[str] = frozenset()

    @property
    def pending_targets(self) -> FrozenSet[str]:
        return self._targets

    def compute_targets(self, selection: TextRange) -> FrozenSet[str]:
        """Ids of the annotations whose whole span lies inside ``selection``."""
        targets = set()
        for annotation in self._lifecycle.annotations():
            annotation_range = self._lifecycle.resolve_range(annotation.id)
            if annotation_range is not None and contains(selection, annotation_range):
                targets.add(annotation.id)
        return frozenset(targets)

    def preview(self, selection: TextRange) -> FrozenSet[str]:
        """Replace the current preview with the annotations enclosed by ``selection``."""
        targets = self.compute_targets(selection)
        if targets != self._targets:
            self._set_targets(targets)
        return self._targets

    def confirm(self) -> Optional[BulkRemovalSummary]:
        """Remove every previewed annotation in one batch."""
        if not self._targets:
            return None
        targets = self._targets
        self._set_targets(frozenset())
        return self._lifecycle.remove_many(sorted(targets))

    def clear(self) -> None:
        """Drop the preview without removing anything."""
        if self._targets:
            self._set_targets(frozenset())

    def discard(self, annotation_id: str) -> None:
        """Forget a target removed through another path."""
        if annotation_id in self._targets:
            self._set_targets(self._targets - {annotation_id})

    def _set_targets(self, targets: FrozenSet[str]) -> None:
        for annotation_id in self._targets - targets:
            self._binder.set_pending(annotation_id, False)
        for annotation_id in targets - self._targets:
            if not self._binder.set_pending(annotation_id, True):
                logger.warning("No markup to flag for bulk target %s", annotation_id)
        self._targets = targets
        self.preview_changed.emit(targets)
