"""In-memory annotation store - owns annotation records for one document."""

import logging
from typing import Dict, List, Optional

from text_annotator.core import Annotation, AnnotationKind, Document, TextRange, intersects
from text_annotator.exc import StaleRangeError

logger = logging.getLogger(__name__)


class AnnotationStore:
    """
    Map from annotation id to record.

    Only the LifecycleManager mutates the store. Range queries resolve each
    record's anchors against the document; records that no longer resolve are
    skipped.
    """

    def __init__(self, document: Document):
        self._document = document
        self._records: Dict[str, Annotation] = {}

    def put(self, record: Annotation) -> None:
        """Store or overwrite a record."""
        self._records[record.id] = record

    def get(self, annotation_id: str) -> Optional[Annotation]:
        return self._records.get(annotation_id)

    def delete(self, annotation_id: str) -> Optional[Annotation]:
        """Remove a record. Unknown ids are ignored."""
        return self._records.pop(annotation_id, None)

    def all(self) -> List[Annotation]:
        return list(self._records.values())

    def all_of_kind(self, kind: AnnotationKind) -> List[Annotation]:
        return [record for record in self._records.values() if record.kind is kind]

    def all_overlapping(self, text_range: TextRange) -> List[Annotation]:
        """Return every record whose span shares at least one character with ``text_range``."""
        matches = []
        for record in self._records.values():
            record_range = self.try_resolve(record)
            if record_range is not None and intersects(record_range, text_range):
                matches.append(record)
        return matches

    def resolve(self, record: Annotation) -> TextRange:
        """Resolve a record's anchors to a range in the current document.

        Raises:
            StaleRangeError: if the anchors no longer resolve.
        """
        return self._document.resolve(record.anchors, expected_text=record.primary_text)

    def try_resolve(self, record: Annotation) -> Optional[TextRange]:
        try:
            return self.resolve(record)
        except StaleRangeError as exc:
            logger.warning("Skipping annotation %s: %s", record.id, exc)
            return None

    def __contains__(self, annotation_id: object) -> bool:
        return annotation_id in self._records

    def __len__(self) -> int:
        return len(self._records)
