"""In-memory annotation repository for testing and session-only use."""

import copy
from typing import Dict, Iterable, List

from text_annotator.core import Annotation
from text_annotator.services.persistence.annotation_repository import AnnotationRepository


class InMemoryAnnotationRepository(AnnotationRepository):
    """
    Simple in-memory repository implementation.

    Records are copied on the way in and out so callers cannot mutate stored state.
    """

    def __init__(self):
        # Structure: {document_id: {annotation_id: Annotation}}
        self._store: Dict[str, Dict[str, Annotation]] = {}

    def persist(self, record: Annotation) -> None:
        self._store.setdefault(record.document_id, {})[record.id] = copy.deepcopy(record)

    def unpersist(self, annotation_id: str) -> None:
        for records in self._store.values():
            records.pop(annotation_id, None)

    def persist_batch(self, records: Iterable[Annotation]) -> None:
        for record in records:
            self.persist(record)

    def unpersist_batch(self, annotation_ids: Iterable[str]) -> None:
        for annotation_id in annotation_ids:
            self.unpersist(annotation_id)

    def load(self, document_id: str) -> List[Annotation]:
        return [copy.deepcopy(record) for record in self._store.get(document_id, {}).values()]
