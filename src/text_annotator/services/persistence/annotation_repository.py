"""Annotation Repository abstraction - plugin interface for annotation storage."""

from abc import ABC, abstractmethod
from typing import Iterable, List

from text_annotator.core import Annotation


class AnnotationRepository(ABC):
    """
    Abstract key-value storage for annotation records.

    The engine writes here last, after in-memory and visual state already
    reflect a change. Implementations raise on failure; the engine logs the
    failure and never rolls back.
    """

    @abstractmethod
    def persist(self, record: Annotation) -> None:
        """Store or overwrite one record."""
        pass

    @abstractmethod
    def unpersist(self, annotation_id: str) -> None:
        """Delete one record. Unknown ids are ignored."""
        pass

    @abstractmethod
    def persist_batch(self, records: Iterable[Annotation]) -> None:
        """Store or overwrite several records in one write."""
        pass

    @abstractmethod
    def unpersist_batch(self, annotation_ids: Iterable[str]) -> None:
        """Delete several records in one write."""
        pass

    @abstractmethod
    def load(self, document_id: str) -> List[Annotation]:
        """Return every stored record belonging to a document."""
        pass
