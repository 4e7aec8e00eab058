"""Persistence services - repository interface with SQLite and in-memory backends."""

from text_annotator.services.persistence.annotation_repository import AnnotationRepository
from text_annotator.services.persistence.in_memory_annotation_repository import InMemoryAnnotationRepository
from text_annotator.services.persistence.sqlite_annotation_repository import SqliteAnnotationRepository

__all__ = [
    "AnnotationRepository",
    "InMemoryAnnotationRepository",
    "SqliteAnnotationRepository",
]
