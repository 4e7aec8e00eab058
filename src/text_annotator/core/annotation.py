"""Annotation entities shared by the store, binder, coordinators and persistence."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class AnnotationKind(str, Enum):
    """The closed set of annotation kinds."""

    VOCABULARY = "vocabulary"
    SENTENCE = "sentence"


class AnnotationMode(str, Enum):
    """Which kind (if any) a completed selection gesture creates."""

    VOCABULARY = "vocabulary"
    SENTENCE = "sentence"
    NONE = "none"

    @property
    def kind(self) -> Optional[AnnotationKind]:
        """The annotation kind created in this mode, or None for bulk-delete mode."""
        if self is AnnotationMode.NONE:
            return None
        return AnnotationKind(self.value)


@dataclass(frozen=True)
class TextAnchor:
    """A stable reference into host content: block id plus offset in that block."""

    block_id: str
    offset: int


@dataclass(frozen=True)
class SpanAnchors:
    start: TextAnchor
    end: TextAnchor


def generate_annotation_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Annotation:
    """A marked span of text with its learning metadata.

    Attributes:
        id: Opaque identifier, stable for the annotation's lifetime.
        kind: Vocabulary or sentence.
        primary_text: Exact text covered at creation time.
        context: Surrounding text captured at creation time. Never changes.
        anchors: Start/end anchors used to relocate the covered range.
        document_id: Identifier of the document the annotation belongs to.
        translation: Resolved asynchronously; None until then.
        examples: Example usages, resolved together with the translation.
        created_at: Creation timestamp.
    """

    id: str
    kind: AnnotationKind
    primary_text: str
    context: str
    anchors: SpanAnchors
    document_id: str = ""
    translation: Optional[str] = None
    examples: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def has_metadata(self) -> bool:
        """True once a translation has been attached."""
        return self.translation is not None


@dataclass(frozen=True)
class BulkRemovalSummary:
    """Outcome of one bulk removal batch."""

    count: int
    by_kind: dict
    annotation_ids: tuple = ()
