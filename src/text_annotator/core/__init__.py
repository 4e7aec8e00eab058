"""Domain layer - annotation entities, the markup tree and range geometry."""

from .annotation import (
    Annotation,
    AnnotationKind,
    AnnotationMode,
    BulkRemovalSummary,
    SpanAnchors,
    TextAnchor,
    generate_annotation_id,
)
from .document import Document
from .markup import Block, Container, MarkElement, TextNode
from .range_geometry import (
    Comparison,
    TextPosition,
    TextRange,
    compare_end,
    compare_start,
    contains,
    intersects,
    overlaps,
)

__all__ = [
    "Annotation",
    "AnnotationKind",
    "AnnotationMode",
    "BulkRemovalSummary",
    "SpanAnchors",
    "TextAnchor",
    "generate_annotation_id",
    "Document",
    "Block",
    "Container",
    "MarkElement",
    "TextNode",
    "Comparison",
    "TextPosition",
    "TextRange",
    "compare_end",
    "compare_start",
    "contains",
    "intersects",
    "overlaps",
]
