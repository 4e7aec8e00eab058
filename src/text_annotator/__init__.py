"""
Text Annotator - an interactive vocabulary and sentence annotation engine.

This package marks spans of rendered text for language learners with:
- Vocabulary (1-3 words) and sentence annotations that may nest
- Consolidation of enclosed annotations into a larger one
- Translation metadata fetched in the background
- Single and bulk deletion driven by pointer and keyboard input
"""

__version__ = "0.1.0"

# Make key components available at package level
from text_annotator.core import Annotation, AnnotationKind, AnnotationMode, Document, TextRange
from text_annotator.engine import AnnotationEngine

__all__ = [
    "Annotation",
    "AnnotationKind",
    "AnnotationMode",
    "AnnotationEngine",
    "Document",
    "TextRange",
]
