"""Unit tests for AnnotationStore."""

import pytest

from text_annotator.core import Annotation, AnnotationKind, Document, TextRange
from text_annotator.services import AnnotationStore


@pytest.fixture
def document():
    return Document.from_text("The quick brown fox jumps over the lazy dog.", document_id="doc")


@pytest.fixture
def store(document):
    return AnnotationStore(document)


def make_record(document, annotation_id, kind, start, end):
    text_range = TextRange.within_block(0, start, end)
    return Annotation(
        id=annotation_id,
        kind=kind,
        primary_text=document.text_in(text_range),
        context=document.context_for(text_range, 100),
        anchors=document.anchors_for(text_range),
        document_id=document.document_id,
    )


class TestAnnotationStoreCrud:
    """Tests for put/get/delete."""

    def test_put_then_get(self, document, store):
        record = make_record(document, "a1", AnnotationKind.VOCABULARY, 4, 9)
        store.put(record)
        assert store.get("a1") is record
        assert "a1" in store
        assert len(store) == 1

    def test_put_overwrites(self, document, store):
        store.put(make_record(document, "a1", AnnotationKind.VOCABULARY, 4, 9))
        replacement = make_record(document, "a1", AnnotationKind.VOCABULARY, 10, 15)
        store.put(replacement)
        assert store.get("a1") is replacement
        assert len(store) == 1

    def test_delete_is_idempotent(self, document, store):
        record = make_record(document, "a1", AnnotationKind.VOCABULARY, 4, 9)
        store.put(record)
        assert store.delete("a1") is record
        assert store.delete("a1") is None
        assert store.get("a1") is None

    def test_all_of_kind(self, document, store):
        store.put(make_record(document, "v", AnnotationKind.VOCABULARY, 4, 9))
        store.put(make_record(document, "s", AnnotationKind.SENTENCE, 0, 44))
        assert [r.id for r in store.all_of_kind(AnnotationKind.SENTENCE)] == ["s"]
        assert {r.id for r in store.all()} == {"v", "s"}


class TestAnnotationStoreRanges:
    """Tests for range queries against the live document."""

    def test_all_overlapping_uses_shared_characters(self, document, store):
        store.put(make_record(document, "quick", AnnotationKind.VOCABULARY, 4, 9))
        store.put(make_record(document, "fox", AnnotationKind.VOCABULARY, 16, 19))

        hits = store.all_overlapping(TextRange.within_block(0, 8, 12))
        assert [r.id for r in hits] == ["quick"]

        # Touching at a boundary shares no character
        assert store.all_overlapping(TextRange.within_block(0, 9, 10)) == []

    def test_resolve_returns_current_range(self, document, store):
        record = make_record(document, "quick", AnnotationKind.VOCABULARY, 4, 9)
        assert store.resolve(record) == TextRange.within_block(0, 4, 9)

    def test_stale_records_are_skipped(self, document, store):
        record = make_record(document, "quick", AnnotationKind.VOCABULARY, 4, 9)
        store.put(record)
        document.remove_block(document.blocks[0].block_id)
        document.add_block("Completely different content here.")

        assert store.try_resolve(record) is None
        assert store.all_overlapping(TextRange.within_block(0, 0, 10)) == []
