"""End-to-end scenarios driven through the selection controller."""

from unittest.mock import MagicMock

from text_annotator import AnnotationEngine
from text_annotator.core import AnnotationKind, AnnotationMode, Document


def build(text, inline_pool, translation_service=None):
    return AnnotationEngine(
        Document.from_text(text),
        translation_service=translation_service,
        thread_pool=inline_pool,
    )


def test_wider_vocabulary_selection_replaces_enclosed_one(inline_pool, find_range):
    engine = build("Yesterday an apple fell from the tree.", inline_pool)
    removed = MagicMock()
    engine.lifecycle.annotation_removed.connect(removed)

    engine.controller.handle_selection_completed(find_range(engine.document, "an"))
    first = engine.store.all()[0]
    assert engine.lifecycle.resolve_range(first.id).start.offset == 10

    engine.controller.handle_selection_completed(find_range(engine.document, "an apple"))

    records = engine.store.all()
    assert len(records) == 1
    assert records[0].primary_text == "an apple"
    assert engine.binder.live_ids() == {records[0].id}
    removed.assert_called_once_with(first.id, "vocabulary")
    assert engine.document.blocks[0].text == "Yesterday an apple fell from the tree."
    assert engine.binder.element_for(records[0].id).text == "an apple"


def test_sentence_wraps_vocabulary_and_leaves_it_on_removal(inline_pool, find_range):
    engine = build("The cat sat. Then it left.", inline_pool)

    engine.controller.handle_selection_completed(find_range(engine.document, "cat"))
    engine.controller.set_mode(AnnotationMode.SENTENCE)
    engine.controller.handle_selection_completed(find_range(engine.document, "The cat sat."))

    cat = engine.store.all_of_kind(AnnotationKind.VOCABULARY)[0]
    sentence = engine.store.all_of_kind(AnnotationKind.SENTENCE)[0]
    assert engine.binder.element_for(cat.id).parent is engine.binder.element_for(sentence.id)

    engine.controller.handle_context_action(sentence.id, "remove")

    assert cat.id in engine.store
    assert engine.binder.element_for(cat.id).text == "cat"
    assert 'data-annotation-id="%s"' % cat.id in engine.render_html()


def test_bulk_delete_removes_only_enclosed_annotations(inline_pool, find_range):
    engine = build("Look, the cat sat on the mat today.", inline_pool)
    document = engine.document
    lifecycle = engine.lifecycle

    the = lifecycle.create_annotation(find_range(document, "the"), AnnotationKind.VOCABULARY)
    cat = lifecycle.create_annotation(find_range(document, "cat"), AnnotationKind.VOCABULARY)
    mat = lifecycle.create_annotation(find_range(document, "mat"), AnnotationKind.VOCABULARY)
    sat_on = lifecycle.create_annotation(find_range(document, "sat on the mat today."), AnnotationKind.SENTENCE)
    bulk_spy = MagicMock()
    lifecycle.bulk_removed.connect(bulk_spy)

    engine.controller.set_mode(AnnotationMode.NONE)
    engine.controller.handle_selection_completed(find_range(document, "the cat sat on the mat"))

    assert engine.controller.pending_bulk_targets == frozenset({the.id, cat.id, mat.id})

    assert engine.controller.handle_key("Delete")

    assert [r.id for r in engine.store.all()] == [sat_on.id]
    assert engine.binder.live_ids() == {sat_on.id}
    assert engine.binder.element_for(sat_on.id).text == "sat on the mat today."
    bulk_spy.assert_called_once()
    summary = bulk_spy.call_args[0][0]
    assert summary.count == 3
    assert summary.by_kind == {"vocabulary": 3, "sentence": 0}


def test_five_word_vocabulary_selection_is_rejected(inline_pool, find_range):
    engine = build("She quickly ran to the old station.", inline_pool)
    feedback = MagicMock()
    engine.controller.feedback_requested.connect(feedback)
    before = engine.render_html()

    engine.controller.handle_selection_completed(find_range(engine.document, "quickly ran to the old"))

    assert len(engine.store) == 0
    assert engine.binder.live_ids() == set()
    assert engine.render_html() == before
    feedback.assert_called_once_with("Please select 1-3 words for vocabulary", 2000)


def test_popup_hides_when_pointer_leaves_document(inline_pool, translation_service, find_range):
    engine = build("Un café con leche, por favor.", inline_pool, translation_service)
    shown, hidden = MagicMock(), MagicMock()
    engine.controller.popup_shown.connect(shown)
    engine.controller.popup_hidden.connect(hidden)

    engine.controller.handle_selection_completed(find_range(engine.document, "café"))
    annotation = engine.store.all()[0]
    block_id = engine.document.blocks[0].block_id

    engine.controller.handle_pointer_entered(engine.annotation_at(block_id, 4))
    assert engine.popup.pending_id == annotation.id
    engine.popup._on_timeout()
    shown.assert_called_once_with(annotation.id, "<café>")

    # No element under the cursor at all
    engine.controller.handle_pointer_moved(None)

    hidden.assert_called_once_with(annotation.id)
    assert engine.popup.active_id is None
