"""Visual Binder - creates and removes annotation markup in the document tree."""

import logging
from typing import List, Optional, Set, Tuple

from text_annotator.core import (
    AnnotationKind,
    Container,
    Document,
    MarkElement,
    TextNode,
    TextPosition,
    TextRange,
)
from text_annotator.exc import OverlapConflictError, StaleRangeError

logger = logging.getLogger(__name__)


class VisualBinder:
    """
    Translates "cover this range with kind K" into markup, and back.

    Responsibilities:
    - Split boundary text nodes so a range can be isolated.
    - Wrap the range in a MarkElement carrying the annotation id.
    - Keep nested annotation markup intact on both wrap and unwrap.
    - Keep the transient pending-deletion flag used by bulk preview.
    """

    def __init__(self, document: Document):
        self._document = document

    def bind(self, text_range: TextRange, annotation_id: str, kind: AnnotationKind) -> MarkElement:
        """Wrap ``text_range`` in a new markup element.

        Raises:
            StaleRangeError: if the range no longer fits the document.
            OverlapConflictError: if wrapping would split existing markup.
            ValueError: for collapsed or multi-block ranges, or a duplicate id.
        """
        if text_range.is_collapsed:
            raise ValueError("Cannot bind a collapsed range")
        if not text_range.is_single_block:
            raise ValueError("Cannot bind a range spanning several blocks")
        if self.element_for(annotation_id) is not None:
            raise ValueError(f"Markup for annotation {annotation_id} already exists")

        block = self._document.block_at(text_range.start.block_index)
        start, end = text_range.start.offset, text_range.end.offset
        if end > len(block):
            raise StaleRangeError(
                f"Range [{start}, {end}) exceeds block '{block.block_id}' of length {len(block)}"
            )

        container, base = self._innermost_container(block, start, end)
        element = self._wrap(container, start - base, end - base, annotation_id, kind)
        logger.debug("Bound %s %s over %r", kind.value, annotation_id, element.text)
        return element

    def unbind(self, annotation_id: str) -> None:
        """Remove the markup for ``annotation_id``, keeping its text and nested markup.

        Raises:
            StaleRangeError: if no live markup carries the id.
        """
        elements = self._elements_for(annotation_id)
        if not elements:
            raise StaleRangeError(f"No markup found for annotation {annotation_id}")
        for element in elements:
            parent = element.parent
            parent.replace_child(element, list(element.children))
            parent.normalize()
        logger.debug("Unbound %s", annotation_id)

    def set_pending(self, annotation_id: str, pending: bool) -> bool:
        """Toggle the pending-deletion state. Returns False if there is no markup."""
        element = self.element_for(annotation_id)
        if element is None:
            return False
        element.pending_deletion = pending
        return True

    def element_for(self, annotation_id: str) -> Optional[MarkElement]:
        elements = self._elements_for(annotation_id)
        return elements[0] if elements else None

    def count_elements(self, annotation_id: str) -> int:
        return len(self._elements_for(annotation_id))

    def live_ids(self) -> Set[str]:
        return {element.annotation_id for element in self._document.iter_elements()}

    def annotations_at(self, position: TextPosition) -> List[str]:
        """Ids of the annotations covering a character, innermost first."""
        block = self._document.block_at(position.block_index)
        found: List[str] = []
        container: Container = block
        offset = 0
        while True:
            for child in container.children:
                child_end = offset + len(child.text)
                if offset <= position.offset < child_end:
                    if isinstance(child, MarkElement):
                        found.append(child.annotation_id)
                        container = child
                        break
                    return list(reversed(found))
                offset = child_end
            else:
                return list(reversed(found))

    def _elements_for(self, annotation_id: str) -> List[MarkElement]:
        return [
            element
            for element in self._document.iter_elements()
            if element.annotation_id == annotation_id
        ]

    def _innermost_container(self, block: Container, start: int, end: int) -> Tuple[Container, int]:
        """Descend into markup that strictly contains [start, end).

        Returns the container and the block offset at which it begins. A range
        that exactly matches an element stays outside it, so the new markup
        wraps the existing one.
        """
        container, base = block, 0
        while True:
            offset = base
            for child in container.children:
                child_end = offset + len(child.text)
                if (
                    isinstance(child, MarkElement)
                    and offset <= start
                    and end <= child_end
                    and (offset, child_end) != (start, end)
                ):
                    container, base = child, offset
                    break
                offset = child_end
            else:
                return container, base

    def _wrap(
        self,
        container: Container,
        start: int,
        end: int,
        annotation_id: str,
        kind: AnnotationKind,
    ) -> MarkElement:
        # Reject before splitting anything so a conflict leaves the tree untouched
        offset = 0
        for child in container.children:
            child_end = offset + len(child.text)
            if (
                isinstance(child, MarkElement)
                and offset < end
                and start < child_end
                and not (start <= offset and child_end <= end)
            ):
                raise OverlapConflictError(
                    f"Range would split the markup of annotation {child.annotation_id}",
                    child.annotation_id,
                )
            offset = child_end

        self._split_at(container, start)
        self._split_at(container, end)

        covered = []
        first_index: Optional[int] = None
        offset = 0
        for index, child in enumerate(container.children):
            child_start, offset = offset, offset + len(child.text)
            if child_start >= start and offset <= end and offset > child_start:
                if first_index is None:
                    first_index = index
                covered.append(child)

        element = MarkElement(annotation_id, kind)
        container.children[first_index:first_index + len(covered)] = [element]
        element.parent = container
        for child in covered:
            element.append(child)
        return element

    @staticmethod
    def _split_at(container: Container, position: int) -> None:
        offset = 0
        for child in container.children:
            child_end = offset + len(child.text)
            if isinstance(child, TextNode) and offset < position < child_end:
                cut = position - offset
                container.replace_child(child, [TextNode(child.text[:cut]), TextNode(child.text[cut:])])
                return
            offset = child_end
