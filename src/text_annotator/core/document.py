"""Document entity - ordered blocks of host content addressed by anchors."""

import re
import uuid
from typing import Iterator, List, Optional

from text_annotator.exc import StaleRangeError

from .annotation import SpanAnchors, TextAnchor
from .markup import Block, MarkElement
from .range_geometry import TextPosition, TextRange

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class Document:
    """Acts as the authority on a document's blocks and how anchors map onto them."""

    def __init__(self, document_id: Optional[str] = None, blocks: Optional[List[Block]] = None):
        self.document_id = document_id or uuid.uuid4().hex
        self._blocks: List[Block] = list(blocks or [])

    @classmethod
    def from_text(cls, text: str, document_id: Optional[str] = None) -> "Document":
        """Split plain text into one block per paragraph (blank-line separated)."""
        paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text)]
        return cls(document_id, [Block(p) for p in paragraphs if p])

    @property
    def blocks(self) -> tuple:
        return tuple(self._blocks)

    # ------------------------------------------------------------------
    # Host content mutation
    # ------------------------------------------------------------------

    def add_block(self, text: str, block_id: Optional[str] = None) -> Block:
        block = Block(text, block_id)
        self._blocks.append(block)
        return block

    def insert_block(self, index: int, text: str, block_id: Optional[str] = None) -> Block:
        block = Block(text, block_id)
        self._blocks.insert(index, block)
        return block

    def remove_block(self, block_id: str) -> Optional[Block]:
        index = self.index_of(block_id)
        if index is None:
            return None
        return self._blocks.pop(index)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def block(self, block_id: str) -> Optional[Block]:
        index = self.index_of(block_id)
        return self._blocks[index] if index is not None else None

    def index_of(self, block_id: str) -> Optional[int]:
        for index, block in enumerate(self._blocks):
            if block.block_id == block_id:
                return index
        return None

    def block_at(self, block_index: int) -> Block:
        """Return the block at ``block_index``.

        Raises:
            StaleRangeError: if the index no longer addresses a block.
        """
        if 0 <= block_index < len(self._blocks):
            return self._blocks[block_index]
        raise StaleRangeError(f"Block index {block_index} out of bounds for document '{self.document_id}'")

    def contains_block(self, block: Block) -> bool:
        return any(candidate is block for candidate in self._blocks)

    def iter_elements(self) -> Iterator[MarkElement]:
        for block in self._blocks:
            yield from block.iter_elements()

    def position(self, block_id: str, offset: int) -> TextPosition:
        """Convert a block id and offset into an ordered document position."""
        index = self.index_of(block_id)
        if index is None:
            raise StaleRangeError(f"Unknown block '{block_id}'")
        self._check_offset(index, offset)
        return TextPosition(index, offset)

    def range_in_block(self, block_id: str, start: int, end: int) -> TextRange:
        return TextRange(self.position(block_id, start), self.position(block_id, end))

    # ------------------------------------------------------------------
    # Text queries
    # ------------------------------------------------------------------

    def text_in(self, text_range: TextRange) -> str:
        """Return the text covered by a range; blocks are joined by newlines."""
        start, end = text_range.start, text_range.end
        self._check_offset(start.block_index, start.offset)
        self._check_offset(end.block_index, end.offset)
        if text_range.is_single_block:
            return self._blocks[start.block_index].text[start.offset:end.offset]
        parts = [self._blocks[start.block_index].text[start.offset:]]
        for index in range(start.block_index + 1, end.block_index):
            parts.append(self._blocks[index].text)
        parts.append(self._blocks[end.block_index].text[:end.offset])
        return "\n".join(parts)

    def trim(self, text_range: TextRange) -> TextRange:
        """Shrink a range past leading and trailing whitespace."""
        start, end = text_range.start, text_range.end
        while start < end:
            text = self.block_at(start.block_index).text
            if start.offset >= len(text):
                start = TextPosition(start.block_index + 1, 0)
            elif text[start.offset].isspace():
                start = TextPosition(start.block_index, start.offset + 1)
            else:
                break
        while end > start:
            if end.offset == 0:
                previous = end.block_index - 1
                end = TextPosition(previous, len(self.block_at(previous).text))
                continue
            text = self.block_at(end.block_index).text
            if not text[end.offset - 1].isspace():
                break
            end = TextPosition(end.block_index, end.offset - 1)
        if end < start:
            end = start
        return TextRange(start, end)

    def context_for(self, text_range: TextRange, window: int) -> str:
        """Return up to ``window // 2`` characters either side of a range, within its block."""
        text = self.block_at(text_range.start.block_index).text
        half = window // 2
        context_start = max(0, text_range.start.offset - half)
        if text_range.is_single_block:
            context_end = min(len(text), text_range.end.offset + half)
        else:
            context_end = len(text)
        return text[context_start:context_end]

    # ------------------------------------------------------------------
    # Anchors
    # ------------------------------------------------------------------

    def anchors_for(self, text_range: TextRange) -> SpanAnchors:
        start_block = self.block_at(text_range.start.block_index)
        end_block = self.block_at(text_range.end.block_index)
        return SpanAnchors(
            start=TextAnchor(start_block.block_id, text_range.start.offset),
            end=TextAnchor(end_block.block_id, text_range.end.offset),
        )

    def resolve(self, anchors: SpanAnchors, expected_text: Optional[str] = None) -> TextRange:
        """Relocate anchors in the current content.

        Raises:
            StaleRangeError: if a block is gone, an offset no longer fits, or the
                covered text differs from ``expected_text``.
        """
        start = self.position(anchors.start.block_id, anchors.start.offset)
        end = self.position(anchors.end.block_id, anchors.end.offset)
        if end < start:
            raise StaleRangeError(f"Anchors {anchors} resolve to an inverted range")
        text_range = TextRange(start, end)
        if expected_text is not None and self.text_in(text_range) != expected_text:
            raise StaleRangeError(f"Text at {anchors} no longer matches {expected_text!r}")
        return text_range

    def _check_offset(self, block_index: int, offset: int) -> None:
        block = self.block_at(block_index)
        if not 0 <= offset <= len(block):
            raise StaleRangeError(
                f"Offset {offset} out of bounds for block '{block.block_id}' of length {len(block)}"
            )
