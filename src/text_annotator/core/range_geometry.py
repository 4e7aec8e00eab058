"""Range geometry - pure comparisons between text positions and ranges."""

from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple


class TextPosition(NamedTuple):
    """A point in a document: the block's index and a character offset inside it.

    Tuple ordering gives the total document order.
    """

    block_index: int
    offset: int


@dataclass(frozen=True)
class TextRange:
    """Half-open range [start, end) between two document positions."""

    start: TextPosition
    end: TextPosition

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} precedes start {self.start}")

    @classmethod
    def within_block(cls, block_index: int, start: int, end: int) -> "TextRange":
        """Build a range whose endpoints lie in the same block."""
        return cls(TextPosition(block_index, start), TextPosition(block_index, end))

    @property
    def is_collapsed(self) -> bool:
        return self.start == self.end

    @property
    def is_single_block(self) -> bool:
        return self.start.block_index == self.end.block_index


class Comparison(IntEnum):
    BEFORE = -1
    SAME = 0
    AFTER = 1


def _compare(a: TextPosition, b: TextPosition) -> Comparison:
    if a < b:
        return Comparison.BEFORE
    if a > b:
        return Comparison.AFTER
    return Comparison.SAME


def compare_start(a: TextRange, b: TextRange) -> Comparison:
    """Compare where ``a`` starts relative to where ``b`` starts."""
    return _compare(a.start, b.start)


def compare_end(a: TextRange, b: TextRange) -> Comparison:
    """Compare where ``a`` ends relative to where ``b`` ends."""
    return _compare(a.end, b.end)


def contains(outer: TextRange, inner: TextRange) -> bool:
    """True if ``outer`` starts at or before ``inner`` and ends at or after it."""
    return (
        compare_start(outer, inner) <= Comparison.SAME
        and compare_end(outer, inner) >= Comparison.SAME
    )


def intersects(a: TextRange, b: TextRange) -> bool:
    """True if the two ranges share at least one character."""
    return a.start < b.end and b.start < a.end


def overlaps(a: TextRange, b: TextRange) -> bool:
    """True if the ranges share a character but neither fully contains the other."""
    return intersects(a, b) and not contains(a, b) and not contains(b, a)
