"""Combinatorial tests for range geometry."""

import itertools

import pytest

from text_annotator.core import (
    Comparison,
    TextPosition,
    TextRange,
    compare_end,
    compare_start,
    contains,
    intersects,
    overlaps,
)


def _ranges(points):
    for start, end in itertools.combinations_with_replacement(points, 2):
        yield TextRange(start, end)


# Positions spanning two blocks so block ordering is exercised too
POINTS = [TextPosition(b, o) for b in range(2) for o in range(4)]
ALL_RANGES = list(_ranges(POINTS))
NON_EMPTY = [r for r in ALL_RANGES if not r.is_collapsed]


def _chars(text_range):
    """Brute-force set of (block, offset) characters covered by a range over POINTS."""
    return {p for p in POINTS if text_range.start <= p < text_range.end}


class TestComparisons:
    def test_compare_start_orders_by_block_then_offset(self):
        a = TextRange.within_block(0, 3, 3)
        b = TextRange.within_block(1, 0, 0)
        assert compare_start(a, b) is Comparison.BEFORE
        assert compare_start(b, a) is Comparison.AFTER
        assert compare_start(a, a) is Comparison.SAME

    def test_compare_end(self):
        a = TextRange.within_block(0, 0, 5)
        b = TextRange.within_block(0, 2, 7)
        assert compare_end(a, b) is Comparison.BEFORE
        assert compare_end(b, a) is Comparison.AFTER

    def test_inverted_range_rejected(self):
        with pytest.raises(ValueError):
            TextRange.within_block(0, 5, 2)


class TestContainment:
    @pytest.mark.parametrize("outer", ALL_RANGES)
    def test_contains_matches_endpoint_definition(self, outer):
        for inner in ALL_RANGES:
            expected = outer.start <= inner.start and inner.end <= outer.end
            assert contains(outer, inner) == expected

    def test_contains_is_reflexive(self):
        for r in ALL_RANGES:
            assert contains(r, r)

    def test_mutual_containment_means_equal(self):
        for a, b in itertools.product(ALL_RANGES, repeat=2):
            if contains(a, b) and contains(b, a):
                assert a == b


class TestOverlap:
    def test_overlaps_matches_character_sets(self):
        for a, b in itertools.product(NON_EMPTY, repeat=2):
            ca, cb = _chars(a), _chars(b)
            shared = bool(ca & cb)
            nested = ca <= cb or cb <= ca
            assert intersects(a, b) == shared
            assert overlaps(a, b) == (shared and not nested)

    def test_overlaps_is_symmetric(self):
        for a, b in itertools.product(ALL_RANGES, repeat=2):
            assert overlaps(a, b) == overlaps(b, a)

    def test_adjacent_ranges_do_not_overlap(self):
        left = TextRange.within_block(0, 0, 2)
        right = TextRange.within_block(0, 2, 4)
        assert not intersects(left, right)
        assert not overlaps(left, right)

    def test_partial_overlap(self):
        a = TextRange.within_block(0, 0, 3)
        b = TextRange.within_block(0, 2, 5)
        assert overlaps(a, b)
        assert not contains(a, b)
