"""Unit tests for stream unit planning and materialization."""

from __future__ import annotations

import pytest
from runmark.application.stream_segmenter import (
    StreamSegmenter,
    count_stream_units,
    segment_stream_units,
)
from runmark.domain.value_objects import SEGMENT_NEW_ATTR, SEGMENT_OWNER

pytestmark = pytest.mark.unit

SEVEN_WORDS = "one two three four five six seven"


def _segs(root):
    return root.find_all(lambda el: el.has(SEGMENT_OWNER.attr))


class TestSegmentStreamUnits:
    def test_new_units_start_at_base_index(self, word_segmenter):
        units = segment_stream_units(SEVEN_WORDS, word_segmenter, base_index=5)
        counted = [u for u in units if u.counted]
        assert len(counted) == 7
        assert [u.text for u in units if u.is_new] == ["six", "seven"]

    def test_blank_units_are_not_counted_nor_new(self, word_segmenter):
        units = segment_stream_units("a  b", word_segmenter)
        blank = [u for u in units if not u.counted]
        assert [u.text for u in blank] == ["  "]
        assert blank[0].is_new is False

    def test_line_breaks_are_dropped(self, grapheme_segmenter):
        units = segment_stream_units("a\r\nb", grapheme_segmenter)
        assert [u.text for u in units] == ["a", "b"]

    def test_count_grapheme_units(self, grapheme_segmenter):
        assert count_stream_units("ab c", grapheme_segmenter) == 3


class TestMaterialize:
    def test_marks_only_new_units(self, root_with_text, word_segmenter):
        root = root_with_text(SEVEN_WORDS)
        result = StreamSegmenter(word_segmenter).materialize(root, base_index=5)
        assert (result.total_units, result.new_units) == (7, 2)

        new = [el for el in _segs(root) if el.get(SEGMENT_NEW_ATTR) == "1"]
        assert [el.text_content() for el in new] == ["six", "seven"]
        assert [el.get(SEGMENT_OWNER.tag_attr) for el in new] == ["0", "1"]
        assert root.text_content() == SEVEN_WORDS

    def test_ordinals_continue_across_fragments(self, tree, word_segmenter):
        root = tree(("div", ["a b", ("em", ["c"]), " d"]))
        result = StreamSegmenter(word_segmenter).materialize(root)
        assert result.total_units == 4
        assert result.new_units == 4

    def test_skips_verbatim_and_blank_fragments(self, tree, word_segmenter):
        root = tree(("div", ["a", ("code", ["x y"]), "   "]))
        result = StreamSegmenter(word_segmenter).materialize(root)
        assert result.total_units == 1
        assert len(_segs(root)) == 1

    def test_existing_segments_are_not_rewrapped(self, root_with_text, word_segmenter):
        root = root_with_text("a b")
        segmenter = StreamSegmenter(word_segmenter)
        segmenter.materialize(root)
        before = len(_segs(root))
        segmenter.materialize(root)
        assert len(_segs(root)) == before

    def test_cap_stops_wrapping_but_keeps_counting(self, root_with_text, grapheme_segmenter):
        root = root_with_text("abcdef")
        result = StreamSegmenter(grapheme_segmenter, max_units=3).materialize(root)
        assert result.capped is True
        assert result.total_units == 6
        assert len(_segs(root)) == 3
        assert root.text_content() == "abcdef"
