"""
Name: TextView Unit Tests

Responsibilities:
  - Verify concatenation order and structural exclusions (verbatim, predicate)
  - Verify soft caps (fragments, chars) set truncated
  - Verify offset lookup and per-fragment segmentation
"""

from __future__ import annotations

import pytest
from runmark.application.text_view import TextView

pytestmark = pytest.mark.unit


class TestBuild:
    def test_concatenates_in_document_order(self, tree):
        root = tree(("div", ["ab", ("span", ["cd"]), "ef"]))
        view = TextView.build(root)
        assert view.text == "abcdef"
        assert [(s.start, s.end) for s in view.slots] == [(0, 2), (2, 4), (4, 6)]

    def test_skips_verbatim_subtrees(self, tree):
        root = tree(("div", ["a", ("code", ["x"]), ("pre", ["y"]), "b"]))
        assert TextView.build(root).text == "ab"

    def test_skips_empty_fragments(self, tree):
        root = tree(("div", ["", "a", ""]))
        view = TextView.build(root)
        assert len(view.slots) == 1

    def test_exclude_predicate_prunes_subtree(self, tree):
        root = tree(("div", ["a", ("q", ["b"]), "c"]))
        view = TextView.build(root, exclude=lambda el: el.tag == "q")
        assert view.text == "ac"

    def test_root_inside_verbatim_yields_nothing(self, tree):
        outer = tree(("pre", [("span", ["x"])]))
        assert TextView.build(outer.children[0]).text == ""

    def test_fragment_cap_truncates(self, tree):
        root = tree(("div", ["a", "b", "c"]))
        view = TextView.build(root, max_fragments=2)
        assert view.text == "ab"
        assert view.truncated is True

    def test_char_cap_keeps_crossing_fragment_whole(self, tree):
        root = tree(("div", ["ab", "cd", "ef"]))
        view = TextView.build(root, max_chars=3)
        assert view.text == "abcd"
        assert view.truncated is True

    def test_not_truncated_under_caps(self, tree):
        root = tree(("div", ["ab"]))
        assert TextView.build(root).truncated is False


class TestLookup:
    def test_locate_maps_boundary_to_next_fragment(self, tree):
        root = tree(("div", ["ab", "cd"]))
        view = TextView.build(root)
        assert view.locate(1) == (0, 1)
        assert view.locate(2) == (1, 0)
        assert view.locate(4) == (1, 2)

    def test_locate_out_of_range_raises(self, tree):
        view = TextView.build(tree(("div", ["ab"])))
        with pytest.raises(IndexError):
            view.locate(3)

    def test_segments_split_across_fragments(self, tree):
        root = tree(("div", ["ab", "cd"]))
        view = TextView.build(root)
        segs = view.segments(1, 3)
        assert [(s.fragment.text, s.local_start, s.local_end) for s in segs] == [
            ("ab", 1, 2),
            ("cd", 0, 1),
        ]

    def test_segments_empty_range(self, tree):
        view = TextView.build(tree(("div", ["ab"])))
        assert view.segments(1, 1) == []

    def test_covers_fragment(self, tree):
        view = TextView.build(tree(("div", ["ab", "cd"])))
        segs = view.segments(0, 3)
        assert segs[0].covers_fragment is True
        assert segs[1].covers_fragment is False
