"""
Name: Reconcile Unit Tests

Responsibilities:
  - Verify minimal child-list diff (identity kept for unchanged nodes)
  - Verify in-place attribute/text patches vs replace on kind mismatch
"""

from __future__ import annotations

import pytest
from runmark.application.reconcile import reconcile

pytestmark = pytest.mark.unit


class TestReconcile:
    def test_identical_trees_need_no_ops(self, document, tree):
        current = tree(("div", ["a", ("b", ["c"])]))
        target = current.clone(deep=True)
        kept = list(current.children)
        before = document.mutation_count

        stats = reconcile(current, target)
        assert stats.total == 0
        assert all(x is y for x, y in zip(current.children, kept))
        assert document.mutation_count == before

    def test_append_keeps_existing_nodes(self, tree):
        current = tree(("div", [("span", ["one"])]))
        first = current.children[0]
        target = tree(("div", [("span", ["one"]), ("span", ["two"])]))

        stats = reconcile(current, target)
        assert stats.inserted == 1
        assert current.children[0] is first
        assert current.to_markup() == '<div><span>one</span><span>two</span></div>'

    def test_attribute_change_patches_in_place(self, tree):
        current = tree(("div", [("span", {"data-x": "1"}, ["a"])]))
        span = current.children[0]
        target = tree(("div", [("span", {"data-x": "2"}, ["a"])]))

        stats = reconcile(current, target)
        assert current.children[0] is span
        assert span.get("data-x") == "2"
        assert stats.updated == 1
        assert stats.inserted == stats.removed == 0

    def test_text_change_updates_fragment(self, tree):
        current = tree(("div", ["hello"]))
        frag = current.children[0]
        stats = reconcile(current, tree(("div", ["hello world"])))
        assert current.children[0] is frag
        assert frag.text == "hello world"
        assert stats.updated == 1

    def test_removal(self, tree):
        current = tree(("div", ["a", ("i", ["b"]), "c"]))
        stats = reconcile(current, tree(("div", ["a", "c"])))
        assert stats.removed == 1
        assert current.to_markup() == "<div>ac</div>"

    def test_kind_mismatch_replaces_node(self, tree):
        current = tree(("div", [("i", ["x"])]))
        old = current.children[0]
        stats = reconcile(current, tree(("div", [("b", ["x"])])))
        assert current.children[0] is not old
        assert current.children[0].tag == "b"
        assert (stats.inserted, stats.removed) == (1, 1)

    def test_root_attributes_are_left_alone(self, tree):
        current = tree(("div", {"data-keep": "1"}, ["a"]))
        reconcile(current, tree(("div", ["b"])))
        assert current.get("data-keep") == "1"
        assert current.text_content() == "b"

    def test_nested_change_only_touches_changed_leaf(self, tree):
        current = tree(("div", [("p", ["a", ("em", ["b"])]), ("p", ["c"])]))
        p1, p2 = current.children
        em = p1.children[1]
        target = tree(("div", [("p", ["a", ("em", ["B"])]), ("p", ["c"])]))

        stats = reconcile(current, target)
        assert current.children[0] is p1
        assert current.children[1] is p2
        assert p1.children[1] is em
        assert em.text_content() == "B"
        assert stats.total == 1
