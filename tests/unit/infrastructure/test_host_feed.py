"""Unit tests for the document change feed adapter."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from runmark.infrastructure.host_feed import DocumentChangeFeed

pytestmark = pytest.mark.unit


@pytest.fixture
def layout(tree):
    page = tree(("body", [("div", ["a"]), ("div", [("p", ["b"])]), ("aside", ["c"])]))
    r1, r2, outside = page.children
    return page, r1, r2, outside


class TestDocumentChangeFeed:
    def test_mutation_inside_root_emits_targeted_batch(self, document, layout):
        _, r1, r2, _ = layout
        sink = Mock()
        feed = DocumentChangeFeed(document, {r1.id: "r1", r2.id: "r2"}, sink)
        feed.start()

        r2.children[0].children[0].set_text("changed")
        batch = sink.call_args.args[0]
        assert batch.root_ids == frozenset({"r2"})
        assert batch.full is False

    def test_mutation_outside_roots_is_ignored(self, document, layout):
        _, r1, _, outside = layout
        sink = Mock()
        DocumentChangeFeed(document, {r1.id: "r1"}, sink).start()
        outside.set("data-x", "1")
        sink.assert_not_called()

    def test_ancestor_mutation_resolves_contained_roots(self, document, layout):
        page, r1, r2, _ = layout
        feed = DocumentChangeFeed(document, {r1.id: "r1", r2.id: "r2"}, Mock())
        assert feed.resolve_roots(page) == frozenset({"r1", "r2"})

    def test_stop_unsubscribes(self, document, layout):
        _, r1, _, _ = layout
        sink = Mock()
        feed = DocumentChangeFeed(document, {r1.id: "r1"}, sink)
        feed.start()
        feed.stop()
        assert feed.active is False
        r1.set("data-x", "1")
        sink.assert_not_called()
