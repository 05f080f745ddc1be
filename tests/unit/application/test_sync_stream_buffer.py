"""
Name: Sync Stream Buffer Unit Tests

Responsibilities:
  - Verify buffered streaming marks only newly arrived units
  - Verify unchanged sources are skipped with zero mutations (every mode)
  - Verify existing buffer nodes keep identity across syncs
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from runmark.application.usecases import SyncStreamBufferUseCase, source_fingerprint
from runmark.domain.value_objects import (
    SEGMENT_COUNT_ATTR,
    SEGMENT_MODE_ATTR,
    SEGMENT_NEW_ATTR,
    SEGMENT_OWNER,
    SOURCE_SIG_ATTR,
    STREAM_BUFFER_ATTR,
)

pytestmark = pytest.mark.unit

FIVE = "one two three four five"
SEVEN = FIVE + " six seven"


@pytest.fixture
def annotate() -> Mock:
    return Mock()


@pytest.fixture
def use_case(grapheme_segmenter, word_segmenter, annotate) -> SyncStreamBufferUseCase:
    return SyncStreamBufferUseCase(
        {"grapheme": grapheme_segmenter, "word": word_segmenter}, annotate
    )


@pytest.fixture
def pair(tree):
    section = tree(
        ("section", [("div", [FIVE]), ("div", {STREAM_BUFFER_ATTR: "1"}, [])])
    )
    source, buffer = section.children
    return source, buffer


def _new_units(buffer):
    return [
        el.text_content()
        for el in buffer.find_all(lambda el: el.get(SEGMENT_NEW_ATTR) == "1")
    ]


def test_source_fingerprint():
    assert source_fingerprint("") == "0:0"
    assert source_fingerprint("ab") == f"2:{ord('b')}"


class TestBufferedSync:
    def test_first_sync_marks_everything_new(self, pair, use_case, annotate):
        source, buffer = pair
        result = use_case.execute(source, buffer, granularity="word")
        assert (result.total_units, result.new_units) == (5, 5)
        assert buffer.text_content() == FIVE
        assert buffer.get(SEGMENT_COUNT_ATTR) == "5"
        assert buffer.get(SEGMENT_MODE_ATTR) == "word"
        assert buffer.get(SOURCE_SIG_ATTR) == source_fingerprint(source.inner_markup())
        annotate.assert_called_once()

    def test_appended_words_are_the_only_new_units(self, pair, use_case):
        source, buffer = pair
        use_case.execute(source, buffer, granularity="word")
        first_seg = buffer.find_first(lambda el: el.has(SEGMENT_OWNER.attr))

        source.children[0].set_text(SEVEN)
        result = use_case.execute(source, buffer, granularity="word")

        assert (result.total_units, result.new_units) == (7, 2)
        assert _new_units(buffer) == ["six", "seven"]
        assert buffer.find_first(lambda el: el.has(SEGMENT_OWNER.attr)) is first_seg
        assert buffer.text_content() == SEVEN
        assert (result.inserted, result.removed) == (4, 0)

    def test_unchanged_source_is_skipped(self, document, pair, use_case, annotate):
        source, buffer = pair
        use_case.execute(source, buffer, granularity="word")
        before = document.mutation_count

        result = use_case.execute(source, buffer, granularity="word")
        assert result.skipped is True
        assert result.total_units == 5
        assert document.mutation_count == before
        assert annotate.call_count == 1

    def test_mode_change_resets_base(self, pair, use_case):
        source, buffer = pair
        use_case.execute(source, buffer, granularity="word")
        result = use_case.execute(source, buffer, granularity="grapheme")
        assert buffer.get(SEGMENT_MODE_ATTR) == "grapheme"
        assert result.new_units == result.total_units == len(FIVE.replace(" ", ""))

    def test_source_is_never_mutated(self, pair, use_case):
        source, buffer = pair
        before = source.to_markup()
        use_case.execute(source, buffer, granularity="word")
        assert source.to_markup() == before


class TestNoEffect:
    def test_buffer_mirrors_source(self, pair, use_case, annotate):
        source, buffer = pair
        result = use_case.execute(source, buffer, granularity=None)
        assert buffer.inner_markup() == source.inner_markup()
        assert result.total_units == 0
        assert buffer.get(SEGMENT_MODE_ATTR) == "none"
        annotate.assert_called_once()

    def test_mirror_updates_in_place(self, pair, use_case):
        source, buffer = pair
        use_case.execute(source, buffer, granularity=None)
        frag = buffer.children[0]
        source.children[0].set_text(SEVEN)
        result = use_case.execute(source, buffer, granularity=None)
        assert buffer.children[0] is frag
        assert result.updated == 1

    def test_unchanged_source_is_skipped_without_mutations(
        self, document, pair, use_case, annotate
    ):
        """R: A repeated sync over the same source does nothing at all."""
        source, buffer = pair
        use_case.execute(source, buffer, granularity=None)
        before = document.mutation_count

        result = use_case.execute(source, buffer, granularity=None)

        assert result.skipped is True
        assert document.mutation_count == before
        assert annotate.call_count == 1

    def test_annotated_target_is_reconciled_not_rebuilt(self, document, pair, grapheme_segmenter):
        """R: Wrappers added by annotation survive a resync that only appends text."""

        def wrap_first_word(target):
            frag = target.children[0]
            head, _, tail = frag.text.partition(" ")
            target.remove_child(frag)
            target.append(document.element("b", {}, [document.text(head)]))
            target.append(document.text(" " + tail))

        use_case = SyncStreamBufferUseCase({"grapheme": grapheme_segmenter}, wrap_first_word)
        source, buffer = pair
        use_case.execute(source, buffer, granularity=None)
        wrapper = buffer.children[0]

        source.children[0].set_text(SEVEN)
        result = use_case.execute(source, buffer, granularity=None)

        assert buffer.children[0] is wrapper
        assert buffer.text_content() == SEVEN
        assert (result.inserted, result.removed, result.updated) == (0, 0, 1)
