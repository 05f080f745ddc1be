"""Unit tests for the delimiter span finder."""

from __future__ import annotations

import pytest
from runmark.application.delimiter_spans import count_occurrences, find_delimited_spans
from runmark.domain.value_objects import Span

pytestmark = pytest.mark.unit


class TestFindDelimitedSpans:
    def test_unterminated_trailing_opener_yields_no_span(self):
        spans = find_delimited_spans("A <<b>> C <<d", "<<", ">>")
        assert spans == [Span(2, 7, "custom")]

    def test_greedy_leftmost_pairs_first_opener(self):
        assert find_delimited_spans("<<a <<b>>", "<<", ">>") == [Span(0, 9, "custom")]

    def test_only_opener(self):
        assert find_delimited_spans("<<x", "<<", ">>") == []

    def test_same_open_and_close_token(self):
        spans = find_delimited_spans("*a* *b*", "*", "*")
        assert [(s.start, s.end) for s in spans] == [(0, 3), (4, 7)]

    @pytest.mark.parametrize("open_token,close_token", [("", ">>"), ("<<", ""), ("", "")])
    def test_empty_tokens_yield_nothing(self, open_token, close_token):
        assert find_delimited_spans("<<a>>", open_token, close_token) == []

    def test_span_cap(self):
        spans = find_delimited_spans("<<a>>" * 5, "<<", ">>", max_spans=3)
        assert len(spans) == 3

    def test_invalid_cap_raises(self):
        with pytest.raises(ValueError):
            find_delimited_spans("<<a>>", "<<", ">>", max_spans=0)

    def test_spans_never_overlap(self):
        text = "<<a>> <<b <<c>> >> <<d>><<e>> <<"
        spans = find_delimited_spans(text, "<<", ">>")
        for left, right in zip(spans, spans[1:]):
            assert left.end <= right.start

    def test_kind_is_propagated(self):
        spans = find_delimited_spans("[x]", "[", "]", kind="aside")
        assert spans[0].kind == "aside"


class TestCountOccurrences:
    def test_non_overlapping(self):
        assert count_occurrences("aaaa", "aa") == 2

    def test_bounded_by_limit(self):
        assert count_occurrences("x" * 100, "x", limit=50) == 50

    def test_empty_inputs(self):
        assert count_occurrences("", "x") == 0
        assert count_occurrences("x", "") == 0
