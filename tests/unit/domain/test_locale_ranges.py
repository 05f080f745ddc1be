"""Unit tests for the fixed locale range tables."""

from __future__ import annotations

import pytest
from runmark.domain.locale_ranges import (
    LOCALE_KEY_PRIORITY,
    NEUTRAL_KEYS,
    UNICODE_RANGES,
)

pytestmark = pytest.mark.unit

EXPECTED_KEYS = {
    "cjk",
    "jp_kana",
    "jp_hiragana",
    "jp_katakana",
    "hangul",
    "bopomofo",
    "latin",
    "cyrillic",
    "greek",
    "arabic",
    "hebrew",
    "devanagari",
    "thai",
    "digits",
    "punctuation",
    "emoji",
}


def test_all_range_keys_present():
    assert set(UNICODE_RANGES) == EXPECTED_KEYS


def test_neutral_keys_are_digits_punctuation_emoji():
    assert tuple(NEUTRAL_KEYS) == ("digits", "punctuation", "emoji")


def test_priority_covers_every_key():
    assert set(LOCALE_KEY_PRIORITY) <= EXPECTED_KEYS


@pytest.mark.parametrize(
    "key,char",
    [
        ("cjk", "世"),
        ("jp_hiragana", "ひ"),
        ("jp_katakana", "カ"),
        ("hangul", "한"),
        ("latin", "é"),
        ("cyrillic", "Ж"),
        ("greek", "λ"),
        ("arabic", "ع"),
        ("hebrew", "ש"),
        ("devanagari", "क"),
        ("thai", "ก"),
        ("digits", "7"),
        ("punctuation", "!"),
    ],
)
def test_representative_code_points(key, char):
    assert UNICODE_RANGES[key].contains(ord(char))
