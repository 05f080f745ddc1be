"""
===============================================================================
TARJETA CRC — domain/locale_ranges.py
===============================================================================

Módulo:
    Tablas fijas de rangos de code points por script/categoría

Responsabilidades:
    - Definir los rangos (inclusivos) de cada range-key clasificable.
    - Definir el orden de prioridad al clasificar un cluster.
    - Definir los rangos de marcas combinantes / selectores de variación.

Colaboradores:
    - application/locale_classifier.py: consume las tablas.
    - crosscutting/config.py: valida range-keys configurados.

Restricciones:
    - Datos puros; la detección de idioma más allá de estas tablas NO es objetivo.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class LocaleRange:
    label: str
    ranges: tuple[tuple[int, int], ...]

    def contains(self, code_point: int) -> bool:
        for start, end in self.ranges:
            if start <= code_point <= end:
                return True
        return False


UNICODE_RANGES: Final[dict[str, LocaleRange]] = {
    "cjk": LocaleRange(
        "Han/CJK",
        (
            (0x3400, 0x4DBF),  # Extension A
            (0x4E00, 0x9FFF),  # Unified Ideographs
            (0xF900, 0xFAFF),  # Compatibility Ideographs
            (0x20000, 0x2A6DF),  # Extension B
            (0x2A700, 0x2B73F),  # Extension C
            (0x2B740, 0x2B81F),  # Extension D
            (0x2B820, 0x2CEAF),  # Extension E/F
            (0x2CEB0, 0x2EBEF),  # Extension G
        ),
    ),
    "jp_kana": LocaleRange(
        "Kana",
        (
            (0x3040, 0x309F),
            (0x30A0, 0x30FF),
            (0x31F0, 0x31FF),
            (0xFF65, 0xFF9F),
        ),
    ),
    "jp_hiragana": LocaleRange("Hiragana", ((0x3040, 0x309F),)),
    "jp_katakana": LocaleRange(
        "Katakana",
        (
            (0x30A0, 0x30FF),
            (0x31F0, 0x31FF),
            (0xFF65, 0xFF9F),
        ),
    ),
    "hangul": LocaleRange(
        "Hangul",
        (
            (0x1100, 0x11FF),  # Jamo
            (0x3130, 0x318F),  # Compatibility Jamo
            (0xA960, 0xA97F),  # Jamo Extended-A
            (0xAC00, 0xD7AF),  # Syllables
            (0xD7B0, 0xD7FF),  # Jamo Extended-B
        ),
    ),
    "bopomofo": LocaleRange("Bopomofo", ((0x3100, 0x312F), (0x31A0, 0x31BF))),
    "latin": LocaleRange(
        "Latin",
        (
            (0x0000, 0x00FF),
            (0x0100, 0x024F),
            (0x1E00, 0x1EFF),
        ),
    ),
    "cyrillic": LocaleRange("Cyrillic", ((0x0400, 0x052F),)),
    "greek": LocaleRange("Greek", ((0x0370, 0x03FF),)),
    "arabic": LocaleRange(
        "Arabic",
        (
            (0x0600, 0x06FF),
            (0x0750, 0x077F),
            (0x08A0, 0x08FF),
            (0xFB50, 0xFDFF),
            (0xFE70, 0xFEFF),
        ),
    ),
    "hebrew": LocaleRange("Hebrew", ((0x0590, 0x05FF),)),
    "devanagari": LocaleRange("Devanagari", ((0x0900, 0x097F),)),
    "thai": LocaleRange("Thai", ((0x0E00, 0x0E7F),)),
    "digits": LocaleRange("Digits", ((0x0030, 0x0039), (0xFF10, 0xFF19))),
    "punctuation": LocaleRange(
        "Punctuation",
        (
            (0x0020, 0x002F),
            (0x003A, 0x0040),
            (0x005B, 0x0060),
            (0x007B, 0x007E),
            (0x2000, 0x206F),  # General Punctuation
            (0x3000, 0x303F),  # CJK Symbols and Punctuation
            (0xFF00, 0xFFEF),  # Halfwidth and Fullwidth Forms
        ),
    ),
    "emoji": LocaleRange(
        "Emoji",
        (
            (0x2600, 0x27BF),  # Misc symbols + Dingbats
            (0x1F000, 0x1FAFF),
        ),
    ),
}

# Categorías "neutrales": solo se asignan si están configuradas; si no, heredan.
NEUTRAL_KEYS: Final[tuple[str, ...]] = ("digits", "punctuation", "emoji")

LOCALE_KEY_PRIORITY: Final[tuple[str, ...]] = (
    "digits",
    "punctuation",
    "emoji",
    "jp_hiragana",
    "jp_katakana",
    "jp_kana",
    "hangul",
    "bopomofo",
    "cjk",
    "latin",
    "cyrillic",
    "greek",
    "arabic",
    "hebrew",
    "devanagari",
    "thai",
)

# Marcas combinantes, selectores de variación y ZWJ (no significativos).
COMBINING_RANGES: Final[tuple[tuple[int, int], ...]] = (
    (0x0300, 0x036F),
    (0x1AB0, 0x1AFF),
    (0x1DC0, 0x1DFF),
    (0x20D0, 0x20FF),
    (0xFE20, 0xFE2F),
    (0xFE00, 0xFE0F),  # Variation Selectors
    (0xE0100, 0xE01EF),  # Variation Selectors Supplement
    (0x200D, 0x200D),  # ZWJ
)
