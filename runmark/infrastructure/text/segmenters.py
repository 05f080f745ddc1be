"""
===============================================================================
CRC CARD — infrastructure/text/segmenters.py
===============================================================================

Componente:
  Segmentadores de texto (Strategy-friendly)

Responsabilidades:
  - Segmentar en grapheme clusters (UAX #29) vía `regex` (\\X).
  - Fallback documentado: iteración por code point cuando el host declara que
    la segmentación por clusters no está disponible.
  - Segmentar en "palabras" para animación de streaming (palabras, runs de
    espacios, saltos de línea y clusters sueltos).

Colaboradores:
  - domain/services.py (TextSegmenterPort)
  - application/locale_classifier.py, application/stream_segmenter.py,
    application/typewriter.py

Decisiones:
  - Las piezas cubren el input completo sin huecos (invariante del puerto).
  - Patrones compilados una sola vez (módulo).
===============================================================================
"""

from __future__ import annotations

from typing import Final, Iterator

import regex

_GRAPHEME_RE: Final = regex.compile(r"\X")

# Orden de alternativas = prioridad: CRLF, saltos, espacios, palabras, cluster.
_WORD_RE: Final = regex.compile(
    r"\r\n|\n|\r|[^\S\r\n]+|[\w\p{M}]+(?:['’][\w\p{M}]+)*|\X"
)


class GraphemeSegmenter:
    """Clusters extendidos (UAX #29) usando el módulo `regex`."""

    granularity = "grapheme"

    def segments(self, text: str) -> Iterator[tuple[str, int, int]]:
        for match in _GRAPHEME_RE.finditer(text or ""):
            yield match.group(), match.start(), match.end()


class CodePointSegmenter:
    """
    Fallback sin segmentación de clusters: un code point por pieza.

    Nota: str de Python ya itera por code point (no hay surrogates que cuidar).
    """

    granularity = "grapheme"

    def segments(self, text: str) -> Iterator[tuple[str, int, int]]:
        for idx, ch in enumerate(text or ""):
            yield ch, idx, idx + 1


class WordSegmenter:
    """Palabras + runs de espacio + saltos de línea + clusters sueltos."""

    granularity = "word"

    def segments(self, text: str) -> Iterator[tuple[str, int, int]]:
        for match in _WORD_RE.finditer(text or ""):
            yield match.group(), match.start(), match.end()


def build_segmenter(granularity: str = "grapheme", *, clusters_available: bool = True):
    """
    Factory por granularidad.

    - "word" -> WordSegmenter
    - "grapheme" -> GraphemeSegmenter, o CodePointSegmenter si el host no
      ofrece segmentación por clusters.
    """
    resolved = (granularity or "grapheme").strip().lower()
    if resolved == "word":
        return WordSegmenter()
    if resolved != "grapheme":
        raise ValueError(f"unknown granularity: {granularity!r}")
    return GraphemeSegmenter() if clusters_available else CodePointSegmenter()
