"""
===============================================================================
CRC CARD — application/quote_spans.py
===============================================================================

Componente:
  QuoteSpanFinder + clasificación de citas materializadas

Responsabilidades:
  - Ubicar pares de comillas (open, close) con la apertura válida más temprana
    entre todos los pares configurados.
  - Excluir apóstrofos dentro de palabra (contracciones: it's, don’t).
  - Etiquetar cada cita ya extraída como "custom" | "dialogue" | "plain" por
    coincidencia exacta de bordes (sin re-escanear el texto crudo).

Colaboradores:
  - application/usecases/apply_quotes.py
  - domain/value_objects.Span

Decisiones:
  - Opener sin cierre del mismo par: NO se consume; queda como texto literal y
    el escaneo sigue inmediatamente después de él.
  - Empate de posición: gana el primer par de la lista (orden = prioridad).
===============================================================================
"""

from __future__ import annotations

import re
from typing import Final, Iterable, Optional, Sequence

from ..domain.value_objects import Span

QuotePair = tuple[str, str]

QUOTE_PAIRS: Final[tuple[QuotePair, ...]] = (
    ('"', '"'),
    ("“", "”"),  # “ ”
    ("‘", "’"),  # ‘ ’
    ("«", "»"),  # « »
    ("「", "」"),  # 「 」
    ("『", "』"),  # 『 』
    ("＂", "＂"),  # ＂ ＂
    ("＇", "＇"),  # ＇ ＇
    ("'", "'"),
)

DIALOGUE_QUOTE_PAIRS: Final[tuple[QuotePair, ...]] = (
    ('"', '"'),
    ("“", "”"),
    ("＂", "＂"),
    ("'", "'"),
    ("‘", "’"),
    ("＇", "＇"),
)

APOSTROPHE_TOKENS: Final[frozenset[str]] = frozenset({"'", "’", "＇"})

QUOTE_CUSTOM: Final[str] = "custom"
QUOTE_DIALOGUE: Final[str] = "dialogue"
QUOTE_PLAIN: Final[str] = "plain"

_ASCII_WORD_RE: Final = re.compile(r"[0-9A-Za-z]")


def _is_ascii_word_char(ch: str) -> bool:
    return bool(ch) and bool(_ASCII_WORD_RE.fullmatch(ch))


def is_apostrophe_in_word(text: str, token_idx: int, token: str) -> bool:
    """True si el token está flanqueado por caracteres de palabra ASCII."""
    prev = text[token_idx - 1] if token_idx > 0 else ""
    next_idx = token_idx + len(token)
    nxt = text[next_idx] if next_idx < len(text) else ""
    return _is_ascii_word_char(prev) and _is_ascii_word_char(nxt)


def find_next_valid_token(text: str, token: str, from_idx: int) -> int:
    """Como str.find, pero saltea apóstrofos dentro de palabra."""
    candidate = text.find(token, from_idx)
    if token not in APOSTROPHE_TOKENS:
        return candidate
    while candidate != -1 and is_apostrophe_in_word(text, candidate, token):
        candidate = text.find(token, candidate + len(token))
    return candidate


def find_quote_spans(
    text: str,
    pairs: Sequence[QuotePair] = QUOTE_PAIRS,
    *,
    kind: str = "quote",
) -> list[Span]:
    """
    Spans de citas emparejadas (incluyen los tokens de apertura y cierre).

    payload: el par (open, close) que generó el span.
    """
    raw = text or ""
    active_pairs = [(o, c) for o, c in pairs if o and c]
    if not raw or not active_pairs:
        return []

    spans: list[Span] = []
    idx = 0
    while idx < len(raw):
        open_idx = -1
        open_token = ""
        close_token = ""
        for candidate_open, candidate_close in active_pairs:
            candidate_idx = find_next_valid_token(raw, candidate_open, idx)
            if candidate_idx == -1:
                continue
            if open_idx == -1 or candidate_idx < open_idx:
                open_idx = candidate_idx
                open_token = candidate_open
                close_token = candidate_close

        if open_idx == -1:
            break

        open_end = open_idx + len(open_token)
        close_idx = find_next_valid_token(raw, close_token, open_end)
        if close_idx == -1:
            idx = open_end
            continue

        close_end = close_idx + len(close_token)
        spans.append(Span(open_idx, close_end, kind, (open_token, close_token)))
        idx = close_end

    return spans


def has_potential_quotes(text: str, pairs: Iterable[QuotePair] = QUOTE_PAIRS) -> bool:
    return bool(text) and any(open_token in text for open_token, _ in pairs)


def _matches_pair(text: str, open_token: str, close_token: str) -> bool:
    return (
        bool(open_token)
        and bool(close_token)
        and text.startswith(open_token)
        and text.endswith(close_token)
        and len(text) >= len(open_token) + len(close_token)
    )


def label_quote(
    quote_text: str,
    *,
    custom_pair: Optional[QuotePair] = None,
    dialogue_pairs: Sequence[QuotePair] = DIALOGUE_QUOTE_PAIRS,
) -> str:
    """
    Categoría de una cita ya materializada, por prioridad:
    custom -> dialogue -> plain.
    """
    trimmed = (quote_text or "").strip()
    if custom_pair is not None and _matches_pair(trimmed, *custom_pair):
        return QUOTE_CUSTOM
    if any(_matches_pair(trimmed, o, c) for o, c in dialogue_pairs):
        return QUOTE_DIALOGUE
    return QUOTE_PLAIN
