"""
===============================================================================
CRC CARD — application/delimiter_spans.py
===============================================================================

Componente:
  DelimiterSpanFinder

Responsabilidades:
  - Ubicar rangos [openStart, closeEnd) de pares open/close no solapados.
  - Greedy leftmost-first, con cota de spans para inputs patológicos.

Colaboradores:
  - application/usecases/apply_custom_font.py
  - domain/value_objects.Span

Decisiones:
  - Un opener sin cierre se abandona en silencio: se reanuda el escaneo justo
    después del token de apertura (no se reintenta, no es error).
  - Tokens vacíos => sin spans.
===============================================================================
"""

from __future__ import annotations

from typing import Final

from ..crosscutting.metrics import record_cap_hit
from ..domain.value_objects import Span

DEFAULT_MAX_SPANS: Final[int] = 200


def find_delimited_spans(
    text: str,
    open_token: str,
    close_token: str,
    *,
    kind: str = "custom",
    max_spans: int = DEFAULT_MAX_SPANS,
) -> list[Span]:
    raw = text or ""
    if not raw or not open_token or not close_token:
        return []
    if max_spans <= 0:
        raise ValueError(f"max_spans debe ser > 0. got={max_spans}")

    spans: list[Span] = []
    open_len = len(open_token)
    close_len = len(close_token)
    idx = 0

    while idx < len(raw):
        if len(spans) >= max_spans:
            if raw.find(open_token, idx) != -1:
                record_cap_hit("spans")
            break

        open_idx = raw.find(open_token, idx)
        if open_idx == -1:
            break

        search_from = open_idx + open_len
        close_idx = raw.find(close_token, search_from)
        if close_idx == -1:
            idx = search_from
            continue

        spans.append(Span(open_idx, close_idx + close_len, kind))
        idx = close_idx + close_len

    return spans


def count_occurrences(text: str, token: str, *, limit: int = 50) -> int:
    """Ocurrencias no solapadas de token, acotadas a `limit` (para firmas)."""
    if not text or not token:
        return 0
    count = 0
    idx = 0
    while count < limit:
        idx = text.find(token, idx)
        if idx == -1:
            break
        count += 1
        idx += len(token)
    return count
