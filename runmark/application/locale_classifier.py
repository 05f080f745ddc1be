"""
===============================================================================
CRC CARD — application/locale_classifier.py
===============================================================================

Componente:
  LocaleClassifier

Responsabilidades:
  - Asignar a cada grapheme cluster una categoría (range-key) por tablas fijas.
  - Fusionar clusters consecutivos de igual categoría en runs.
  - Arrastrar la última categoría entre fragmentos/pasadas (carry key).

Colaboradores:
  - domain/locale_ranges.py (tablas y prioridad)
  - domain/services.TextSegmenterPort (clusters o fallback por code point)
  - application/usecases/apply_locale_fonts.py

Reglas de clasificación (en orden):
  1. Clusters solo-whitespace heredan la categoría previa (fijo, no configurable).
  2. Primer code point significativo (saltea combinantes, selectores, ZWJ).
  3. digits -> punctuation -> emoji: se asignan solo si están activos; si no,
     son neutrales y heredan la previa.
  4. Scripts activos según LOCALE_KEY_PRIORITY.
  5. Sin coincidencia: "" (no produce run).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Optional

from ..domain.locale_ranges import (
    COMBINING_RANGES,
    LOCALE_KEY_PRIORITY,
    NEUTRAL_KEYS,
    UNICODE_RANGES,
)
from ..domain.services import TextSegmenterPort
from ..domain.value_objects import Span


@dataclass(frozen=True)
class LocaleRuns:
    spans: list[Span]
    last_key: str


def is_combining_or_variation(code_point: int) -> bool:
    for start, end in COMBINING_RANGES:
        if start <= code_point <= end:
            return True
    return False


def first_significant_code_point(cluster: str) -> Optional[int]:
    for ch in cluster or "":
        cp = ord(ch)
        if is_combining_or_variation(cp):
            continue
        return cp
    return None


def locale_key_for_cluster(
    cluster: str, active_keys: AbstractSet[str], prev_key: str = ""
) -> str:
    """Categoría de un cluster (ver reglas en el módulo)."""
    prev = prev_key or ""
    if not cluster or not cluster.strip():
        return prev

    cp = first_significant_code_point(cluster)
    if cp is None:
        return prev

    for key in NEUTRAL_KEYS:
        if UNICODE_RANGES[key].contains(cp):
            return key if key in active_keys else prev

    for key in LOCALE_KEY_PRIORITY:
        if key in NEUTRAL_KEYS or key not in active_keys:
            continue
        if UNICODE_RANGES[key].contains(cp):
            return key

    return ""


def classify_locale_runs(
    text: str,
    active_keys: AbstractSet[str],
    segmenter: TextSegmenterPort,
    *,
    prev_key: str = "",
) -> LocaleRuns:
    """
    Runs [start, end) con categoría no vacía sobre `text`.

    Devuelve también la última categoría asignada para sembrar la siguiente
    llamada (otro fragmento u otra pasada).
    """
    raw = text or ""
    if not raw:
        return LocaleRuns(spans=[], last_key=prev_key or "")

    spans: list[Span] = []
    prev = prev_key or ""
    run_key: Optional[str] = None
    run_start = 0

    for cluster, start, _end in segmenter.segments(raw):
        key = locale_key_for_cluster(cluster, active_keys, prev)
        if run_key is None:
            run_key = key
            run_start = start
        elif key != run_key:
            if run_key:
                spans.append(Span(run_start, start, run_key))
            run_key = key
            run_start = start
        prev = key

    if run_key and run_start < len(raw):
        spans.append(Span(run_start, len(raw), run_key))

    return LocaleRuns(spans=spans, last_key=prev)
