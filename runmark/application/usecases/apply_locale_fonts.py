"""
===============================================================================
USE CASE: Apply Locale Fonts (pasada por script/locale)
===============================================================================

Business Goal:
    Etiquetar cada run de texto con la categoría de script activa (latin, cjk,
    digits, ...) para que el host aplique la fuente configurada por categoría.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    ApplyLocaleFontsUseCase

Responsibilities:
    - Sin reglas activas => limpiar marcadores propios y olvidar la firma.
    - Firma (reglas + largo + marcadores) sin cambios => cero trabajo.
    - Clasificar el texto concatenado en runs y materializarlos.
    - Respetar la cota total de operaciones de wrap por pasada.

Collaborators:
    - application/locale_classifier.classify_locale_runs
    - application/text_view.TextView
    - application/annotator (apply_spans / clear_markers)
    - application/signatures.SignatureCache

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Se excluyen: verbatim, marcadores de la pasada custom, wrappers de locale.
R2) Unidades typewriter atómicas se marcan en el lugar (no se envuelven).
R3) Cota max_locale_wraps: al alcanzarse se corta en silencio.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from ...crosscutting.metrics import record_cap_hit
from ...domain.entities import Element
from ...domain.services import TextSegmenterPort
from ...domain.value_objects import CUSTOM_OWNER, LOCALE_OWNER, Signature
from ..annotator import apply_spans, clear_markers
from ..locale_classifier import classify_locale_runs
from ..signatures import SignatureCache, compute_signature
from ..text_view import TextView
from .pass_results import PassResult, PassStatus

logger = logging.getLogger(__name__)

PASS_NAME = "locale"


def _excluded(element: Element) -> bool:
    if element.has(CUSTOM_OWNER.attr):
        return True
    return element.get(LOCALE_OWNER.attr) == "wrap"


class ApplyLocaleFontsUseCase:
    def __init__(
        self,
        signatures: SignatureCache,
        segmenter: TextSegmenterPort,
        *,
        max_wraps: int = 12_000,
        max_chars: int = 50_000,
        max_fragments: int = 20_000,
    ) -> None:
        self._signatures = signatures
        self._segmenter = segmenter
        self._max_wraps = max_wraps
        self._max_chars = max_chars
        self._max_fragments = max_fragments

    def execute(
        self,
        root: Element,
        *,
        fonts: Mapping[str, str],
        root_id: Optional[str] = None,
    ) -> PassResult:
        active_keys = frozenset(key for key, font in fonts.items() if font)

        if not active_keys:
            cleared = clear_markers(root, LOCALE_OWNER)
            if root_id is not None:
                self._signatures.forget(root_id, PASS_NAME)
            return PassResult.disabled(PASS_NAME, cleared.unwrapped + cleared.unmarked)

        rules = {key: fonts[key] for key in sorted(active_keys)}
        if root_id is not None:
            signature = self._signature(root, rules)
            if self._signatures.should_skip(root_id, PASS_NAME, signature):
                return PassResult.skipped(PASS_NAME)

        cleared = clear_markers(root, LOCALE_OWNER)
        view = TextView.build(
            root,
            exclude=_excluded,
            max_chars=self._max_chars,
            max_fragments=self._max_fragments,
        )
        runs = classify_locale_runs(view.text, active_keys, self._segmenter)
        applied = apply_spans(view, runs.spans, LOCALE_OWNER, max_ops=self._max_wraps)
        if applied.capped:
            record_cap_hit("locale_wraps")
            logger.warning(
                "locale wrap cap reached", extra={"max_wraps": self._max_wraps}
            )

        if root_id is not None:
            self._signatures.record(root_id, PASS_NAME, self._signature(root, rules))

        return PassResult(
            pass_name=PASS_NAME,
            status=PassStatus.APPLIED,
            spans=len(runs.spans),
            wrapped=applied.wrapped,
            marked=applied.marked,
            cleared=cleared.unwrapped + cleared.unmarked,
            capped=applied.capped or view.truncated,
        )

    @staticmethod
    def _signature(root: Element, rules: Mapping[str, str]) -> Signature:
        return compute_signature(root, config=dict(rules), owners=(LOCALE_OWNER,))
