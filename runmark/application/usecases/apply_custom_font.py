"""
===============================================================================
USE CASE: Apply Custom Font (pasada de delimitadores)
===============================================================================

Business Goal:
    Marcar como "custom" cada rango [open ... close] del texto visible de un
    root, para que el host le aplique una fuente independiente.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    ApplyCustomFontUseCase

Responsibilities:
    - Pasada inactiva => limpiar marcadores propios y olvidar la firma.
    - Firma sin cambios => cero trabajo.
    - Limpiar, construir el TextView, ubicar rangos y materializarlos.
    - Registrar la firma POST-mutación.

Collaborators:
    - application/signatures.SignatureCache
    - application/text_view.TextView
    - application/delimiter_spans.find_delimited_spans
    - application/annotator (apply_spans / clear_markers)

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Tokens vacíos (tras trim) o pasada deshabilitada => inactiva.
R2) Los rangos pueden cruzar fragmentos; se parten por fragmento.
R3) Un rango que cubre una unidad typewriter entera se marca en el lugar.
R4) Cota de spans por pasada (soft-fail).
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from ...domain.entities import Element
from ...domain.value_objects import CUSTOM_OWNER, Signature
from ..annotator import apply_spans, clear_markers
from ..delimiter_spans import find_delimited_spans
from ..signatures import SignatureCache, compute_signature
from ..text_view import TextView
from .pass_results import PassResult, PassStatus

logger = logging.getLogger(__name__)

PASS_NAME = "custom"


def _excluded(element: Element) -> bool:
    return element.has(CUSTOM_OWNER.attr)


class ApplyCustomFontUseCase:
    def __init__(
        self,
        signatures: SignatureCache,
        *,
        max_spans: int = 200,
        max_chars: int = 50_000,
        max_fragments: int = 20_000,
    ) -> None:
        self._signatures = signatures
        self._max_spans = max_spans
        self._max_chars = max_chars
        self._max_fragments = max_fragments

    def execute(
        self,
        root: Element,
        *,
        open_token: str,
        close_token: str,
        enabled: bool = True,
        root_id: Optional[str] = None,
    ) -> PassResult:
        open_token = (open_token or "").strip()
        close_token = (close_token or "").strip()

        if not (enabled and open_token and close_token):
            cleared = clear_markers(root, CUSTOM_OWNER)
            if root_id is not None:
                self._signatures.forget(root_id, PASS_NAME)
            return PassResult.disabled(PASS_NAME, cleared.unwrapped + cleared.unmarked)

        if root_id is not None:
            signature = self._signature(root, open_token, close_token)
            if self._signatures.should_skip(root_id, PASS_NAME, signature):
                return PassResult.skipped(PASS_NAME)

        cleared = clear_markers(root, CUSTOM_OWNER)
        view = TextView.build(
            root,
            exclude=_excluded,
            max_chars=self._max_chars,
            max_fragments=self._max_fragments,
        )
        spans = find_delimited_spans(
            view.text, open_token, close_token, kind=PASS_NAME, max_spans=self._max_spans
        )
        applied = apply_spans(view, spans, CUSTOM_OWNER)

        if root_id is not None:
            self._signatures.record(
                root_id, PASS_NAME, self._signature(root, open_token, close_token)
            )

        logger.debug(
            "custom pass applied",
            extra={"spans": len(spans), "wrapped": applied.wrapped, "marked": applied.marked},
        )
        return PassResult(
            pass_name=PASS_NAME,
            status=PassStatus.APPLIED,
            spans=len(spans),
            wrapped=applied.wrapped,
            marked=applied.marked,
            cleared=cleared.unwrapped + cleared.unmarked,
            capped=view.truncated or len(spans) >= self._max_spans,
        )

    @staticmethod
    def _signature(root: Element, open_token: str, close_token: str) -> Signature:
        return compute_signature(
            root,
            config={"open": open_token, "close": close_token},
            tokens=(open_token, close_token),
            owners=(CUSTOM_OWNER,),
        )
