"""
===============================================================================
USE CASE: Apply Quotes (envolver citas + etiquetarlas)
===============================================================================

Business Goal:
    Convertir cada cita emparejada del texto en un elemento <q> y etiquetar
    todas las <q> (propias o del host) como custom | dialogue | plain, para
    que el host aplique la fuente de diálogo.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    ApplyQuotesUseCase

Responsibilities:
    - Pasada inactiva => quitar <q> propias y etiquetas; olvidar la firma.
    - Firma (largo + cantidad de <q> + <q> etiquetadas) sin cambios => nada.
    - Escanear cada fragmento por separado (una cita nunca cruza fragmentos).
    - Etiquetar por coincidencia exacta de bordes, sin re-escanear texto crudo.

Collaborators:
    - application/quote_spans (find_quote_spans / label_quote)
    - application/text_view.TextView (un slot por fragmento)
    - application/annotator (apply_spans / mark_element / clear_markers)

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Fragmentos dentro de una <q> existente no se escanean.
R2) Opener sin cierre => queda como texto literal.
R3) Prioridad de etiqueta: custom -> dialogue -> plain.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from ...domain.entities import Element
from ...domain.value_objects import QUOTE_LABEL_OWNER, QUOTE_OWNER, Signature, Span
from ..annotator import apply_spans, clear_markers, mark_element
from ..quote_spans import QUOTE_PAIRS, QuotePair, find_quote_spans, label_quote
from ..signatures import SignatureCache, compute_signature
from ..text_view import TextView
from .pass_results import PassResult, PassStatus

logger = logging.getLogger(__name__)

PASS_NAME = "quotes"


def _is_quote(element: Element) -> bool:
    return element.tag == "q"


class ApplyQuotesUseCase:
    def __init__(
        self,
        signatures: SignatureCache,
        *,
        max_chars: int = 50_000,
        max_fragments: int = 20_000,
    ) -> None:
        self._signatures = signatures
        self._max_chars = max_chars
        self._max_fragments = max_fragments

    def execute(
        self,
        root: Element,
        *,
        enabled: bool = True,
        custom_pair: Optional[QuotePair] = None,
        root_id: Optional[str] = None,
    ) -> PassResult:
        if not enabled:
            cleared_labels = clear_markers(root, QUOTE_LABEL_OWNER)
            cleared_quotes = clear_markers(root, QUOTE_OWNER)
            if root_id is not None:
                self._signatures.forget(root_id, PASS_NAME)
            return PassResult.disabled(
                PASS_NAME,
                cleared_labels.unmarked + cleared_quotes.unwrapped,
            )

        if root_id is not None:
            signature = self._signature(root, custom_pair)
            if self._signatures.should_skip(root_id, PASS_NAME, signature):
                return PassResult.skipped(PASS_NAME)

        view = TextView.build(
            root,
            exclude=_is_quote,
            max_chars=self._max_chars,
            max_fragments=self._max_fragments,
        )
        spans: list[Span] = []
        for slot in view.slots:
            for span in find_quote_spans(slot.fragment.text, QUOTE_PAIRS):
                spans.append(
                    Span(slot.start + span.start, slot.start + span.end, span.kind, span.payload)
                )
        applied = apply_spans(view, spans, QUOTE_OWNER, mark_units=False)

        labeled = 0
        for q in root.find_all(_is_quote):
            mark_element(
                q,
                QUOTE_LABEL_OWNER,
                label_quote(q.text_content(), custom_pair=custom_pair),
            )
            labeled += 1

        if root_id is not None:
            self._signatures.record(root_id, PASS_NAME, self._signature(root, custom_pair))

        return PassResult(
            pass_name=PASS_NAME,
            status=PassStatus.APPLIED,
            spans=len(spans),
            wrapped=applied.wrapped,
            marked=labeled,
            capped=view.truncated,
        )

    @staticmethod
    def _signature(root: Element, custom_pair: Optional[QuotePair]) -> Signature:
        quotes = root.find_all(_is_quote)
        labeled = sum(1 for q in quotes if q.has(QUOTE_LABEL_OWNER.attr))
        base = compute_signature(
            root, config={"custom_pair": list(custom_pair or ())}
        )
        return Signature(
            config=base.config,
            length=base.length,
            token_counts=(len(quotes), labeled),
        )
