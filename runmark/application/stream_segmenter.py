"""
===============================================================================
CRC CARD — application/stream_segmenter.py
===============================================================================

Componente:
  StreamSegmenter (unidades de animación para contenido en streaming)

Responsabilidades:
  - Segmentar texto en unidades (grapheme para typewriter, word para el resto).
  - Asignar ordinales estables: solo las unidades no vacías avanzan el ordinal.
  - Distinguir unidades ya emitidas (ordinal < base_index) de las nuevas.
  - Materializar las unidades como span[data-runmark-seg] sobre un árbol objetivo.

Colaboradores:
  - domain/services.TextSegmenterPort
  - application/annotator.py (isolate_range + wrap_node)
  - application/usecases/sync_stream_buffer.py

Decisiones:
  - Solo unidades contadas (no vacías) en/después del borde son "nuevas".
  - Saltos de línea quedan como texto plano y no son unidades.
  - Fragmentos solo-whitespace, contenedores verbatim y segmentos ya existentes
    no se segmentan.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..crosscutting.metrics import record_cap_hit
from ..domain.entities import Element, Fragment, is_verbatim
from ..domain.services import TextSegmenterPort
from ..domain.value_objects import SEGMENT_NEW_ATTR, SEGMENT_OWNER, StreamUnit
from .annotator import isolate_range, wrap_node

_LINE_BREAKS = frozenset({"\n", "\r", "\r\n"})


@dataclass(frozen=True)
class SegmentationResult:
    total_units: int
    new_units: int
    capped: bool = False


def _plan_units(
    text: str,
    segmenter: TextSegmenterPort,
    base_index: int,
    start_ordinal: int,
) -> Iterator[tuple[int, int, StreamUnit]]:
    ordinal = start_ordinal
    for piece, start, end in segmenter.segments(text or ""):
        if piece in _LINE_BREAKS:
            continue
        counted = bool(piece.strip())
        yield start, end, StreamUnit(
            text=piece,
            ordinal=ordinal,
            is_new=counted and ordinal >= base_index,
            counted=counted,
        )
        if counted:
            ordinal += 1


def segment_stream_units(
    text: str,
    segmenter: TextSegmenterPort,
    base_index: int = 0,
    *,
    start_ordinal: int = 0,
) -> list[StreamUnit]:
    """
    Unidades de `text` en orden. La granularidad la define el segmentador.

    Ejemplo (word): 5 palabras emitidas + 2 nuevas con base_index=5
    => 7 unidades contadas, 2 con is_new=True.
    """
    return [unit for _, _, unit in _plan_units(text, segmenter, base_index, start_ordinal)]


def count_stream_units(text: str, segmenter: TextSegmenterPort) -> int:
    return sum(1 for unit in segment_stream_units(text, segmenter) if unit.counted)


class StreamSegmenter:
    def __init__(self, segmenter: TextSegmenterPort, *, max_units: int = 20_000) -> None:
        self._segmenter = segmenter
        self._max_units = max_units

    @property
    def granularity(self) -> str:
        return self._segmenter.granularity

    def materialize(self, root: Element, base_index: int = 0) -> SegmentationResult:
        """
        Envuelve cada unidad en span[data-runmark-seg] con seg-i relativo al
        borde (max(0, ordinal - base)) y seg-new="1" en las nuevas.

        Al alcanzar max_units se deja de envolver; el conteo sigue.
        """
        ordinal = 0
        new_units = 0
        wrapped = 0
        capped = False

        for fragment in list(self._eligible_fragments(root)):
            planned = list(_plan_units(fragment.text, self._segmenter, base_index, ordinal))
            for _, _, unit in planned:
                if unit.counted:
                    ordinal += 1
                if unit.is_new:
                    new_units += 1

            if wrapped + len(planned) > self._max_units:
                if not capped:
                    record_cap_hit("stream_units")
                capped = True
                planned = planned[: max(0, self._max_units - wrapped)]
            wrapped += len(planned)

            for start, end, unit in reversed(planned):
                piece = isolate_range(fragment, start, end)
                wrapper = wrap_node(
                    piece, SEGMENT_OWNER, str(max(0, unit.ordinal - base_index))
                )
                if unit.is_new:
                    wrapper.set(SEGMENT_NEW_ATTR, "1")

        return SegmentationResult(total_units=ordinal, new_units=new_units, capped=capped)

    def _eligible_fragments(self, root: Element) -> Iterator[Fragment]:
        for fragment in root.iter_fragments():
            if not fragment.text.strip():
                continue
            parent = fragment.parent
            if parent is None:
                continue
            if parent.closest(is_verbatim) is not None:
                continue
            if parent.closest(lambda el: el.has(SEGMENT_OWNER.attr)) is not None:
                continue
            yield fragment
