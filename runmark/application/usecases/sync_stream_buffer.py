"""
===============================================================================
USE CASE: Sync Stream Buffer (modo buffered)
===============================================================================

Business Goal:
    Mantener un buffer visible que refleja el contenido en streaming de un
    root, con cada unidad nueva marcada para animarse escalonadamente, sin
    reconstruir el buffer entero en cada token.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    SyncStreamBufferUseCase

Responsibilities:
    - Huella de la fuente "{len}:{ord(último)}" sobre su markup; mismo modo y
      misma huella => cero trabajo (también sin animación).
    - Base de novedad = conteo persistido si el modo no cambió; si no, 0.
    - Copia -> pasadas de anotación (sin typewriter) -> segmentación (sólo si
      hay granularidad) -> reconciliación mínima -> persistir conteo/modo/huella.

Collaborators:
    - application/stream_segmenter.StreamSegmenter
    - application/reconcile.reconcile
    - container.AnnotationEngine (callback de anotación)

-------------------------------------------------------------------------------
FLOW
-------------------------------------------------------------------------------
1) modo = granularidad | "none"; sig igual y modo igual -> skipped.
2) base_index = seg-count previo (mismo modo) | 0.
3) target = clone(source); annotate(target).
4) granularidad -> materialize(target, base_index); "none" -> sin unidades.
5) reconcile(buffer, target); persistir seg-count, seg-mode, src-sig.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

from ...domain.entities import Element
from ...domain.services import TextSegmenterPort
from ...domain.value_objects import (
    SEGMENT_COUNT_ATTR,
    SEGMENT_MODE_ATTR,
    SOURCE_SIG_ATTR,
    StreamSyncResult,
)
from ..reconcile import reconcile
from ..stream_segmenter import StreamSegmenter

logger = logging.getLogger(__name__)

PASS_NAME = "stream"
NO_ANIMATION_MODE = "none"


def source_fingerprint(markup: str) -> str:
    return f"{len(markup)}:{ord(markup[-1]) if markup else 0}"


def _parse_count(value: str | None) -> int:
    try:
        return max(0, int(value or 0))
    except ValueError:
        return 0


class SyncStreamBufferUseCase:
    def __init__(
        self,
        segmenters: Mapping[str, TextSegmenterPort],
        annotate: Callable[[Element], None],
        *,
        max_units: int = 20_000,
    ) -> None:
        self._segmenters = segmenters
        self._annotate = annotate
        self._max_units = max_units

    def execute(
        self, source: Element, buffer: Element, *, granularity: Optional[str]
    ) -> StreamSyncResult:
        """
        Sincroniza `buffer` con `source`.

        granularity: "grapheme" | "word" para animar unidades nuevas; None copia
        la fuente anotada sin segmentar.
        """
        mode = granularity or NO_ANIMATION_MODE
        next_sig = source_fingerprint(source.inner_markup())
        prev_mode = buffer.get(SEGMENT_MODE_ATTR, "")
        prev_sig = buffer.get(SOURCE_SIG_ATTR, "")
        prev_count = _parse_count(buffer.get(SEGMENT_COUNT_ATTR))

        if prev_mode == mode and prev_sig == next_sig:
            return StreamSyncResult(total_units=prev_count, new_units=0, skipped=True)

        base_index = prev_count if prev_mode == mode else 0

        target = source.clone(deep=True)
        self._annotate(target)
        total_units = new_units = 0
        if granularity is not None:
            segmenter = StreamSegmenter(self._segmenters[granularity], max_units=self._max_units)
            segmented = segmenter.materialize(target, base_index)
            total_units, new_units = segmented.total_units, segmented.new_units

        stats = reconcile(buffer, target)
        buffer.set(SEGMENT_COUNT_ATTR, str(total_units))
        buffer.set(SEGMENT_MODE_ATTR, mode)
        buffer.set(SOURCE_SIG_ATTR, next_sig)

        logger.debug(
            "stream buffer synced",
            extra={
                "mode": mode,
                "base_index": base_index,
                "total_units": total_units,
                "new_units": new_units,
                "ops": stats.total,
            },
        )
        return StreamSyncResult(
            total_units=total_units,
            new_units=new_units,
            inserted=stats.inserted,
            updated=stats.updated,
            removed=stats.removed,
        )
