"""
===============================================================================
CRC CARD — application/typewriter.py
===============================================================================

Componente:
  TypewriterUnitizer (unidades atómicas por grapheme)

Responsabilidades:
  - Convertir cada grapheme de los contenedores con capacidad typewriter en una
    unidad atómica (span[data-runmark-unit]) con su ordinal.
  - Reservar dos ordinales por cada <q> (apertura y cierre).
  - Persistir el conteo emitido (data-runmark-tw-count) y encadenar el inicio
    de cada contenedor (data-runmark-tw-start = suma previa × step_ms).
  - Recontar en lugar de reconstruir; reconstruir solo si el contenido fue
    reemplazado después de procesarse.

Colaboradores:
  - application/annotator.py (split + wrap; única vía de mutación)
  - domain/services.TextSegmenterPort (graphemes o fallback por code point)
  - container.AnnotationEngine (solo roots que no están en streaming)

Decisiones:
  - Saltos de línea (\\n, \\r, \\r\\n) quedan como texto plano: no se borra nada.
  - Unidades en blanco se envuelven pero no avanzan el ordinal.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..domain.entities import Element, Fragment, is_verbatim
from ..domain.services import TextSegmenterPort
from ..domain.value_objects import (
    QUOTE_CLOSE_INDEX_ATTR,
    QUOTE_OPEN_INDEX_ATTR,
    TYPEWRITER_ATTR,
    TYPEWRITER_COUNT_ATTR,
    TYPEWRITER_START_ATTR,
    UNIT_OWNER,
)
from .annotator import clear_markers, isolate_range, wrap_node

_LINE_BREAKS = frozenset({"\n", "\r", "\r\n"})


@dataclass(frozen=True)
class TypewriterContainer:
    element: Element
    count: int
    start_ms: int
    rebuilt: bool = False


def is_typewriter_container(element: Element) -> bool:
    return element.get(TYPEWRITER_ATTR) == "1"


def find_typewriter_containers(root: Element) -> list[Element]:
    found = [root] if is_typewriter_container(root) else []
    found.extend(
        el
        for el in root.find_all(is_typewriter_container)
        if el.closest(is_verbatim) is None
    )
    # Un contenedor anidado en otro ya queda cubierto por el externo.
    return [
        el
        for el in found
        if not any(other is not el and el.is_descendant_of(other) for other in found)
    ]


def count_emitted_units(container: Element) -> int:
    """Unidades no vacías + dos por cada <q>."""
    units = container.find_all(lambda el: el.has(UNIT_OWNER.attr))
    counted = sum(1 for unit in units if unit.text_content().strip())
    quotes = len(container.find_all(lambda el: el.tag == "q"))
    return counted + quotes * 2


def _has_plain_text(container: Element) -> bool:
    return bool(container.text_content().strip())


class _Ordinal:
    def __init__(self) -> None:
        self.value = 0


class TypewriterUnitizer:
    def __init__(self, segmenter: TextSegmenterPort) -> None:
        self._segmenter = segmenter

    def ensure_processed(self, container: Element) -> tuple[int, bool]:
        """
        Devuelve (conteo emitido, reconstruido).

        Un contenedor ya procesado se recuenta; si el recuento da 0 pero hay
        texto, el contenido fue reemplazado y se reconstruye.
        """
        if container.has(TYPEWRITER_COUNT_ATTR):
            existing = count_emitted_units(container)
            if existing > 0 or not _has_plain_text(container):
                container.set(TYPEWRITER_COUNT_ATTR, str(existing))
                return existing, False
            clear_markers(container, UNIT_OWNER)
            container.remove(TYPEWRITER_COUNT_ATTR)

        ordinal = _Ordinal()
        self._unitize_children(container, ordinal)
        container.set(TYPEWRITER_COUNT_ATTR, str(ordinal.value))
        return ordinal.value, True

    def process(self, root: Element, *, step_ms: int) -> list[TypewriterContainer]:
        """Procesa los contenedores de `root` en orden y encadena sus inicios."""
        out: list[TypewriterContainer] = []
        offset_ms = 0
        for container in find_typewriter_containers(root):
            container.set(TYPEWRITER_START_ATTR, f"{max(0, offset_ms)}ms")
            count, rebuilt = self.ensure_processed(container)
            out.append(TypewriterContainer(container, count, offset_ms, rebuilt))
            offset_ms += count * step_ms
        return out

    # -------------------------------------------------------------------------
    # Recorrido
    # -------------------------------------------------------------------------
    def _unitize_children(self, element: Element, ordinal: _Ordinal) -> None:
        for child in list(element.children):
            if isinstance(child, Fragment):
                self._unitize_fragment(child, ordinal)
            elif isinstance(child, Element):
                self._unitize_element(child, ordinal)

    def _unitize_element(self, element: Element, ordinal: _Ordinal) -> None:
        if is_verbatim(element) or element.tag == "br":
            return
        if element.tag == "q":
            element.set(QUOTE_OPEN_INDEX_ATTR, str(ordinal.value))
            ordinal.value += 1
            self._unitize_children(element, ordinal)
            element.set(QUOTE_CLOSE_INDEX_ATTR, str(ordinal.value))
            ordinal.value += 1
            return
        self._unitize_children(element, ordinal)

    def _unitize_fragment(self, fragment: Fragment, ordinal: _Ordinal) -> None:
        planned: list[tuple[int, int, int]] = []
        for piece, start, end in self._segmenter.segments(fragment.text):
            if piece in _LINE_BREAKS:
                continue
            planned.append((start, end, ordinal.value))
            if piece.strip():
                ordinal.value += 1

        # Reverso: la pieza izquierda conserva identidad y offsets válidos.
        for start, end, index in reversed(planned):
            piece = isolate_range(fragment, start, end)
            wrap_node(piece, UNIT_OWNER, str(index))


def chained_start_offsets(counts: Iterable[int], step_ms: int) -> list[int]:
    """start_ms de cada contenedor = suma de conteos previos × step_ms."""
    offsets: list[int] = []
    total = 0
    for count in counts:
        offsets.append(total * step_ms)
        total += max(0, count)
    return offsets
