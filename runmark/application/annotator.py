"""
===============================================================================
CRC CARD — application/annotator.py
===============================================================================

Componente:
  Annotator (materializar spans como marcadores y revertirlos)

Responsabilidades:
  - Partir fragmentos en los bordes de cada span sin perder ni duplicar texto.
  - Envolver la pieza central en un wrapper propio (kind=wrap) o marcar en el
    lugar una unidad atómica existente (kind=mark).
  - Limpiar exactamente los marcadores de un owner: wrap -> unwrap + re-fusión
    de las piezas partidas; mark -> quitar atributos, conservar el nodo.

Colaboradores:
  - application/text_view.py (TextView.segments)
  - domain/entities.py (primitivas de hijos/atributos)
  - domain/value_objects.py (MarkerOwner, MarkerKind, UNIT_OWNER)

Decisiones:
  - Orden inverso dentro de cada fragmento: los splits posteriores no invalidan
    los offsets anteriores (la pieza izquierda conserva identidad).
  - Único componente del motor que muta el árbol.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..crosscutting.exceptions import TreeStructureError
from ..domain.entities import Element, Fragment, Node
from ..domain.value_objects import UNIT_OWNER, MarkerKind, MarkerOwner, Span
from .text_view import TextView


@dataclass(frozen=True)
class ApplyResult:
    wrapped: int = 0
    marked: int = 0
    capped: bool = False

    @property
    def total(self) -> int:
        return self.wrapped + self.marked


@dataclass(frozen=True)
class ClearResult:
    unwrapped: int = 0
    unmarked: int = 0
    merged: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.unwrapped or self.unmarked or self.merged)


# =============================================================================
# Primitivas
# =============================================================================


def split_fragment(fragment: Fragment, offset: int) -> Fragment:
    """
    Parte `fragment` en `offset`; devuelve la pieza derecha (nueva).

    Invariante: len(izq) + len(der) == len(original).
    """
    value = fragment.text
    if offset <= 0 or offset >= len(value):
        raise TreeStructureError(
            f"split offset {offset} out of range for fragment of length {len(value)}"
        )
    parent = fragment.parent
    if parent is None:
        raise TreeStructureError(f"fragment {fragment.id} is detached")

    idx = fragment.index_in_parent()
    right = fragment.document.text(value[offset:])
    right.engine_split = True
    fragment.set_text(value[:offset])
    parent.insert(idx + 1, right)
    return right


def isolate_range(fragment: Fragment, start: int, end: int) -> Fragment:
    """Deja [start, end) en un fragmento propio y lo devuelve."""
    length = len(fragment.text)
    start = max(0, min(length, start))
    end = max(0, min(length, end))
    if end <= start:
        raise TreeStructureError(f"empty range [{start}, {end}) on fragment {fragment.id}")

    if end < length:
        split_fragment(fragment, end)
    if start > 0:
        return split_fragment(fragment, start)
    return fragment


def wrap_node(node: Node, owner: MarkerOwner, category: Optional[str] = None) -> Element:
    parent = node.parent
    if parent is None:
        raise TreeStructureError(f"node {node.id} is detached")
    attrs = {owner.attr: MarkerKind.WRAP.value}
    if owner.tag_attr and category is not None:
        attrs[owner.tag_attr] = category
    wrapper = node.document.element(owner.wrapper_tag, attrs)
    parent.insert(node.index_in_parent(), wrapper)
    wrapper.append(node)
    return wrapper


def mark_element(element: Element, owner: MarkerOwner, category: Optional[str] = None) -> None:
    element.set(owner.attr, MarkerKind.MARK.value)
    if owner.tag_attr and category is not None:
        element.set(owner.tag_attr, category)


def unmark_element(element: Element, owner: MarkerOwner) -> None:
    element.remove(owner.attr)
    if owner.tag_attr:
        element.remove(owner.tag_attr)


def unwrap_element(element: Element) -> list[Node]:
    """Reemplaza el wrapper por sus hijos, en su misma posición."""
    parent = element.parent
    if parent is None:
        raise TreeStructureError(f"element {element.id} is detached")
    idx = element.index_in_parent()
    children = list(element.children)
    parent.remove_child(element)
    for offset, child in enumerate(children):
        parent.insert(idx + offset, child)
    return children


def merge_split_fragments(parent: Element) -> int:
    """Re-fusiona piezas nacidas de un split con su fragmento vecino izquierdo."""
    merged = 0
    i = 1
    while i < len(parent.children):
        node = parent.children[i]
        prev = parent.children[i - 1]
        if (
            isinstance(node, Fragment)
            and node.engine_split
            and isinstance(prev, Fragment)
        ):
            prev.set_text(prev.text + node.text)
            parent.remove_child(node)
            merged += 1
            continue
        i += 1
    return merged


def atomic_unit_of(fragment: Fragment) -> Optional[Element]:
    """Unidad atómica (typewriter) que contiene exactamente a este fragmento."""
    parent = fragment.parent
    if parent is None or not parent.has(UNIT_OWNER.attr):
        return None
    if len(parent.children) != 1:
        return None
    return parent


# =============================================================================
# Apply / Clear
# =============================================================================


def apply_spans(
    view: TextView,
    spans: Iterable[Span],
    owner: MarkerOwner,
    *,
    max_ops: Optional[int] = None,
    mark_units: bool = True,
) -> ApplyResult:
    """
    Materializa spans (ordenados, sin solape) sobre los fragmentos de la vista.

    - Cada span se parte en porciones por fragmento.
    - Porción que cubre un fragmento entero dentro de una unidad atómica =>
      se marca la unidad (kind=mark) en lugar de envolver.
    - max_ops corta en silencio al alcanzarse (soft-fail).
    """
    by_fragment: dict[int, tuple[Fragment, list[tuple[int, int, str]]]] = {}
    for span in spans:
        for seg in view.segments(span.start, span.end):
            entry = by_fragment.setdefault(seg.fragment.id, (seg.fragment, []))
            entry[1].append((seg.local_start, seg.local_end, span.kind))

    wrapped = 0
    marked = 0
    for fragment, segments in by_fragment.values():
        ordered = sorted(segments, key=lambda s: (s[0], s[1]), reverse=True)
        full_len = len(fragment.text)
        for start, end, category in ordered:
            if max_ops is not None and wrapped + marked >= max_ops:
                return ApplyResult(wrapped=wrapped, marked=marked, capped=True)
            if end <= start:
                continue
            if mark_units and start <= 0 and end >= full_len:
                unit = atomic_unit_of(fragment)
                if unit is not None:
                    mark_element(unit, owner, category)
                    marked += 1
                    continue
            middle = isolate_range(fragment, start, end)
            wrap_node(middle, owner, category)
            wrapped += 1

    return ApplyResult(wrapped=wrapped, marked=marked)


def clear_markers(root: Element, owner: MarkerOwner) -> ClearResult:
    """
    Quita solo los marcadores de `owner` bajo `root`. Idempotente.
    """
    owned = root.find_all(lambda el: el.has(owner.attr))
    if not owned:
        return ClearResult()

    unwrapped = 0
    unmarked = 0
    touched_parents: dict[int, Element] = {}

    # Reverso: los wrappers más profundos/últimos primero.
    for el in reversed(owned):
        kind = el.get(owner.attr)
        if kind == MarkerKind.WRAP.value and el.parent is not None:
            parent = el.parent
            unwrap_element(el)
            touched_parents[parent.id] = parent
            unwrapped += 1
        else:
            unmark_element(el, owner)
            unmarked += 1

    merged = 0
    for parent in touched_parents.values():
        merged += merge_split_fragments(parent)

    return ClearResult(unwrapped=unwrapped, unmarked=unmarked, merged=merged)


def count_markers(root: Element, owner: MarkerOwner) -> int:
    return sum(
        1
        for node in root.iter_descendants()
        if isinstance(node, Element) and node.has(owner.attr)
    )
