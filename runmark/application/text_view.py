"""
===============================================================================
CRC CARD — application/text_view.py
===============================================================================

Componente:
  TextView (snapshot lógico del texto de un root)

Responsabilidades:
  - Concatenar el texto de los fragmentos en orden de documento.
  - Excluir fragmentos bajo ancestros con capacidad "verbatim" (style, script,
    textarea, pre, code) y bajo las exclusiones propias de cada pasada.
  - Acotar largo total y cantidad de fragmentos (soft-fail).
  - Mapear offset global -> (fragmento, offset local) con búsqueda binaria.

Colaboradores:
  - domain/entities.py (Element, Fragment)
  - application/annotator.py (consume segments())
  - crosscutting/metrics.py (caps alcanzados)

Decisiones:
  - Efímero: se reconstruye en cada pasada, nunca se persiste.
  - La exclusión es estructural (ancestros), nunca por inspección de contenido.
===============================================================================
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from ..crosscutting.metrics import record_cap_hit
from ..domain.entities import Element, Fragment, is_verbatim

ExcludePredicate = Callable[[Element], bool]

DEFAULT_MAX_CHARS = 50_000
DEFAULT_MAX_FRAGMENTS = 20_000


@dataclass(frozen=True)
class FragmentSlot:
    """Fragmento incluido y su rango [start, end) en el texto concatenado."""

    fragment: Fragment
    start: int
    end: int


@dataclass(frozen=True)
class FragmentSegment:
    """Porción de un span que cae dentro de un único fragmento (offsets locales)."""

    fragment: Fragment
    local_start: int
    local_end: int

    @property
    def covers_fragment(self) -> bool:
        return self.local_start <= 0 and self.local_end >= len(self.fragment.text)


@dataclass
class TextView:
    text: str
    slots: list[FragmentSlot]
    truncated: bool = False
    _starts: list[int] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if not self._starts:
            self._starts = [slot.start for slot in self.slots]

    @classmethod
    def build(
        cls,
        root: Element,
        *,
        exclude: Optional[ExcludePredicate] = None,
        max_chars: int = DEFAULT_MAX_CHARS,
        max_fragments: int = DEFAULT_MAX_FRAGMENTS,
    ) -> "TextView":
        """
        Construye la vista sobre los fragmentos elegibles de `root`.

        Caps:
          - max_fragments: se dejan de admitir fragmentos al alcanzarlo.
          - max_chars: el fragmento que cruza el límite se incluye entero; los
            siguientes no (no se corta texto a mitad de fragmento).
        """
        parts: list[str] = []
        slots: list[FragmentSlot] = []
        offset = 0
        truncated = False

        for fragment in iter_eligible_fragments(root, exclude=exclude):
            if len(slots) >= max_fragments:
                truncated = True
                record_cap_hit("fragments")
                break
            if offset >= max_chars:
                truncated = True
                record_cap_hit("chars")
                break
            value = fragment.text
            slots.append(FragmentSlot(fragment, offset, offset + len(value)))
            parts.append(value)
            offset += len(value)

        return cls(text="".join(parts), slots=slots, truncated=truncated)

    def __len__(self) -> int:
        return len(self.text)

    @property
    def fragments(self) -> list[Fragment]:
        return [slot.fragment for slot in self.slots]

    def locate(self, offset: int) -> tuple[int, int]:
        """
        Offset global -> (índice de slot, offset local).

        Un offset en el borde entre dos fragmentos se asigna al siguiente.
        """
        if offset < 0 or offset > len(self.text) or not self.slots:
            raise IndexError(f"offset {offset} out of range")
        idx = bisect.bisect_right(self._starts, offset) - 1
        # Saltar slots vacíos no ocurre (fragmentos vacíos se excluyen), salvo el final.
        idx = max(0, min(idx, len(self.slots) - 1))
        slot = self.slots[idx]
        return idx, offset - slot.start

    def segments(self, start: int, end: int) -> list[FragmentSegment]:
        """Parte [start, end) en porciones por fragmento (orden de documento)."""
        if end <= start or not self.slots:
            return []
        out: list[FragmentSegment] = []
        idx = max(0, bisect.bisect_right(self._starts, start) - 1)
        while idx < len(self.slots):
            slot = self.slots[idx]
            if slot.start >= end:
                break
            seg_start = max(slot.start, start) - slot.start
            seg_end = min(slot.end, end) - slot.start
            if seg_end > seg_start:
                out.append(FragmentSegment(slot.fragment, seg_start, seg_end))
            idx += 1
        return out


def iter_eligible_fragments(
    root: Element, *, exclude: Optional[ExcludePredicate] = None
) -> Iterator[Fragment]:
    """
    Fragmentos no vacíos en orden de documento, podando subárboles excluidos.

    Los ancestros del propio root también cuentan (semántica closest()).
    """
    for anc in [root, *root.ancestors()]:
        if is_verbatim(anc) or (exclude is not None and exclude(anc)):
            return

    stack = list(reversed(root.children))
    while stack:
        node = stack.pop()
        if isinstance(node, Fragment):
            if node.text:
                yield node
            continue
        if isinstance(node, Element):
            if is_verbatim(node) or (exclude is not None and exclude(node)):
                continue
            stack.extend(reversed(node.children))
