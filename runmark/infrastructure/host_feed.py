"""
===============================================================================
CRC CARD — infrastructure/host_feed.py
===============================================================================

Componente:
  DocumentChangeFeed (adaptador de mutaciones del host -> ChangeBatch)

Responsabilidades:
  - Suscribirse a las mutaciones registradas por el Document.
  - Resolver qué roots registrados contienen (o están contenidos en) el nodo
    mutado.
  - Empujar un ChangeBatch dirigido al scheduler.

Colaboradores:
  - domain/entities.Document (subscribe / MutationRecord)
  - application/scheduler.ScanScheduler (notify)
  - container.AnnotationEngine (registro de roots)

Notas:
  - Mutaciones de nodos fuera de cualquier root se ignoran.
  - El feed no filtra mutaciones propias del motor: el scheduler las suprime
    mientras hay una pasada en curso.
===============================================================================
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

from ..domain.entities import Document, Element, MutationRecord, Node
from ..domain.value_objects import ChangeBatch


class DocumentChangeFeed:
    def __init__(
        self,
        document: Document,
        roots: Mapping[int, str],
        sink: Callable[[ChangeBatch], None],
    ) -> None:
        """
        roots: node id del root -> root_id estable (vista viva del registro).
        """
        self._document = document
        self._roots = roots
        self._sink = sink
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._document.subscribe(self._on_mutation)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def resolve_roots(self, node: Node) -> frozenset[str]:
        chain: list[Node] = [node, *node.ancestors()]
        for candidate in chain:
            root_id = self._roots.get(candidate.id)
            if root_id is not None:
                return frozenset({root_id})

        if isinstance(node, Element):
            return frozenset(
                self._roots[desc.id]
                for desc in node.iter_descendants()
                if desc.id in self._roots
            )
        return frozenset()

    def _on_mutation(self, record: MutationRecord, node: Node) -> None:
        root_ids = self.resolve_roots(node)
        if not root_ids:
            return
        self._sink(ChangeBatch(root_ids=root_ids, reason=record.kind))
