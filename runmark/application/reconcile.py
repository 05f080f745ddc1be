"""
===============================================================================
CRC CARD — application/reconcile.py
===============================================================================

Componente:
  Reconciliación mínima (buffer vivo <- árbol objetivo)

Responsabilidades:
  - Llevar los hijos de `current` a la forma de `target` con la menor cantidad
    de operaciones: nodos alineados se parchean en el lugar (identidad
    preservada), bloques reemplazados se parchean cuando el tipo/tag coincide, e
    inserciones/remociones para el resto.
  - Reportar conteos de operaciones (inserted/updated/removed).

Colaboradores:
  - difflib.SequenceMatcher (diff sobre claves de nodos)
  - application/usecases/sync_stream_buffer.py
  - crosscutting/metrics.record_reconcile_ops

Decisiones:
  - `target` se consume: sus nodos se mueven a `current` cuando hay que insertar.
  - Clave de alineación de Element = (tag, texto): los atributos no la afectan,
    así un cambio de atributos (p. ej. seg-i relativo) parchea en vez de reinsertar.
===============================================================================
"""

from __future__ import annotations

from difflib import SequenceMatcher
from typing import Hashable

from ..crosscutting.metrics import record_reconcile_ops
from ..domain.entities import Element, Fragment, Node
from ..domain.value_objects import ReconcileStats


def _node_key(node: Node) -> Hashable:
    if isinstance(node, Fragment):
        return ("#text", node.text)
    return ("#element", node.tag, node.text_content())


def _compatible(old: Node, new: Node) -> bool:
    if isinstance(old, Fragment) and isinstance(new, Fragment):
        return True
    return (
        isinstance(old, Element)
        and isinstance(new, Element)
        and old.tag == new.tag
    )


def _patch(old: Node, new: Node) -> ReconcileStats:
    if isinstance(old, Fragment) and isinstance(new, Fragment):
        if old.text == new.text:
            return ReconcileStats()
        old.set_text(new.text)
        return ReconcileStats(updated=1)

    if not (isinstance(old, Element) and isinstance(new, Element)):
        return ReconcileStats()
    stats = ReconcileStats()
    if old.attrs != new.attrs:
        old.replace_attrs(new.attrs)
        stats = ReconcileStats(updated=1)
    return stats + _reconcile_children(old, new)


def _reconcile_children(current: Element, target: Element) -> ReconcileStats:
    old_nodes = list(current.children)
    new_nodes = list(target.children)
    matcher = SequenceMatcher(
        None,
        [_node_key(n) for n in old_nodes],
        [_node_key(n) for n in new_nodes],
        autojunk=False,
    )

    stats = ReconcileStats()
    # Reverso: los índices previos a i1 siguen siendo válidos.
    for tag, i1, i2, j1, j2 in reversed(matcher.get_opcodes()):
        if tag == "equal":
            for old, new in zip(old_nodes[i1:i2], new_nodes[j1:j2]):
                stats = stats + _patch(old, new)
            continue
        olds = old_nodes[i1:i2]
        news = new_nodes[j1:j2]
        paired = min(len(olds), len(news)) if tag == "replace" else 0

        for node in olds[paired:]:
            current.remove_child(node)
        for offset, node in enumerate(news[paired:]):
            current.insert(i1 + paired + offset, node)
        stats = stats + ReconcileStats(
            inserted=len(news) - paired, removed=len(olds) - paired
        )

        for old, new in zip(olds[:paired], news[:paired]):
            if _compatible(old, new):
                stats = stats + _patch(old, new)
                continue
            idx = old.index_in_parent()
            current.remove_child(old)
            current.insert(idx, new)
            stats = stats + ReconcileStats(inserted=1, removed=1)

    return stats


def reconcile(current: Element, target: Element) -> ReconcileStats:
    """Aplica a `current` el diff mínimo de hijos contra `target`."""
    stats = _reconcile_children(current, target)
    record_reconcile_ops(
        inserted=stats.inserted, updated=stats.updated, removed=stats.removed
    )
    return stats
