"""
============================================================
TARJETA CRC — runmark/infrastructure/cache.py
============================================================
Module: Signature Store (memo table en memoria)

Responsibilities:
  - Guardar la última Signature por (root_id, pass_name).
  - Eviction explícita por root (teardown del host) + cota LRU de seguridad.
  - Métricas simples (hits/misses/evictions) para tuning.

Collaborators:
  - domain/services.SignatureStorePort (contrato)
  - application/signatures.SignatureCache (gate de pasadas)

Policy / Design Notes:
  - Clave = root_id estable provisto por el host (NO identidad de objeto).
  - LRU real: OrderedDict para eviction determinística si se supera max_roots.
  - Índice secundario root_id -> pasadas para que evict_root sea O(pasadas).
============================================================
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Optional

from ..domain.value_objects import Signature


class InMemorySignatureStore:
    """
    Memo table en memoria.

    Nota:
      - El motor es single-threaded (cooperativo): no hace falta Lock.
      - max_roots acota memoria si el host nunca notifica teardown.
    """

    def __init__(self, *, max_roots: int = 10_000) -> None:
        if max_roots <= 0:
            raise ValueError("max_roots must be > 0")
        self._max_roots = int(max_roots)

        # root_id -> {pass_name: Signature} (OrderedDict mantiene orden de uso)
        self._entries: "OrderedDict[str, dict[str, Signature]]" = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, root_id: str, pass_name: str) -> Optional[Signature]:
        per_root = self._entries.get(root_id)
        if per_root is None or pass_name not in per_root:
            self._misses += 1
            return None
        self._entries.move_to_end(root_id, last=True)
        self._hits += 1
        return per_root[pass_name]

    def set(self, root_id: str, pass_name: str, signature: Signature) -> None:
        per_root = self._entries.get(root_id)
        if per_root is None:
            if len(self._entries) >= self._max_roots:
                self._entries.popitem(last=False)  # LRU
                self._evictions += 1
            per_root = {}
            self._entries[root_id] = per_root
        per_root[pass_name] = signature
        self._entries.move_to_end(root_id, last=True)

    def delete(self, root_id: str, pass_name: str) -> None:
        per_root = self._entries.get(root_id)
        if per_root is None:
            return
        per_root.pop(pass_name, None)
        if not per_root:
            del self._entries[root_id]

    def evict_root(self, root_id: str) -> int:
        """Elimina todas las firmas del root; devuelve cuántas había."""
        per_root = self._entries.pop(root_id, None)
        if not per_root:
            return 0
        self._evictions += 1
        return len(per_root)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, root_id: object) -> bool:
        return root_id in self._entries

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "backend": "in-memory",
            "roots": len(self._entries),
            "max_roots": self._max_roots,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
            "hit_rate": (self._hits / total) if total > 0 else 0.0,
        }
