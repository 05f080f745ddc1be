"""
===============================================================================
CRC CARD — application/signatures.py
===============================================================================

Componente:
  SignatureCache (gate de pasadas por root)

Responsabilidades:
  - Calcular la Signature de un root para una pasada: fingerprint de config +
    largo del texto + ocurrencias acotadas de tokens clave + marcadores propios.
  - Decidir si una pasada puede omitirse (firma igual a la última registrada).
  - Registrar la firma POST-mutación y desalojar por root (teardown).

Colaboradores:
  - domain/services.SignatureStorePort (infrastructure/cache.InMemorySignatureStore)
  - application/annotator.count_markers
  - application/usecases/* (cada pasada arma su firma)

Decisiones:
  - Firma igual => cero trabajo de clasificadores/Annotator (O(1) amortizado
    cuando nada relevante cambió, aunque el scheduler corra en cada frame).
===============================================================================
"""

from __future__ import annotations

import hashlib
import json
from typing import Iterable, Optional

from ..domain.entities import Element
from ..domain.services import SignatureStorePort
from ..domain.value_objects import MarkerOwner, Signature
from .annotator import count_markers
from .delimiter_spans import count_occurrences

TOKEN_COUNT_LIMIT = 50


def config_fingerprint(config: object) -> str:
    """Fingerprint estable (sha256 corto) de una configuración serializable."""
    payload = json.dumps(config, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def compute_signature(
    root: Element,
    *,
    config: object,
    tokens: Iterable[str] = (),
    owners: Iterable[MarkerOwner] = (),
    text: Optional[str] = None,
) -> Signature:
    content = root.text_content() if text is None else text
    return Signature(
        config=config_fingerprint(config),
        length=len(content),
        token_counts=tuple(
            count_occurrences(content, token, limit=TOKEN_COUNT_LIMIT)
            for token in tokens
        ),
        marker_count=sum(count_markers(root, owner) for owner in owners),
    )


class SignatureCache:
    """Fachada sobre el store: should_skip / record / forget / evict."""

    def __init__(self, store: SignatureStorePort) -> None:
        self._store = store

    def should_skip(self, root_id: str, pass_name: str, signature: Signature) -> bool:
        return self._store.get(root_id, pass_name) == signature

    def record(self, root_id: str, pass_name: str, signature: Signature) -> None:
        self._store.set(root_id, pass_name, signature)

    def last(self, root_id: str, pass_name: str) -> Optional[Signature]:
        return self._store.get(root_id, pass_name)

    def forget(self, root_id: str, pass_name: str) -> None:
        self._store.delete(root_id, pass_name)

    def evict(self, root_id: str) -> int:
        return self._store.evict_root(root_id)
