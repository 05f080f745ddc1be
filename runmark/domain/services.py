"""
===============================================================================
TARJETA CRC — domain/services.py
===============================================================================

Módulo:
    Puertos (Protocols) hacia colaboradores externos

Responsabilidades:
    - TextSegmenterPort: segmentación en clusters / palabras (capacidad del host).
    - SignatureStorePort: memo table de firmas por root + pasada.
    - FrameClockPort: programación "un flush por frame" + settle posterior.
    - PresentationBuilderPort: enhancement opcional (ej. CSS de fuentes).

Colaboradores:
    - infrastructure/text/segmenters.py, infrastructure/cache.py,
      infrastructure/clock.py: implementaciones concretas.
    - application/*, container.py: dependen solo de estos contratos.

Restricciones:
    - Este módulo ES dominio: no importa librerías de infraestructura.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Optional, Protocol

from .value_objects import Signature


class TextSegmenterPort(Protocol):
    """
    Segmenta texto en piezas contiguas que cubren todo el input.

    Contrato:
      - segments(text) produce (pieza, start, end) en orden, sin huecos.
      - La concatenación de las piezas es exactamente `text`.
    """

    granularity: str

    def segments(self, text: str) -> Iterator[tuple[str, int, int]]: ...


class SignatureStorePort(Protocol):
    """Memo table de firmas, clave = (root_id, pass_name)."""

    def get(self, root_id: str, pass_name: str) -> Optional[Signature]: ...

    def set(self, root_id: str, pass_name: str, signature: Signature) -> None: ...

    def delete(self, root_id: str, pass_name: str) -> None: ...

    def evict_root(self, root_id: str) -> int: ...

    def clear(self) -> None: ...


class FrameClockPort(Protocol):
    """
    Reloj de frames del host.

    - request_frame: ejecuta callback en el próximo tick (un handle por pedido).
    - call_soon: ejecuta callback apenas termine el trabajo síncrono actual.
    """

    def request_frame(self, callback: Callable[[], None]) -> Any: ...

    def cancel_frame(self, handle: Any) -> None: ...

    def call_soon(self, callback: Callable[[], None]) -> None: ...


class PresentationBuilderPort(Protocol):
    """
    Enhancement opcional: construye datos de presentación (ej. CSS de fuentes)
    a partir de las fuentes activas. Puede fallar; el motor no depende de él.
    """

    def build(self, fonts: dict[str, str]) -> None: ...
