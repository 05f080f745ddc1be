"""
===============================================================================
TARJETA CRC — domain/value_objects.py
===============================================================================

Módulo:
    Objetos de valor del motor de anotación

Responsabilidades:
    - Span: rango semiabierto clasificado sobre el espacio de offsets de un TextView.
    - MarkerOwner: identidad de los marcadores de cada pasada (atributos propios).
    - Signature: huella barata de contenido + configuración.
    - StreamUnit: unidad de animación direccionable.
    - Eventos y lotes de cambios normalizados (ChangeBatch, LifecycleEvent).

Colaboradores:
    - application/*: producen/consumen estos valores.
    - domain/entities.py: los marcadores se materializan como atributos de nodos.

Principios:
    - Inmutables (frozen) y sin dependencias de infraestructura.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# Prefijo común de atributos del motor: distingue estructura propia de la del host.
ATTR_PREFIX = "data-runmark-"


class MarkerKind(str, Enum):
    WRAP = "wrap"
    MARK = "mark"


@dataclass(frozen=True)
class Span:
    """
    Rango [start, end) sobre el texto concatenado de un TextView.

    kind: categoría semántica ("custom", "quote", "latin", ...).
    payload: dato opaco adicional de la pasada.
    """

    start: int
    end: int
    kind: str
    payload: Any = None

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid span bounds: [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class MarkerOwner:
    """
    Identidad de los marcadores de una pasada.

    - attr: atributo de pertenencia; su valor es MarkerKind ("wrap" | "mark").
    - tag_attr: atributo opcional con la categoría del span.
    - wrapper_tag: tag del elemento creado al envolver.
    """

    name: str
    attr: str
    tag_attr: Optional[str] = None
    wrapper_tag: str = "span"

    def owns(self, attrs: dict[str, str]) -> bool:
        return self.attr in attrs


CUSTOM_OWNER = MarkerOwner("custom", ATTR_PREFIX + "custom", ATTR_PREFIX + "custom-kind")
LOCALE_OWNER = MarkerOwner("locale", ATTR_PREFIX + "locale", ATTR_PREFIX + "locale-font")
QUOTE_OWNER = MarkerOwner("quote", ATTR_PREFIX + "q", wrapper_tag="q")
QUOTE_LABEL_OWNER = MarkerOwner(
    "quote_label", ATTR_PREFIX + "quote-label", ATTR_PREFIX + "quote"
)
UNIT_OWNER = MarkerOwner("typewriter", ATTR_PREFIX + "unit", ATTR_PREFIX + "unit-i")
SEGMENT_OWNER = MarkerOwner("stream", ATTR_PREFIX + "seg", ATTR_PREFIX + "seg-i")

# Capacidades declaradas por el host sobre elementos.
TYPEWRITER_ATTR = ATTR_PREFIX + "typewriter"
TYPEWRITER_COUNT_ATTR = ATTR_PREFIX + "tw-count"
TYPEWRITER_START_ATTR = ATTR_PREFIX + "tw-start"
QUOTE_OPEN_INDEX_ATTR = ATTR_PREFIX + "q-open-i"
QUOTE_CLOSE_INDEX_ATTR = ATTR_PREFIX + "q-close-i"

# Estado persistido en el buffer de streaming.
SEGMENT_NEW_ATTR = ATTR_PREFIX + "seg-new"
SEGMENT_COUNT_ATTR = ATTR_PREFIX + "seg-count"
SEGMENT_MODE_ATTR = ATTR_PREFIX + "seg-mode"
SOURCE_SIG_ATTR = ATTR_PREFIX + "src-sig"
STREAM_BUFFER_ATTR = ATTR_PREFIX + "stream-buffer"

# Estado de streaming escrito sobre el root activo (lo consume la presentación).
STREAM_MODE_ATTR = ATTR_PREFIX + "stream-mode"
STREAM_ANIM_ATTR = ATTR_PREFIX + "stream-anim"
STREAM_CURSOR_ATTR = ATTR_PREFIX + "stream-cursor"
STREAM_STEP_ATTR = ATTR_PREFIX + "stream-step"
STREAM_ROOT_ATTRS = (STREAM_MODE_ATTR, STREAM_ANIM_ATTR, STREAM_CURSOR_ATTR, STREAM_STEP_ATTR)


@dataclass(frozen=True)
class Signature:
    """
    Huella de un root para una pasada.

    config: fingerprint de la configuración relevante
    length: largo total del texto del root
    token_counts: ocurrencias acotadas de tokens clave
    marker_count: marcadores propios existentes
    """

    config: str
    length: int
    token_counts: tuple[int, ...] = ()
    marker_count: int = 0


@dataclass(frozen=True)
class StreamUnit:
    """Unidad de animación: ordinal estable + flag de novedad."""

    text: str
    ordinal: int
    is_new: bool
    counted: bool = True


@dataclass(frozen=True)
class StreamSyncResult:
    total_units: int
    new_units: int
    skipped: bool = False
    inserted: int = 0
    updated: int = 0
    removed: int = 0


@dataclass(frozen=True)
class ReconcileStats:
    inserted: int = 0
    updated: int = 0
    removed: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.updated + self.removed

    def __add__(self, other: "ReconcileStats") -> "ReconcileStats":
        return ReconcileStats(
            inserted=self.inserted + other.inserted,
            updated=self.updated + other.updated,
            removed=self.removed + other.removed,
        )


class LifecycleEventType(str, Enum):
    CONTENT_CHANGED = "content_changed"
    GENERATION_STARTED = "generation_started"
    GENERATION_STOPPED = "generation_stopped"
    GENERATION_ENDED = "generation_ended"
    TOKEN_RECEIVED = "token_received"


@dataclass(frozen=True)
class LifecycleEvent:
    type: LifecycleEventType
    root_id: Optional[str] = None


@dataclass(frozen=True)
class ChangeBatch:
    """
    Lote normalizado de cambios empujado por el host al scheduler.

    full=True pide un rescan completo (absorbe cualquier pedido dirigido).
    """

    root_ids: frozenset[str] = field(default_factory=frozenset)
    reason: str = "content_changed"
    full: bool = False
