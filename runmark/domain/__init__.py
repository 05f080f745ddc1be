"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en application/container.
    - Mantener estable el “surface area” del dominio.

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .entities import VERBATIM_TAGS, Document, Element, Fragment, MutationRecord, Node
from .services import (
    FrameClockPort,
    PresentationBuilderPort,
    SignatureStorePort,
    TextSegmenterPort,
)
from .value_objects import (
    ChangeBatch,
    LifecycleEvent,
    LifecycleEventType,
    MarkerKind,
    MarkerOwner,
    ReconcileStats,
    Signature,
    Span,
    StreamSyncResult,
    StreamUnit,
)

__all__ = [
    # Tree
    "Document",
    "Element",
    "Fragment",
    "Node",
    "MutationRecord",
    "VERBATIM_TAGS",
    # Ports
    "TextSegmenterPort",
    "SignatureStorePort",
    "FrameClockPort",
    "PresentationBuilderPort",
    # Value objects
    "Span",
    "MarkerKind",
    "MarkerOwner",
    "Signature",
    "StreamUnit",
    "StreamSyncResult",
    "ReconcileStats",
    "ChangeBatch",
    "LifecycleEvent",
    "LifecycleEventType",
]
