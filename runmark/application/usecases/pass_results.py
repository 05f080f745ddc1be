"""
===============================================================================
PASS RESULTS (Shared Result Models)
===============================================================================

Name:
    Resultados compartidos de las pasadas de anotación

Business Goal:
    Que todas las pasadas (quotes, typewriter, custom, locale, stream) devuelvan
    un contrato estable y explícito, útil para el motor (métricas, logs) y
    para tests de flujo.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Component:
    pass_results models (module)

Responsibilities:
    - PassStatus: applied | skipped | disabled.
    - PassResult: conteos de spans, wraps, marks, limpiezas y cap alcanzado.

Collaborators:
    - application/usecases/*
    - container.AnnotationEngine
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PassStatus(str, Enum):
    """
    - APPLIED: la pasada corrió (puede no haber emitido spans).
    - SKIPPED: firma sin cambios, cero trabajo.
    - DISABLED: pasada inactiva; sus marcadores fueron limpiados.
    """

    APPLIED = "applied"
    SKIPPED = "skipped"
    DISABLED = "disabled"


@dataclass(frozen=True)
class PassResult:
    pass_name: str
    status: PassStatus
    spans: int = 0
    wrapped: int = 0
    marked: int = 0
    cleared: int = 0
    capped: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.wrapped or self.marked or self.cleared)

    @classmethod
    def skipped(cls, pass_name: str) -> "PassResult":
        return cls(pass_name=pass_name, status=PassStatus.SKIPPED)

    @classmethod
    def disabled(cls, pass_name: str, cleared: int = 0) -> "PassResult":
        return cls(pass_name=pass_name, status=PassStatus.DISABLED, cleared=cleared)
