"""
===============================================================================
USE CASE: Typewriter Pass (unidades por grapheme + inicios encadenados)
===============================================================================

Business Goal:
    Preparar los contenedores typewriter de un root (que no está en streaming)
    para una animación carácter a carácter encadenada entre contenedores.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    TypewriterPassUseCase

Responsibilities:
    - Delegar en TypewriterUnitizer la unitización / recuento.
    - Devolver el conteo total emitido por el root (para encadenar roots).

Collaborators:
    - application/typewriter.TypewriterUnitizer
    - container.AnnotationEngine
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ...domain.entities import Element
from ...domain.services import TextSegmenterPort
from ..typewriter import TypewriterContainer, TypewriterUnitizer
from .pass_results import PassStatus

PASS_NAME = "typewriter"


@dataclass(frozen=True)
class TypewriterPassResult:
    status: PassStatus
    containers: tuple[TypewriterContainer, ...] = ()

    @property
    def emitted_units(self) -> int:
        return sum(c.count for c in self.containers)

    @property
    def rebuilt(self) -> int:
        return sum(1 for c in self.containers if c.rebuilt)


class TypewriterPassUseCase:
    def __init__(self, segmenter: TextSegmenterPort, *, step_ms: int = 20) -> None:
        self._unitizer = TypewriterUnitizer(segmenter)
        self._step_ms = step_ms

    def execute(self, root: Element, *, enabled: bool = True) -> TypewriterPassResult:
        if not enabled:
            return TypewriterPassResult(status=PassStatus.DISABLED)
        containers = self._unitizer.process(root, step_ms=self._step_ms)
        return TypewriterPassResult(status=PassStatus.APPLIED, containers=tuple(containers))
