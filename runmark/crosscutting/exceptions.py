# runmark/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del motor de anotación
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message “humana”

Importante: el input malformado (delimitadores o comillas sin cerrar) NO es
un error. Estas excepciones cubren errores de programación sobre el árbol y
configuración inválida.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  RunmarkError + subclases

Responsabilidades:
  - Estandarizar errores internos del motor
  - Generar error_id para rastreo

Colaboradores:
  - domain/entities.py (operaciones estructurales del árbol)
  - container.py (enhancements opcionales: PresentationError)
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class RunmarkError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      RunmarkError

    Responsabilidades:
      - Base para errores internos del motor
      - Proveer error_code + error_id + message

    Colaboradores:
      - container.AnnotationEngine
    ----------------------------------------------------------------------------
    """

    error_code: str = "RUNMARK_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class TreeStructureError(RunmarkError):
    """Operación estructural inválida (offset fuera de rango, nodo desconectado)."""

    error_code: str = "TREE_STRUCTURE_ERROR"


class ConfigurationError(RunmarkError):
    """Configuración inconsistente detectada en runtime."""

    error_code: str = "CONFIGURATION_ERROR"


class PresentationError(RunmarkError):
    """Falla de un colaborador opcional de presentación (no aborta pasadas)."""

    error_code: str = "PRESENTATION_ERROR"
