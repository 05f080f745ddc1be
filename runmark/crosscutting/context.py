"""
===============================================================================
TARJETA CRC — runmark/crosscutting/context.py (Contexto por pasada)
===============================================================================

Responsabilidades:
  - Mantener contexto “pass-scoped” usando ContextVars.
  - Permitir correlación de logs/métricas sin pasar parámetros por todo el stack.
  - Proveer helpers mínimos: set_pass_context(), get_context_dict(), clear_context().

Colaboradores:
  - runmark.application.scheduler: setea tick_id al ejecutar un flush.
  - runmark.container: setea root_id/pass_name por cada pasada.
  - runmark.crosscutting.logger: enriquece logs leyendo get_context_dict().

Restricciones:
  - Solo tipos primitivos (str) para serialización segura.
  - Defaults vacíos ("") para evitar None y simplificar JSON.
===============================================================================
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Final, Iterator

root_id_var: ContextVar[str] = ContextVar("root_id", default="")
pass_name_var: ContextVar[str] = ContextVar("pass_name", default="")
tick_id_var: ContextVar[str] = ContextVar("tick_id", default="")

_CTX_ROOT_ID: Final[str] = "root_id"
_CTX_PASS_NAME: Final[str] = "pass_name"
_CTX_TICK_ID: Final[str] = "tick_id"


def set_pass_context(*, root_id: str = "", pass_name: str = "") -> None:
    """
    Setea el contexto de la pasada en curso.

    Regla:
      - Strings vacíos significan “no disponible”.
    """
    root_id_var.set(root_id or "")
    pass_name_var.set(pass_name or "")


def set_tick_context(tick_id: str = "") -> None:
    tick_id_var.set(tick_id or "")


@contextmanager
def pass_context(*, root_id: str = "", pass_name: str = "") -> Iterator[None]:
    """Context manager que restaura el contexto previo al salir."""
    root_token = root_id_var.set(root_id or "")
    pass_token = pass_name_var.set(pass_name or "")
    try:
        yield
    finally:
        pass_name_var.reset(pass_token)
        root_id_var.reset(root_token)


def get_context_dict() -> dict[str, str]:
    """
    Devuelve solo las claves con valor (evita ruido en logs).
    """
    out: dict[str, str] = {}
    root_id = root_id_var.get()
    if root_id:
        out[_CTX_ROOT_ID] = root_id
    pass_name = pass_name_var.get()
    if pass_name:
        out[_CTX_PASS_NAME] = pass_name
    tick_id = tick_id_var.get()
    if tick_id:
        out[_CTX_TICK_ID] = tick_id
    return out


def clear_context() -> None:
    root_id_var.set("")
    pass_name_var.set("")
    tick_id_var.set("")
