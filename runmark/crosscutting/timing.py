# runmark/crosscutting/timing.py
"""
===============================================================================
MÓDULO: Tiempos por pasada de un process_root
===============================================================================

Responsabilidades:
  - Cronometrar cada pasada (quotes/typewriter/custom/locale/stream) dentro de
    un mismo process_root y el total desde que se creó.
  - Publicar root/pass en el contexto de logs mientras la pasada corre.

Colaboradores:
  - crosscutting/context.pass_context
  - container.AnnotationEngine (reportes y métricas)
===============================================================================
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator, Optional

from .context import pass_context


class PassTimings:
    """Segundos por pasada de un root; `to_dict()` los expone en ms."""

    def __init__(self, root_id: str = "") -> None:
        self.root_id = root_id
        self._started = time.perf_counter()
        self._passes: dict[str, float] = {}

    @contextmanager
    def measure(self, pass_name: str) -> Iterator[None]:
        start = time.perf_counter()
        with pass_context(root_id=self.root_id, pass_name=pass_name):
            try:
                yield
            finally:
                self._passes[pass_name] = time.perf_counter() - start

    def seconds(self, pass_name: str) -> Optional[float]:
        return self._passes.get(pass_name)

    def to_dict(self) -> dict[str, float]:
        out = {f"{name}_ms": round(sec * 1000, 2) for name, sec in self._passes.items()}
        out["total_ms"] = round((time.perf_counter() - self._started) * 1000, 2)
        return out
