"""
===============================================================================
CRC CARD — application/scheduler.py
===============================================================================

Componente:
  ScanScheduler (coalescer de pedidos de escaneo, un flush por frame)

Responsabilidades:
  - Fusionar pedidos (full / dirigidos a roots) en un único flush por frame.
  - Un pedido full absorbe cualquier pedido dirigido pendiente.
  - Durante una pasada, los cambios notificados (incluidos los propios del
    motor) se acumulan en un set suprimido en lugar de re-disparar.
  - Al asentarse la pasada, re-encolar los roots suprimidos aún adjuntos como
    un pedido dirigido (o un full si ninguno sigue adjunto).
  - Un pedido full recibido durante la pasada se recuerda y se re-encola como
    full al asentarse (absorbe los roots suprimidos).

Colaboradores:
  - domain/services.FrameClockPort (request_frame + call_soon)
  - container.AnnotationEngine (run_full / run_targeted / is_attached)
  - infrastructure/host_feed.DocumentChangeFeed (notify)

Decisiones:
  - Single-threaded cooperativo: no hay locks; last-writer-wins.
  - Una excepción de la pasada se propaga a quien llamó flush(), después de
    encolar el callback de asentamiento.
===============================================================================
"""

from __future__ import annotations

from itertools import count
from typing import Any, Callable, Iterable, Optional

from ..crosscutting.context import set_tick_context
from ..crosscutting.logger import logger
from ..domain.services import FrameClockPort
from ..domain.value_objects import ChangeBatch


class ScanScheduler:
    def __init__(
        self,
        clock: FrameClockPort,
        *,
        run_full: Callable[[], None],
        run_targeted: Callable[[list[str]], None],
        is_attached: Callable[[str], bool],
        before_flush: Optional[Callable[[], None]] = None,
    ) -> None:
        self._clock = clock
        self._run_full = run_full
        self._run_targeted = run_targeted
        self._is_attached = is_attached
        self._before_flush = before_flush

        self._full_requested = False
        self._pending: dict[str, None] = {}
        self._suppressed: dict[str, None] = {}
        self._full_suppressed = False
        self._frame_handle: Any = None
        self._in_pass = False
        self._ticks = count(1)

    # -------------------------------------------------------------------------
    # Estado
    # -------------------------------------------------------------------------
    @property
    def in_pass(self) -> bool:
        return self._in_pass

    @property
    def frame_pending(self) -> bool:
        return self._frame_handle is not None

    @property
    def full_requested(self) -> bool:
        return self._full_requested

    @property
    def pending_roots(self) -> list[str]:
        return list(self._pending)

    @property
    def suppressed_roots(self) -> list[str]:
        return list(self._suppressed)

    # -------------------------------------------------------------------------
    # Pedidos
    # -------------------------------------------------------------------------
    def schedule(self, *, full: bool = True, roots: Optional[Iterable[str]] = None) -> None:
        if full:
            self._full_requested = True
        for root_id in roots or ():
            if root_id:
                self._pending[root_id] = None

        if self._frame_handle is not None:
            return
        self._frame_handle = self._clock.request_frame(self.flush)

    def notify(self, batch: ChangeBatch) -> None:
        """Entrada del feed de cambios del host."""
        if batch.full:
            if self._in_pass:
                self._full_suppressed = True
                return
            self.schedule(full=True)
            return

        roots = [root_id for root_id in batch.root_ids if root_id]
        if not roots:
            return
        if self._in_pass:
            for root_id in roots:
                if self._is_attached(root_id):
                    self._suppressed[root_id] = None
            return
        self.schedule(full=False, roots=roots)

    def cancel(self) -> None:
        if self._frame_handle is not None:
            self._clock.cancel_frame(self._frame_handle)
        self._frame_handle = None
        self._full_requested = False
        self._pending.clear()
        self._suppressed.clear()
        self._full_suppressed = False

    # -------------------------------------------------------------------------
    # Flush
    # -------------------------------------------------------------------------
    def flush(self) -> None:
        self._frame_handle = None
        self._in_pass = True
        set_tick_context(str(next(self._ticks)))
        try:
            if self._before_flush is not None:
                self._before_flush()

            if self._full_requested:
                self._full_requested = False
                self._pending.clear()
                logger.debug("scan flush", extra={"mode": "full"})
                self._run_full()
                return

            if not self._pending:
                return
            roots = list(self._pending)
            self._pending.clear()
            logger.debug("scan flush", extra={"mode": "targeted", "roots": len(roots)})
            self._run_targeted(roots)
        finally:
            self._clock.call_soon(self._settle)

    def _settle(self) -> None:
        self._in_pass = False
        set_tick_context("")
        full = self._full_suppressed
        self._full_suppressed = False
        if full:
            self._suppressed.clear()
            self.schedule(full=True)
            return
        if not self._suppressed:
            return

        roots = [root_id for root_id in self._suppressed if self._is_attached(root_id)]
        self._suppressed.clear()
        if roots:
            self.schedule(full=False, roots=roots)
        else:
            self.schedule(full=True)
