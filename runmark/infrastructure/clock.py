"""
===============================================================================
CRC CARD — infrastructure/clock.py
===============================================================================

Componente:
  Relojes de frame (FrameClockPort)

Responsabilidades:
  - ManualFrameClock: el host (o los tests) avanza frames explícitamente.
  - AsyncioFrameClock: frames sobre un event loop de asyncio (~60 fps).

Colaboradores:
  - domain/services.FrameClockPort
  - application/scheduler.ScanScheduler

Notas:
  - call_soon equivale a "después de que el trabajo síncrono actual termine";
    en ManualFrameClock se drena al final de cada tick.
===============================================================================
"""

from __future__ import annotations

import asyncio
from collections import deque
from itertools import count
from typing import Callable, Optional


class ManualFrameClock:
    """Reloj determinístico: tick() ejecuta el frame pendiente y luego los call_soon."""

    def __init__(self) -> None:
        self._ids = count(1)
        self._frames: dict[int, Callable[[], None]] = {}
        self._soon: deque[Callable[[], None]] = deque()
        self.frames_run = 0

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._frames[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._frames.pop(handle, None)

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._soon.append(callback)

    @property
    def pending_frames(self) -> int:
        return len(self._frames)

    def drain_soon(self) -> None:
        while self._soon:
            self._soon.popleft()()

    def tick(self) -> int:
        """
        Ejecuta los frames pedidos hasta ahora (no los que se pidan durante
        el tick) y luego drena call_soon. Devuelve cuántos frames corrió.
        """
        frames = list(self._frames.items())
        self._frames.clear()
        ran = 0
        try:
            for _, callback in frames:
                callback()
                ran += 1
                self.frames_run += 1
        finally:
            self.drain_soon()
        return ran

    def run_until_idle(self, max_ticks: int = 100) -> int:
        ticks = 0
        while (self._frames or self._soon) and ticks < max_ticks:
            self.tick()
            ticks += 1
        return ticks


class AsyncioFrameClock:
    """Frames programados con loop.call_later (intervalo configurable)."""

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        *,
        frame_interval: float = 1 / 60,
    ) -> None:
        if frame_interval < 0:
            raise ValueError("frame_interval must be >= 0")
        self._loop = loop
        self._frame_interval = frame_interval

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def request_frame(self, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._get_loop().call_later(self._frame_interval, callback)

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._get_loop().call_soon(callback)
