"""Fixed-rate tick source driving the per-frame update."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional


logger = logging.getLogger(__name__)

MAX_DT = 0.1


class FrameTicker:
    """Calls ``tick(dt)`` at up to ``target_fps`` until :meth:`stop` is called.

    The callback may also return ``False`` to stop the ticker. ``clock`` and
    ``sleep`` are injectable for tests.
    """

    def __init__(
        self,
        target_fps: float = 60,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if target_fps <= 0:
            raise ValueError(f"target_fps must be positive, got {target_fps}")
        self.frame_interval = 1.0 / target_fps
        self._clock = clock
        self._sleep = sleep
        self._running = False
        self.frames = 0

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._running = False

    def run(self, tick: Callable[[float], Optional[bool]]) -> int:
        """Block until stopped; returns the number of ticks executed."""
        self._running = True
        previous = self._clock()
        dt = self.frame_interval
        try:
            while self._running:
                started = self._clock()
                if tick(dt) is False:
                    self._running = False
                self.frames += 1

                elapsed = self._clock() - started
                if elapsed < self.frame_interval:
                    self._sleep(self.frame_interval - elapsed)
                now = self._clock()
                dt = min(now - previous, MAX_DT)
                previous = now
        finally:
            self._running = False
        logger.debug(f"Ticker stopped after {self.frames} frames")
        return self.frames
