"""Tick loop — asyncio-based fixed-rate driver.

Drives one step function per tick with the measured wall-clock ``dt``.
Used by the CLI to run the demo world while recording and to play a
replay back in real time.

The step function returns False to end the loop; ``stop()`` ends it
from outside (e.g. a signal handler).
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable


class TickLoop:
    """Fixed-rate tick loop.

    Args:
        step_fn: Called once per tick with ``dt`` in seconds.  Returning
            False stops the loop.
        tick_hz: Target ticks per second.
        max_ticks: Optional hard limit on the number of ticks.
    """

    def __init__(
        self,
        step_fn: Callable[[float], bool | None],
        tick_hz: float = 60.0,
        max_ticks: int | None = None,
    ) -> None:
        self._step_fn = step_fn
        self._running = False
        self._step_interval = 1.0 / tick_hz if tick_hz > 0 else 0.0
        self._max_ticks = max_ticks

        # --- Monitoring counters ---
        self.tick_count: int = 0
        self.started_at: float = 0.0
        self.last_tick_dt: float = 0.0
        self.last_tick_duration_ms: float = 0.0
        self.avg_tick_duration_ms: float = 0.0
        self._tick_duration_sum: float = 0.0

    async def run(self) -> None:
        """Run until stop() is called or the step function returns False."""
        self._running = True
        self.started_at = time.monotonic()
        last = self.started_at
        while self._running:
            now = time.monotonic()
            dt = now - last
            last = now

            t0 = time.monotonic()
            keep_going = self._step(dt)
            elapsed_ms = (time.monotonic() - t0) * 1000

            self.last_tick_dt = dt
            self.last_tick_duration_ms = elapsed_ms
            self._tick_duration_sum += elapsed_ms
            self.avg_tick_duration_ms = self._tick_duration_sum / self.tick_count

            if not keep_going or (self._max_ticks is not None and self.tick_count >= self._max_ticks):
                self._running = False
                break

            await asyncio.sleep(self._step_interval)

    @property
    def uptime_seconds(self) -> float:
        """Seconds since the loop started."""
        if self.started_at == 0.0:
            return 0.0
        return time.monotonic() - self.started_at

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Signal the loop to stop after the current tick."""
        self._running = False

    def _step(self, dt: float) -> bool:
        """One tick.  Returns False when the step function asked to stop."""
        self.tick_count += 1
        return self._step_fn(dt) is not False
