# services/session_timer.py
"""
Per-question answer timer.

The live tick only feeds display callbacks. Recorded durations always come
from a direct elapsed() call at submission time.
"""
import asyncio
import time
from typing import Callable, Optional

from config import get_settings
from utils.logger import get_logger

logger = get_logger("SessionTimer")


class SessionTimer:
    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        on_tick: Optional[Callable[[int], None]] = None,
        tick_interval: Optional[float] = None,
    ):
        self.clock = clock
        self.on_tick = on_tick
        self.tick_interval = tick_interval if tick_interval is not None else get_settings().timer_tick_seconds
        self.started_at: Optional[float] = None
        self.frozen_elapsed: Optional[int] = None
        self._tick_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.started_at is not None and self.frozen_elapsed is None

    def start(self) -> None:
        """Record a fresh reference instant; any previous reference is discarded."""
        self._cancel_tick()
        self.started_at = self.clock()
        self.frozen_elapsed = None
        self._start_tick()

    def elapsed(self) -> int:
        """Whole seconds since the reference instant."""
        if self.frozen_elapsed is not None:
            return self.frozen_elapsed
        if self.started_at is None:
            return 0
        return max(0, int(self.clock() - self.started_at))

    def stop(self) -> int:
        """Freeze the elapsed value and stop ticking."""
        if self.is_running:
            self.frozen_elapsed = self.elapsed()
        self._cancel_tick()
        return self.elapsed()

    def reset(self) -> None:
        self._cancel_tick()
        self.started_at = None
        self.frozen_elapsed = None

    # ------------------------------------------------------------------ #
    # Display ticking
    # ------------------------------------------------------------------ #
    def _start_tick(self) -> None:
        if not self.on_tick:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (sync caller); display ticking is unavailable.
            return
        self._tick_task = loop.create_task(self._tick_loop())

    async def _tick_loop(self) -> None:
        while self.is_running:
            await asyncio.sleep(self.tick_interval)
            if not self.is_running:
                break
            try:
                self.on_tick(self.elapsed())
            except Exception as e:
                logger.error(f"Timer tick callback failed: {e}", exc_info=True)

    def _cancel_tick(self) -> None:
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None
