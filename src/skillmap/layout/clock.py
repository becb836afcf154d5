from __future__ import annotations
import asyncio
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class FrameThrottle:
    """Lets through at most one frame per ``min_interval_ms``."""

    def __init__(self, min_interval_ms: float = 40.0):
        self.min_interval_ms = max(float(min_interval_ms), 0.0)
        self._last: Optional[float] = None

    def should_emit(self, timestamp_ms: float) -> bool:
        if self._last is not None and timestamp_ms - self._last <= self.min_interval_ms:
            return False
        self._last = timestamp_ms
        return True

    def reset(self):
        self._last = None


class AnimationClock:
    """Milliseconds elapsed since construction (or the last ``restart``)."""

    def __init__(self, now: Callable[[], float] = time.monotonic):
        self._now = now
        self._start = now()

    def elapsed_ms(self) -> float:
        return (self._now() - self._start) * 1000.0

    def restart(self):
        self._start = self._now()


async def run_animation(
    on_frame: Callable[[float], None],
    stop: asyncio.Event,
    interval_ms: float = 40.0,
    clock: Optional[AnimationClock] = None,
) -> int:
    """Call ``on_frame(elapsed_ms)`` on throttled ticks until ``stop`` is set.

    Returns the number of frames delivered. Setting ``stop`` ends the loop
    without waiting out the current interval. Used by hosts that own an event
    loop (``skillmap frames``); the gradio page ticks from ``gr.Timer`` through
    ``FrameThrottle`` instead.
    """
    clock = clock or AnimationClock()
    throttle = FrameThrottle(interval_ms)
    frames = 0
    while not stop.is_set():
        ts = clock.elapsed_ms()
        if throttle.should_emit(ts):
            on_frame(ts)
            frames += 1
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval_ms / 1000.0)
        except asyncio.TimeoutError:
            pass
    logger.debug("[clock] animation stopped after %d frames", frames)
    return frames
