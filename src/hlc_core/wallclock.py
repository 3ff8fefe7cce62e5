"""
wallclock.py - Wall clock sources.

The clock core consumes exactly one capability: "read the current time
as integer milliseconds since the Unix epoch". Anything callable with
that shape can be used, so tests and replays can substitute a
deterministic source for the system clock.
"""

import threading
import time
from typing import Callable

WallClock = Callable[[], int]


def system_wall_clock() -> int:
    """Current system time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


class ManualWallClock:
    """
    Settable wall clock for tests and deterministic replay.
    
    Time only moves when told to, and may be set backwards to
    simulate a stalled or skewed host clock.
    """

    def __init__(self, start_ms: int = 0):
        self._now = start_ms
        self._reads = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            self._reads += 1
            return self._now

    @property
    def reads(self) -> int:
        """Number of times the clock has been read."""
        return self._reads

    def set(self, now_ms: int) -> None:
        with self._lock:
            self._now = now_ms

    def advance(self, delta_ms: int = 1) -> int:
        """Move time by delta_ms (negative values go backwards)."""
        with self._lock:
            self._now += delta_ms
            return self._now
