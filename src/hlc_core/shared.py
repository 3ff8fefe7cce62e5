"""
shared.py - Node-wide clock holder.

A process that stamps events from several threads keeps one Clock
behind a single lock. Every call is one read-modify-write of the
current value, so no two callers can observe the same prior clock and
no update is lost.
"""

import threading

from hlc_core.clock import Clock, clock_advance, clock_current, clock_update
from hlc_core.config import DEFAULT_OVERFLOW_POLICY, OverflowPolicy
from hlc_core.timestamp import Timestamp
from hlc_core.wallclock import WallClock, system_wall_clock


class SharedClock:
    """
    Clock manager for generating and tracking timestamps of one node.
    
    Usage:
        clock = SharedClock()
        ts = clock.send()            # stamp an outgoing message
        ts = clock.merge(remote_ts)  # stamp a received message
    """

    def __init__(
        self,
        wall_clock: WallClock = system_wall_clock,
        initial: Clock | None = None,
        overflow: OverflowPolicy = DEFAULT_OVERFLOW_POLICY,
    ):
        self._wall_clock = wall_clock
        self._overflow = overflow
        self._lock = threading.Lock()
        self._clock = initial if initial is not None else Clock.create(wall_clock=wall_clock)

    @property
    def clock(self) -> Clock:
        """Snapshot of the current clock value."""
        with self._lock:
            return self._clock

    @property
    def current(self) -> Timestamp:
        """Latest timestamp without advancing the clock."""
        return self.clock.timestamp

    def advance(self) -> Timestamp:
        """Stamp a local event."""
        with self._lock:
            self._clock = clock_advance(self._clock, self._wall_clock(), self._overflow)
            return self._clock.timestamp

    def send(self) -> Timestamp:
        """Stamp an outgoing message; the result is what goes on the wire."""
        return self.advance()

    def merge(self, remote: Timestamp | Clock) -> Timestamp:
        """
        Stamp a received message.
        
        On failure (AmbiguousMergeError, LogicalOverflowError) the
        held clock is left unchanged.
        """
        with self._lock:
            self._clock = clock_update(
                self._clock, remote, self._wall_clock(), self._overflow
            )
            return self._clock.timestamp

    def resync(self) -> Timestamp:
        """Catch up with the wall clock without bumping the counter."""
        with self._lock:
            self._clock = clock_current(self._clock, self._wall_clock())
            return self._clock.timestamp
