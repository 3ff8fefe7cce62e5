"""
clock.py - Hybrid Logical Clock transitions.

A Clock is an immutable value holding a node's current Timestamp.
Three primitives move it forward, each a pure function of the current
clock, one wall clock reading and (for merge) a remote timestamp:

- clock_current: catch up with the wall clock, never bump the counter
- clock_advance: stamp a local or send event
- clock_update:  stamp a receive event, merging the remote timestamp

Callers replace their reference with the returned Clock. Nothing is
mutated in place; see SharedClock for a node-wide synchronized holder.

Reference: "Logical Physical Clocks and Consistent Snapshots in
            Globally Distributed Databases" (Kulkarni et al., 2014)
"""

from dataclasses import dataclass

from hlc_core.config import DEFAULT_OVERFLOW_POLICY, MAX_LOGICAL, OverflowPolicy
from hlc_core.errors import AmbiguousMergeError, LogicalOverflowError, ValidationError
from hlc_core.invariants import Invariants
from hlc_core.metrics import ClockLogger
from hlc_core.timestamp import Timestamp, compare, logical_part, pack, physical_part
from hlc_core.wallclock import WallClock, system_wall_clock

_events = ClockLogger()


@dataclass(frozen=True)
class Clock:
    """
    Immutable HLC state of one node.

    Fields:
    - timestamp: The most recent timestamp this node has produced
    """
    timestamp: Timestamp

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, Timestamp):
            raise ValidationError(
                f"Clock timestamp must be a Timestamp, got {type(self.timestamp).__name__}",
                field="timestamp",
                value=self.timestamp,
            )

    @classmethod
    def create(cls, now: int | None = None, wall_clock: WallClock | None = None) -> "Clock":
        """Start a clock at the current wall time with a zero counter."""
        return cls(pack(read_wall_clock(now, wall_clock), 0))

    @classmethod
    def at(cls, physical: int, logical: int = 0) -> "Clock":
        """Start a clock at an explicit timestamp."""
        return cls(pack(physical, logical))

    @property
    def physical(self) -> int:
        return physical_part(self.timestamp)

    @property
    def logical(self) -> int:
        return logical_part(self.timestamp)

    def current(
        self, now: int | None = None, wall_clock: WallClock | None = None
    ) -> "Clock":
        """Resync with the wall clock. See clock_current()."""
        return clock_current(self, read_wall_clock(now, wall_clock))

    def advance(
        self,
        now: int | None = None,
        wall_clock: WallClock | None = None,
        overflow: OverflowPolicy = DEFAULT_OVERFLOW_POLICY,
    ) -> "Clock":
        """Stamp a local event. See clock_advance()."""
        return clock_advance(self, read_wall_clock(now, wall_clock), overflow)

    def merge(
        self,
        remote: "Timestamp | Clock",
        now: int | None = None,
        wall_clock: WallClock | None = None,
        overflow: OverflowPolicy = DEFAULT_OVERFLOW_POLICY,
    ) -> "Clock":
        """Stamp a receive event. See clock_update()."""
        return clock_update(self, remote, read_wall_clock(now, wall_clock), overflow)

    def __str__(self) -> str:
        return (
            f"Clock(timestamp={self.timestamp}, "
            f"wall_time={self.physical}, logical_time={self.logical})"
        )


def read_wall_clock(now: int | None = None, wall_clock: WallClock | None = None) -> int:
    """
    Return the wall clock reading for one transition.

    An explicit `now` wins; otherwise `wall_clock` (or the system
    clock) is read exactly once.

    Raises:
        ValidationError: If the reading is not an int
    """
    if now is None:
        now = (wall_clock or system_wall_clock)()
    if not isinstance(now, int) or isinstance(now, bool):
        raise ValidationError(
            f"Wall clock reading must be int milliseconds, got {type(now).__name__}",
            field="now",
            value=now,
        )
    return now


def _bump_logical(
    physical: int, logical: int, primitive: str, overflow: OverflowPolicy
) -> Timestamp:
    """Next timestamp within the same millisecond, honouring the overflow policy."""
    if logical < MAX_LOGICAL:
        return pack(physical, logical + 1)

    _events.logical_overflow(primitive, physical, overflow.value)
    if overflow is OverflowPolicy.FAIL:
        raise LogicalOverflowError(physical, logical, primitive)

    # pack() rejects physical + 1 once the 46-bit field is exhausted
    return pack(physical + 1, 0)


def _merge_collision(local: Timestamp, remote: Timestamp) -> Timestamp:
    """
    Resolve a merge where local and remote are identical.

    Without a node identifier there is no way to order the two
    events, so this always fails.
    """
    _events.merge_collision(local.value)
    raise AmbiguousMergeError(local)


def clock_current(clock: Clock, now: int) -> Clock:
    """
    Resync a clock with the wall clock.

    If the wall clock has passed the clock's physical part, the result
    is (now, 0). Otherwise the same clock is returned unchanged; the
    logical counter is never bumped.

    Args:
        clock: Current clock
        now: Wall clock reading in ms

    Returns:
        New clock, or `clock` itself when no adjustment is needed
    """
    if now <= clock.physical:
        packed = clock.timestamp.value
        _events.clock_advanced("current", packed, packed, clock.logical)
        return clock

    result = Clock(pack(now, 0))
    Invariants.assert_no_regression(clock.timestamp, result.timestamp)
    _events.clock_advanced("current", clock.timestamp.value, result.timestamp.value, 0)
    return result


def clock_advance(
    clock: Clock, now: int, overflow: OverflowPolicy = DEFAULT_OVERFLOW_POLICY
) -> Clock:
    """
    Stamp a local (or send) event.

    If the wall clock has moved past the physical part, adopt it and
    reset the counter. Otherwise (wall clock stalled or behind) keep
    the physical part and bump the counter.

    Args:
        clock: Current clock
        now: Wall clock reading in ms
        overflow: What to do if the counter is exhausted

    Returns:
        New clock strictly greater than `clock`

    Raises:
        LogicalOverflowError: Counter exhausted under OverflowPolicy.FAIL
        OutOfRangeError: `now` does not fit the physical field
    """
    local = clock.timestamp

    if now > physical_part(local):
        ts = pack(now, 0)
    else:
        ts = _bump_logical(physical_part(local), logical_part(local), "advance", overflow)

    Invariants.assert_strictly_advances(local, ts)
    _events.clock_advanced("advance", local.value, ts.value, logical_part(ts))
    return Clock(ts)


def clock_update(
    clock: Clock,
    remote: Timestamp | Clock,
    now: int,
    overflow: OverflowPolicy = DEFAULT_OVERFLOW_POLICY,
) -> Clock:
    """
    Stamp a receive event carrying a remote timestamp.

    Cases, in order:
    1. Wall clock ahead of both sides: (now, 0)
    2. Remote ahead of local: remote's physical, remote's counter + 1
    3. Local ahead of remote: local's physical, local's counter + 1
    4. Identical: AmbiguousMergeError

    Args:
        clock: Current clock
        remote: Timestamp (or Clock) received from another node
        now: Wall clock reading in ms
        overflow: What to do if the counter is exhausted

    Returns:
        New clock strictly greater than both local and remote

    Raises:
        AmbiguousMergeError: Local and remote timestamps are identical
        LogicalOverflowError: Counter exhausted under OverflowPolicy.FAIL
    """
    if isinstance(remote, Clock):
        remote = remote.timestamp
    if not isinstance(remote, Timestamp):
        raise ValidationError(
            f"Remote must be a Timestamp or Clock, got {type(remote).__name__}",
            field="remote",
            value=remote,
        )

    local = clock.timestamp

    if now > physical_part(local) and now > physical_part(remote):
        ts = pack(now, 0)
    else:
        order = compare(remote, local)
        if order > 0:
            ts = _bump_logical(physical_part(remote), logical_part(remote), "merge", overflow)
        elif order < 0:
            ts = _bump_logical(physical_part(local), logical_part(local), "merge", overflow)
        else:
            ts = _merge_collision(local, remote)

    Invariants.assert_happens_after(local, remote, ts)
    _events.clock_merged(local.value, remote.value, ts.value, logical_part(ts))
    return Clock(ts)
