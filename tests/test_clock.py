"""
test_clock.py - Tests for clock transitions.

These tests verify that resync, local advance and merge-on-receive
keep timestamps strictly increasing and causally ordered regardless
of what the wall clock does.
"""

import pytest

from hlc_core import (
    AmbiguousMergeError,
    Clock,
    ManualWallClock,
    ValidationError,
    clock_advance,
    clock_current,
    clock_update,
    pack,
)


class TestCreate:
    """Tests for clock construction."""

    def test_create_from_explicit_now(self, t0):
        clock = Clock.create(now=t0)
        assert clock.timestamp == pack(t0, 0)

    def test_create_reads_wall_clock_once(self, wall, t0):
        clock = Clock.create(wall_clock=wall)
        assert clock.timestamp == pack(t0, 0)
        assert wall.reads == 1

    def test_create_from_system_clock(self):
        """The system clock gives a recent millisecond reading."""
        clock = Clock.create()
        assert clock.logical == 0
        assert clock.physical > 1_600_000_000_000

    def test_non_int_reading_rejected(self):
        with pytest.raises(ValidationError):
            Clock.create(now=1.5)

    @pytest.mark.parametrize("bad", [5, None, "1679924536986"])
    def test_requires_timestamp(self, bad):
        """A Clock can only hold a Timestamp."""
        with pytest.raises(ValidationError):
            Clock(bad)

    def test_clock_is_immutable(self, clock):
        with pytest.raises(AttributeError):
            clock.timestamp = pack(0, 0)

    def test_str(self, t0):
        text = str(Clock.at(t0, 3))
        assert f"wall_time={t0}" in text
        assert "logical_time=3" in text


class TestCurrent:
    """Tests for resync-to-wall-clock."""

    def test_wall_clock_ahead_resets_counter(self, t0):
        clock = Clock.at(t0, 7)
        result = clock_current(clock, t0 + 5)
        assert result.timestamp == pack(t0 + 5, 0)

    @pytest.mark.parametrize("delta", [0, -1, -1000])
    def test_wall_clock_not_ahead_returns_same(self, t0, delta):
        """Stalled or lagging wall clock leaves the clock untouched."""
        clock = Clock.at(t0, 7)
        assert clock_current(clock, t0 + delta) is clock

    def test_method_uses_wall_clock(self, clock, wall, t0):
        wall.advance(3)
        assert clock.current(wall_clock=wall).timestamp == pack(t0 + 3, 0)
        assert wall.reads == 1

    def test_does_not_mutate(self, clock, t0):
        clock.current(now=t0 + 10)
        assert clock.timestamp == pack(t0, 0)


class TestAdvance:
    """Tests for advance-on-local-event."""

    def test_physical_jump(self, clock, t0):
        """A later wall clock is adopted with counter 0."""
        result = clock_advance(clock, t0 + 1)
        assert result.timestamp == pack(t0 + 1, 0)

    def test_same_millisecond_bumps_counter(self, clock, t0):
        result = clock_advance(clock, t0)
        assert result.timestamp == pack(t0, 1)

    def test_wall_clock_backwards_bumps_counter(self, t0):
        """A wall clock behind the HLC never moves it back."""
        clock = Clock.at(t0, 4)
        result = clock_advance(clock, t0 - 500)
        assert result.timestamp == pack(t0, 5)

    @pytest.mark.parametrize("delta", [-10, -1, 0, 1, 10])
    def test_strictly_monotonic(self, t0, delta):
        clock = Clock.at(t0, 3)
        assert clock.advance(now=t0 + delta).timestamp > clock.timestamp

    def test_twenty_events_frozen_wall_clock(self, t0, wall):
        """Twenty events in one millisecond get counters 1..20."""
        clock = Clock.create(wall_clock=wall)
        stamps = []
        for _ in range(20):
            clock = clock.advance(wall_clock=wall)
            stamps.append(clock.timestamp)

        assert [ts.logical for ts in stamps] == list(range(1, 21))
        assert all(ts.physical == t0 for ts in stamps)
        assert stamps == sorted(set(stamps))

    def test_twenty_events_moving_wall_clock(self, t0):
        """Each event is strictly later: bump by one or jump with reset."""
        readings = iter([t0, t0, t0 + 1, t0 + 1, t0 + 1, t0 - 3, t0 + 2] + [t0 + 2] * 14)
        wall = lambda: next(readings)

        clock = Clock.create(wall_clock=wall)
        previous = clock.timestamp
        for _ in range(20):
            clock = clock.advance(wall_clock=wall)
            ts = clock.timestamp
            assert ts > previous
            if ts.physical == previous.physical:
                assert ts.logical == previous.logical + 1
            else:
                assert ts.logical == 0
            previous = ts

    def test_system_clock(self):
        clock = Clock.create()
        assert clock.advance().timestamp > clock.timestamp


class TestMerge:
    """Tests for advance-on-receive."""

    def test_wall_clock_ahead_of_both(self, t0):
        clock = Clock.at(t0, 9)
        remote = pack(t0 + 5, 30)
        result = clock_update(clock, remote, t0 + 6)
        assert result.timestamp == pack(t0 + 6, 0)

    def test_wall_clock_must_exceed_both(self, t0):
        """Equal to the remote physical is not ahead of it."""
        clock = Clock.at(t0, 9)
        remote = pack(t0 + 5, 30)
        result = clock_update(clock, remote, t0 + 5)
        assert result.timestamp == pack(t0 + 5, 31)

    def test_remote_dominates(self, t0):
        """A newer remote is adopted with its counter bumped."""
        clock = Clock.at(t0, 20)
        remote = pack(t0 + 200, 100)
        result = clock_update(clock, remote, t0)
        assert result.timestamp == pack(t0 + 200, 101)

    def test_remote_dominates_same_millisecond(self, t0):
        clock = Clock.at(t0, 2)
        remote = pack(t0, 8)
        assert clock_update(clock, remote, t0).timestamp == pack(t0, 9)

    def test_local_dominates(self, t0):
        """An older remote only triggers a bump of the local counter."""
        clock = Clock.at(t0 + 200, 101)
        remote = pack(t0, 10000)
        result = clock_update(clock, remote, t0)
        assert result.timestamp == pack(t0 + 200, 102)

    def test_local_dominates_ignores_remote_counter(self, t0):
        clock = Clock.at(t0, 5)
        for remote_logical in (0, 4):
            result = clock_update(clock, pack(t0, remote_logical), t0)
            assert result.timestamp == pack(t0, 6)

    def test_collision_raises(self, t0):
        """Identical local and remote timestamps cannot be merged."""
        clock = Clock.at(t0, 3)
        with pytest.raises(AmbiguousMergeError) as exc_info:
            clock_update(clock, pack(t0, 3), t0)
        assert exc_info.value.timestamp == pack(t0, 3)

    def test_collision_resolved_by_wall_clock(self, t0):
        """Case 1 is checked first, so a later wall clock avoids the collision."""
        clock = Clock.at(t0, 3)
        result = clock_update(clock, pack(t0, 3), t0 + 1)
        assert result.timestamp == pack(t0 + 1, 0)

    @pytest.mark.parametrize(
        "local,remote,now",
        [
            ((100, 0), (100, 5), 90),
            ((100, 5), (100, 0), 100),
            ((100, 0), (150, 2), 120),
            ((150, 2), (100, 0), 120),
            ((100, 9), (99, 70), 200),
        ],
    )
    def test_result_follows_both(self, local, remote, now):
        clock = Clock.at(*local)
        remote_ts = pack(*remote)
        result = clock_update(clock, remote_ts, now).timestamp
        assert result > clock.timestamp
        assert result > remote_ts

    def test_accepts_remote_clock(self, t0):
        clock = Clock.at(t0, 0)
        other = Clock.at(t0 + 1, 4)
        assert clock.merge(other, now=t0).timestamp == pack(t0 + 1, 5)

    def test_rejects_other_types(self, clock, t0):
        with pytest.raises(ValidationError):
            clock.merge(12345, now=t0)

    def test_merge_reads_wall_clock_once(self, clock, t0):
        wall = ManualWallClock(t0)
        clock.merge(pack(t0 + 1, 0), wall_clock=wall)
        assert wall.reads == 1

    def test_sender_keeps_its_clock(self, t0):
        """Sending a timestamp copies a value; the sender keeps advancing."""
        sender = Clock.at(t0, 0).advance(now=t0)
        receiver = Clock.at(t0 - 50, 0).merge(sender.timestamp, now=t0 - 50)

        assert receiver.timestamp == pack(t0, 2)
        assert sender.timestamp == pack(t0, 1)
        assert sender.advance(now=t0).timestamp == pack(t0, 2)
