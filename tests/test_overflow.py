"""
test_overflow.py - Tests for logical counter exhaustion.

A counter at 65535 must never spill into the physical field. Under
FAIL the transition raises; under BUMP_PHYSICAL it borrows the next
millisecond.
"""

import pytest

from hlc_core import (
    Clock,
    LogicalOverflowError,
    OutOfRangeError,
    OverflowPolicy,
    clock_advance,
    clock_update,
    pack,
)
from hlc_core.config import DEFAULT_OVERFLOW_POLICY, MAX_LOGICAL, MAX_PHYSICAL


class TestFailPolicy:
    """Tests for the default FAIL policy."""

    def test_default_is_fail(self):
        assert DEFAULT_OVERFLOW_POLICY is OverflowPolicy.FAIL

    def test_advance_raises(self, t0):
        clock = Clock.at(t0, MAX_LOGICAL)
        with pytest.raises(LogicalOverflowError) as exc_info:
            clock_advance(clock, t0)
        assert exc_info.value.physical == t0
        assert exc_info.value.logical == MAX_LOGICAL
        assert exc_info.value.primitive == "advance"

    def test_advance_recovers_when_wall_clock_moves(self, t0):
        """Retrying after the wall clock ticks succeeds."""
        clock = Clock.at(t0, MAX_LOGICAL)
        with pytest.raises(LogicalOverflowError):
            clock.advance(now=t0)
        assert clock.advance(now=t0 + 1).timestamp == pack(t0 + 1, 0)

    def test_last_counter_value_is_usable(self, t0):
        clock = Clock.at(t0, MAX_LOGICAL - 1)
        assert clock.advance(now=t0).timestamp == pack(t0, MAX_LOGICAL)

    def test_merge_remote_exhausted(self, t0):
        clock = Clock.at(t0, 0)
        with pytest.raises(LogicalOverflowError) as exc_info:
            clock_update(clock, pack(t0 + 5, MAX_LOGICAL), t0)
        assert exc_info.value.primitive == "merge"

    def test_merge_local_exhausted(self, t0):
        clock = Clock.at(t0 + 5, MAX_LOGICAL)
        with pytest.raises(LogicalOverflowError):
            clock_update(clock, pack(t0, 0), t0)

    def test_message_mentions_physical(self, t0):
        with pytest.raises(LogicalOverflowError, match=str(t0)):
            Clock.at(t0, MAX_LOGICAL).advance(now=t0)


class TestBumpPhysicalPolicy:
    """Tests for the BUMP_PHYSICAL policy."""

    def test_advance_borrows_next_millisecond(self, t0):
        clock = Clock.at(t0, MAX_LOGICAL)
        result = clock.advance(now=t0, overflow=OverflowPolicy.BUMP_PHYSICAL)
        assert result.timestamp == pack(t0 + 1, 0)
        assert result.timestamp > clock.timestamp

    def test_merge_borrows_next_millisecond(self, t0):
        clock = Clock.at(t0, 0)
        remote = pack(t0 + 5, MAX_LOGICAL)
        result = clock.merge(remote, now=t0, overflow=OverflowPolicy.BUMP_PHYSICAL)
        assert result.timestamp == pack(t0 + 6, 0)
        assert result.timestamp > remote

    def test_physical_exhausted(self):
        """The last representable timestamp cannot be followed."""
        clock = Clock.at(MAX_PHYSICAL, MAX_LOGICAL)
        with pytest.raises(OutOfRangeError):
            clock.advance(now=0, overflow=OverflowPolicy.BUMP_PHYSICAL)
