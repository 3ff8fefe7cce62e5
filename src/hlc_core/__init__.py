"""
hlc_core - Hybrid Logical Clock

Packed 64-bit timestamps that combine wall time with a logical counter,
and the pure transitions that keep them causally ordered across nodes.
"""

from hlc_core.clock import Clock, clock_advance, clock_current, clock_update
from hlc_core.config import OverflowPolicy
from hlc_core.errors import (
    HLCError,
    ValidationError,
    OutOfRangeError,
    LogicalOverflowError,
    AmbiguousMergeError,
    InvariantViolationError,
)
from hlc_core.shared import SharedClock
from hlc_core.timestamp import Timestamp, compare, logical_part, pack, physical_part
from hlc_core.wallclock import ManualWallClock, WallClock, system_wall_clock

__version__ = "0.1.0"
__all__ = [
    # Core
    "Timestamp",
    "pack",
    "physical_part",
    "logical_part",
    "compare",
    "Clock",
    "clock_current",
    "clock_advance",
    "clock_update",
    "SharedClock",
    "OverflowPolicy",
    # Wall clock
    "WallClock",
    "ManualWallClock",
    "system_wall_clock",
    # Errors
    "HLCError",
    "ValidationError",
    "OutOfRangeError",
    "LogicalOverflowError",
    "AmbiguousMergeError",
    "InvariantViolationError",
]
