"""
config.py - Configuration constants for hlc_core.

All configuration is immutable and defined at module level.
No mutable global state is permitted.

Packed timestamp layout (64 bits, most significant first):

    | reserved (2) | physical ms (46) | logical counter (16) |
"""

from enum import Enum
from typing import Final


class OverflowPolicy(Enum):
    """What to do when the logical counter would pass MAX_LOGICAL."""

    # Raise LogicalOverflowError; caller retries once wall time moves on
    FAIL = "fail"
    # Borrow the next millisecond and reset the counter
    BUMP_PHYSICAL = "bump_physical"


# Bit widths
RESERVED_BITS: Final[int] = 2
PHYSICAL_BITS: Final[int] = 46
LOGICAL_BITS: Final[int] = 16
TOTAL_BITS: Final[int] = RESERVED_BITS + PHYSICAL_BITS + LOGICAL_BITS

# Derived bounds and masks
MAX_PHYSICAL: Final[int] = (1 << PHYSICAL_BITS) - 1
MAX_LOGICAL: Final[int] = (1 << LOGICAL_BITS) - 1
LOGICAL_MASK: Final[int] = MAX_LOGICAL
RESERVED_MASK: Final[int] = ((1 << RESERVED_BITS) - 1) << (PHYSICAL_BITS + LOGICAL_BITS)
MAX_PACKED: Final[int] = (1 << (PHYSICAL_BITS + LOGICAL_BITS)) - 1

DEFAULT_OVERFLOW_POLICY: Final[OverflowPolicy] = OverflowPolicy.FAIL

# Wire format
WIRE_SIZE_BYTES: Final[int] = TOTAL_BITS // 8
DEFAULT_BYTE_ORDER: Final[str] = "big"

# Wall time used by the reference ordering scenario (2023-03-27T13:42:16.986Z)
REFERENCE_WALL_TIME_MS: Final[int] = 1679924536986

# Offset of the remote clock in the demo merge scenario
DEMO_REMOTE_SKEW_MS: Final[int] = 200
