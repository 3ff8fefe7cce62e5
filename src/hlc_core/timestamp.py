"""
timestamp.py - Packed Hybrid Logical Clock timestamps.

A timestamp is a single 64-bit unsigned integer:

    | reserved (2) | physical ms (46) | logical counter (16) |

Because physical time occupies the high bits, comparing two packed
values as integers is the same as comparing (physical, logical)
lexicographically. That is what makes the packed form usable directly
as a sort key, an index column or a wire value.
"""

from dataclasses import dataclass

from hlc_core.config import (
    LOGICAL_BITS,
    LOGICAL_MASK,
    MAX_LOGICAL,
    MAX_PACKED,
    MAX_PHYSICAL,
    RESERVED_MASK,
    TOTAL_BITS,
)
from hlc_core.errors import OutOfRangeError, ValidationError


def _require_int(name: str, value: object) -> int:
    # bool is an int subclass but never a meaningful clock reading
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"{name} must be an int, got {type(value).__name__}",
            field=name,
            value=value,
        )
    return value


@dataclass(frozen=True, order=True)
class Timestamp:
    """
    Immutable packed HLC timestamp.
    
    Build instances with pack() or Timestamp.from_value(); the
    constructor only checks that the packed value is well formed.
    
    Fields:
    - value: The packed 64-bit representation
    """
    value: int

    def __post_init__(self) -> None:
        _require_int("value", self.value)
        if self.value < 0 or self.value >> TOTAL_BITS:
            raise ValidationError(
                f"Packed timestamp must be an unsigned {TOTAL_BITS}-bit integer",
                field="value",
                value=self.value,
            )
        if self.value & RESERVED_MASK:
            raise ValidationError(
                "Packed timestamp has reserved bits set",
                field="value",
                value=hex(self.value),
            )

    @classmethod
    def from_value(cls, value: int) -> "Timestamp":
        """Wrap a packed value received from storage or the wire."""
        return cls(value)

    @property
    def physical(self) -> int:
        """Wall time component in milliseconds."""
        return self.value >> LOGICAL_BITS

    @property
    def logical(self) -> int:
        """Logical counter component."""
        return self.value & LOGICAL_MASK

    def format(self) -> str:
        """Human readable form: physical ms and the counter as 4 hex digits."""
        return f"{self.physical}:{self.logical:04x}"

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return format(self.value, "b")

    def __repr__(self) -> str:
        return f"Timestamp(physical={self.physical}, logical={self.logical})"


def pack(physical: int, logical: int) -> Timestamp:
    """
    Build a timestamp from its physical and logical parts.
    
    Args:
        physical: Milliseconds since the epoch, 0..2^46-1
        logical: Counter within the millisecond, 0..65535
        
    Returns:
        The packed Timestamp
        
    Raises:
        ValidationError: If either part is not an int
        OutOfRangeError: If either part does not fit its bit width
    """
    _require_int("physical", physical)
    _require_int("logical", logical)

    if not 0 <= physical <= MAX_PHYSICAL:
        raise OutOfRangeError("physical", physical, MAX_PHYSICAL)
    if not 0 <= logical <= MAX_LOGICAL:
        raise OutOfRangeError("logical", logical, MAX_LOGICAL)

    return Timestamp((physical << LOGICAL_BITS) | logical)


def physical_part(ts: Timestamp) -> int:
    """Extract the high 46 bits (wall time in ms)."""
    return ts.value >> LOGICAL_BITS


def logical_part(ts: Timestamp) -> int:
    """Extract the low 16 bits (logical counter)."""
    return ts.value & LOGICAL_MASK


def compare(a: Timestamp, b: Timestamp) -> int:
    """
    Compare two timestamps.
    
    Physical parts are compared first, logical parts break ties.
    For in-range timestamps this agrees with comparing packed values.
    
    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    key_a = (physical_part(a), logical_part(a))
    key_b = (physical_part(b), logical_part(b))

    if key_a < key_b:
        return -1
    elif key_a > key_b:
        return 1
    else:
        return 0


# Largest representable timestamp
MAX_TIMESTAMP = Timestamp(MAX_PACKED)
