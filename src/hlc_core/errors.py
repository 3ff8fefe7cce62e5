"""
errors.py - Domain-specific exceptions for hlc_core.

All exceptions inherit from HLCError for unified handling.
Each exception type represents a distinct failure mode.
"""

from typing import Any


class HLCError(Exception):
    """Base exception for all hlc_core errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


class InvariantViolationError(HLCError):
    """
    Raised when a core clock invariant is violated.
    
    This is a critical error indicating a bug in a transition.
    The clock MUST NOT be used to stamp further events.
    """

    def __init__(self, invariant: str, details: str) -> None:
        super().__init__(
            f"Invariant violation: {invariant}. {details}",
            context={"invariant": invariant, "details": details},
        )
        self.invariant = invariant
        self.details = details


class ValidationError(HLCError):
    """
    Raised when input validation fails.
    
    This includes wrong types, wrong wire lengths, undecodable
    payloads and packed values with reserved bits set.
    """

    def __init__(
        self, message: str, field: str | None = None, value: Any = None
    ) -> None:
        context = {}
        if field is not None:
            context["field"] = field
        if value is not None:
            context["value"] = repr(value)[:100]
        super().__init__(message, context=context)
        self.field = field
        self.value = value


class OutOfRangeError(ValidationError):
    """
    Raised when a physical or logical part does not fit its bit width.
    
    Values are rejected rather than masked: truncation would
    silently corrupt the ordering of packed timestamps.
    """

    def __init__(self, field: str, value: int, maximum: int) -> None:
        super().__init__(
            f"{field} must be in [0, {maximum}], got {value}",
            field=field,
            value=value,
        )
        self.context["maximum"] = maximum
        self.maximum = maximum


class LogicalOverflowError(HLCError):
    """
    Raised when the logical counter would pass its 16-bit maximum.
    
    Only raised under OverflowPolicy.FAIL. The caller should wait
    until the wall clock moves past `physical` and try again.
    """

    def __init__(self, physical: int, logical: int, primitive: str) -> None:
        super().__init__(
            f"Logical counter exhausted at physical time {physical}",
            context={"physical": physical, "logical": logical, "primitive": primitive},
        )
        self.physical = physical
        self.logical = logical
        self.primitive = primitive


class AmbiguousMergeError(HLCError):
    """
    Raised when a remote timestamp is identical to the local one.
    
    Two independent events with the same timestamp cannot be
    ordered without a node identifier, which this clock does not carry.
    """

    def __init__(self, timestamp: Any) -> None:
        super().__init__(
            "Cannot merge identical local and remote timestamps",
            context={"timestamp": timestamp},
        )
        self.timestamp = timestamp
