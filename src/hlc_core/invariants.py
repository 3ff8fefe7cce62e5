"""
invariants.py - Core clock invariant definitions and enforcement.

Invariant checks run after every transition that stamps an event.
If an invariant is violated, the transition MUST fail with
InvariantViolationError instead of handing out a timestamp that could
reorder history.
"""

from hlc_core.errors import InvariantViolationError
from hlc_core.timestamp import Timestamp, compare


class Invariants:
    """
    Core invariants that must hold for causal correctness.
    
    Violation of any invariant indicates a bug in a transition.
    """

    # Invariant names as constants for consistent error messages
    STRICT_MONOTONICITY = "STRICT_MONOTONICITY"
    HAPPENS_AFTER = "HAPPENS_AFTER"
    NO_REGRESSION = "NO_REGRESSION"

    @staticmethod
    def assert_strictly_advances(previous: Timestamp, result: Timestamp) -> None:
        """
        A local event must be stamped strictly after the previous one.
        
        Raises:
            InvariantViolationError: If result <= previous
        """
        if compare(result, previous) <= 0:
            raise InvariantViolationError(
                Invariants.STRICT_MONOTONICITY,
                f"{result!r} does not follow {previous!r}",
            )

    @staticmethod
    def assert_happens_after(
        local: Timestamp, remote: Timestamp, result: Timestamp
    ) -> None:
        """
        A receive event must be stamped after both the local history
        and the remote event that triggered it.
        
        Raises:
            InvariantViolationError: If result <= local or result <= remote
        """
        for side, ts in (("local", local), ("remote", remote)):
            if compare(result, ts) <= 0:
                raise InvariantViolationError(
                    Invariants.HAPPENS_AFTER,
                    f"Merged {result!r} does not follow {side} {ts!r}",
                )

    @staticmethod
    def assert_no_regression(previous: Timestamp, result: Timestamp) -> None:
        """
        A resync may leave the clock unchanged but never move it back.
        
        Raises:
            InvariantViolationError: If result < previous
        """
        if compare(result, previous) < 0:
            raise InvariantViolationError(
                Invariants.NO_REGRESSION,
                f"Resync moved clock back from {previous!r} to {result!r}",
            )
