"""
test_invariants.py - Tests for clock invariants.

These tests verify that the checks used by the transitions catch
timestamps that would reorder history.
"""

import pytest

from hlc_core import InvariantViolationError, pack
from hlc_core.invariants import Invariants


class TestStrictMonotonicity:
    def test_accepts_later(self):
        Invariants.assert_strictly_advances(pack(5, 1), pack(5, 2))

    @pytest.mark.parametrize("result", [pack(5, 1), pack(5, 0), pack(4, 9)])
    def test_rejects_equal_or_earlier(self, result):
        with pytest.raises(InvariantViolationError) as exc_info:
            Invariants.assert_strictly_advances(pack(5, 1), result)
        assert exc_info.value.invariant == Invariants.STRICT_MONOTONICITY


class TestHappensAfter:
    def test_accepts_result_after_both(self):
        Invariants.assert_happens_after(pack(5, 1), pack(6, 0), pack(6, 1))

    def test_rejects_result_not_after_remote(self):
        with pytest.raises(InvariantViolationError) as exc_info:
            Invariants.assert_happens_after(pack(5, 1), pack(6, 0), pack(5, 2))
        assert exc_info.value.invariant == Invariants.HAPPENS_AFTER
        assert "remote" in exc_info.value.details

    def test_rejects_result_not_after_local(self):
        with pytest.raises(InvariantViolationError):
            Invariants.assert_happens_after(pack(7, 1), pack(6, 0), pack(7, 1))


class TestNoRegression:
    def test_allows_unchanged(self):
        Invariants.assert_no_regression(pack(5, 1), pack(5, 1))

    def test_rejects_backwards(self):
        with pytest.raises(InvariantViolationError):
            Invariants.assert_no_regression(pack(5, 1), pack(5, 0))
