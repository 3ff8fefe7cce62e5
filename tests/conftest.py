"""
conftest.py - pytest fixtures for hlc_core tests.
"""

import pytest

from hlc_core import Clock, ManualWallClock
from hlc_core.config import REFERENCE_WALL_TIME_MS


@pytest.fixture
def t0():
    """Fixed wall time used across tests."""
    return REFERENCE_WALL_TIME_MS


@pytest.fixture
def wall(t0):
    """Manual wall clock frozen at t0."""
    return ManualWallClock(t0)


@pytest.fixture
def clock(t0):
    """Clock started at (t0, 0)."""
    return Clock.at(t0, 0)
