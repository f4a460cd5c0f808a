"""Shared pytest fixtures for test modules."""

import pytest

from tests.fakes.clock import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    """A controllable clock starting at t=1000s for TTL tests."""
    return FakeClock()
