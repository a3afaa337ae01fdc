"""
Shared pytest fixtures.
"""

import os
import sys
import pytest
from datetime import datetime, timedelta, timezone

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    """A FakeClock starting at 2026-01-01 12:00:00 UTC."""
    return FakeClock()


@pytest.fixture
def image():
    """A payload large enough to pass the minimum image size check."""
    return "data:image/jpeg;base64," + "A" * 2000
