"""Shared pytest fixtures for days tests."""

import tempfile
from datetime import date, datetime, time, timedelta
from pathlib import Path

import pytest

from days.config import DaysConfig
from days.engine import DaysEngine


def local_dt(year, month, day, hour=12, minute=0):
    """Timezone-aware local datetime whose local calendar day is year-month-day."""
    return datetime(year, month, day, hour, minute).astimezone()


def at_day(d: date, hour=12):
    return datetime.combine(d, time(hour)).astimezone()


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def temp_home():
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_home):
    """Create a test configuration."""
    return DaysConfig(data_dir=temp_home)


@pytest.fixture
def clock():
    return FixedClock(local_dt(2024, 3, 15, 9, 30))


@pytest.fixture
def engine(config, clock):
    """Create a test engine on a fixed clock."""
    return DaysEngine(config, clock=clock)
