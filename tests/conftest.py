"""Shared pytest fixtures."""

# Clear settings cache before any imports to prevent stale values
from cosmic_core.config import get_settings

get_settings.cache_clear()

from datetime import date, datetime, timedelta, timezone

import pytest

from cosmic_core.store.backends import MemoryBackend
from cosmic_core.store.durable_store import DurableStore


class FakeClock:
    """Controllable clock for the cache, quota and grant components."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def today(self) -> date:
        return self.now.date()

    def millis(self) -> int:
        return int(self.now.timestamp() * 1000)

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def store(memory_backend):
    return DurableStore(memory_backend)
