"""Shared fixtures for the bucket list tests."""

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

import pytest

from bucket_list.database import GoalStore, MemoryPersistence
from bucket_list.observability import ObservabilitySink

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingSink(ObservabilitySink):
    """Keeps every call so tests can assert on them."""

    def __init__(self):
        self.events = []
        self.logs = []
        self.spans = []

    def event(self, action, attributes=None):
        self.events.append((action, dict(attributes or {})))

    def log(self, level, message, context=None):
        self.logs.append((level, message, dict(context or {})))

    @contextmanager
    def span(self, name, attributes=None):
        self.spans.append(name)
        yield

    def actions(self):
        return [action for action, _ in self.events]


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def persistence():
    return MemoryPersistence()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store(persistence, sink, clock):
    return GoalStore(persistence, sink=sink, clock=clock)


@pytest.fixture
def yesterday(clock):
    return clock.now.date() - timedelta(days=1)


@pytest.fixture
def tomorrow(clock):
    return clock.now.date() + timedelta(days=1)
