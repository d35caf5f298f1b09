"""Service test fixtures — in-memory store, controllable clock, recording sinks.

Invariants:
    - Every test gets a fresh in-memory SQLite database (StaticPool, one connection)
    - The clock advances one second per call so ledger order is deterministic
    - Sinks record published events in order; FailingSink always raises

Design Decisions:
    - Real DatabaseSessionManager instead of fakes: the services' transactional
      guarantees are exercised against the SQL store they run on in production
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from stockhub.infrastructure.database import DatabaseSessionManager
from stockhub.services.exchange_membership import ExchangeMembershipEngine
from stockhub.services.stock_lifecycle import StockLifecycleManager


class StepClock:
    """Deterministic clock: each call returns the previous instant plus `step`."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


class RecordingSink:
    def __init__(self):
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [f"{e.entity.value}.{e.kind.value}" for e in self.events]


class FailingSink:
    def publish(self, event) -> None:
        raise RuntimeError("sink offline")


@pytest.fixture
def store():
    manager = DatabaseSessionManager("sqlite://")
    manager.create_schema()
    yield manager
    manager.dispose()


@pytest.fixture
def clock():
    return StepClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def engine(store, sink):
    return ExchangeMembershipEngine(store, threshold=10, sink=sink)


@pytest.fixture
def stocks(store, engine, sink, clock):
    return StockLifecycleManager(store, engine, sink=sink, clock=clock)


@pytest.fixture
def make_stocks(stocks):
    """Create `n` stocks named S0..S{n-1}; returns their ids."""
    def _make(n: int, prefix: str = "S") -> list[int]:
        return [
            stocks.create(f"{prefix}{i}", None, Decimal("10")).id
            for i in range(n)
        ]
    return _make


@pytest.fixture
def live_exchange(engine, make_stocks):
    """Factory: an exchange holding `n` members, set live when n >= threshold."""
    def _make(name: str, n: int):
        exchange = engine.create(name)
        for stock_id in make_stocks(n, prefix=f"{name}-"):
            engine.add_member(exchange.id, stock_id)
        if n >= engine.threshold:
            exchange = engine.update(exchange.id, live_in_market=True)
        return engine.get(exchange.id)
    return _make


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def step_clock():
    """Factory for clocks with a custom start and step."""
    return StepClock
