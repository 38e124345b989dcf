"""Pytest fixtures for the payment gateway tests."""

from datetime import datetime, timedelta, timezone

import pytest

from safaritix.integrations.clients.mocks.mtn import MTNMockGateway
from safaritix.integrations.clients.mocks.transaction_store import TransactionStore


class FakeClock:
    """Hand-driven replacement for datetime.now(timezone.utc)."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    """Fresh in-memory transaction store per test."""
    return TransactionStore()


@pytest.fixture
def mock_gateway(store, clock):
    """Simulated gateway without artificial latency."""
    return MTNMockGateway(store=store, latency=(0.0, 0.0), clock=clock)
