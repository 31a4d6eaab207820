"""Pytest configuration for dashsync tests."""

import asyncio
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from dashsync import FetchCoordinator, InMemoryCacheStore


class FakeSource:
    """In-memory item source recording every call.

    Fetches for a key block on ``gates[key]`` when one is set, so tests
    can hold a fetch in flight; keys in ``failing`` raise once released.
    """

    def __init__(
        self,
        data: dict[str, list[Any]] | None = None,
        keys: Iterable[str] | None = None,
    ) -> None:
        self.data = dict(data or {})
        self.keys = list(keys) if keys is not None else list(self.data)
        self.failing: set[str] = set()
        self.list_error: Exception | None = None
        self.gates: dict[str, asyncio.Event] = {}
        self.list_calls = 0
        self.fetch_calls: list[str] = []

    async def list_keys(self) -> list[str]:
        self.list_calls += 1
        await asyncio.sleep(0)
        if self.list_error is not None:
            raise self.list_error
        return list(self.keys)

    async def fetch_items(self, key: str) -> list[Any]:
        self.fetch_calls.append(key)
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if key in self.failing:
            raise RuntimeError(f"boom: {key}")
        return list(self.data.get(key, []))

    def calls_for(self, key: str) -> int:
        return self.fetch_calls.count(key)

    def hold(self, key: str) -> asyncio.Event:
        """Block fetches for a key until the returned event is set."""
        gate = asyncio.Event()
        self.gates[key] = gate
        return gate


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


async def settle(rounds: int = 10) -> None:
    """Let every ready task run until it blocks."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def source() -> FakeSource:
    """Create a source with two accounts."""
    return FakeSource(
        {
            "a@x.com": [
                {"id": "t1", "read": False},
                {"id": "t2", "read": True},
            ],
            "b@x.com": [{"id": "t3", "read": False}],
        }
    )


@pytest.fixture
def clock() -> ManualClock:
    """Create a manual clock."""
    return ManualClock()


@pytest.fixture
def store() -> InMemoryCacheStore:
    """Create an unbounded store."""
    return InMemoryCacheStore()


@pytest.fixture
def coordinator(
    store: InMemoryCacheStore, source: FakeSource, clock: ManualClock
) -> FetchCoordinator:
    """Create a coordinator over the fake source."""
    return FetchCoordinator(store, source, clock=clock)
