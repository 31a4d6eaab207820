"""Tests for ActiveKeySelector."""

import asyncio
from datetime import timedelta
from typing import Any

import pytest
from conftest import FakeSource, ManualClock, settle

from dashsync import (
    ActiveKeySelector,
    ActiveView,
    FetchCoordinator,
    InMemoryCacheStore,
)

TTL = timedelta(minutes=5)


@pytest.fixture
def selector(
    store: InMemoryCacheStore,
    coordinator: FetchCoordinator,
    clock: ManualClock,
) -> ActiveKeySelector:
    """Create a selector with a five minute TTL."""
    return ActiveKeySelector(store, coordinator, ttl=TTL, clock=clock)


class TestFreshHit:
    """Tests for serving fresh entries."""

    @pytest.mark.asyncio
    async def test_fresh_entry_served_without_fetch(
        self,
        selector: ActiveKeySelector,
        store: InMemoryCacheStore,
        source: FakeSource,
        clock: ManualClock,
    ) -> None:
        """Test that a fresh entry is published immediately."""
        store.put("a@x.com", ["cached"], clock.now)
        await selector.mark_initialized()

        await selector.set_active("a@x.com")

        assert selector.view == ActiveView(
            active_key="a@x.com", items=("cached",), loading=False, error=None
        )
        assert source.fetch_calls == []

    @pytest.mark.asyncio
    async def test_fresh_hit_before_initialization(
        self,
        selector: ActiveKeySelector,
        store: InMemoryCacheStore,
        source: FakeSource,
        clock: ManualClock,
    ) -> None:
        """Test that fresh entries are served even while initializing."""
        store.put("a@x.com", ["cached"], clock.now)

        await selector.set_active("a@x.com")

        assert selector.view.items == ("cached",)
        assert source.fetch_calls == []

    @pytest.mark.asyncio
    async def test_same_key_is_noop(
        self, selector: ActiveKeySelector, source: FakeSource
    ) -> None:
        """Test that re-selecting the focused key does not refetch."""
        await selector.mark_initialized()
        await selector.set_active("a@x.com")
        generation = selector.generation

        await selector.set_active("a@x.com")

        assert source.calls_for("a@x.com") == 1
        assert selector.generation == generation

    @pytest.mark.asyncio
    async def test_cache_disabled_always_fetches(
        self,
        store: InMemoryCacheStore,
        coordinator: FetchCoordinator,
        source: FakeSource,
        clock: ManualClock,
    ) -> None:
        """Test that use_cache=False ignores fresh entries."""
        selector = ActiveKeySelector(
            store, coordinator, ttl=TTL, clock=clock, use_cache=False
        )
        store.put("a@x.com", ["cached"], clock.now)
        await selector.mark_initialized()

        await selector.set_active("a@x.com")

        assert source.calls_for("a@x.com") == 1
        assert len(selector.view.items) == 2


class TestMiss:
    """Tests for missing or stale entries."""

    @pytest.mark.asyncio
    async def test_miss_before_initialization_is_deferred(
        self, selector: ActiveKeySelector, source: FakeSource
    ) -> None:
        """Test that a miss waits for initialization instead of fetching."""
        await selector.set_active("a@x.com")

        assert source.fetch_calls == []
        assert selector.view.loading is True

        await selector.mark_initialized()

        assert source.calls_for("a@x.com") == 1
        assert selector.view.loading is False
        assert len(selector.view.items) == 2

    @pytest.mark.asyncio
    async def test_miss_after_initialization_loads(
        self, selector: ActiveKeySelector, source: FakeSource
    ) -> None:
        """Test that loading is published while the fetch runs."""
        await selector.mark_initialized()
        gate = source.hold("b@x.com")

        task = asyncio.create_task(selector.set_active("b@x.com"))
        await settle()

        assert selector.view.loading is True
        assert selector.view.active_key == "b@x.com"

        gate.set()
        await task

        assert selector.view.loading is False
        assert selector.view.items == ({"id": "t3", "read": False},)

    @pytest.mark.asyncio
    async def test_stale_entry_refetched(
        self,
        selector: ActiveKeySelector,
        store: InMemoryCacheStore,
        source: FakeSource,
        clock: ManualClock,
    ) -> None:
        """Test that an expired entry triggers a fetch."""
        store.put("a@x.com", ["old"], clock.now)
        await selector.mark_initialized()
        clock.advance(minutes=6)

        await selector.set_active("a@x.com")

        assert source.calls_for("a@x.com") == 1
        assert selector.view.items != ("old",)

    @pytest.mark.asyncio
    async def test_failure_published_and_items_kept(
        self,
        selector: ActiveKeySelector,
        store: InMemoryCacheStore,
        source: FakeSource,
        clock: ManualClock,
    ) -> None:
        """Test that a failed load publishes an error without clearing items."""
        store.put("a@x.com", ["cached"], clock.now)
        await selector.mark_initialized()
        await selector.set_active("a@x.com")
        source.failing.add("b@x.com")

        await selector.set_active("b@x.com")

        assert selector.view.loading is False
        assert selector.view.error is not None
        assert "b@x.com" in selector.view.error
        assert selector.view.items == ("cached",)

    @pytest.mark.asyncio
    async def test_preload_failure_shown_without_retry(
        self, selector: ActiveKeySelector, source: FakeSource
    ) -> None:
        """Test that a key that failed to preload is not fetched again at once."""
        await selector.set_active("a@x.com")

        await selector.mark_initialized({"a@x.com": RuntimeError("boom")})

        assert source.fetch_calls == []
        assert selector.view.error == "boom"
        assert selector.view.loading is False

    @pytest.mark.asyncio
    async def test_initialized_without_key_stops_loading(
        self, selector: ActiveKeySelector
    ) -> None:
        """Test that initialization with no keys clears the loading flag."""
        await selector.mark_initialized()

        assert selector.view.loading is False
        assert selector.view.active_key is None


class TestStaleResponses:
    """Tests for discarding responses of keys that lost focus."""

    @pytest.mark.asyncio
    async def test_response_for_previous_key_dropped(
        self,
        selector: ActiveKeySelector,
        store: InMemoryCacheStore,
        source: FakeSource,
        clock: ManualClock,
    ) -> None:
        """Test that a late response does not replace the focused key's items."""
        await selector.mark_initialized()
        gate = source.hold("a@x.com")
        task = asyncio.create_task(selector.set_active("a@x.com"))
        await settle()

        store.put("b@x.com", ["b-items"], clock.now)
        await selector.set_active("b@x.com")
        gate.set()
        await task

        assert selector.view.active_key == "b@x.com"
        assert selector.view.items == ("b-items",)
        assert selector.view.loading is False
        # The late response still populated its own key
        assert store.get("a@x.com") is not None

    @pytest.mark.asyncio
    async def test_late_failure_dropped(
        self,
        selector: ActiveKeySelector,
        store: InMemoryCacheStore,
        source: FakeSource,
        clock: ManualClock,
    ) -> None:
        """Test that a late failure for another key is not published."""
        await selector.mark_initialized()
        source.failing.add("a@x.com")
        gate = source.hold("a@x.com")
        task = asyncio.create_task(selector.set_active("a@x.com"))
        await settle()

        store.put("b@x.com", ["b-items"], clock.now)
        await selector.set_active("b@x.com")
        gate.set()
        await task

        assert selector.view.error is None


class TestListeners:
    """Tests for view subscriptions."""

    @pytest.mark.asyncio
    async def test_subscribe_and_unsubscribe(
        self, selector: ActiveKeySelector
    ) -> None:
        """Test that listeners see every view until removed."""
        views: list[ActiveView] = []
        unsubscribe = selector.subscribe(views.append)

        await selector.mark_initialized()
        await selector.set_active("a@x.com")
        seen = len(views)

        assert views[-1].items == selector.view.items
        assert any(view.loading for view in views)

        unsubscribe()
        await selector.set_active("b@x.com")
        assert len(views) == seen

    @pytest.mark.asyncio
    async def test_on_items_receives_fetched_items(
        self,
        store: InMemoryCacheStore,
        coordinator: FetchCoordinator,
        clock: ManualClock,
    ) -> None:
        """Test that the items hook sees fetched and cached items."""
        received: list[tuple[str, tuple[Any, ...]]] = []
        selector = ActiveKeySelector(
            store,
            coordinator,
            ttl=TTL,
            clock=clock,
            on_items=lambda key, items: received.append((key, items)),
        )
        store.put("b@x.com", ["cached"], clock.now)
        await selector.mark_initialized()

        await selector.set_active("a@x.com")
        await selector.set_active("b@x.com")

        assert [key for key, _ in received] == ["a@x.com", "b@x.com"]
        assert received[1][1] == ("cached",)

    @pytest.mark.asyncio
    async def test_fail_publishes_global_error(
        self, selector: ActiveKeySelector
    ) -> None:
        """Test that a global failure ends initialization with an error."""
        selector.fail(RuntimeError("no accounts"))

        assert selector.initialized is True
        assert selector.view.loading is False
        assert selector.view.error == "no accounts"
