"""Active-key selector - serves the focused key from cache or the network."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Any

from dashsync.core.interfaces.cache_store import ICacheStore
from dashsync.core.services.fetch_coordinator import FetchCoordinator
from dashsync.exceptions import SyncError
from dashsync.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveView:
    """What the UI shows for the focused key."""

    active_key: str | None = None
    items: tuple[Any, ...] = ()
    loading: bool = True
    error: str | None = None


ViewListener = Callable[[ActiveView], None]
ItemsListener = Callable[[str, tuple[Any, ...]], None]


class ActiveKeySelector:
    """Tracks the focused key and publishes its items.

    On every change of focus the key is served from the store when
    fresh. Otherwise it is fetched through the coordinator, unless
    initialization is still running, in which case the load is
    deferred until ``mark_initialized``.

    Fetches cannot be cancelled, so each activation or reload bumps a
    generation counter and a response is published only if the
    generation is unchanged when it resolves. Responses for a key that
    lost focus in the meantime are dropped.
    """

    def __init__(
        self,
        store: ICacheStore,
        coordinator: FetchCoordinator,
        ttl: timedelta,
        clock: Clock | None = None,
        use_cache: bool = True,
        on_items: ItemsListener | None = None,
    ) -> None:
        """Initialize the selector.

        Args:
            store: Store read for fresh entries.
            coordinator: Coordinator used on a miss.
            ttl: Maximum entry age served without refetching.
            clock: Optional time source. Defaults to UTC wall time.
            use_cache: When False every activation fetches.
            on_items: Called with (key, items) whenever items for a key
                are served or fetched, including dropped responses.
        """
        self._store = store
        self._coordinator = coordinator
        self._ttl = ttl
        self._clock = clock or utcnow
        self._use_cache = use_cache
        self._on_items = on_items

        self._view = ActiveView()
        self._initialized = False
        self._generation = 0
        self._listeners: list[ViewListener] = []

    @property
    def view(self) -> ActiveView:
        """Get the currently published view."""
        return self._view

    @property
    def active_key(self) -> str | None:
        """Get the focused key."""
        return self._view.active_key

    @property
    def initialized(self) -> bool:
        """Get whether initialization has completed."""
        return self._initialized

    @property
    def generation(self) -> int:
        """Get the current load generation."""
        return self._generation

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Register a listener for view changes.

        Args:
            listener: Called with the new view after every change.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set_active(self, key: str) -> None:
        """Focus a key.

        Setting the key that is already focused does nothing.

        Args:
            key: The partition key to focus.
        """
        if key == self._view.active_key:
            return

        self._generation += 1
        self._publish(active_key=key)
        await self._resolve(key)

    async def mark_initialized(
        self,
        errors: Mapping[str, BaseException] | None = None,
    ) -> None:
        """Record that initialization finished and settle the focused key.

        A key whose preload failed shows that failure instead of being
        fetched again straight away.

        Args:
            errors: Per-key preload failures.
        """
        self._initialized = True
        key = self._view.active_key
        if key is None:
            self._publish(loading=False, error=None)
            return

        if self._serve_fresh(key):
            return
        if errors and key in errors:
            self._publish(items=(), loading=False, error=str(errors[key]))
            return

        await self.reload()

    def fail(self, error: BaseException) -> None:
        """Publish a global failure and stop waiting for initialization.

        Args:
            error: The failure to surface.
        """
        self._initialized = True
        self._generation += 1
        self._publish(loading=False, error=str(error))

    async def reload(self) -> tuple[Any, ...] | None:
        """Fetch the focused key through the coordinator.

        Failures are published as the view's error rather than raised.

        Returns:
            The fetched items, or None if there was nothing to load, the
            fetch failed, or the response was dropped as stale.
        """
        key = self._view.active_key
        if key is None:
            return None

        self._generation += 1
        generation = self._generation
        self._publish(loading=True, error=None)

        try:
            items = await self._coordinator.fetch_for_key(key)
        except SyncError as e:
            if generation != self._generation:
                logger.debug("Dropping stale failure for %r", key)
                return None
            self._publish(loading=False, error=str(e))
            return None

        if self._on_items is not None:
            self._on_items(key, items)
        if generation != self._generation:
            logger.debug("Dropping stale response for %r", key)
            return None

        self._publish(items=items, loading=False, error=None)
        return items

    async def _resolve(self, key: str) -> None:
        if self._serve_fresh(key):
            return
        if not self._initialized:
            logger.debug("Deferring load of %r until initialization completes", key)
            return
        await self.reload()

    def _serve_fresh(self, key: str) -> bool:
        if not self._use_cache:
            return False
        entry = self._store.get(key)
        if entry is None or not entry.is_fresh(self._clock(), self._ttl):
            return False

        logger.debug("Serving %r from cache", key)
        if self._on_items is not None:
            self._on_items(key, entry.items)
        self._publish(items=entry.items, loading=False, error=None)
        return True

    def _publish(self, **changes: Any) -> None:
        self._view = replace(self._view, **changes)
        for listener in list(self._listeners):
            listener(self._view)
