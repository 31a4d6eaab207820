"""Sync service - main orchestrator for the synchronization cache."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any

from dashsync.core.entities.cache_entry import CacheEntry
from dashsync.core.entities.snapshot import KeySummary, SyncSnapshot
from dashsync.core.entities.sync_config import SyncConfig
from dashsync.core.interfaces.cache_store import ICacheStore
from dashsync.core.interfaces.item_source import IItemSource
from dashsync.core.services.active_key_selector import ActiveKeySelector, ActiveView
from dashsync.core.services.fetch_coordinator import FetchCoordinator
from dashsync.core.services.invalidator import Invalidator
from dashsync.core.services.preloader import CountProjection, Preloader, PreloadResult
from dashsync.exceptions import DiscoveryError
from dashsync.infrastructure.stores.memory import InMemoryCacheStore
from dashsync.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[SyncSnapshot], None]


class SyncService:
    """Domain service that orchestrates the synchronization cache.

    This is the main entry point for view components. It owns the
    cache store and wires the fetch coordinator, preloader, active-key
    selector and invalidator around it, so all state lives on one
    instance rather than at module level.

    Example:
        service = SyncService(
            source=email_bridge_source(BRIDGE_URL, client=client),
            config=SyncConfig(ttl=timedelta(minutes=5)),
            count=unread_count,
        )
        service.subscribe(render)
        await service.initialize()
        await service.set_active_key("b@x.com")
        await service.refresh(force=True)
    """

    def __init__(
        self,
        source: IItemSource,
        config: SyncConfig | None = None,
        store: ICacheStore | None = None,
        count: CountProjection = len,
        label: Callable[[str], str] | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the sync service.

        Args:
            source: The collaborator providing keys and items.
            config: Optional configuration. Uses defaults if not provided.
            store: Optional store. Defaults to an InMemoryCacheStore
                bounded by ``config.max_entries``.
            count: Projection deriving each key's count from its items.
            label: Optional function turning a key into its display
                label. Defaults to the key itself.
            clock: Optional time source. Defaults to UTC wall time.
        """
        self._config = config or SyncConfig()
        self._source = source
        self._count = count
        self._label = label or str
        self._clock = clock or utcnow

        if store is None:
            store = InMemoryCacheStore(maxsize=self._config.max_entries)
        self._store = store
        self._coordinator = FetchCoordinator(self._store, source, clock=self._clock)
        self._preloader = Preloader(source, self._coordinator, self._store, count)
        self._selector = ActiveKeySelector(
            self._store,
            self._coordinator,
            ttl=self._config.ttl,
            clock=self._clock,
            use_cache=self._config.enabled,
            on_items=self._record_count,
        )
        self._invalidator = Invalidator(self._store, self._coordinator, self._selector)

        self._keys: dict[str, KeySummary] = {}
        self._listeners: list[SnapshotListener] = []
        self._init_task: asyncio.Task[PreloadResult] | None = None

        self._selector.subscribe(self._on_view_change)

    @property
    def config(self) -> SyncConfig:
        """Get the sync configuration."""
        return self._config

    @property
    def keys(self) -> tuple[KeySummary, ...]:
        """Get the discovered keys with their derived counts."""
        return tuple(self._keys.values())

    @property
    def active_key(self) -> str | None:
        """Get the focused key."""
        return self._selector.active_key

    @property
    def items(self) -> tuple[Any, ...]:
        """Get the items published for the focused key."""
        return self._selector.view.items

    @property
    def loading(self) -> bool:
        """Get whether the focused key is loading."""
        return self._selector.view.loading

    @property
    def error(self) -> str | None:
        """Get the last error published for the focused key."""
        return self._selector.view.error

    @property
    def initialized(self) -> bool:
        """Get whether initialization has completed."""
        return self._selector.initialized

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with fetch statistics and the number of cached keys.
        """
        return {**self._coordinator.stats, "entries": len(self._store)}

    def snapshot(self) -> SyncSnapshot:
        """Capture the current state for rendering."""
        view = self._selector.view
        return SyncSnapshot(
            keys=self.keys,
            active_key=view.active_key,
            items=view.items,
            loading=view.loading,
            error=view.error,
            initialized=self._selector.initialized,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener for state changes.

        Args:
            listener: Called with a fresh snapshot after every change.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def entry(self, key: str) -> CacheEntry | None:
        """Look up the cached entry for a key without side effects."""
        return self._store.get(key)

    def is_fresh(self, key: str) -> bool:
        """Check whether a key's cached entry is still fresh."""
        return self._store.is_fresh(key, self._clock(), self._config.ttl)

    async def initialize(self) -> PreloadResult:
        """Discover keys, preload them and focus the first one.

        Runs once; later calls share the first call's outcome. After a
        DiscoveryError the next call discovers again.

        Returns:
            The per-key outcome of the preload.

        Raises:
            DiscoveryError: If the source failed to list keys.
        """
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
        return await asyncio.shield(self._init_task)

    async def set_active_key(self, key: str) -> None:
        """Focus a key, serving it from cache when fresh.

        Args:
            key: The partition key to focus.
        """
        await self._selector.set_active(key)

    async def refresh(self, force: bool = False) -> tuple[Any, ...] | None:
        """Invalidate and re-fetch the focused key.

        Args:
            force: Drop every cached key instead of only the focused one.

        Returns:
            The re-fetched items, or None if nothing was published.
        """
        return await self._invalidator.refresh(force=force)

    async def fetch_for_key(self, key: str) -> tuple[Any, ...]:
        """Fetch a key through the coordinator, bypassing freshness.

        Raises:
            FetchError: If the source failed to fetch the key.
        """
        return await self._coordinator.fetch_for_key(key)

    def invalidate(self, key: str) -> bool:
        """Drop one key's cached entry."""
        return self._invalidator.invalidate(key)

    def invalidate_all(self) -> int:
        """Drop every cached entry."""
        return self._invalidator.invalidate_all()

    async def aclose(self) -> None:
        """Close the source if it holds resources."""
        close = getattr(self._source, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "SyncService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _initialize(self) -> PreloadResult:
        try:
            result = await self._preloader.initialize(
                preload=self._config.preload,
                on_discovered=self._set_keys,
            )
        except DiscoveryError as e:
            # Allow the caller to retry discovery with another initialize().
            self._init_task = None
            self._selector.fail(e)
            raise

        for key, count in result.counts.items():
            self._keys[key] = self._keys[key].with_count(count)
        self._notify()

        if self._selector.active_key is None and result.keys:
            await self._selector.set_active(result.keys[0])
        await self._selector.mark_initialized(result.errors)
        logger.debug(
            "Initialized with %d keys, active key %r",
            len(result.keys),
            self._selector.active_key,
        )
        return result

    def _set_keys(self, keys: Sequence[str]) -> None:
        self._keys = {
            key: KeySummary(key=key, label=self._label(key)) for key in keys
        }
        self._notify()

    def _record_count(self, key: str, items: tuple[Any, ...]) -> None:
        summary = self._keys.get(key)
        if summary is None:
            return
        count = self._count(items)
        if summary.count != count:
            self._keys[key] = summary.with_count(count)
            self._notify()

    def _on_view_change(self, view: ActiveView) -> None:
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
