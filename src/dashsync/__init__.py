"""dashsync - Keyed synchronization cache for dashboard views.

Fetches item collections for a set of independent keys (one per
connected account, say), memoizes them with a TTL, coalesces
concurrent fetches for the same key, preloads every key in parallel
at startup, and supports soft and forced invalidation.

Example:
    from datetime import timedelta
    from dashsync import SyncConfig, SyncService, unread_count

    class MailSource:
        async def list_keys(self) -> list[str]:
            return ["a@x.com", "b@x.com"]

        async def fetch_items(self, key: str) -> list[dict]:
            return await bridge.threads(key)

    service = SyncService(
        MailSource(),
        config=SyncConfig(ttl=timedelta(minutes=5)),
        count=unread_count,
    )
    service.subscribe(lambda snapshot: render(snapshot))

    await service.initialize()           # discover + preload all keys
    await service.set_active_key("b@x.com")  # served from cache
    await service.refresh()              # drop b@x.com and refetch it
    await service.refresh(force=True)    # drop everything, refetch b@x.com
"""

from dashsync.core.entities import CacheEntry, KeySummary, SyncConfig, SyncSnapshot
from dashsync.core.interfaces import ICacheStore, IItemSource
from dashsync.core.services import (
    ActiveKeySelector,
    ActiveView,
    FetchCoordinator,
    Invalidator,
    Preloader,
    PreloadResult,
    SyncService,
)
from dashsync.exceptions import DiscoveryError, FetchError, SyncError
from dashsync.infrastructure import InMemoryCacheStore
from dashsync.projections import count_where, item_count, unread_count

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
    "CacheEntry",
    "SyncConfig",
    "KeySummary",
    "SyncSnapshot",
    # Core interfaces
    "ICacheStore",
    "IItemSource",
    # Core services
    "SyncService",
    "FetchCoordinator",
    "Preloader",
    "PreloadResult",
    "ActiveKeySelector",
    "ActiveView",
    "Invalidator",
    # Infrastructure implementations
    "InMemoryCacheStore",
    # Projections
    "count_where",
    "item_count",
    "unread_count",
    # Errors
    "SyncError",
    "DiscoveryError",
    "FetchError",
]
