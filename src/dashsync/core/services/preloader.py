"""Key registry and preloader - discovers keys and warms the cache."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from dashsync.core.interfaces.cache_store import ICacheStore
from dashsync.core.interfaces.item_source import IItemSource
from dashsync.core.services.fetch_coordinator import FetchCoordinator
from dashsync.exceptions import DiscoveryError

logger = logging.getLogger(__name__)

CountProjection = Callable[[Sequence[Any]], int]


@dataclass
class PreloadResult:
    """Outcome of one initialization pass.

    Every discovered key ends up in exactly one of ``items`` or
    ``errors``. ``counts`` only covers keys that have an entry.
    """

    keys: tuple[str, ...] = ()
    items: dict[str, tuple[Any, ...]] = field(default_factory=dict)
    errors: dict[str, BaseException] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def failed_keys(self) -> tuple[str, ...]:
        """Get the keys whose preload failed, in discovery order."""
        return tuple(key for key in self.keys if key in self.errors)


class Preloader:
    """Discovers the partition keys and fetches them all concurrently.

    A failing key never aborts its siblings: each key's fetch settles
    on its own and a failed key simply has no entry afterwards, to be
    retried lazily on first access.
    """

    def __init__(
        self,
        source: IItemSource,
        coordinator: FetchCoordinator,
        store: ICacheStore,
        count: CountProjection = len,
    ) -> None:
        """Initialize the preloader.

        Args:
            source: The collaborator providing ``list_keys``.
            coordinator: Coordinator used for every per-key fetch.
            store: Store the derived counts are read from.
            count: Projection deriving a per-key count from its items.
        """
        self._source = source
        self._coordinator = coordinator
        self._store = store
        self._count = count

    async def discover(self) -> tuple[str, ...]:
        """List the partition keys.

        Duplicates are collapsed, keeping the first occurrence.

        Returns:
            The discovered keys, in source order.

        Raises:
            DiscoveryError: If the source failed to list keys.
        """
        try:
            listed = await self._source.list_keys()
        except Exception as e:
            logger.warning("Key discovery failed: %s", e)
            raise DiscoveryError(f"Failed to list keys: {e}") from e
        return tuple(dict.fromkeys(listed))

    async def initialize(
        self,
        preload: bool = True,
        on_discovered: Callable[[tuple[str, ...]], None] | None = None,
    ) -> PreloadResult:
        """Discover keys and preload every one of them.

        Args:
            preload: When False, only discover keys.
            on_discovered: Called with the keys before the fan-out starts.

        Returns:
            The per-key outcome of the preload.

        Raises:
            DiscoveryError: If the source failed to list keys.
        """
        keys = await self.discover()
        result = PreloadResult(keys=keys)
        if on_discovered is not None:
            on_discovered(keys)

        if not keys:
            logger.info("No keys discovered; nothing to preload")
            return result
        if not preload:
            return result

        outcomes = await asyncio.gather(
            *(self._coordinator.fetch_for_key(key) for key in keys),
            return_exceptions=True,
        )
        for key, outcome in zip(keys, outcomes):
            if isinstance(outcome, BaseException):
                result.errors[key] = outcome
            else:
                result.items[key] = outcome

        result.counts = self.counts(keys)
        logger.info(
            "Preloaded %d of %d keys", len(result.items), len(keys)
        )
        return result

    def counts(self, keys: Sequence[str]) -> dict[str, int]:
        """Derive counts for the keys that currently have an entry.

        Args:
            keys: Keys to derive counts for.

        Returns:
            Mapping of key to derived count; keys without an entry
            are omitted.
        """
        counts: dict[str, int] = {}
        for key in keys:
            entry = self._store.get(key)
            if entry is not None:
                counts[key] = self._count(entry.items)
        return counts
