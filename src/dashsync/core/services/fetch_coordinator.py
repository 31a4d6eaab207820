"""Fetch coordinator - single in-flight fetch per key with write-through."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from dashsync.core.interfaces.cache_store import ICacheStore
from dashsync.core.interfaces.item_source import IItemSource
from dashsync.exceptions import FetchError
from dashsync.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

Generation = tuple[int, int]


@dataclass
class _PendingFetch:
    """A network call currently outstanding for one key."""

    task: "asyncio.Task[tuple[Any, ...]]"
    generation: Generation


class FetchCoordinator:
    """Wraps the source's ``fetch_items`` call for the cache.

    Guarantees at most one outstanding network call per key. Callers
    arriving while a fetch is in flight await that same fetch and get
    its outcome, items or error. Successful results are written through
    to the store with the time the fetch resolved; failures leave the
    store untouched.

    Every invalidation advances the key's generation. A fetch issued
    under an older generation still answers its callers, but it does
    not repopulate the store, and newcomers wait for it to settle and
    then issue a fresh call instead of joining it.
    """

    def __init__(
        self,
        store: ICacheStore,
        source: IItemSource,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the fetch coordinator.

        Args:
            store: The store successful fetches are written to.
            source: The collaborator providing ``fetch_items``.
            clock: Optional time source. Defaults to UTC wall time.
        """
        self._store = store
        self._source = source
        self._clock = clock or utcnow

        self._in_flight: dict[str, _PendingFetch] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0

        # Statistics
        self._fetches = 0
        self._coalesced = 0
        self._failures = 0

    @property
    def in_flight(self) -> frozenset[str]:
        """Get the keys with an outstanding network call."""
        return frozenset(self._in_flight)

    @property
    def stats(self) -> dict[str, int]:
        """Get fetch statistics.

        Returns:
            Dictionary with network fetches issued, callers coalesced
            onto an existing fetch, and failed fetches.
        """
        return {
            "fetches": self._fetches,
            "coalesced": self._coalesced,
            "failures": self._failures,
        }

    def generation(self, key: str) -> Generation:
        """Return the current generation for a key."""
        return (self._epoch, self._generations.get(key, 0))

    def supersede(self, key: str) -> None:
        """Mark fetches issued so far for a key as outdated."""
        self._generations[key] = self._generations.get(key, 0) + 1

    def supersede_all(self) -> None:
        """Mark every fetch issued so far as outdated."""
        self._epoch += 1

    async def fetch_for_key(self, key: str) -> tuple[Any, ...]:
        """Fetch the items for a key, sharing any fetch already in flight.

        Args:
            key: The partition key.

        Returns:
            The fetched items.

        Raises:
            FetchError: If the source failed to fetch the key.
        """
        while True:
            pending = self._in_flight.get(key)
            if pending is None:
                break
            if pending.generation == self.generation(key):
                self._coalesced += 1
                logger.debug("Joining in-flight fetch for %r", key)
                return await asyncio.shield(pending.task)
            # Superseded fetch: let it settle, then issue our own.
            await asyncio.wait([pending.task])

        generation = self.generation(key)
        task = asyncio.ensure_future(self._fetch(key, generation))
        self._in_flight[key] = _PendingFetch(task=task, generation=generation)
        return await asyncio.shield(task)

    async def _fetch(self, key: str, generation: Generation) -> tuple[Any, ...]:
        """Run one network call and write its result through.

        Args:
            key: The partition key.
            generation: The key's generation when the call was issued.

        Returns:
            The fetched items.
        """
        self._fetches += 1
        try:
            items = tuple(await self._source.fetch_items(key))
        except Exception as e:
            self._failures += 1
            logger.warning("Fetch failed for %r: %s", key, e)
            raise FetchError(key, f"Failed to fetch items for {key!r}: {e}") from e
        finally:
            self._in_flight.pop(key, None)

        now = self._clock()
        if generation == self.generation(key):
            self._store.put(key, items, now)
        else:
            logger.debug("Discarding superseded fetch result for %r", key)
        return items
