"""In-memory cache store implementation."""

from collections.abc import Iterable, MutableMapping
from datetime import datetime, timedelta
from typing import Any

from cachetools import LRUCache  # type: ignore[import-untyped]

from dashsync.core.entities.cache_entry import CacheEntry


class InMemoryCacheStore:
    """In-memory key -> entry store.

    Unbounded by default, so an entry only disappears when it is
    invalidated. Passing ``maxsize`` switches the backing mapping to a
    cachetools LRUCache, trading that guarantee for a memory bound.
    """

    def __init__(self, maxsize: int | None = None) -> None:
        """Initialize the in-memory cache store.

        Args:
            maxsize: Optional maximum number of keys kept. When reached,
                the least recently used key is evicted.
        """
        self._maxsize = maxsize
        self._entries: MutableMapping[str, CacheEntry]
        if maxsize is None:
            self._entries = {}
        else:
            self._entries = LRUCache(maxsize=maxsize)

    def get(self, key: str) -> CacheEntry | None:
        """Look up the entry for a key.

        Args:
            key: The partition key.

        Returns:
            The entry, or None if never fetched or invalidated.
        """
        return self._entries.get(key)

    def put(
        self,
        key: str,
        items: Iterable[Any],
        now: datetime,
    ) -> CacheEntry:
        """Overwrite the entry for a key.

        Args:
            key: The partition key.
            items: The fetched items.
            now: Time the fetch resolved.

        Returns:
            The stored entry.
        """
        entry = CacheEntry.create(key=key, items=items, fetched_at=now)
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> bool:
        """Remove the entry for a key.

        Args:
            key: The partition key.

        Returns:
            True if an entry existed and was removed, False otherwise.
        """
        try:
            del self._entries[key]
            return True
        except KeyError:
            return False

    def invalidate_all(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed.
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    def is_fresh(self, key: str, now: datetime, ttl: timedelta) -> bool:
        """Check if a key has an entry younger than ttl.

        Args:
            key: The partition key.
            now: The reference time.
            ttl: Maximum age for the entry to count as fresh.

        Returns:
            True if present and fresh, False otherwise.
        """
        entry = self._entries.get(key)
        return entry is not None and entry.is_fresh(now, ttl)

    def keys(self) -> list[str]:
        """Return the keys that currently have an entry."""
        return list(self._entries.keys())

    def __len__(self) -> int:
        """Return the number of cached keys."""
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Return whether a key has an entry."""
        return key in self._entries

    @property
    def maxsize(self) -> int | None:
        """Return the maximum number of keys, or None if unbounded."""
        return self._maxsize
