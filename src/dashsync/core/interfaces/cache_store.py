"""Cache store interface."""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any, Protocol

from dashsync.core.entities.cache_entry import CacheEntry


class ICacheStore(Protocol):
    """Contract for the key -> entry store.

    Unlike the source, every method is synchronous and total: reads
    and writes never suspend, so they cannot interleave with other
    coroutines.
    """

    def get(self, key: str) -> CacheEntry | None:
        """Look up the entry for a key.

        Args:
            key: The partition key.

        Returns:
            The entry, or None if never fetched or invalidated.
        """
        ...

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
        ...

    def invalidate(self, key: str) -> bool:
        """Remove the entry for a key.

        Args:
            key: The partition key.

        Returns:
            True if an entry existed and was removed, False otherwise.
        """
        ...

    def invalidate_all(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed.
        """
        ...

    def is_fresh(self, key: str, now: datetime, ttl: timedelta) -> bool:
        """Check if a key has an entry younger than ttl.

        Args:
            key: The partition key.
            now: The reference time.
            ttl: Maximum age for the entry to count as fresh.

        Returns:
            True if present and fresh, False otherwise.
        """
        ...

    def keys(self) -> list[str]:
        """Return the keys that currently have an entry."""
        ...

    def __len__(self) -> int: ...

    def __contains__(self, key: object) -> bool: ...
