"""Cache entry entity."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry value object.

    Holds the ordered items fetched for one key together with the
    moment that fetch resolved.
    """

    key: str
    items: tuple[Any, ...]
    fetched_at: datetime

    def age(self, now: datetime) -> timedelta:
        """Return how long ago the entry was fetched.

        Args:
            now: The reference time.

        Returns:
            Elapsed time since the fetch resolved.
        """
        return now - self.fetched_at

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        """Check if the entry is still within its time-to-live.

        Args:
            now: The reference time.
            ttl: Maximum age for the entry to count as fresh.

        Returns:
            True if the entry is younger than ttl, False otherwise.
        """
        return self.age(now) < ttl

    @classmethod
    def create(
        cls,
        key: str,
        items: Iterable[Any],
        fetched_at: datetime | None = None,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Args:
            key: The partition key.
            items: The fetched items, in upstream order.
            fetched_at: Fetch completion time. Defaults to now (UTC).

        Returns:
            A new CacheEntry instance.
        """
        return cls(
            key=key,
            items=tuple(items),
            fetched_at=fetched_at or datetime.now(timezone.utc),
        )
