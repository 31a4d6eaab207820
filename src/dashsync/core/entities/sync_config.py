"""Synchronization cache configuration entity."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass
class SyncConfig:
    """Synchronization cache configuration.

    TTL and the two source endpoints are the only knobs the cache
    really needs; the remaining flags toggle optional behaviour.

    Freshness:
        An entry is served from cache while ``now - fetched_at < ttl``.
        Stale entries stay in the store until invalidated or
        overwritten by a successful re-fetch.

    Preloading:
        With ``preload=True`` every discovered key is fetched
        concurrently during initialization. With ``preload=False``
        only the first key is loaded, lazily, once it becomes active.
    """

    enabled: bool = True
    ttl: timedelta = timedelta(minutes=5)
    max_entries: int | None = None  # None = unbounded, no eviction
    preload: bool = True

    def __post_init__(self) -> None:
        """Validate the configured limits."""
        if self.ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        if self.max_entries is not None and self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")

    @property
    def ttl_ms(self) -> int:
        """Get the TTL in milliseconds."""
        return int(self.ttl / timedelta(milliseconds=1))

    @classmethod
    def from_ttl_ms(cls, ttl_ms: int, **kwargs: Any) -> "SyncConfig":
        """Build a config from a millisecond TTL.

        Args:
            ttl_ms: Time-to-live in milliseconds.
            **kwargs: Remaining SyncConfig fields.

        Returns:
            A new SyncConfig instance.
        """
        return cls(ttl=timedelta(milliseconds=ttl_ms), **kwargs)
