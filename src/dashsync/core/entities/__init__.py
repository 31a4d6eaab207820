"""Domain entities for dashsync."""

from dashsync.core.entities.cache_entry import CacheEntry
from dashsync.core.entities.snapshot import KeySummary, SyncSnapshot
from dashsync.core.entities.sync_config import SyncConfig

__all__ = [
    "CacheEntry",
    "SyncConfig",
    "KeySummary",
    "SyncSnapshot",
]
