"""Core domain layer for dashsync."""

from dashsync.core.entities import CacheEntry, KeySummary, SyncConfig, SyncSnapshot
from dashsync.core.interfaces import ICacheStore, IItemSource
from dashsync.core.services import SyncService

__all__ = [
    # Entities
    "CacheEntry",
    "SyncConfig",
    "KeySummary",
    "SyncSnapshot",
    # Interfaces
    "ICacheStore",
    "IItemSource",
    # Services
    "SyncService",
]
