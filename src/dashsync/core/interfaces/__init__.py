"""Core interfaces (Protocol classes) for dashsync."""

from dashsync.core.interfaces.cache_store import ICacheStore
from dashsync.core.interfaces.item_source import IItemSource

__all__ = [
    "ICacheStore",
    "IItemSource",
]
