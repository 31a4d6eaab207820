"""Cache store implementations."""

from dashsync.infrastructure.stores.memory import InMemoryCacheStore

__all__ = ["InMemoryCacheStore"]
