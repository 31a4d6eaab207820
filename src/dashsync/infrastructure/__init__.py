"""Infrastructure layer implementations for dashsync."""

from dashsync.infrastructure.stores import InMemoryCacheStore

__all__ = [
    "InMemoryCacheStore",
]
