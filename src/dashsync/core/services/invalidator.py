"""Invalidator - soft and forced refresh of the focused key."""

import logging
from typing import Any

from dashsync.core.interfaces.cache_store import ICacheStore
from dashsync.core.services.active_key_selector import ActiveKeySelector
from dashsync.core.services.fetch_coordinator import FetchCoordinator

logger = logging.getLogger(__name__)


class Invalidator:
    """Drops cached entries and re-fetches the focused key.

    A soft refresh only drops the focused key. A forced refresh drops
    every key but still re-fetches the focused one alone; the others
    are fetched again lazily when they next gain focus.
    """

    def __init__(
        self,
        store: ICacheStore,
        coordinator: FetchCoordinator,
        selector: ActiveKeySelector,
    ) -> None:
        self._store = store
        self._coordinator = coordinator
        self._selector = selector

    def invalidate(self, key: str) -> bool:
        """Drop one key's entry and outdate its in-flight fetch.

        Args:
            key: The partition key.

        Returns:
            True if an entry existed, False otherwise.
        """
        self._coordinator.supersede(key)
        return self._store.invalidate(key)

    def invalidate_all(self) -> int:
        """Drop every entry and outdate every in-flight fetch.

        Returns:
            Number of entries dropped.
        """
        self._coordinator.supersede_all()
        return self._store.invalidate_all()

    async def refresh(self, force: bool = False) -> tuple[Any, ...] | None:
        """Invalidate and re-fetch the focused key.

        Args:
            force: Drop every key instead of only the focused one.

        Returns:
            The re-fetched items, or None if no key is focused, the
            fetch failed, or focus moved before it resolved.
        """
        key = self._selector.active_key
        if key is None:
            return None

        if force:
            dropped = self.invalidate_all()
            logger.debug("Forced refresh dropped %d entries", dropped)
        else:
            self.invalidate(key)

        return await self._selector.reload()
