"""Item source interface."""

from collections.abc import Sequence
from typing import Any, Protocol


class IItemSource(Protocol):
    """Contract for the remote collaborator the cache pulls from.

    Both calls may fail by raising any exception. ``fetch_items`` must
    be safe to call repeatedly for the same key, since concurrent
    requests are coalesced into one.
    """

    async def list_keys(self) -> Sequence[str]:
        """Discover the current set of partitions.

        Returns:
            Partition keys, in display order.
        """
        ...

    async def fetch_items(self, key: str) -> Sequence[Any]:
        """Fetch every item belonging to one partition.

        Args:
            key: The partition key.

        Returns:
            The partition's items, in upstream order.
        """
        ...
