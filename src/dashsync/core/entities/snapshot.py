"""View-facing state published by the synchronization cache."""

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class KeySummary:
    """One discovered partition as shown by the UI.

    ``count`` is whatever the configured projection derives from the
    partition's items (unread threads, open deals, ...). It stays 0
    until items for the key have been fetched at least once.
    """

    key: str
    label: str
    count: int = 0

    def with_count(self, count: int) -> "KeySummary":
        """Return a copy carrying a new derived count."""
        return replace(self, count=count)


@dataclass(frozen=True)
class SyncSnapshot:
    """Immutable view of the cache state at one point in time."""

    keys: tuple[KeySummary, ...] = ()
    active_key: str | None = None
    items: tuple[Any, ...] = ()
    loading: bool = True
    error: str | None = None
    initialized: bool = False

    def summary_for(self, key: str) -> KeySummary | None:
        """Look up the summary for a key.

        Args:
            key: The partition key.

        Returns:
            The matching KeySummary, or None if the key is unknown.
        """
        for summary in self.keys:
            if summary.key == key:
                return summary
        return None
