"""Exceptions raised by dashsync."""


class SyncError(Exception):
    """Base class for synchronization cache failures."""

    pass


class DiscoveryError(SyncError):
    """Raised when the source fails to list partition keys.

    Initialization cannot continue without keys, so this is surfaced
    globally rather than per key.
    """

    pass


class FetchError(SyncError):
    """Raised when the source fails to fetch items for one key.

    Local to that key: siblings are unaffected and any entry already
    cached for the key is left in place.
    """

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Failed to fetch items for {key!r}")
