"""HTTP source adapter for dashsync.

Example:
    import httpx
    from dashsync import SyncService, unread_count
    from dashsync.adapters.http import email_bridge_source

    async with httpx.AsyncClient(timeout=10.0) as client:
        source = email_bridge_source(
            "https://bridge.example.com", token=SECRET, client=client
        )
        service = SyncService(source, count=unread_count)
        await service.initialize()
"""

from dashsync.adapters.http.source import (
    HttpItemSource,
    email_bridge_source,
    mark_read_from_labels,
)

__all__ = [
    "HttpItemSource",
    "email_bridge_source",
    "mark_read_from_labels",
]
