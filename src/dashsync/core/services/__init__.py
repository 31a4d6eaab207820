"""Domain services for dashsync."""

from dashsync.core.services.active_key_selector import ActiveKeySelector, ActiveView
from dashsync.core.services.fetch_coordinator import FetchCoordinator
from dashsync.core.services.invalidator import Invalidator
from dashsync.core.services.preloader import Preloader, PreloadResult
from dashsync.core.services.sync_service import SyncService

__all__ = [
    "SyncService",
    "FetchCoordinator",
    "Preloader",
    "PreloadResult",
    "ActiveKeySelector",
    "ActiveView",
    "Invalidator",
]
