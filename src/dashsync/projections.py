"""Count projections for per-key summaries.

The cache never looks inside items. A projection is the one place
where item shape matters: it turns a key's items into the number
shown next to the key, such as unread threads.

Example:
    service = SyncService(source, count=unread_count)
    service = SyncService(source, count=count_where("status", "open"))
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

Projection = Callable[[Sequence[Any]], int]

_MISSING = object()


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, _MISSING)
    return getattr(item, name, _MISSING)


def item_count(items: Sequence[Any]) -> int:
    """Count every item."""
    return len(items)


def count_where(name: str, value: Any) -> Projection:
    """Build a projection counting items whose field equals a value.

    Works for mappings and for objects with attributes. Items lacking
    the field are not counted.

    Args:
        name: Field or attribute name.
        value: Value to match.

    Returns:
        A projection function.
    """

    def project(items: Sequence[Any]) -> int:
        return sum(1 for item in items if _field(item, name) == value)

    return project


unread_count: Projection = count_where("read", False)
