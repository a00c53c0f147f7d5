"""Client-side sorting of library results."""

from operator import attrgetter
from typing import Any, Callable, List, Optional, Sequence, TypeVar, Union

from media_bridge.models import SortOrder

T = TypeVar("T")

SortKey = Union[str, Callable[[Any], Any]]


def key_extractor(sort_key: SortKey) -> Callable[[Any], Any]:
    """Turn an attribute path ("representative_item.title") or callable into a key function."""
    if callable(sort_key):
        return sort_key
    return attrgetter(sort_key)


def sort_entries(
    entries: Sequence[T], sort_key: Optional[SortKey], order: SortOrder = SortOrder.FORWARD
) -> List[T]:
    """Stable sort of library entries.

    Args:
        entries: Items or collections in fetch order
        sort_key: Attribute path or key function; None keeps fetch order
        order: FORWARD for ascending, REVERSE for descending

    Returns:
        New list; entries whose key is None keep their relative order at the end
    """
    if sort_key is None:
        return list(entries)

    key = key_extractor(sort_key)
    present = [entry for entry in entries if key(entry) is not None]
    missing = [entry for entry in entries if key(entry) is None]
    return sorted(present, key=key, reverse=order is SortOrder.REVERSE) + missing
