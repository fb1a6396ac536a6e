"""Display ordering for shopping list items."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, Optional, Protocol, Tuple


class SortableItem(Protocol):
    id: Any
    checked_at: Optional[datetime]
    sort_index: int
    updated_at: Optional[datetime]


def display_sort_key(item: SortableItem) -> Tuple[bool, int, bool, datetime, Any]:
    """Unchecked first, then prior sort index, last update and id as tie-breaks."""

    return (
        item.checked_at is not None,
        item.sort_index if item.sort_index is not None else 0,
        # Undated rows sort first without comparing naive and aware timestamps.
        item.updated_at is not None,
        item.updated_at or datetime.min,
        item.id,
    )


def sort_for_display(items: Iterable[SortableItem]) -> List[SortableItem]:
    return sorted(items, key=display_sort_key)


def compute_sort_order(items: Iterable[SortableItem]) -> List[Tuple[Any, int]]:
    """Return ``(item_id, sort_index)`` pairs forming a dense 0..N-1 sequence.

    Running this on its own output yields the same assignment.
    """

    return [(item.id, index) for index, item in enumerate(sort_for_display(items))]


__all__ = ["SortableItem", "display_sort_key", "sort_for_display", "compute_sort_order"]
