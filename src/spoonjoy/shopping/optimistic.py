"""Optimistic client-side overrides layered over the server's shopping list."""

from __future__ import annotations

import dataclasses
from typing import Dict, FrozenSet, Iterable, List, Sequence

from spoonjoy.models.shopping import ShoppingListItem


@dataclasses.dataclass(frozen=True)
class OptimisticOverrides:
    """Speculative check/remove state keyed by item id, pending server confirmation."""

    checked: Dict[int, bool] = dataclasses.field(default_factory=dict)
    removed: FrozenSet[int] = frozenset()

    def with_checked(self, item_id: int, checked: bool) -> "OptimisticOverrides":
        return dataclasses.replace(self, checked={**self.checked, item_id: checked})

    def with_removed(self, item_id: int) -> "OptimisticOverrides":
        return dataclasses.replace(self, removed=self.removed | {item_id})

    def without(self, item_id: int) -> "OptimisticOverrides":
        checked = {key: value for key, value in self.checked.items() if key != item_id}
        return OptimisticOverrides(checked=checked, removed=self.removed - {item_id})

    def restricted_to(self, active_ids: Iterable[int]) -> "OptimisticOverrides":
        active = frozenset(active_ids)
        checked = {key: value for key, value in self.checked.items() if key in active}
        return OptimisticOverrides(checked=checked, removed=self.removed & active)

    def is_empty(self) -> bool:
        return not self.checked and not self.removed


@dataclasses.dataclass(frozen=True)
class ReconciledView:
    items: List[ShoppingListItem]
    overrides: OptimisticOverrides


def _display_key(item: ShoppingListItem) -> tuple:
    return (item.checked, item.sort_index, item.id)


def reconcile(
    server_items: Sequence[ShoppingListItem],
    overrides: OptimisticOverrides,
) -> ReconciledView:
    """Overlay overrides on server truth and drop overrides for vanished items."""

    active_items = [item for item in server_items if item.is_active]
    pruned = overrides.restricted_to(item.id for item in active_items)

    display: List[ShoppingListItem] = []
    for item in active_items:
        if item.id in pruned.removed:
            continue
        if item.id in pruned.checked and pruned.checked[item.id] != item.checked:
            item = item.model_copy(update={"checked": pruned.checked[item.id]})
        display.append(item)

    display.sort(key=_display_key)
    return ReconciledView(items=display, overrides=pruned)


def revert(overrides: OptimisticOverrides, item_id: int) -> OptimisticOverrides:
    """Forget a failed write so the next reconcile shows the server's state again."""

    return overrides.without(item_id)


__all__ = ["OptimisticOverrides", "ReconciledView", "reconcile", "revert"]
