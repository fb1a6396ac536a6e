"""Tests for optimistic overrides over server shopping list state."""

from __future__ import annotations

from datetime import datetime

from spoonjoy.models.shopping import ShoppingListItem
from spoonjoy.shopping.optimistic import OptimisticOverrides, reconcile, revert


def _item(item_id: int, sort_index: int, *, checked: bool = False, deleted: bool = False) -> ShoppingListItem:
    return ShoppingListItem(
        id=item_id,
        shopping_list_id=1,
        ingredient_ref_id=item_id,
        ingredient_name=f"ingredient-{item_id}",
        sort_index=sort_index,
        checked=checked,
        checked_at=datetime(2025, 1, 1) if checked else None,
        deleted_at=datetime(2025, 1, 2) if deleted else None,
        created_at=datetime(2025, 1, 1),
        updated_at=datetime(2025, 1, 1),
    )


def test_checked_override_moves_item_to_checked_partition():
    server = [_item(1, 0), _item(2, 1), _item(3, 2)]
    overrides = OptimisticOverrides().with_checked(1, True)

    view = reconcile(server, overrides)

    assert [item.id for item in view.items] == [2, 3, 1]
    assert view.items[-1].checked is True
    assert server[0].checked is False


def test_removed_override_hides_item():
    overrides = OptimisticOverrides().with_removed(2)

    view = reconcile([_item(1, 0), _item(2, 1)], overrides)

    assert [item.id for item in view.items] == [1]


def test_overrides_for_vanished_items_are_pruned():
    overrides = OptimisticOverrides().with_checked(5, True).with_removed(6).with_checked(1, True)

    view = reconcile([_item(1, 0), _item(6, 1, deleted=True)], overrides)

    assert view.overrides.checked == {1: True}
    assert view.overrides.removed == frozenset()
    assert [item.id for item in view.items] == [1]


def test_revert_restores_server_state():
    server = [_item(1, 0, checked=True), _item(2, 1)]
    overrides = OptimisticOverrides().with_checked(1, False).with_removed(2)

    optimistic = reconcile(server, overrides)
    assert [(item.id, item.checked) for item in optimistic.items] == [(1, False)]

    reverted = revert(revert(overrides, 1), 2)
    view = reconcile(server, reverted)

    assert reverted.is_empty()
    assert [(item.id, item.checked) for item in view.items] == [(2, False), (1, True)]
