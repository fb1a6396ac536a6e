"""Unit tests for shopping list reconciliation."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from spoonjoy.db import shopping_list as repo
from spoonjoy.db.models import IngredientRefORM, ShoppingListItemORM
from spoonjoy.db.repository import session_scope
from spoonjoy.db.shopping_list import (
    add_from_recipe,
    add_item,
    clear_all,
    clear_completed,
    get_shopping_item,
    list_shopping_items,
    remove_item,
    reorder_shopping_list,
    toggle_check,
)

OWNER = "default"


def _names(owner: str = OWNER) -> list[str]:
    return [item.ingredient_name for item in list_shopping_items(owner).items]


def _sort_indices(owner: str = OWNER) -> list[int]:
    return [item.sort_index for item in list_shopping_items(owner).items]


def test_add_item_merges_same_identity_case_insensitively():
    first = add_item(OWNER, ingredient_name="Flour", quantity=2, unit_name="Cup")
    second = add_item(OWNER, ingredient_name="  flour ", quantity=1, unit_name="cup")

    assert second.id == first.id
    assert second.quantity == pytest.approx(3.0)
    assert second.ingredient_name == "flour"
    assert second.unit_name == "cup"
    assert second.display_quantity == "3"
    assert len(list_shopping_items(OWNER).items) == 1


def test_different_units_are_separate_rows():
    add_item(OWNER, ingredient_name="milk", quantity=1, unit_name="cup")
    add_item(OWNER, ingredient_name="milk", quantity=1, unit_name="gallon")

    items = list_shopping_items(OWNER).items
    assert len(items) == 2
    assert {item.unit_name for item in items} == {"cup", "gallon"}


def test_items_without_unit_merge_with_each_other():
    first = add_item(OWNER, ingredient_name="eggs", quantity=2)
    second = add_item(OWNER, ingredient_name="Eggs", quantity=4, unit_name="  ")

    assert second.id == first.id
    assert second.unit_id is None
    assert second.quantity == pytest.approx(6.0)


def test_merge_without_quantity_keeps_existing_quantity():
    add_item(OWNER, ingredient_name="rice", quantity=1.5, unit_name="cup")
    merged = add_item(OWNER, ingredient_name="rice", unit_name="cup")

    assert merged.quantity == pytest.approx(1.5)
    assert merged.display_quantity == "1 ½"


def test_insert_without_quantity_stores_none():
    item = add_item(OWNER, ingredient_name="basil")

    assert item.quantity is None
    assert item.display_quantity == ""
    assert item.category_key == "produce"
    assert item.icon_key == "leaf"
    assert item.icon_label == "Leafy greens"


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"ingredient_name": "flour", "quantity": -1}, "negative"),
        ({"ingredient_name": "   ", "quantity": 1}, "required"),
        ({"ingredient_name": "flour", "quantity": float("inf")}, "valid number"),
    ],
)
def test_add_item_rejects_invalid_input(kwargs, message):
    with pytest.raises(ValueError, match=message):
        add_item(OWNER, **kwargs)

    assert list_shopping_items(OWNER).items == []


def test_new_items_append_to_unchecked_end():
    add_item(OWNER, ingredient_name="apples", quantity=3)
    add_item(OWNER, ingredient_name="bread", quantity=1, unit_name="loaf")
    add_item(OWNER, ingredient_name="carrots", quantity=2, unit_name="lb")

    assert _names() == ["apples", "bread", "carrots"]
    assert _sort_indices() == [0, 1, 2]


def test_toggle_check_partitions_and_keeps_indices_dense():
    apples = add_item(OWNER, ingredient_name="apples", quantity=3)
    add_item(OWNER, ingredient_name="bread", quantity=1)
    add_item(OWNER, ingredient_name="carrots", quantity=2)

    checked = toggle_check(OWNER, apples.id)

    assert checked.checked is True
    assert checked.checked_at is not None
    assert _names() == ["bread", "carrots", "apples"]
    assert _sort_indices() == [0, 1, 2]
    shopping_list = list_shopping_items(OWNER)
    assert shopping_list.checked_count == 1
    assert shopping_list.unchecked_count == 2

    unchecked = toggle_check(OWNER, apples.id)

    assert unchecked.checked is False
    assert unchecked.checked_at is None
    assert _names()[-1] == "apples"
    assert _sort_indices() == [0, 1, 2]


def test_toggle_check_can_force_state():
    item = add_item(OWNER, ingredient_name="lemons", quantity=2)

    first = toggle_check(OWNER, item.id, checked=True)
    again = toggle_check(OWNER, item.id, checked=True)

    assert again.checked is True
    assert again.checked_at == first.checked_at


def test_merging_into_checked_item_does_not_uncheck_it():
    item = add_item(OWNER, ingredient_name="butter", quantity=1, unit_name="stick")
    toggle_check(OWNER, item.id)

    merged = add_item(OWNER, ingredient_name="butter", quantity=1, unit_name="stick")

    assert merged.checked is True
    assert merged.quantity == pytest.approx(2.0)


def test_remove_item_soft_deletes_and_redensifies():
    first = add_item(OWNER, ingredient_name="apples", quantity=3)
    second = add_item(OWNER, ingredient_name="bread", quantity=1)
    add_item(OWNER, ingredient_name="carrots", quantity=2)

    remove_item(OWNER, second.id)

    assert _names() == ["apples", "carrots"]
    assert _sort_indices() == [0, 1]
    assert get_shopping_item(OWNER, second.id) is None
    assert get_shopping_item(OWNER, first.id) is not None


def test_removed_item_is_revived_with_merged_quantity():
    tomatoes = add_item(OWNER, ingredient_name="tomatoes", quantity=4)
    add_item(OWNER, ingredient_name="onion", quantity=1)
    remove_item(OWNER, tomatoes.id)

    revived = add_item(OWNER, ingredient_name="tomatoes", quantity=2)

    assert revived.id == tomatoes.id
    assert revived.quantity == pytest.approx(6.0)
    assert revived.deleted_at is None
    assert sorted(_names()) == ["onion", "tomatoes"]


def test_removed_item_readded_without_quantity_keeps_amount():
    eggs = add_item(OWNER, ingredient_name="eggs", quantity=6, unit_name="whole")
    remove_item(OWNER, eggs.id)

    revived = add_item(OWNER, ingredient_name="eggs", unit_name="whole")

    assert revived.id == eggs.id
    assert revived.quantity == pytest.approx(6.0)
    assert revived.deleted_at is None


def test_removed_checked_item_stays_checked_on_manual_readd():
    basil = add_item(OWNER, ingredient_name="basil", quantity=1)
    toggle_check(OWNER, basil.id)
    remove_item(OWNER, basil.id)

    revived = add_item(OWNER, ingredient_name="basil", quantity=1)

    assert revived.checked is True
    assert revived.quantity == pytest.approx(2.0)


def test_unitless_identity_rejects_second_row():
    salt = add_item(OWNER, ingredient_name="salt")

    with pytest.raises(IntegrityError):
        with session_scope() as session:
            session.add(
                ShoppingListItemORM(
                    shopping_list_id=salt.shopping_list_id,
                    unit_id=None,
                    ingredient_ref_id=salt.ingredient_ref_id,
                    quantity=None,
                    checked=False,
                    sort_index=5,
                )
            )

    assert _names().count("salt") == 1
    again = add_item(OWNER, ingredient_name="salt", quantity=1)
    assert again.id == salt.id


def test_clear_completed_removes_only_checked_items():
    apples = add_item(OWNER, ingredient_name="apples", quantity=3)
    add_item(OWNER, ingredient_name="bread", quantity=1)
    carrots = add_item(OWNER, ingredient_name="carrots", quantity=2)
    toggle_check(OWNER, apples.id)
    toggle_check(OWNER, carrots.id)

    cleared = clear_completed(OWNER)

    assert cleared == 2
    assert _names() == ["bread"]
    assert _sort_indices() == [0]


def test_clear_all_removes_everything():
    add_item(OWNER, ingredient_name="apples", quantity=3)
    add_item(OWNER, ingredient_name="bread", quantity=1)

    assert clear_all(OWNER) == 2
    assert list_shopping_items(OWNER).items == []
    assert clear_all(OWNER) == 0


def test_unknown_and_foreign_items_are_not_found():
    theirs = add_item("someone-else", ingredient_name="coffee", quantity=1, unit_name="bag")

    with pytest.raises(ValueError, match="not found"):
        toggle_check(OWNER, 999)
    with pytest.raises(ValueError, match="not found"):
        remove_item(OWNER, theirs.id)

    assert _names("someone-else") == ["coffee"]
    assert _names() == []


def test_add_from_recipe_merges_and_scales(pancake_recipe):
    add_item(OWNER, ingredient_name="flour", quantity=1, unit_name="cup")

    merged = add_from_recipe(OWNER, pancake_recipe.id, 2)

    assert merged == 4
    items = {item.ingredient_name: item for item in list_shopping_items(OWNER).items}
    assert items["flour"].quantity == pytest.approx(5.0)
    assert items["sugar"].quantity == pytest.approx(2.0)
    assert items["milk"].quantity == pytest.approx(3.0)
    assert items["egg"].quantity == pytest.approx(4.0)
    assert items["egg"].unit_name is None
    assert _sort_indices() == [0, 1, 2, 3]


def test_add_from_recipe_unchecks_matching_items(pancake_recipe):
    milk = add_item(OWNER, ingredient_name="milk", quantity=1, unit_name="cup")
    toggle_check(OWNER, milk.id)

    add_from_recipe(OWNER, pancake_recipe.id)

    refreshed = get_shopping_item(OWNER, milk.id)
    assert refreshed.checked is False
    assert refreshed.checked_at is None
    assert refreshed.quantity == pytest.approx(2.5)


@pytest.mark.parametrize("factor", [0, -1, float("nan"), float("inf")])
def test_add_from_recipe_ignores_invalid_scale(pancake_recipe, factor):
    add_from_recipe(OWNER, pancake_recipe.id, factor)

    items = {item.ingredient_name: item for item in list_shopping_items(OWNER).items}
    assert items["flour"].quantity == pytest.approx(2.0)
    assert items["milk"].quantity == pytest.approx(1.5)


def test_add_from_unknown_recipe_raises():
    with pytest.raises(ValueError, match="not found"):
        add_from_recipe(OWNER, 12345)


def test_reorder_is_idempotent():
    apples = add_item(OWNER, ingredient_name="apples", quantity=3)
    add_item(OWNER, ingredient_name="bread", quantity=1)
    add_item(OWNER, ingredient_name="carrots", quantity=2)
    toggle_check(OWNER, apples.id)

    first = reorder_shopping_list(OWNER)
    second = reorder_shopping_list(OWNER)

    assert [(item.id, item.sort_index) for item in first] == [
        (item.id, item.sort_index) for item in second
    ]
    assert [item.sort_index for item in second] == [0, 1, 2]


def test_affordance_failure_rolls_back_the_whole_add(monkeypatch):
    def explode(*_args, **_kwargs):
        raise RuntimeError("resolver unavailable")

    monkeypatch.setattr(repo, "resolve_ingredient_affordance", explode)

    with pytest.raises(RuntimeError):
        add_item(OWNER, ingredient_name="saffron", quantity=1, unit_name="pinch")

    monkeypatch.undo()
    assert list_shopping_items(OWNER).items == []
    with session_scope() as session:
        count = session.execute(
            select(func.count()).select_from(IngredientRefORM).where(IngredientRefORM.name == "saffron")
        ).scalar_one()
    assert count == 0


def test_recipe_import_is_all_or_nothing(monkeypatch, pancake_recipe):
    calls = {"count": 0}
    original = repo.resolve_ingredient_affordance

    def flaky(name, category_key=None, icon_key=None):
        calls["count"] += 1
        if calls["count"] == 3:
            raise RuntimeError("resolver unavailable")
        return original(name, category_key, icon_key)

    monkeypatch.setattr(repo, "resolve_ingredient_affordance", flaky)

    with pytest.raises(RuntimeError):
        add_from_recipe(OWNER, pancake_recipe.id)

    assert list_shopping_items(OWNER).items == []
