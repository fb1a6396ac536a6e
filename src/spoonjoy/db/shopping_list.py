"""Shopping list persistence and reconciliation."""
# mypy: ignore-errors

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from spoonjoy import metrics
from spoonjoy.models.shopping import ShoppingList, ShoppingListItem
from spoonjoy.parsing.quantity import format_quantity, normalize_scale_factor, scale_quantity
from spoonjoy.shopping.affordances import (
    IngredientAffordance,
    category_label,
    icon_label,
    resolve_ingredient_affordance,
)
from spoonjoy.shopping.ordering import compute_sort_order, sort_for_display

from .catalog import get_or_create_ingredient, get_or_create_unit
from .models import (
    IngredientRefORM,
    RecipeIngredientORM,
    RecipeORM,
    ShoppingListItemORM,
    ShoppingListORM,
    UnitORM,
)
from .repository import session_scope

logger = logging.getLogger(__name__)

AffordanceResolver = Callable[[str, Optional[str], Optional[str]], IngredientAffordance]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_model(row: ShoppingListItemORM) -> ShoppingListItem:
    return ShoppingListItem.model_validate(
        {
            "id": row.id,
            "shopping_list_id": row.shopping_list_id,
            "ingredient_ref_id": row.ingredient_ref_id,
            "ingredient_name": row.ingredient_ref.name,
            "unit_id": row.unit_id,
            "unit_name": row.unit.name if row.unit is not None else None,
            "quantity": row.quantity,
            "display_quantity": format_quantity(row.quantity),
            "checked": row.checked,
            "checked_at": row.checked_at,
            "sort_index": row.sort_index,
            "category_key": row.category_key,
            "category_label": category_label(row.category_key),
            "icon_key": row.icon_key,
            "icon_label": icon_label(row.icon_key),
            "deleted_at": row.deleted_at,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }
    )


def _validate_quantity(quantity: Optional[float]) -> Optional[float]:
    if quantity is None:
        return None
    value = float(quantity)
    if not math.isfinite(value):
        raise ValueError("Quantity must be a valid number")
    if value < 0:
        raise ValueError("Quantity cannot be negative")
    return value


def _get_or_create_list(session: Session, owner_id: str) -> ShoppingListORM:
    owner = (owner_id or "").strip()
    if not owner:
        raise ValueError("Owner id is required")

    shopping_list = session.execute(
        select(ShoppingListORM).where(ShoppingListORM.owner_id == owner)
    ).scalar_one_or_none()
    if shopping_list is None:
        shopping_list = ShoppingListORM(owner_id=owner)
        session.add(shopping_list)
        session.flush()
        logger.info("Created shopping list id=%s", shopping_list.id, extra={"owner_id": owner})
    return shopping_list


def _active_items(session: Session, shopping_list_id: int) -> List[ShoppingListItemORM]:
    return list(
        session.execute(
            select(ShoppingListItemORM).where(
                ShoppingListItemORM.shopping_list_id == shopping_list_id,
                ShoppingListItemORM.deleted_at.is_(None),
            )
        )
        .scalars()
        .all()
    )


def _find_by_identity(
    session: Session,
    shopping_list_id: int,
    unit_id: Optional[int],
    ingredient_ref_id: int,
) -> Optional[ShoppingListItemORM]:
    # NULL never equals NULL in SQL; match absent units with IS NULL.
    unit_clause = (
        ShoppingListItemORM.unit_id.is_(None)
        if unit_id is None
        else ShoppingListItemORM.unit_id == unit_id
    )
    return session.execute(
        select(ShoppingListItemORM).where(
            ShoppingListItemORM.shopping_list_id == shopping_list_id,
            ShoppingListItemORM.ingredient_ref_id == ingredient_ref_id,
            unit_clause,
        )
    ).scalar_one_or_none()


def _next_sort_index(session: Session, shopping_list_id: int) -> int:
    current_max = session.execute(
        select(func.max(ShoppingListItemORM.sort_index)).where(
            ShoppingListItemORM.shopping_list_id == shopping_list_id,
            ShoppingListItemORM.deleted_at.is_(None),
        )
    ).scalar_one_or_none()
    return 0 if current_max is None else current_max + 1


def _get_active_item(session: Session, owner_id: str, item_id: int) -> ShoppingListItemORM:
    shopping_list = _get_or_create_list(session, owner_id)
    item = session.get(ShoppingListItemORM, item_id)
    if item is None or item.shopping_list_id != shopping_list.id or item.deleted_at is not None:
        raise ValueError(f"Shopping list item {item_id} not found")
    return item


def reorder(session: Session, shopping_list_id: int) -> List[ShoppingListItemORM]:
    """Re-densify sort indices over active items and sync ``checked`` with ``checked_at``."""

    session.flush()
    items = _active_items(session, shopping_list_id)
    by_id = {item.id: item for item in items}
    for item_id, index in compute_sort_order(items):
        item = by_id[item_id]
        if item.sort_index != index:
            item.sort_index = index
        is_checked = item.checked_at is not None
        if item.checked != is_checked:
            item.checked = is_checked
    session.flush()
    return sort_for_display(items)


def merge_or_insert(
    session: Session,
    shopping_list: ShoppingListORM,
    *,
    ingredient: IngredientRefORM,
    unit: Optional[UnitORM] = None,
    quantity: Optional[float] = None,
    category_key: Optional[str] = None,
    icon_key: Optional[str] = None,
    uncheck: bool = False,
    resolver: Optional[AffordanceResolver] = None,
) -> Tuple[ShoppingListItemORM, bool]:
    """Merge a contribution into the row with the same identity, or append a new row.

    Returns the row and whether it was newly inserted. Runs inside the caller's session,
    so a failure anywhere rolls back the whole contribution.
    """

    quantity = _validate_quantity(quantity)
    resolver = resolver or resolve_ingredient_affordance
    affordance = resolver(ingredient.name, category_key, icon_key)
    unit_id = unit.id if unit is not None else None

    existing = _find_by_identity(session, shopping_list.id, unit_id, ingredient.id)
    if existing is None:
        item = ShoppingListItemORM(
            shopping_list_id=shopping_list.id,
            unit_id=unit_id,
            ingredient_ref_id=ingredient.id,
            quantity=quantity,
            checked=False,
            checked_at=None,
            sort_index=_next_sort_index(session, shopping_list.id),
            category_key=affordance.category_key,
            icon_key=affordance.icon_key,
        )
        session.add(item)
        session.flush()
        created = True
    else:
        item = existing
        if quantity:
            item.quantity = (item.quantity or 0.0) + quantity
        item.deleted_at = None
        item.category_key = affordance.category_key or item.category_key
        item.icon_key = affordance.icon_key or item.icon_key
        if uncheck:
            item.checked = False
            item.checked_at = None
        created = False

    reorder(session, shopping_list.id)
    logger.debug(
        "Merged shopping item id=%s ingredient=%s unit_id=%s created=%s quantity=%s",
        item.id,
        ingredient.name,
        unit_id,
        created,
        item.quantity,
    )
    return item, created


def get_or_create_shopping_list(owner_id: str) -> ShoppingList:
    with session_scope() as session:
        shopping_list = _get_or_create_list(session, owner_id)
        items = sort_for_display(_active_items(session, shopping_list.id))
        return ShoppingList(
            id=shopping_list.id,
            owner_id=shopping_list.owner_id,
            items=[_to_model(row) for row in items],
        )


def list_shopping_items(owner_id: str) -> ShoppingList:
    """Return the owner's list with active items, unchecked first."""

    return get_or_create_shopping_list(owner_id)


def get_shopping_item(owner_id: str, item_id: int) -> Optional[ShoppingListItem]:
    with session_scope() as session:
        try:
            row = _get_active_item(session, owner_id, item_id)
        except ValueError:
            return None
        return _to_model(row)


def add_item(
    owner_id: str,
    *,
    ingredient_name: str,
    quantity: Optional[float] = None,
    unit_name: Optional[str] = None,
    category_key: Optional[str] = None,
    icon_key: Optional[str] = None,
) -> ShoppingListItem:
    """Add a manual or parsed entry, merging with an existing row of the same identity."""

    quantity = _validate_quantity(quantity)
    with session_scope() as session:
        shopping_list = _get_or_create_list(session, owner_id)
        ingredient = get_or_create_ingredient(session, ingredient_name)
        unit = get_or_create_unit(session, unit_name)
        item, created = merge_or_insert(
            session,
            shopping_list,
            ingredient=ingredient,
            unit=unit,
            quantity=quantity,
            category_key=category_key,
            icon_key=icon_key,
        )
        result = _to_model(item)

    metrics.SHOPPING_MUTATIONS.labels(operation="insert" if created else "merge").inc()
    logger.info(
        "Shopping item %s id=%s ingredient=%s quantity=%s unit=%s",
        "added" if created else "merged",
        result.id,
        result.ingredient_name,
        result.quantity,
        result.unit_name,
        extra={"owner_id": owner_id},
    )
    return result


def add_from_recipe(owner_id: str, recipe_id: int, scale_factor: object = 1.0) -> int:
    """Merge every ingredient of a recipe, scaled, into the list. Returns the count merged.

    Re-adding from a recipe un-checks rows that were already checked off.
    """

    factor = normalize_scale_factor(scale_factor)
    with session_scope() as session:
        recipe = session.get(RecipeORM, recipe_id)
        if recipe is None or recipe.deleted_at is not None:
            raise ValueError(f"Recipe {recipe_id} not found")

        shopping_list = _get_or_create_list(session, owner_id)
        ingredients = (
            session.execute(
                select(RecipeIngredientORM)
                .where(RecipeIngredientORM.recipe_id == recipe.id)
                .order_by(RecipeIngredientORM.step_num.asc(), RecipeIngredientORM.id.asc())
            )
            .scalars()
            .all()
        )
        for ingredient in ingredients:
            merge_or_insert(
                session,
                shopping_list,
                ingredient=ingredient.ingredient_ref,
                unit=ingredient.unit,
                quantity=scale_quantity(ingredient.quantity, factor),
                uncheck=True,
            )
        merged = len(ingredients)

    metrics.SHOPPING_MUTATIONS.labels(operation="add_from_recipe").inc()
    logger.info(
        "Added %s ingredient(s) from recipe %s scale=%s",
        merged,
        recipe_id,
        factor,
        extra={"owner_id": owner_id},
    )
    return merged


def toggle_check(owner_id: str, item_id: int, checked: Optional[bool] = None) -> ShoppingListItem:
    """Flip (or force) the checked state, then reorder the list."""

    with session_scope() as session:
        item = _get_active_item(session, owner_id, item_id)
        next_state = (item.checked_at is None) if checked is None else bool(checked)
        if next_state:
            item.checked_at = item.checked_at or _utcnow()
        else:
            item.checked_at = None
        item.checked = next_state
        reorder(session, item.shopping_list_id)
        result = _to_model(item)

    metrics.SHOPPING_MUTATIONS.labels(operation="toggle_check").inc()
    logger.info(
        "Shopping item id=%s checked=%s sort_index=%s",
        result.id,
        result.checked,
        result.sort_index,
        extra={"owner_id": owner_id},
    )
    return result


def remove_item(owner_id: str, item_id: int) -> None:
    """Soft-delete one item and re-densify the remaining order."""

    with session_scope() as session:
        item = _get_active_item(session, owner_id, item_id)
        item.deleted_at = _utcnow()
        reorder(session, item.shopping_list_id)

    metrics.SHOPPING_MUTATIONS.labels(operation="remove").inc()
    logger.info("Removed shopping item id=%s", item_id, extra={"owner_id": owner_id})


def clear_completed(owner_id: str) -> int:
    """Soft-delete every checked item; returns how many were cleared."""

    with session_scope() as session:
        shopping_list = _get_or_create_list(session, owner_id)
        now = _utcnow()
        cleared = 0
        for item in _active_items(session, shopping_list.id):
            if item.checked_at is not None or item.checked:
                item.deleted_at = now
                cleared += 1
        reorder(session, shopping_list.id)

    metrics.SHOPPING_MUTATIONS.labels(operation="clear_completed").inc()
    logger.info("Cleared %s completed shopping item(s)", cleared, extra={"owner_id": owner_id})
    return cleared


def clear_all(owner_id: str) -> int:
    """Soft-delete every active item. No reorder: nothing is left to order."""

    with session_scope() as session:
        shopping_list = _get_or_create_list(session, owner_id)
        now = _utcnow()
        items = _active_items(session, shopping_list.id)
        for item in items:
            item.deleted_at = now
        cleared = len(items)

    metrics.SHOPPING_MUTATIONS.labels(operation="clear_all").inc()
    logger.info("Cleared all %s shopping item(s)", cleared, extra={"owner_id": owner_id})
    return cleared


def reorder_shopping_list(owner_id: str) -> List[ShoppingListItem]:
    """Run a normalization pass on demand and return the ordered items."""

    with session_scope() as session:
        shopping_list = _get_or_create_list(session, owner_id)
        items = reorder(session, shopping_list.id)
        return [_to_model(row) for row in items]


__all__ = [
    "merge_or_insert",
    "reorder",
    "get_or_create_shopping_list",
    "list_shopping_items",
    "get_shopping_item",
    "add_item",
    "add_from_recipe",
    "toggle_check",
    "remove_item",
    "clear_completed",
    "clear_all",
    "reorder_shopping_list",
]
