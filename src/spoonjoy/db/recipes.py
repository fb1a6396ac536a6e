"""Recipe ingredient source for the shopping list."""
# mypy: ignore-errors

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import select

from spoonjoy.models.recipe import RecipeIngredient, RecipeSummary

from .catalog import get_or_create_ingredient, get_or_create_unit, normalize_name
from .models import RecipeIngredientORM, RecipeORM, RecipeStepORM
from .repository import session_scope

logger = logging.getLogger(__name__)

MIN_QUANTITY = 0.001
MAX_QUANTITY = 99999.0
MAX_UNIT_NAME_LENGTH = 50
MAX_INGREDIENT_NAME_LENGTH = 100

IngredientTuple = Tuple[Optional[float], Optional[str], str]


class DuplicateIngredientError(ValueError):
    """Raised when an ingredient is already part of a recipe."""

    def __init__(self, message: str = "This ingredient is already in the recipe", *, field: str = "ingredient_name"):
        super().__init__(message)
        self.field = field


def _ingredient_to_model(row: RecipeIngredientORM) -> RecipeIngredient:
    return RecipeIngredient(
        id=row.id,
        recipe_id=row.recipe_id,
        step_num=row.step_num,
        quantity=row.quantity,
        unit_id=row.unit_id,
        unit_name=row.unit.name if row.unit is not None else None,
        ingredient_ref_id=row.ingredient_ref_id,
        ingredient_name=row.ingredient_ref.name,
    )


def _validate_ingredient_input(
    quantity: Optional[float], unit_name: Optional[str], ingredient_name: str
) -> None:
    if quantity is not None:
        value = float(quantity)
        if not math.isfinite(value):
            raise ValueError("Quantity must be a valid number")
        if value < MIN_QUANTITY or value > MAX_QUANTITY:
            raise ValueError(f"Quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY:g}")
    if unit_name and len(unit_name.strip()) > MAX_UNIT_NAME_LENGTH:
        raise ValueError(f"Unit name must be {MAX_UNIT_NAME_LENGTH} characters or less")
    name = (ingredient_name or "").strip()
    if not name:
        raise ValueError("Ingredient name is required")
    if len(name) > MAX_INGREDIENT_NAME_LENGTH:
        raise ValueError(f"Ingredient name must be {MAX_INGREDIENT_NAME_LENGTH} characters or less")


def _get_recipe(session, recipe_id: int) -> RecipeORM:
    recipe = session.get(RecipeORM, recipe_id)
    if recipe is None or recipe.deleted_at is not None:
        raise ValueError(f"Recipe {recipe_id} not found")
    return recipe


def create_recipe(
    owner_id: str,
    title: str,
    steps: Sequence[Mapping[str, object]] = (),
) -> RecipeSummary:
    """Create a recipe with numbered steps.

    Each step is a mapping with an optional ``description`` and an optional
    ``ingredients`` list of ``(quantity, unit_name, ingredient_name)`` tuples.
    """

    clean_title = (title or "").strip()
    if not clean_title:
        raise ValueError("Recipe title is required")

    with session_scope() as session:
        recipe = RecipeORM(owner_id=owner_id, title=clean_title)
        session.add(recipe)
        session.flush()

        for step_num, step in enumerate(steps, start=1):
            session.add(
                RecipeStepORM(
                    recipe_id=recipe.id,
                    step_num=step_num,
                    description=str(step.get("description") or ""),
                )
            )
            ingredients: Iterable[IngredientTuple] = step.get("ingredients") or ()
            for quantity, unit_name, ingredient_name in ingredients:
                _add_ingredient(session, recipe, step_num, quantity, unit_name, ingredient_name)

        summary = RecipeSummary(id=recipe.id, title=recipe.title)

    logger.info("Created recipe id=%s title=%s", summary.id, summary.title, extra={"owner_id": owner_id})
    return summary


def list_recipes(owner_id: str) -> List[RecipeSummary]:
    with session_scope() as session:
        rows = (
            session.execute(
                select(RecipeORM)
                .where(RecipeORM.owner_id == owner_id, RecipeORM.deleted_at.is_(None))
                .order_by(RecipeORM.title.asc(), RecipeORM.id.asc())
            )
            .scalars()
            .all()
        )
        return [RecipeSummary(id=row.id, title=row.title) for row in rows]


def list_recipe_ingredients(recipe_id: int) -> List[RecipeIngredient]:
    with session_scope() as session:
        recipe = _get_recipe(session, recipe_id)
        rows = (
            session.execute(
                select(RecipeIngredientORM)
                .where(RecipeIngredientORM.recipe_id == recipe.id)
                .order_by(RecipeIngredientORM.step_num.asc(), RecipeIngredientORM.id.asc())
            )
            .scalars()
            .all()
        )
        return [_ingredient_to_model(row) for row in rows]


def _add_ingredient(
    session,
    recipe: RecipeORM,
    step_num: int,
    quantity: Optional[float],
    unit_name: Optional[str],
    ingredient_name: str,
) -> RecipeIngredientORM:
    _validate_ingredient_input(quantity, unit_name, ingredient_name)

    ingredient = get_or_create_ingredient(session, ingredient_name)
    duplicate = session.execute(
        select(RecipeIngredientORM.id).where(
            RecipeIngredientORM.recipe_id == recipe.id,
            RecipeIngredientORM.ingredient_ref_id == ingredient.id,
        )
    ).first()
    if duplicate is not None:
        raise DuplicateIngredientError()

    row = RecipeIngredientORM(
        recipe_id=recipe.id,
        step_num=step_num,
        quantity=float(quantity) if quantity is not None else None,
        unit=get_or_create_unit(session, unit_name),
        ingredient_ref=ingredient,
    )
    session.add(row)
    session.flush()
    return row


def add_recipe_ingredient(
    recipe_id: int,
    step_num: int,
    quantity: Optional[float],
    unit_name: Optional[str],
    ingredient_name: str,
) -> RecipeIngredient:
    """Attach an ingredient to a recipe step; an ingredient may appear once per recipe."""

    with session_scope() as session:
        recipe = _get_recipe(session, recipe_id)
        row = _add_ingredient(session, recipe, step_num, quantity, unit_name, ingredient_name)
        result = _ingredient_to_model(row)

    logger.info(
        "Added ingredient %s to recipe id=%s step=%s",
        normalize_name(ingredient_name),
        recipe_id,
        step_num,
    )
    return result


__all__ = [
    "DuplicateIngredientError",
    "create_recipe",
    "list_recipes",
    "list_recipe_ingredients",
    "add_recipe_ingredient",
]
