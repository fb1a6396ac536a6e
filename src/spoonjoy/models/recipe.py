"""Recipe read models consumed by the shopping list."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RecipeSummary(BaseModel):
    id: int
    title: str

    model_config = ConfigDict(frozen=True)


class RecipeIngredient(BaseModel):
    """Ingredient tuple a recipe contributes to a shopping list."""

    id: int
    recipe_id: int
    step_num: int
    quantity: Optional[float] = Field(default=None)
    unit_id: Optional[int] = Field(default=None)
    unit_name: Optional[str] = Field(default=None)
    ingredient_ref_id: int
    ingredient_name: str

    model_config = ConfigDict(frozen=True)


__all__ = ["RecipeSummary", "RecipeIngredient"]
