"""Pydantic models defining shared data contracts."""

from spoonjoy.models.parsing import (
    ParsedIngredient,
    ParsedItemDraft,
    ParseOutcome,
    ParseSource,
)
from spoonjoy.models.recipe import RecipeIngredient, RecipeSummary
from spoonjoy.models.shopping import ShoppingList, ShoppingListItem

__all__ = [
    "ParsedIngredient",
    "ParsedItemDraft",
    "ParseOutcome",
    "ParseSource",
    "RecipeIngredient",
    "RecipeSummary",
    "ShoppingList",
    "ShoppingListItem",
]
