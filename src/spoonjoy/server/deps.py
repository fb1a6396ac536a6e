"""Dependency definitions for the Spoonjoy API server."""

from __future__ import annotations

from typing import Callable, List, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from spoonjoy.config import get_settings
from spoonjoy.db.recipes import add_recipe_ingredient, list_recipes
from spoonjoy.db.shopping_list import (
    add_from_recipe,
    add_item,
    clear_all,
    clear_completed,
    list_shopping_items,
    remove_item,
    toggle_check,
)
from spoonjoy.models.recipe import RecipeIngredient, RecipeSummary
from spoonjoy.models.shopping import ShoppingList, ShoppingListItem
from spoonjoy.parsing.pipeline import ShoppingItemParser, build_shopping_item_parser

ShoppingListProvider = Callable[[str], ShoppingList]
ShoppingItemAdder = Callable[[str, dict], ShoppingListItem]
RecipeMerger = Callable[[str, int, float], int]
ShoppingItemToggler = Callable[[str, int, Optional[bool]], ShoppingListItem]
ShoppingItemRemover = Callable[[str, int], None]
ShoppingListClearer = Callable[[str], int]
RecipeListProvider = Callable[[str], List[RecipeSummary]]
RecipeIngredientAdder = Callable[[int, dict], RecipeIngredient]


def get_owner_id(
    x_owner_id: Optional[str] = Header(default=None, alias="X-Owner-ID"),
    settings=Depends(get_settings),
) -> str:
    """Resolve the owner the request acts for."""

    owner = (x_owner_id or "").strip()
    return owner or settings.default_owner_id


def get_shopping_item_parser() -> ShoppingItemParser:
    return build_shopping_item_parser()


def get_shopping_list_provider() -> ShoppingListProvider:
    return list_shopping_items


def get_shopping_item_adder() -> ShoppingItemAdder:
    return lambda owner_id, payload: add_item(owner_id, **payload)


def get_recipe_merger() -> RecipeMerger:
    return lambda owner_id, recipe_id, scale_factor: add_from_recipe(owner_id, recipe_id, scale_factor)


def get_shopping_item_toggler() -> ShoppingItemToggler:
    return lambda owner_id, item_id, checked=None: toggle_check(owner_id, item_id, checked)


def get_shopping_item_remover() -> ShoppingItemRemover:
    return remove_item


def get_completed_clearer() -> ShoppingListClearer:
    return clear_completed


def get_shopping_list_clearer() -> ShoppingListClearer:
    return clear_all


def get_recipe_list_provider() -> RecipeListProvider:
    return list_recipes


def get_recipe_ingredient_adder() -> RecipeIngredientAdder:
    return lambda recipe_id, payload: add_recipe_ingredient(recipe_id, **payload)


def require_api_token(
    request: Request,
    settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    if request.query_params.get("api_token") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
