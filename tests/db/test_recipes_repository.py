"""Unit tests for the recipe ingredient source."""

from __future__ import annotations

import pytest

from spoonjoy.db.recipes import (
    DuplicateIngredientError,
    add_recipe_ingredient,
    create_recipe,
    list_recipe_ingredients,
    list_recipes,
)


def test_create_and_list_recipes_by_owner(pancake_recipe):
    create_recipe("someone-else", "Omelette")

    assert [recipe.title for recipe in list_recipes("default")] == ["Pancakes"]
    assert [recipe.title for recipe in list_recipes("someone-else")] == ["Omelette"]


def test_recipe_ingredients_are_normalized_and_ordered(pancake_recipe):
    ingredients = list_recipe_ingredients(pancake_recipe.id)

    assert [(item.step_num, item.ingredient_name, item.unit_name) for item in ingredients] == [
        (1, "flour", "cup"),
        (1, "sugar", "tbsp"),
        (2, "milk", "cup"),
        (2, "egg", None),
    ]
    assert ingredients[2].quantity == pytest.approx(1.5)


def test_add_recipe_ingredient_appends_to_step(pancake_recipe):
    added = add_recipe_ingredient(pancake_recipe.id, 1, 0.5, "tsp", "Baking Powder")

    assert added.ingredient_name == "baking powder"
    assert added.unit_name == "tsp"
    assert added.step_num == 1
    assert len(list_recipe_ingredients(pancake_recipe.id)) == 5


def test_duplicate_ingredient_is_a_field_error(pancake_recipe):
    with pytest.raises(DuplicateIngredientError) as excinfo:
        add_recipe_ingredient(pancake_recipe.id, 2, 1, "cup", " FLOUR ")

    assert excinfo.value.field == "ingredient_name"
    assert str(excinfo.value) == "This ingredient is already in the recipe"
    assert isinstance(excinfo.value, ValueError)


@pytest.mark.parametrize(
    ("quantity", "unit", "name"),
    [
        (0, "cup", "rice"),
        (100000, "cup", "rice"),
        (float("nan"), "cup", "rice"),
        (1, "u" * 51, "rice"),
        (1, "cup", "r" * 101),
        (1, "cup", "  "),
    ],
)
def test_add_recipe_ingredient_validates_input(pancake_recipe, quantity, unit, name):
    with pytest.raises(ValueError):
        add_recipe_ingredient(pancake_recipe.id, 1, quantity, unit, name)

    assert len(list_recipe_ingredients(pancake_recipe.id)) == 4


def test_unknown_recipe_is_not_found():
    with pytest.raises(ValueError, match="not found"):
        list_recipe_ingredients(404)
    with pytest.raises(ValueError, match="not found"):
        add_recipe_ingredient(404, 1, 1, "cup", "rice")


def test_create_recipe_requires_title():
    with pytest.raises(ValueError):
        create_recipe("default", "   ")
