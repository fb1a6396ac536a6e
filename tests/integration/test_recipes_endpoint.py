"""Integration tests for the recipe endpoints."""

from __future__ import annotations

from fastapi import status

from tests.integration.utils import auth_headers


def test_list_recipes_for_owner(client, pancake_recipe):
    response = client.get("/recipes")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == [{"id": pancake_recipe.id, "title": "Pancakes"}]
    assert client.get("/recipes", headers={"X-Owner-ID": "bob"}).json() == []


def test_add_recipe_ingredient(client, pancake_recipe):
    response = client.post(
        f"/recipes/{pancake_recipe.id}/ingredients",
        json={"step_num": 2, "quantity": 0.5, "unit_name": "tsp", "ingredient_name": "Vanilla"},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["ingredient_name"] == "vanilla"
    assert body["step_num"] == 2


def test_duplicate_recipe_ingredient_is_field_error(client, pancake_recipe):
    response = client.post(
        f"/recipes/{pancake_recipe.id}/ingredients",
        json={"quantity": 1, "unit_name": "cup", "ingredient_name": "milk"},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == {
        "field": "ingredient_name",
        "message": "This ingredient is already in the recipe",
    }


def test_invalid_recipe_ingredient_quantity_is_bad_request(client, pancake_recipe):
    response = client.post(
        f"/recipes/{pancake_recipe.id}/ingredients",
        json={"quantity": 250000, "unit_name": "cup", "ingredient_name": "water"},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_unknown_recipe_returns_404(client):
    response = client.post(
        "/recipes/999/ingredients",
        json={"quantity": 1, "unit_name": "cup", "ingredient_name": "water"},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
