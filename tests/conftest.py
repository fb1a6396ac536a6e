"""Shared pytest fixtures for the Spoonjoy test suite."""

from __future__ import annotations

from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from spoonjoy.config import get_settings
from spoonjoy.db.recipes import create_recipe
from spoonjoy.db.repository import reset_repository_state
from spoonjoy.models.recipe import RecipeSummary
from spoonjoy.server.app import create_app


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def pancake_recipe() -> RecipeSummary:
    """Seed a two-step recipe owned by the default owner."""

    return create_recipe(
        "default",
        "Pancakes",
        [
            {
                "description": "Whisk the dry ingredients.",
                "ingredients": [(2, "cup", "Flour"), (1, "tbsp", "sugar")],
            },
            {
                "description": "Add the wet ingredients.",
                "ingredients": [(1.5, "cup", "milk"), (2, None, "egg")],
            },
        ],
    )


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_spoonjoy.db"
    monkeypatch.setenv("SPOONJOY_DATABASE_PATH", str(db_path))
    monkeypatch.delenv("SPOONJOY_API_TOKEN", raising=False)
    monkeypatch.delenv("SPOONJOY_INGREDIENT_LLM_ENABLED", raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("SPOONJOY_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
