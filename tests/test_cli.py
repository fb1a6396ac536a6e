"""Tests for the spoonjoy command-line interface."""

from __future__ import annotations

from typer.testing import CliRunner

from spoonjoy.cli import app
from spoonjoy.db.shopping_list import list_shopping_items

runner = CliRunner()


def test_add_merges_parsed_entry():
    result = runner.invoke(app, ["add", "2 cups flour"])

    assert result.exit_code == 0
    assert "Added 2 cups flour" in result.stdout
    items = list_shopping_items("default").items
    assert [(item.ingredient_name, item.unit_name, item.quantity) for item in items] == [
        ("flour", "cups", 2.0)
    ]


def test_add_refuses_ambiguous_entry_without_writing():
    result = runner.invoke(app, ["add", "1/0 cup sugar"])

    assert result.exit_code == 2
    assert '"is_ambiguous": true' in result.stdout
    assert '"original_text": "1/0 cup sugar"' in result.stdout
    assert list_shopping_items("default").items == []


def test_list_reports_empty_list():
    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0
    assert "Shopping list is empty." in result.stdout
