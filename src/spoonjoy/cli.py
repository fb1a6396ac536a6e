"""Command-line interface for Spoonjoy."""

from __future__ import annotations

import asyncio
import json
from typing import Optional

import typer

from spoonjoy.config import get_settings
from spoonjoy.db.shopping_list import (
    add_from_recipe,
    add_item,
    list_shopping_items,
    reorder_shopping_list,
)
from spoonjoy.parsing.pipeline import build_shopping_item_parser
from spoonjoy.parsing.quantity import parse_fraction_token

app = typer.Typer(help="Spoonjoy shopping list commands.")

OwnerOption = typer.Option(None, "--owner", help="Owner id; defaults to SPOONJOY_DEFAULT_OWNER_ID.")


def _resolve_owner(owner: Optional[str]) -> str:
    return (owner or "").strip() or get_settings().default_owner_id


def _echo_json(payload: object, pretty: bool) -> None:
    typer.echo(json.dumps(payload, indent=2 if pretty else None, sort_keys=pretty, default=str))


@app.command()
def parse(
    text: str = typer.Argument(..., help="Free-text shopping entry, e.g. '2 cups flour'."),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON."),
) -> None:
    """Parse a shopping entry into quantity, unit and ingredient."""

    outcome = asyncio.run(build_shopping_item_parser().parse(text))
    _echo_json(outcome.model_dump(mode="json"), pretty)


@app.command()
def add(
    text: str = typer.Argument(..., help="Free-text shopping entry."),
    owner: Optional[str] = OwnerOption,
) -> None:
    """Parse an entry and merge it into the shopping list."""

    outcome = asyncio.run(build_shopping_item_parser().parse(text))
    draft = outcome.draft
    if outcome.error:
        typer.secho(outcome.error, fg=typer.colors.YELLOW)
    if draft.is_ambiguous:
        typer.secho(
            f"Could not split '{draft.original_text}' into quantity, unit and ingredient; "
            "re-enter it with a leading amount.",
            fg=typer.colors.RED,
            err=True,
        )
        _echo_json(draft.model_dump(mode="json"), pretty=True)
        raise typer.Exit(code=2)

    try:
        item = add_item(
            _resolve_owner(owner),
            ingredient_name=draft.ingredient_name,
            quantity=parse_fraction_token(draft.quantity),
            unit_name=draft.unit_name or None,
        )
    except ValueError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    label = " ".join(part for part in (item.display_quantity, item.unit_name, item.ingredient_name) if part)
    typer.echo(f"Added {label} (item {item.id}, via {outcome.source} parser)")


@app.command("from-recipe")
def from_recipe(
    recipe_id: int = typer.Argument(..., help="Recipe id to add."),
    scale: float = typer.Option(1.0, "--scale", help="Scale factor applied to quantities."),
    owner: Optional[str] = OwnerOption,
) -> None:
    """Merge every ingredient of a recipe into the shopping list."""

    try:
        merged = add_from_recipe(_resolve_owner(owner), recipe_id, scale)
    except ValueError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Merged {merged} ingredient(s).")


@app.command("list")
def list_items(
    owner: Optional[str] = OwnerOption,
    as_json: bool = typer.Option(False, "--json", help="Emit the list as JSON."),
) -> None:
    """Show the shopping list, unchecked items first."""

    shopping_list = list_shopping_items(_resolve_owner(owner))
    if as_json:
        _echo_json(shopping_list.model_dump(mode="json"), pretty=True)
        return

    if not shopping_list.items:
        typer.echo("Shopping list is empty.")
        return
    for item in shopping_list.items:
        mark = "x" if item.checked else " "
        label = " ".join(part for part in (item.display_quantity, item.unit_name, item.ingredient_name) if part)
        typer.echo(f"[{mark}] {item.id:>4}  {label}")


@app.command()
def reorder(owner: Optional[str] = OwnerOption) -> None:
    """Re-densify sort order for the shopping list."""

    items = reorder_shopping_list(_resolve_owner(owner))
    typer.echo(f"Reordered {len(items)} item(s).")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    reload: bool = typer.Option(False, "--reload/--no-reload"),
) -> None:
    """Run the HTTP API."""

    from spoonjoy.server.run import serve as run_server

    run_server(host=host, port=port, reload=reload)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ``spoonjoy`` script."""
    app(prog_name="spoonjoy", args=argv)


if __name__ == "__main__":
    main()
