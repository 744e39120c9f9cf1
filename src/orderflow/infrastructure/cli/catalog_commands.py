"""CLI commands for the restaurant/menu catalog."""

from __future__ import annotations

import json
from pathlib import Path

import click

from orderflow.application.set_stock import SetStockHandler
from orderflow.application.show_menu import ShowMenuHandler
from orderflow.domain.exceptions import DomainException
from orderflow.infrastructure.bootstrap import catalog_repository, clock
from orderflow.infrastructure.persistence.json_catalog_repository import parse_catalog


@click.command("load")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def catalog_load(file: Path) -> None:
    """Import restaurants and menu items from a JSON file."""
    try:
        raw = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{file} is not valid JSON: {exc}")

    try:
        restaurants, items = parse_catalog(raw)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    repo = catalog_repository()
    for restaurant in restaurants:
        repo.save_restaurant(restaurant)
    for item in items:
        repo.save_menu_item(item)

    click.echo(f"Loaded {len(restaurants)} restaurant(s) and {len(items)} menu item(s).")


@click.command("menu")
@click.option("--restaurant", required=True, help="Restaurant ID.")
def catalog_menu(restaurant: str) -> None:
    """Show a restaurant's menu with stock and current availability."""
    handler = ShowMenuHandler(catalog=catalog_repository())

    try:
        lines = handler.handle(restaurant, clock())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No menu items found.")
        return

    click.echo(f"{'ID':<10} {'Name':<24} {'Price':>10} {'Stock':>10} {'Now':>5}")
    click.echo("-" * 63)
    for line in lines:
        now = "yes" if line.available_now else "no"
        click.echo(
            f"{line.id:<10} {line.name:<24} {line.price:>10} {line.stock:>10} {now:>5}"
        )


@click.command("stock")
@click.option("--item", "item_id", required=True, help="Menu item ID.")
@click.option("--quantity", required=True, help="Units left, or 'unlimited'.")
def catalog_stock(item_id: str, quantity: str) -> None:
    """Set the remaining stock for a menu item."""
    if quantity == "unlimited":
        amount = None
    else:
        try:
            amount = int(quantity)
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{quantity}'.")

    handler = SetStockHandler(catalog=catalog_repository())

    try:
        handler.handle(item_id, amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for '{item_id}' set to {quantity}")
