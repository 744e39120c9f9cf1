import click

from orderflow.infrastructure.cli.catalog_commands import (
    catalog_load,
    catalog_menu,
    catalog_stock,
)
from orderflow.infrastructure.cli.order_commands import (
    order_assign,
    order_cancel,
    order_list,
    order_place,
    order_rate,
    order_show,
    order_status,
    order_track,
)
from orderflow.infrastructure.config import get_settings
from orderflow.infrastructure.log_setup import configure_logging


@click.group()
def cli() -> None:
    """orderflow: restaurant order processing engine"""
    configure_logging(get_settings().log_level)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def catalog() -> None:
    """Manage the restaurant catalog."""


# Register subcommands
order.add_command(order_assign)
order.add_command(order_cancel)
order.add_command(order_list)
order.add_command(order_place)
order.add_command(order_rate)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_track)
catalog.add_command(catalog_load)
catalog.add_command(catalog_menu)
catalog.add_command(catalog_stock)
