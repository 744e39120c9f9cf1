"""CLI commands for the Order aggregate."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from functools import wraps

import click

from orderflow.application.assign_delivery import AssignDeliveryPersonHandler
from orderflow.application.dto import (
    AddressSpec,
    OrderDTO,
    OrderItemSpec,
    OrderPageDTO,
    PlaceOrderRequest,
)
from orderflow.application.list_orders import ListOrdersHandler
from orderflow.application.show_order import ShowOrderHandler
from orderflow.domain.exceptions import DomainException
from orderflow.domain.model.actor import Actor, ActorRole
from orderflow.domain.model.order import OrderStatus, PaymentMethod
from orderflow.domain.service.pricing_calculator import AddOnChoice, CustomizationChoice
from orderflow.infrastructure.bootstrap import (
    cancel_order_handler,
    catalog_repository,
    clock,
    order_locks,
    order_repository,
    place_order_handler,
    rate_order_handler,
    update_order_status_handler,
)


def actor_options(func: Callable) -> Callable:
    """Add ``--as``/``--role`` and pass an ``actor`` keyword instead."""

    @click.option("--as", "actor_id", required=True, help="ID of the acting user.")
    @click.option(
        "--role",
        type=click.Choice([r.value for r in ActorRole]),
        default=ActorRole.CUSTOMER.value,
        show_default=True,
        help="Role of the acting user.",
    )
    @wraps(func)
    def wrapper(actor_id: str, role: str, **kwargs):
        return func(actor=Actor(actor_id, ActorRole(role)), **kwargs)

    return wrapper


def _split_pair(raw: str, expected: str) -> tuple[str, str]:
    if ":" not in raw:
        raise click.BadParameter(f"Invalid format '{raw}'. Expected '{expected}'.")
    left, right = raw.split(":", 1)
    return left.strip(), right.strip()


def _parse_items(
    raw: str,
    customizations: tuple[str, ...],
    add_ons: tuple[str, ...],
) -> list[OrderItemSpec]:
    """Parse 'm1:2,m2:1' plus per-item customization/add-on options."""
    chosen: dict[str, list[CustomizationChoice]] = {}
    for entry in customizations:
        item_id, choice = _split_pair(entry, "ItemId:Group=Option")
        if "=" not in choice:
            raise click.BadParameter(f"Invalid customization '{entry}'. Expected 'ItemId:Group=Option'.")
        group, option = choice.split("=", 1)
        chosen.setdefault(item_id, []).append(CustomizationChoice(group.strip(), option.strip()))

    extras: dict[str, list[AddOnChoice]] = {}
    for entry in add_ons:
        item_id, rest = _split_pair(entry, "ItemId:AddOn[:Qty]")
        name, _, qty_str = rest.partition(":")
        try:
            qty = int(qty_str) if qty_str else 1
        except ValueError:
            raise click.BadParameter(f"Invalid add-on quantity '{qty_str}' in '{entry}'.")
        extras.setdefault(item_id, []).append(AddOnChoice(name.strip(), qty))

    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        item_id, qty_str = _split_pair(pair.strip(), "ItemId:Quantity")
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{qty_str}' for item '{item_id}'.")
        specs.append(
            OrderItemSpec(
                menu_item_id=item_id,
                quantity=qty,
                customizations=tuple(chosen.get(item_id, [])),
                add_ons=tuple(extras.get(item_id, [])),
            )
        )
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (status={dto.status})")
    click.echo(f"ID:       {dto.id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Payment:  {dto.payment_method} ({dto.payment_status})")
    if dto.estimated_delivery_time:
        click.echo(f"ETA:      {dto.estimated_delivery_time}")
    click.echo()
    click.echo(f"  {'Item':<24} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*51}")
    for item in dto.items:
        click.echo(
            f"  {item.name:<24} {item.quantity:>5} {item.unit_price:>10} {item.item_total:>10}"
        )
        for extra in item.extras:
            click.echo(f"    {extra}")
    click.echo(f"  {'-'*51}")
    for label, value in (
        ("Subtotal", dto.subtotal),
        ("Delivery fee", dto.delivery_fee),
        ("Tax", dto.tax),
        ("Tip", dto.tip),
        ("Order Total", dto.total),
    ):
        click.echo(f"  {label:<31} {value:>20}")


def _display_page(page: OrderPageDTO) -> None:
    if not page.orders:
        click.echo("No orders found.")
        return
    click.echo(f"{'Number':<22} {'Status':<18} {'Items':>5} {'Total':>10}")
    click.echo("-" * 58)
    for order in page.orders:
        click.echo(
            f"{order.order_number:<22} {order.status:<18} {order.item_count:>5} {order.total:>10}"
        )
    click.echo(f"Page {page.page} of {page.total_pages} ({page.total_count} orders)")


@click.command("place")
@actor_options
@click.option("--restaurant", required=True, help="Restaurant ID.")
@click.option("--items", required=True, help="Items as 'ItemId:Qty,ItemId:Qty'.")
@click.option("--customize", multiple=True, help="Customization as 'ItemId:Group=Option'.")
@click.option("--add-on", "add_ons", multiple=True, help="Add-on as 'ItemId:Name[:Qty]'.")
@click.option(
    "--pay",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=PaymentMethod.CASH_ON_DELIVERY.value,
    show_default=True,
)
@click.option("--street", required=True)
@click.option("--city", required=True)
@click.option("--state", required=True)
@click.option("--zip", "zip_code", required=True)
@click.option("--phone", required=True, help="Contact phone number.")
@click.option("--tip", default="0", show_default=True)
@click.option("--requests", default="", help="Special requests for the kitchen.")
@click.option("--schedule", type=click.DateTime(), default=None, help="Deliver at this time.")
def order_place(
    actor: Actor,
    restaurant: str,
    items: str,
    customize: tuple[str, ...],
    add_ons: tuple[str, ...],
    pay: str,
    street: str,
    city: str,
    state: str,
    zip_code: str,
    phone: str,
    tip: str,
    requests: str,
    schedule: datetime | None,
) -> None:
    """Place a new order."""
    request = PlaceOrderRequest(
        restaurant_id=restaurant,
        items=_parse_items(items, customize, add_ons),
        payment_method=pay,
        delivery_address=AddressSpec(street, city, state, zip_code),
        contact_phone=phone,
        tip=tip,
        special_requests=requests,
        scheduled_for=schedule,
    )

    try:
        dto = place_order_handler().handle(actor, request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} placed  (status={dto.status})")
    _display_order(dto)


@click.command("show")
@actor_options
@click.option("--id", "order_ref", required=True, help="Order ID or number.")
def order_show(actor: Actor, order_ref: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository(), catalog=catalog_repository())

    try:
        dto = handler.handle(actor, order_ref)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("track")
@actor_options
@click.option("--id", "order_ref", required=True, help="Order ID or number.")
def order_track(actor: Actor, order_ref: str) -> None:
    """Show the delivery progress and status history of an order."""
    handler = ShowOrderHandler(order_repo=order_repository(), catalog=catalog_repository())

    try:
        dto = handler.track(actor, order_ref)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number}  (status={dto.status})")
    click.echo(f"ETA:       {dto.estimated_delivery_time or '-'}")
    click.echo(f"Delivered: {dto.actual_delivery_time or '-'}")
    click.echo(f"Courier:   {dto.delivery_person_id or '-'}")
    click.echo()
    for change in dto.history:
        note = f"  {change.note}" if change.note else ""
        click.echo(f"  {change.timestamp}  {change.status:<18}{note}")


@click.command("list")
@actor_options
@click.option("--restaurant", default=None, help="List a restaurant's orders instead of your own.")
@click.option("--status", type=click.Choice([s.value for s in OrderStatus]), default=None)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=None, help="Page size (max 50).")
def order_list(
    actor: Actor,
    restaurant: str | None,
    status: str | None,
    page: int,
    limit: int | None,
) -> None:
    """List orders, newest first."""
    handler = ListOrdersHandler(order_repo=order_repository(), catalog=catalog_repository())

    try:
        if restaurant:
            result = handler.for_restaurant(actor, restaurant, status, page, limit or 20)
        else:
            result = handler.for_customer(actor, status, page, limit or 10)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_page(result)


@click.command("status")
@actor_options
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--to", "status", required=True, type=click.Choice([s.value for s in OrderStatus]))
@click.option("--note", default="", help="Note for the status history.")
def order_status(actor: Actor, order_id: str, status: str, note: str) -> None:
    """Move an order to its next status."""
    try:
        dto = update_order_status_handler().handle(actor, order_id, status, note)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.status}.")
    if dto.estimated_delivery_time:
        click.echo(f"Estimated delivery: {dto.estimated_delivery_time}")


@click.command("cancel")
@actor_options
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.option("--reason", required=True, help="Why the order is cancelled.")
def order_cancel(actor: Actor, order_id: str, reason: str) -> None:
    """Cancel an order (refund depends on how far it got)."""
    try:
        dto = cancel_order_handler().handle(actor, order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} cancelled.")
    if dto.refund_issued:
        click.echo(f"Refund of {dto.refund_amount} issued.")
    else:
        click.echo(f"No refund issued (refund due: {dto.refund_amount}).")


@click.command("rate")
@actor_options
@click.option("--id", "order_id", required=True, help="Order ID to rate.")
@click.option("--food", required=True, type=click.IntRange(1, 5))
@click.option("--delivery", required=True, type=click.IntRange(1, 5))
@click.option("--overall", required=True, type=click.IntRange(1, 5))
@click.option("--review", default="", help="Optional comment (max 500 characters).")
def order_rate(
    actor: Actor,
    order_id: str,
    food: int,
    delivery: int,
    overall: int,
    review: str,
) -> None:
    """Rate a delivered order."""
    try:
        dto = rate_order_handler().handle(actor, order_id, food, delivery, overall, review)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} rated {dto.overall}/5.")


@click.command("assign")
@actor_options
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--person", required=True, help="Delivery person ID.")
def order_assign(actor: Actor, order_id: str, person: str) -> None:
    """Assign a delivery person to an order."""
    handler = AssignDeliveryPersonHandler(
        order_repo=order_repository(),
        catalog=catalog_repository(),
        locks=order_locks(),
        clock=clock,
    )

    try:
        dto = handler.handle(actor, order_id, person)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} assigned to {dto.delivery_person_id}.")
