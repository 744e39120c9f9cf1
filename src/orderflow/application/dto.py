"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from orderflow.domain.model.order import Order
from orderflow.domain.service.pricing_calculator import AddOnChoice, CustomizationChoice

# --- Inputs ---------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one menu item the customer asked for."""

    menu_item_id: str
    quantity: int
    customizations: tuple[CustomizationChoice, ...] = ()
    add_ons: tuple[AddOnChoice, ...] = ()
    special_instructions: str = ""


@dataclass(frozen=True)
class AddressSpec:
    street: str
    city: str
    state: str
    zip_code: str
    landmark: str = ""
    instructions: str = ""


@dataclass(frozen=True)
class PlaceOrderRequest:
    restaurant_id: str
    items: list[OrderItemSpec]
    payment_method: str
    delivery_address: AddressSpec
    contact_phone: str
    tip: str = "0"
    special_requests: str = ""
    scheduled_for: datetime | None = None
    payment_details: dict[str, Any] = field(default_factory=dict)


# --- Outputs --------------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    item_total: str
    extras: list[str]


@dataclass(frozen=True)
class StatusChangeDTO:
    status: str
    timestamp: str
    note: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    order_number: str
    customer_id: str
    restaurant_id: str
    status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    delivery_fee: str
    tax: str
    discount: str
    tip: str
    total: str
    payment_method: str
    payment_status: str
    transaction_id: str | None
    refund_amount: str
    estimated_delivery_time: str | None
    actual_delivery_time: str | None
    delivery_person_id: str | None
    rating: int | None
    history: list[StatusChangeDTO]
    created_at: str


@dataclass(frozen=True)
class OrderSummaryDTO:
    id: str
    order_number: str
    status: str
    total: str
    item_count: int
    created_at: str


@dataclass(frozen=True)
class OrderPageDTO:
    orders: list[OrderSummaryDTO]
    page: int
    total_pages: int
    total_count: int

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class TrackingDTO:
    order_number: str
    status: str
    estimated_delivery_time: str | None
    actual_delivery_time: str | None
    delivery_person_id: str | None
    assigned_at: str | None
    picked_up_at: str | None
    estimated_arrival: str | None
    history: list[StatusChangeDTO]


@dataclass(frozen=True)
class StatusUpdateDTO:
    id: str
    order_number: str
    status: str
    estimated_delivery_time: str | None


@dataclass(frozen=True)
class CancellationDTO:
    id: str
    order_number: str
    status: str
    refund_amount: str
    refund_issued: bool


@dataclass(frozen=True)
class RatingDTO:
    order_number: str
    food: int
    delivery: int
    overall: int
    review: str


# --- Mapping --------------------------------------------------------------------


def format_time(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def to_history_dto(order: Order) -> list[StatusChangeDTO]:
    return [
        StatusChangeDTO(
            status=change.status.value,
            timestamp=format_time(change.timestamp),  # type: ignore[arg-type]
            note=change.note,
        )
        for change in order.status_history
    ]


def to_order_dto(order: Order) -> OrderDTO:
    pricing = order.pricing
    return OrderDTO(
        id=order.id,
        order_number=order.order_number,
        customer_id=order.customer_id,
        restaurant_id=order.restaurant_id,
        status=order.status.value,
        items=[
            OrderLineItemDTO(
                name=item.name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                item_total=str(item.item_total),
                extras=[f"{c.group}: {c.option}" for c in item.customizations]
                + [f"+ {a.name} x{a.quantity}" for a in item.add_ons],
            )
            for item in order.items
        ],
        subtotal=str(pricing.subtotal),
        delivery_fee=str(pricing.delivery_fee),
        tax=str(pricing.tax),
        discount=str(pricing.discount),
        tip=str(pricing.tip),
        total=str(pricing.total),
        payment_method=order.payment.method.value,
        payment_status=order.payment.status.value,
        transaction_id=order.payment.transaction_id,
        refund_amount=str(order.payment.refund_amount),
        estimated_delivery_time=format_time(order.estimated_delivery_time),
        actual_delivery_time=format_time(order.actual_delivery_time),
        delivery_person_id=order.delivery_person_id,
        rating=order.rating.overall if order.rating is not None else None,
        history=to_history_dto(order),
        created_at=format_time(order.created_at),  # type: ignore[arg-type]
    )


def to_summary_dto(order: Order) -> OrderSummaryDTO:
    return OrderSummaryDTO(
        id=order.id,
        order_number=order.order_number,
        status=order.status.value,
        total=str(order.pricing.total),
        item_count=len(order.items),
        created_at=format_time(order.created_at),  # type: ignore[arg-type]
    )
