"""Application service: Show / Track Order use cases (queries)."""

from __future__ import annotations

from orderflow.application.dto import (
    OrderDTO,
    TrackingDTO,
    format_time,
    to_history_dto,
    to_order_dto,
)
from orderflow.domain.exceptions import EntityNotFoundError
from orderflow.domain.model.actor import Actor
from orderflow.domain.model.order import Order
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.service.access_policy import AccessPolicy, OrderAction


def to_tracking_dto(order: Order) -> TrackingDTO:
    return TrackingDTO(
        order_number=order.order_number,
        status=order.status.value,
        estimated_delivery_time=format_time(order.estimated_delivery_time),
        actual_delivery_time=format_time(order.actual_delivery_time),
        delivery_person_id=order.delivery_person_id,
        assigned_at=format_time(order.tracking.assigned_at),
        picked_up_at=format_time(order.tracking.picked_up_at),
        estimated_arrival=format_time(order.tracking.estimated_arrival),
        history=to_history_dto(order),
    )


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository, catalog: CatalogRepository) -> None:
        self._order_repo = order_repo
        self._catalog = catalog

    def handle(self, actor: Actor, order_ref: str) -> OrderDTO:
        """Look an order up by internal ID or display number."""
        return to_order_dto(self._load(actor, order_ref))

    def track(self, actor: Actor, order_ref: str) -> TrackingDTO:
        return to_tracking_dto(self._load(actor, order_ref))

    def _load(self, actor: Actor, order_ref: str) -> Order:
        order = self._order_repo.get_by_id(order_ref)
        if order is None:
            order = self._order_repo.get_by_number(order_ref)
        if order is None:
            raise EntityNotFoundError(f"Order {order_ref} not found")
        AccessPolicy(self._catalog).check(actor, OrderAction.VIEW, order)
        return order
