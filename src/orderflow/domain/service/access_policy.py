"""Domain service: Access Policy.

One place for every "may this actor do that to this order" rule.  Use
cases call ``check()`` before touching an order; a refusal raises
AuthorizationError.
"""

from __future__ import annotations

from enum import Enum

from orderflow.domain.exceptions import AuthorizationError
from orderflow.domain.model.actor import Actor, ActorRole
from orderflow.domain.model.order import Order
from orderflow.domain.repository.catalog_repository import CatalogRepository


class OrderAction(Enum):
    PLACE = "place"
    VIEW = "view"
    UPDATE_STATUS = "update_status"
    ASSIGN_DELIVERY = "assign_delivery"
    CANCEL = "cancel"
    RATE = "rate"
    LIST_RESTAURANT_ORDERS = "list_restaurant_orders"


class AccessPolicy:

    def __init__(self, catalog: CatalogRepository) -> None:
        self._catalog = catalog

    def check(
        self,
        actor: Actor,
        action: OrderAction,
        order: Order | None = None,
        restaurant_id: str | None = None,
    ) -> None:
        if not self.allows(actor, action, order, restaurant_id):
            raise AuthorizationError(self._refusal(action))

    def allows(
        self,
        actor: Actor,
        action: OrderAction,
        order: Order | None = None,
        restaurant_id: str | None = None,
    ) -> bool:
        is_admin = actor.role == ActorRole.ADMIN
        if order is not None:
            restaurant_id = order.restaurant_id
        is_customer = order is not None and order.customer_id == actor.id

        if action == OrderAction.PLACE:
            return actor.role in (ActorRole.CUSTOMER, ActorRole.ADMIN)
        if action == OrderAction.VIEW:
            return is_admin or is_customer or self._owns(actor, restaurant_id)
        if action in (
            OrderAction.UPDATE_STATUS,
            OrderAction.ASSIGN_DELIVERY,
            OrderAction.LIST_RESTAURANT_ORDERS,
        ):
            return is_admin or self._owns(actor, restaurant_id)
        if action == OrderAction.CANCEL:
            return is_admin or is_customer
        if action == OrderAction.RATE:
            return is_customer
        return False

    def _owns(self, actor: Actor, restaurant_id: str | None) -> bool:
        if actor.role != ActorRole.RESTAURANT_OWNER or restaurant_id is None:
            return False
        restaurant = self._catalog.get_restaurant(restaurant_id)
        return restaurant is not None and restaurant.owner_id == actor.id

    @staticmethod
    def _refusal(action: OrderAction) -> str:
        return {
            OrderAction.PLACE: "Only customers can place orders",
            OrderAction.VIEW: "You can only access your own orders",
            OrderAction.UPDATE_STATUS: "You can only update orders for your own restaurant",
            OrderAction.ASSIGN_DELIVERY: "You can only update orders for your own restaurant",
            OrderAction.CANCEL: "You can only cancel your own orders",
            OrderAction.RATE: "You can only rate your own orders",
            OrderAction.LIST_RESTAURANT_ORDERS: "You can only view orders for your own restaurant",
        }[action]
