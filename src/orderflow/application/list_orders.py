"""Application service: List Orders use case (query).

Customers page through their own orders; restaurant owners (and admins)
page through a restaurant's orders.  Both lists are newest first and can
be filtered by status.
"""

from __future__ import annotations

import math

from orderflow.application.dto import OrderPageDTO, to_summary_dto
from orderflow.application.update_order_status import parse_status
from orderflow.domain.exceptions import EntityNotFoundError, ValidationError
from orderflow.domain.model.actor import Actor
from orderflow.domain.model.order import Order
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.service.access_policy import AccessPolicy, OrderAction

MAX_PAGE_SIZE = 50


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository, catalog: CatalogRepository) -> None:
        self._order_repo = order_repo
        self._catalog = catalog

    def for_customer(
        self,
        actor: Actor,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPageDTO:
        orders = self._order_repo.list_for_customer(
            actor.id, parse_status(status) if status else None
        )
        return self._paginate(orders, page, limit)

    def for_restaurant(
        self,
        actor: Actor,
        restaurant_id: str,
        status: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> OrderPageDTO:
        if self._catalog.get_restaurant(restaurant_id) is None:
            raise EntityNotFoundError("Restaurant not found")
        AccessPolicy(self._catalog).check(
            actor, OrderAction.LIST_RESTAURANT_ORDERS, restaurant_id=restaurant_id
        )
        orders = self._order_repo.list_for_restaurant(
            restaurant_id, parse_status(status) if status else None
        )
        return self._paginate(orders, page, limit)

    @staticmethod
    def _paginate(orders: list[Order], page: int, limit: int) -> OrderPageDTO:
        if page < 1:
            raise ValidationError("Page must be a positive integer")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        start = (page - 1) * limit
        return OrderPageDTO(
            orders=[to_summary_dto(order) for order in orders[start:start + limit]],
            page=page,
            total_pages=math.ceil(len(orders) / limit),
            total_count=len(orders),
        )
