"""Application service: Assign Delivery Person use case."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from orderflow.application.dto import TrackingDTO
from orderflow.application.locking import KeyedLock
from orderflow.application.show_order import to_tracking_dto
from orderflow.domain.exceptions import EntityNotFoundError
from orderflow.domain.model.actor import Actor
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.service.access_policy import AccessPolicy, OrderAction


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AssignDeliveryPersonHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogRepository,
        locks: KeyedLock,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._catalog = catalog
        self._locks = locks
        self._clock = clock

    def handle(self, actor: Actor, order_id: str, person_id: str) -> TrackingDTO:
        with self._locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")
            AccessPolicy(self._catalog).check(actor, OrderAction.ASSIGN_DELIVERY, order)

            order.assign_delivery_person(person_id, self._clock())
            self._order_repo.save(order)
        return to_tracking_dto(order)
