"""Application service: Update Order Status use case.

Kitchen and delivery staff move an order along its lifecycle.  Every
transition is re-validated by the Order aggregate under the order's lock,
so two simultaneous updates cannot both win.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from orderflow.application.dto import StatusUpdateDTO, format_time
from orderflow.application.locking import KeyedLock
from orderflow.application.notifications import NotificationPublisher
from orderflow.domain.exceptions import EntityNotFoundError, ValidationError
from orderflow.domain.model.actor import Actor
from orderflow.domain.model.events import OrderCancelled
from orderflow.domain.model.order import DEFAULT_ESTIMATES, DeliveryEstimates, OrderStatus
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.service.access_policy import AccessPolicy, OrderAction
from orderflow.domain.service.stock_service import StockService

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(raw)
    except ValueError:
        raise ValidationError(f"Invalid status '{raw}'") from None


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogRepository,
        notifier: NotificationPublisher,
        locks: KeyedLock,
        estimates: DeliveryEstimates = DEFAULT_ESTIMATES,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._catalog = catalog
        self._notifier = notifier
        self._locks = locks
        self._estimates = estimates
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        status: str,
        note: str = "",
    ) -> StatusUpdateDTO:
        target = parse_status(status)

        with self._locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")
            AccessPolicy(self._catalog).check(actor, OrderAction.UPDATE_STATUS, order)

            previous = order.status
            event = order.transition_to(
                target, note, actor, self._clock(), self._estimates
            )
            self._order_repo.save(order)

            if isinstance(event, OrderCancelled):
                StockService(self._catalog).restore_for_order(order)

        logger.info(
            "Order %s moved from %s to %s by %s",
            order.order_number,
            previous.value,
            order.status.value,
            actor.id,
        )
        self._notifier.notify(event)
        return StatusUpdateDTO(
            id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            estimated_delivery_time=format_time(order.estimated_delivery_time),
        )
