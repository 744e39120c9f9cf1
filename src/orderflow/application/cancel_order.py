"""Application service: Cancel Order use case.

Cancellation is not a plain transition: the aggregate works out the
refund owed for the stage the order reached, and we give the claimed
stock back to the menu.  If the kitchen has already moved the order past
a cancellable stage the aggregate refuses and nothing is changed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from orderflow.application.dto import CancellationDTO
from orderflow.application.locking import KeyedLock
from orderflow.application.notifications import NotificationPublisher
from orderflow.domain.exceptions import EntityNotFoundError
from orderflow.domain.model.actor import Actor
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.service.access_policy import AccessPolicy, OrderAction
from orderflow.domain.service.stock_service import StockService

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogRepository,
        notifier: NotificationPublisher,
        locks: KeyedLock,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._catalog = catalog
        self._notifier = notifier
        self._locks = locks
        self._clock = clock

    def handle(self, actor: Actor, order_id: str, reason: str) -> CancellationDTO:
        with self._locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")
            AccessPolicy(self._catalog).check(actor, OrderAction.CANCEL, order)

            event = order.cancel(reason, actor, self._clock())
            self._order_repo.save(order)
            StockService(self._catalog).restore_for_order(order)

        logger.info(
            "Order %s cancelled by %s (refund %s, issued=%s)",
            order.order_number,
            actor.id,
            event.refund_amount,
            event.refund_issued,
        )
        self._notifier.notify(event)
        return CancellationDTO(
            id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            refund_amount=str(event.refund_amount),
            refund_issued=event.refund_issued,
        )
