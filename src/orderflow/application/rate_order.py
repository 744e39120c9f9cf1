"""Application service: Rate Order use case.

A delivered order can be rated once by the customer who placed it.  The
rating is stored on the order and a verified-purchase review derived from
it is handed to the review subsystem.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from orderflow.application.dto import RatingDTO
from orderflow.application.locking import KeyedLock
from orderflow.application.notifications import NotificationPublisher
from orderflow.domain.exceptions import EntityNotFoundError
from orderflow.domain.model.actor import Actor
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.repository.review_repository import ReviewRepository
from orderflow.domain.service.access_policy import AccessPolicy, OrderAction

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogRepository,
        review_repo: ReviewRepository,
        notifier: NotificationPublisher,
        locks: KeyedLock,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._catalog = catalog
        self._review_repo = review_repo
        self._notifier = notifier
        self._locks = locks
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        food: int,
        delivery: int,
        overall: int,
        review: str = "",
    ) -> RatingDTO:
        with self._locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")
            AccessPolicy(self._catalog).check(actor, OrderAction.RATE, order)

            event = order.rate(food, delivery, overall, review, self._clock())
            # Review first: if the review store fails the order stays unrated
            # and the customer can try again.
            self._review_repo.add(event.review)
            self._order_repo.save(order)

        logger.info("Order %s rated %d/5", order.order_number, overall)
        self._notifier.notify(event)
        rating = order.rating
        return RatingDTO(
            order_number=order.order_number,
            food=rating.food,  # type: ignore[union-attr]
            delivery=rating.delivery,  # type: ignore[union-attr]
            overall=rating.overall,  # type: ignore[union-attr]
            review=rating.review,  # type: ignore[union-attr]
        )
