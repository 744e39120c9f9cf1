"""Fan-out of order events to the real-time channel.

Publishing is fire-and-forget: the order change has already been saved by
the time we get here, so a broken channel is logged and otherwise ignored.
"""

from __future__ import annotations

import logging
from typing import Any

from orderflow.domain.model.events import (
    OrderCancelled,
    OrderEvent,
    OrderPlaced,
    OrderRated,
    OrderStatusChanged,
)
from orderflow.domain.port.event_publisher import EventPublisher

logger = logging.getLogger(__name__)


def restaurant_topic(restaurant_id: str) -> str:
    return f"restaurant-{restaurant_id}"


def order_topic(order_id: str) -> str:
    return f"order-{order_id}"


def to_message(event: OrderEvent) -> tuple[str, dict[str, Any]]:
    """Map a domain event to ``(topic, payload)``."""
    if isinstance(event, OrderPlaced):
        return restaurant_topic(event.restaurant_id), {
            "event": "new-order",
            "order_id": event.order_id,
            "order_number": event.order_number,
            "customer_id": event.customer_id,
            "total": str(event.total.amount),
            "item_count": event.item_count,
        }
    if isinstance(event, OrderStatusChanged):
        eta = event.estimated_delivery_time
        return order_topic(event.order_id), {
            "event": "order-status-update",
            "order_id": event.order_id,
            "order_number": event.order_number,
            "status": event.status,
            "estimated_delivery_time": eta.isoformat() if eta is not None else None,
            "note": event.note,
        }
    if isinstance(event, OrderCancelled):
        return restaurant_topic(event.restaurant_id), {
            "event": "order-cancelled",
            "order_id": event.order_id,
            "order_number": event.order_number,
            "reason": event.reason,
            "refund_amount": str(event.refund_amount.amount),
        }
    if isinstance(event, OrderRated):
        return restaurant_topic(event.restaurant_id), {
            "event": "order-rated",
            "order_id": event.order_id,
            "order_number": event.order_number,
            "overall": event.overall,
        }
    raise TypeError(f"Unsupported event {type(event).__name__}")


class NotificationPublisher:

    def __init__(self, publisher: EventPublisher) -> None:
        self._publisher = publisher

    def notify(self, event: OrderEvent) -> bool:
        """Publish *event*; returns False if the channel failed."""
        topic, payload = to_message(event)
        try:
            self._publisher.publish(topic, payload)
        except Exception:
            logger.exception(
                "Failed to publish %s for order %s", payload["event"], payload["order_number"]
            )
            return False
        logger.debug("Published %s to %s", payload["event"], topic)
        return True
