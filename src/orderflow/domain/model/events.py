"""Domain events returned by Order mutations.

Each state-changing method on the Order aggregate returns one of these
instead of triggering anything itself.  The application layer decides what
to do with them (publish, forward to the review subsystem, log).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from orderflow.domain.model.value_objects import Money


@dataclass(frozen=True)
class OrderPlaced:
    order_id: str
    order_number: str
    restaurant_id: str
    customer_id: str
    total: Money
    item_count: int
    occurred_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: str
    order_number: str
    restaurant_id: str
    previous_status: str
    status: str
    note: str
    estimated_delivery_time: datetime | None
    occurred_at: datetime


@dataclass(frozen=True)
class OrderCancelled:
    order_id: str
    order_number: str
    restaurant_id: str
    previous_status: str
    reason: str
    refund_amount: Money
    refund_issued: bool
    occurred_at: datetime


@dataclass(frozen=True)
class ReviewRecord:
    """Derived review handed to the review subsystem on first rating."""

    order_id: str
    customer_id: str
    restaurant_id: str
    overall: int
    food: int
    delivery: int
    service: int
    packaging: int
    comment: str
    is_verified_purchase: bool
    created_at: datetime


@dataclass(frozen=True)
class OrderRated:
    order_id: str
    order_number: str
    restaurant_id: str
    overall: int
    review: ReviewRecord
    occurred_at: datetime


OrderEvent = OrderPlaced | OrderStatusChanged | OrderCancelled | OrderRated
