"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON-backed
infrastructure but keep everything in dicts.  No file I/O, no randomness,
no clocks that move on their own.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from orderflow.domain.exceptions import (
    ConcurrentModificationError,
    EntityNotFoundError,
    PaymentError,
    ValidationError,
)
from orderflow.domain.model.catalog import MenuItem, Restaurant
from orderflow.domain.model.events import ReviewRecord
from orderflow.domain.model.order import Order, OrderStatus, PaymentMethod
from orderflow.domain.model.value_objects import Money
from orderflow.domain.port.event_publisher import EventPublisher
from orderflow.domain.port.payment_gateway import PaymentGateway, PaymentResult
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.repository.review_repository import ReviewRepository


class FakeOrderRepository(OrderRepository):
    """Stores deep copies so callers can't mutate stored state by accident."""

    def __init__(self, on_add: Callable[[Order], None] | None = None) -> None:
        self._store: dict[str, Order] = {}
        self._lock = threading.Lock()
        self.deleted: list[str] = []
        self.on_add = on_add

    def get_by_id(self, order_id: str) -> Order | None:
        with self._lock:
            order = self._store.get(order_id)
            return copy.deepcopy(order) if order is not None else None

    def get_by_number(self, order_number: str) -> Order | None:
        with self._lock:
            for order in self._store.values():
                if order.order_number == order_number:
                    return copy.deepcopy(order)
        return None

    def add(self, order: Order) -> None:
        with self._lock:
            if order.id in self._store:
                raise ValidationError(f"Order {order.id} already exists")
            self._store[order.id] = copy.deepcopy(order)
        if self.on_add is not None:
            self.on_add(order)

    def save(self, order: Order) -> None:
        with self._lock:
            stored = self._store.get(order.id)
            if stored is None:
                raise ValidationError(f"Order {order.id} has not been added")
            if stored.version != order.version:
                raise ConcurrentModificationError(
                    f"Order {order.order_number} was modified concurrently"
                )
            order.version += 1
            self._store[order.id] = copy.deepcopy(order)

    def delete(self, order_id: str) -> None:
        with self._lock:
            self._store.pop(order_id, None)
            self.deleted.append(order_id)

    def list_for_customer(
        self, customer_id: str, status: OrderStatus | None = None
    ) -> list[Order]:
        return self._filter(lambda o: o.customer_id == customer_id, status)

    def list_for_restaurant(
        self, restaurant_id: str, status: OrderStatus | None = None
    ) -> list[Order]:
        return self._filter(lambda o: o.restaurant_id == restaurant_id, status)

    def _filter(self, match: Callable[[Order], bool], status: OrderStatus | None) -> list[Order]:
        with self._lock:
            orders = [
                copy.deepcopy(o)
                for o in self._store.values()
                if match(o) and (status is None or o.status == status)
            ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def __len__(self) -> int:
        return len(self._store)


class FakeCatalogRepository(CatalogRepository):

    def __init__(
        self,
        restaurants: list[Restaurant] | None = None,
        items: list[MenuItem] | None = None,
    ) -> None:
        self._restaurants: dict[str, Restaurant] = {r.id: r for r in restaurants or []}
        self._items: dict[str, MenuItem] = {i.id: i for i in items or []}
        self._lock = threading.Lock()

    def get_restaurant(self, restaurant_id: str) -> Restaurant | None:
        return self._restaurants.get(restaurant_id)

    def get_menu_item(self, item_id: str) -> MenuItem | None:
        return self._items.get(item_id)

    def list_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        return [i for i in self._items.values() if i.restaurant_id == restaurant_id]

    def claim_stock(self, item_id: str, quantity: int) -> bool:
        with self._lock:
            availability = self._item(item_id).availability
            remaining = availability.available_quantity
            if remaining is None:
                return True
            if remaining < quantity:
                return False
            availability.available_quantity = remaining - quantity
            return True

    def restore_stock(self, item_id: str, quantity: int) -> None:
        with self._lock:
            availability = self._item(item_id).availability
            if availability.available_quantity is not None:
                availability.available_quantity += quantity

    def set_stock(self, item_id: str, quantity: int | None) -> None:
        with self._lock:
            self._item(item_id).availability.available_quantity = quantity

    def save_restaurant(self, restaurant: Restaurant) -> None:
        self._restaurants[restaurant.id] = restaurant

    def save_menu_item(self, item: MenuItem) -> None:
        self._items[item.id] = item

    def stock_of(self, item_id: str) -> int | None:
        return self._item(item_id).availability.available_quantity

    def _item(self, item_id: str) -> MenuItem:
        item = self._items.get(item_id)
        if item is None:
            raise EntityNotFoundError(f"Menu item not found: '{item_id}'")
        return item


class FakeReviewRepository(ReviewRepository):

    def __init__(self, failures: int = 0) -> None:
        self.reviews: list[ReviewRecord] = []
        self.failures = failures

    def add(self, review: ReviewRecord) -> None:
        if self.failures:
            self.failures -= 1
            raise ConnectionError("review store unavailable")
        self.reviews.append(review)

    def list_for_restaurant(self, restaurant_id: str) -> list[ReviewRecord]:
        return [r for r in self.reviews if r.restaurant_id == restaurant_id]


class RecordingPublisher(EventPublisher):

    def __init__(self) -> None:
        self.messages: list[tuple[str, dict[str, Any]]] = []

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        self.messages.append((topic, payload))

    @property
    def events(self) -> list[str]:
        return [payload["event"] for _, payload in self.messages]


class FailingPublisher(EventPublisher):

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        raise ConnectionError("channel unavailable")


class FakePaymentGateway(PaymentGateway):
    """Approves or declines every charge, as configured."""

    def __init__(
        self,
        succeed: bool = True,
        on_charge: Callable[[], None] | None = None,
    ) -> None:
        self.succeed = succeed
        self.on_charge = on_charge
        self.charges: list[tuple[PaymentMethod, Money]] = []

    def charge(
        self,
        method: PaymentMethod,
        amount: Money,
        details: dict[str, Any] | None = None,
    ) -> PaymentResult:
        self.charges.append((method, amount))
        if self.on_charge is not None:
            self.on_charge()
        if not self.succeed:
            raise PaymentError("Card declined")
        return PaymentResult(
            transaction_id=f"txn_test_{len(self.charges)}",
            gateway="stripe" if method == PaymentMethod.CARD else "razorpay",
        )


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        # Wednesday, lunchtime
        self.now = now or datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: int) -> datetime:
        self.now = self.now + timedelta(minutes=minutes)
        return self.now
