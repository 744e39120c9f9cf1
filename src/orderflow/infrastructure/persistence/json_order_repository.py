"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from orderflow.domain.exceptions import ConcurrentModificationError, ValidationError
from orderflow.domain.model.order import (
    DeliveryAddress,
    DeliveryTracking,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentInfo,
    PaymentMethod,
    PaymentStatus,
    Pricing,
    Rating,
    SelectedAddOn,
    SelectedCustomization,
    StatusChange,
)
from orderflow.domain.model.value_objects import Money, Quantity
from orderflow.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.RLock()
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_number(self, order_number: str) -> Order | None:
        for raw in self._load_raw():
            if raw["order_number"] == order_number:
                return self._to_domain(raw)
        return None

    def add(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()
            if any(raw["id"] == order.id for raw in orders):
                raise ValidationError(f"Order {order.id} already exists")
            orders.append(self._to_raw(order))
            self._persist_raw(orders)

    def save(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    if raw["version"] != order.version:
                        raise ConcurrentModificationError(
                            f"Order {order.order_number} was modified concurrently"
                        )
                    order.version += 1
                    orders[i] = self._to_raw(order)
                    self._persist_raw(orders)
                    return
        raise ValidationError(f"Order {order.id} has not been added")

    def delete(self, order_id: str) -> None:
        with self._lock:
            orders = [raw for raw in self._load_raw() if raw["id"] != order_id]
            self._persist_raw(orders)

    def list_for_customer(
        self,
        customer_id: str,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        return self._filter("customer_id", customer_id, status)

    def list_for_restaurant(
        self,
        restaurant_id: str,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        return self._filter("restaurant_id", restaurant_id, status)

    def _filter(self, key: str, value: str, status: OrderStatus | None) -> list[Order]:
        orders = [
            self._to_domain(raw)
            for raw in self._load_raw()
            if raw[key] == value and (status is None or raw["status"] == status.value)
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        pricing = order.pricing
        payment = order.payment
        return {
            "id": order.id,
            "order_number": order.order_number,
            "customer_id": order.customer_id,
            "restaurant_id": order.restaurant_id,
            "status": order.status.value,
            "version": order.version,
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "menu_item_id": item.menu_item_id,
                    "name": item.name,
                    "unit_price": str(item.unit_price.amount),
                    "quantity": item.quantity.value,
                    "customizations": [
                        {"group": c.group, "option": c.option, "price": str(c.price.amount)}
                        for c in item.customizations
                    ],
                    "add_ons": [
                        {
                            "name": a.name,
                            "unit_price": str(a.unit_price.amount),
                            "quantity": a.quantity.value,
                        }
                        for a in item.add_ons
                    ],
                    "special_instructions": item.special_instructions,
                }
                for item in order.items
            ],
            "pricing": {
                "subtotal": str(pricing.subtotal.amount),
                "delivery_fee": str(pricing.delivery_fee.amount),
                "tax": str(pricing.tax.amount),
                "discount": str(pricing.discount.amount),
                "coupon_code": pricing.coupon_code,
                "tip": str(pricing.tip.amount),
                "total": str(pricing.total.amount),
                "currency": pricing.total.currency,
            },
            "payment": {
                "method": payment.method.value,
                "status": payment.status.value,
                "transaction_id": payment.transaction_id,
                "gateway": payment.gateway,
                "paid_at": _dump_time(payment.paid_at),
                "refunded_at": _dump_time(payment.refunded_at),
                "refund_amount": str(payment.refund_amount.amount),
            },
            "delivery_address": {
                "street": order.delivery_address.street,
                "city": order.delivery_address.city,
                "state": order.delivery_address.state,
                "zip_code": order.delivery_address.zip_code,
                "landmark": order.delivery_address.landmark,
                "instructions": order.delivery_address.instructions,
            },
            "contact_phone": order.contact_phone,
            "status_history": [
                {
                    "status": change.status.value,
                    "timestamp": change.timestamp.isoformat(),
                    "note": change.note,
                    "actor_id": change.actor_id,
                }
                for change in order.status_history
            ],
            "estimated_delivery_time": _dump_time(order.estimated_delivery_time),
            "actual_delivery_time": _dump_time(order.actual_delivery_time),
            "delivery_person_id": order.delivery_person_id,
            "tracking": {
                "assigned_at": _dump_time(order.tracking.assigned_at),
                "picked_up_at": _dump_time(order.tracking.picked_up_at),
                "estimated_arrival": _dump_time(order.tracking.estimated_arrival),
            },
            "rating": (
                {
                    "food": order.rating.food,
                    "delivery": order.rating.delivery,
                    "overall": order.rating.overall,
                    "review": order.rating.review,
                    "rated_at": order.rating.rated_at.isoformat(),
                }
                if order.rating is not None
                else None
            ),
            "special_requests": order.special_requests,
            "scheduled_for": _dump_time(order.scheduled_for),
            "cancellation_reason": order.cancellation_reason,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw["pricing"].get("currency", "USD")

        def money(value: str) -> Money:
            return Money(Decimal(value), currency)

        items = [
            OrderLineItem(
                menu_item_id=i["menu_item_id"],
                name=i["name"],
                unit_price=money(i["unit_price"]),
                quantity=Quantity(i["quantity"]),
                customizations=tuple(
                    SelectedCustomization(c["group"], c["option"], money(c["price"]))
                    for c in i.get("customizations", [])
                ),
                add_ons=tuple(
                    SelectedAddOn(a["name"], money(a["unit_price"]), Quantity(a["quantity"]))
                    for a in i.get("add_ons", [])
                ),
                special_instructions=i.get("special_instructions", ""),
            )
            for i in raw["items"]
        ]
        p = raw["pricing"]
        pay = raw["payment"]
        addr = raw["delivery_address"]
        track = raw.get("tracking") or {}
        rating = raw.get("rating")
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            customer_id=raw["customer_id"],
            restaurant_id=raw["restaurant_id"],
            items=items,
            pricing=Pricing(
                subtotal=money(p["subtotal"]),
                delivery_fee=money(p["delivery_fee"]),
                tax=money(p["tax"]),
                tip=money(p["tip"]),
                total=money(p["total"]),
                discount=money(p["discount"]),
                coupon_code=p.get("coupon_code"),
            ),
            payment=PaymentInfo(
                method=PaymentMethod(pay["method"]),
                status=PaymentStatus(pay["status"]),
                transaction_id=pay.get("transaction_id"),
                gateway=pay.get("gateway"),
                paid_at=_load_time(pay.get("paid_at")),
                refunded_at=_load_time(pay.get("refunded_at")),
                refund_amount=money(pay.get("refund_amount", "0")),
            ),
            delivery_address=DeliveryAddress(
                street=addr["street"],
                city=addr["city"],
                state=addr["state"],
                zip_code=addr["zip_code"],
                landmark=addr.get("landmark", ""),
                instructions=addr.get("instructions", ""),
            ),
            contact_phone=raw["contact_phone"],
            status=OrderStatus(raw["status"]),
            status_history=[
                StatusChange(
                    status=OrderStatus(h["status"]),
                    timestamp=datetime.fromisoformat(h["timestamp"]),
                    note=h.get("note", ""),
                    actor_id=h.get("actor_id"),
                )
                for h in raw["status_history"]
            ],
            estimated_delivery_time=_load_time(raw.get("estimated_delivery_time")),
            actual_delivery_time=_load_time(raw.get("actual_delivery_time")),
            delivery_person_id=raw.get("delivery_person_id"),
            tracking=DeliveryTracking(
                assigned_at=_load_time(track.get("assigned_at")),
                picked_up_at=_load_time(track.get("picked_up_at")),
                estimated_arrival=_load_time(track.get("estimated_arrival")),
            ),
            rating=(
                Rating(
                    food=rating["food"],
                    delivery=rating["delivery"],
                    overall=rating["overall"],
                    review=rating.get("review", ""),
                    rated_at=datetime.fromisoformat(rating["rated_at"]),
                )
                if rating
                else None
            ),
            special_requests=raw.get("special_requests", ""),
            scheduled_for=_load_time(raw.get("scheduled_for")),
            cancellation_reason=raw.get("cancellation_reason"),
            created_at=datetime.fromisoformat(raw["created_at"]),
            version=raw.get("version", 0),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(orders, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


def _dump_time(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
