"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items, its pricing
breakdown, its payment record and its append-only status history.
All lifecycle rules (legal transitions, cancellation refunds, one-time
rating) are enforced here.  Mutating methods return the domain event
describing what happened; they never publish anything themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.actor import Actor
from orderflow.domain.model.events import (
    OrderCancelled,
    OrderPlaced,
    OrderRated,
    OrderStatusChanged,
    ReviewRecord,
)
from orderflow.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY_FOR_PICKUP = "ready_for_pickup"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CARD = "card"
    UPI = "upi"
    WALLET = "wallet"
    CASH_ON_DELIVERY = "cash_on_delivery"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY_FOR_PICKUP, OrderStatus.CANCELLED}),
    OrderStatus.READY_FOR_PICKUP: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

# Narrower than the graph: READY_FOR_PICKUP can still be cancelled.
NON_CANCELLABLE_STATUSES = frozenset({
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})

REFUND_RATES: dict[OrderStatus, Decimal] = {
    OrderStatus.PENDING: Decimal("1"),
    OrderStatus.CONFIRMED: Decimal("1"),
    OrderStatus.PREPARING: Decimal("0.8"),
    OrderStatus.READY_FOR_PICKUP: Decimal("0.5"),
}

DELIVERY_PERSON_ASSIGNABLE = frozenset({
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY_FOR_PICKUP,
})

MAX_LINE_ITEMS = 50
MAX_REVIEW_LENGTH = 500


def refund_for(status: OrderStatus, total: Money) -> Money:
    """Refund owed when an order in *status* is cancelled."""
    rate = REFUND_RATES.get(status)
    if rate is None:
        return Money(Decimal("0.00"), total.currency)
    return total.scale(rate)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DeliveryEstimates:
    """Timing assumptions used to derive delivery estimates."""

    preparation: timedelta = timedelta(minutes=30)
    delivery: timedelta = timedelta(minutes=20)
    initial: timedelta = timedelta(minutes=45)


DEFAULT_ESTIMATES = DeliveryEstimates()


# ---------------------------------------------------------------------------
# Value objects owned by the order
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SelectedCustomization:
    group: str
    option: str
    price: Money


@dataclass(frozen=True)
class SelectedAddOn:
    name: str
    unit_price: Money
    quantity: Quantity = Quantity(1)

    @property
    def total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price snapshot of a menu item at order-placement time.

    ``unit_price`` already includes customizations and add-ons; none of
    it is ever recomputed from the live catalog.
    """

    menu_item_id: str
    name: str
    unit_price: Money  # locked at placement time
    quantity: Quantity
    customizations: tuple[SelectedCustomization, ...] = ()
    add_ons: tuple[SelectedAddOn, ...] = ()
    special_instructions: str = ""

    @property
    def item_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class Pricing:
    """Order-level price breakdown.

    Invariant: ``total == subtotal + delivery_fee + tax - discount + tip``.
    """

    subtotal: Money
    delivery_fee: Money
    tax: Money
    tip: Money
    total: Money
    discount: Money = field(default_factory=Money.zero)
    coupon_code: str | None = None

    def __post_init__(self) -> None:
        expected = self.subtotal + self.delivery_fee + self.tax + self.tip - self.discount
        if expected != self.total:
            raise ValidationError(
                f"Pricing total {self.total} does not match its components ({expected})"
            )

    @staticmethod
    def compute(
        subtotal: Money,
        delivery_fee: Money,
        tax: Money,
        tip: Money | None = None,
        discount: Money | None = None,
        coupon_code: str | None = None,
    ) -> Pricing:
        tip = tip if tip is not None else Money.zero()
        discount = discount if discount is not None else Money.zero()
        total = subtotal + delivery_fee + tax + tip - discount
        return Pricing(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            tax=tax,
            tip=tip,
            total=total,
            discount=discount,
            coupon_code=coupon_code,
        )


@dataclass(frozen=True)
class StatusChange:
    """One entry of the append-only status history."""

    status: OrderStatus
    timestamp: datetime
    note: str = ""
    actor_id: str | None = None


@dataclass
class PaymentInfo:
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: str | None = None
    gateway: str | None = None
    paid_at: datetime | None = None
    refunded_at: datetime | None = None
    refund_amount: Money = field(default_factory=Money.zero)

    @property
    def is_cash_on_delivery(self) -> bool:
        return self.method == PaymentMethod.CASH_ON_DELIVERY


@dataclass(frozen=True)
class DeliveryAddress:
    street: str
    city: str
    state: str
    zip_code: str
    landmark: str = ""
    instructions: str = ""

    def __post_init__(self) -> None:
        for label, value in (
            ("Street address", self.street),
            ("City", self.city),
            ("State", self.state),
            ("Zip code", self.zip_code),
        ):
            if not value or not value.strip():
                raise ValidationError(f"{label} is required")


@dataclass
class DeliveryTracking:
    assigned_at: datetime | None = None
    picked_up_at: datetime | None = None
    estimated_arrival: datetime | None = None


@dataclass(frozen=True)
class Rating:
    food: int
    delivery: int
    overall: int
    review: str
    rated_at: datetime

    def __post_init__(self) -> None:
        for label, score in (
            ("Food", self.food),
            ("Delivery", self.delivery),
            ("Overall", self.overall),
        ):
            if not isinstance(score, int) or isinstance(score, bool) or not 1 <= score <= 5:
                raise ValidationError(f"{label} rating must be between 1 and 5")
        if len(self.review) > MAX_REVIEW_LENGTH:
            raise ValidationError(
                f"Review cannot exceed {MAX_REVIEW_LENGTH} characters"
            )


# ---------------------------------------------------------------------------
# Aggregate root
# ---------------------------------------------------------------------------


@dataclass
class Order:
    """Aggregate root for restaurant orders.

    Use the ``Order.place()`` factory for new orders; it enforces all
    placement rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str
    order_number: str
    customer_id: str
    restaurant_id: str
    items: list[OrderLineItem]
    pricing: Pricing
    payment: PaymentInfo
    delivery_address: DeliveryAddress
    contact_phone: str
    status: OrderStatus = OrderStatus.PENDING
    status_history: list[StatusChange] = field(default_factory=list)
    estimated_delivery_time: datetime | None = None
    actual_delivery_time: datetime | None = None
    delivery_person_id: str | None = None
    tracking: DeliveryTracking = field(default_factory=DeliveryTracking)
    rating: Rating | None = None
    special_requests: str = ""
    scheduled_for: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime = field(default_factory=_utc_now)
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        order_id: str,
        order_number: str,
        customer_id: str,
        restaurant_id: str,
        items: list[OrderLineItem],
        pricing: Pricing,
        payment_method: PaymentMethod,
        delivery_address: DeliveryAddress,
        contact_phone: str,
        special_requests: str = "",
        scheduled_for: datetime | None = None,
        now: datetime | None = None,
        estimates: DeliveryEstimates = DEFAULT_ESTIMATES,
    ) -> Order:
        """Create a new ``pending`` order, enforcing all invariants."""
        now = now or _utc_now()

        if not customer_id:
            raise ValidationError("Customer reference is required")
        if not restaurant_id:
            raise ValidationError("Restaurant reference is required")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        if not contact_phone or not contact_phone.strip():
            raise ValidationError("Contact phone is required")

        subtotal = Money.zero()
        for item in items:
            subtotal = subtotal + item.item_total
        if subtotal != pricing.subtotal:
            raise ValidationError(
                f"Pricing subtotal {pricing.subtotal} does not match items ({subtotal})"
            )

        return Order(
            id=order_id,
            order_number=order_number,
            customer_id=customer_id,
            restaurant_id=restaurant_id,
            items=list(items),
            pricing=pricing,
            payment=PaymentInfo(method=payment_method),
            delivery_address=delivery_address,
            contact_phone=contact_phone.strip(),
            status_history=[
                StatusChange(OrderStatus.PENDING, now, "Order placed", customer_id)
            ],
            estimated_delivery_time=now + estimates.initial,
            special_requests=special_requests,
            scheduled_for=scheduled_for,
            created_at=now,
        )

    def placed_event(self) -> OrderPlaced:
        return OrderPlaced(
            order_id=self.id,
            order_number=self.order_number,
            restaurant_id=self.restaurant_id,
            customer_id=self.customer_id,
            total=self.pricing.total,
            item_count=len(self.items),
            occurred_at=self.created_at,
        )

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def transition_to(
        self,
        target: OrderStatus,
        note: str = "",
        actor: Actor | None = None,
        now: datetime | None = None,
        estimates: DeliveryEstimates = DEFAULT_ESTIMATES,
    ) -> OrderStatusChanged | OrderCancelled:
        """Move the order along the lifecycle graph.

        Cancellation targets are routed through ``cancel()`` so a refund is
        always computed.  Raises ValidationError for any transition not in
        ``ALLOWED_TRANSITIONS``; the order is left untouched in that case.
        """
        if not self.can_transition_to(target):
            raise ValidationError(
                f"Cannot change status from {self.status.value} to {target.value}"
            )

        if target == OrderStatus.CANCELLED:
            return self.cancel(note.strip() or "no reason given", actor, now)

        now = now or _utc_now()
        previous = self.status

        if target == OrderStatus.CONFIRMED:
            self.estimated_delivery_time = now + estimates.preparation + estimates.delivery
        elif target == OrderStatus.OUT_FOR_DELIVERY:
            self.tracking.picked_up_at = now
            self.tracking.estimated_arrival = now + estimates.delivery
        elif target == OrderStatus.DELIVERED:
            self.actual_delivery_time = now
            if self.payment.is_cash_on_delivery:
                self.payment.status = PaymentStatus.COMPLETED
                self.payment.paid_at = now

        self._append_history(target, now, note, actor)

        return OrderStatusChanged(
            order_id=self.id,
            order_number=self.order_number,
            restaurant_id=self.restaurant_id,
            previous_status=previous.value,
            status=target.value,
            note=note,
            estimated_delivery_time=self.estimated_delivery_time,
            occurred_at=now,
        )

    def cancel(
        self,
        reason: str,
        actor: Actor | None = None,
        now: datetime | None = None,
    ) -> OrderCancelled:
        """Cancel the order and settle the refund owed for its current stage."""
        if not self.is_cancellable:
            raise ValidationError(
                f"Order cannot be cancelled at this stage ({self.status.value})"
            )
        if not reason or not reason.strip():
            raise ValidationError("Cancellation reason is required")

        now = now or _utc_now()
        reason = reason.strip()
        previous = self.status
        refund = refund_for(previous, self.pricing.total)

        refund_issued = False
        if self.payment.status == PaymentStatus.COMPLETED and not refund.is_zero:
            self.payment.status = PaymentStatus.REFUNDED
            self.payment.refunded_at = now
            self.payment.refund_amount = refund
            refund_issued = True

        label = actor.label if actor is not None else "system"
        self.cancellation_reason = reason
        self._append_history(
            OrderStatus.CANCELLED, now, f"Cancelled by {label}: {reason}", actor
        )

        return OrderCancelled(
            order_id=self.id,
            order_number=self.order_number,
            restaurant_id=self.restaurant_id,
            previous_status=previous.value,
            reason=reason,
            refund_amount=refund,
            refund_issued=refund_issued,
            occurred_at=now,
        )

    def rate(
        self,
        food: int,
        delivery: int,
        overall: int,
        review: str = "",
        now: datetime | None = None,
    ) -> OrderRated:
        """Record the customer's rating.  Allowed exactly once, after delivery."""
        if self.status != OrderStatus.DELIVERED:
            raise ValidationError("You can only rate delivered orders")
        if self.rating is not None:
            raise ValidationError("Order has already been rated")

        now = now or _utc_now()
        rating = Rating(food, delivery, overall, review or "", now)
        self.rating = rating

        record = ReviewRecord(
            order_id=self.id,
            customer_id=self.customer_id,
            restaurant_id=self.restaurant_id,
            overall=overall,
            food=food,
            delivery=delivery,
            service=overall,
            packaging=food,
            comment=rating.review or "No comment provided",
            is_verified_purchase=True,
            created_at=now,
        )
        return OrderRated(
            order_id=self.id,
            order_number=self.order_number,
            restaurant_id=self.restaurant_id,
            overall=overall,
            review=record,
            occurred_at=now,
        )

    def assign_delivery_person(self, person_id: str, now: datetime | None = None) -> None:
        if self.status not in DELIVERY_PERSON_ASSIGNABLE:
            raise ValidationError(
                f"Cannot assign a delivery person to an order in {self.status.value} status"
            )
        if not person_id:
            raise ValidationError("Delivery person reference is required")
        self.delivery_person_id = person_id
        self.tracking.assigned_at = now or _utc_now()

    # --- Payment bookkeeping --------------------------------------------------

    def record_payment(
        self, transaction_id: str, gateway: str, now: datetime | None = None
    ) -> None:
        if self.payment.is_cash_on_delivery:
            raise ValidationError("Cash-on-delivery orders are settled at delivery")
        if self.payment.status != PaymentStatus.PENDING:
            raise ValidationError(
                f"Payment already {self.payment.status.value}"
            )
        self.payment.status = PaymentStatus.COMPLETED
        self.payment.transaction_id = transaction_id
        self.payment.gateway = gateway
        self.payment.paid_at = now or _utc_now()

    def record_payment_failure(self) -> None:
        self.payment.status = PaymentStatus.FAILED

    # --- Computed properties --------------------------------------------------

    @property
    def is_cancellable(self) -> bool:
        return self.status not in NON_CANCELLABLE_STATUSES

    @property
    def refund_amount(self) -> Money:
        """Refund that cancelling right now would produce."""
        return refund_for(self.status, self.pricing.total)

    @property
    def delivery_delay(self) -> timedelta:
        """How late the delivery was against the estimate (never negative)."""
        if self.actual_delivery_time is None or self.estimated_delivery_time is None:
            return timedelta(0)
        return max(timedelta(0), self.actual_delivery_time - self.estimated_delivery_time)

    # --- Internal helpers -----------------------------------------------------

    def _append_history(
        self,
        status: OrderStatus,
        now: datetime,
        note: str,
        actor: Actor | None,
    ) -> None:
        self.status_history.append(
            StatusChange(status, now, note, actor.id if actor is not None else None)
        )
        self.status = status
