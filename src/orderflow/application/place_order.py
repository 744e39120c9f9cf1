"""Application service: Place Order use case.

Orchestrates the flow between the catalog, the Order aggregate, stock,
payment and notifications.  This is the only place that coordinates all
of them, and the only place with a designed partial-failure path: when
the charge fails (declined, or the gateway blows up) the freshly stored
order is deleted and its stock given back before the error reaches the
caller.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from orderflow.application.dto import OrderDTO, PlaceOrderRequest, to_order_dto
from orderflow.application.locking import KeyedLock
from orderflow.application.notifications import NotificationPublisher
from orderflow.domain.exceptions import PaymentError, ValidationError
from orderflow.domain.model.actor import Actor
from orderflow.domain.model.order import (
    DEFAULT_ESTIMATES,
    DeliveryAddress,
    DeliveryEstimates,
    Order,
    PaymentMethod,
)
from orderflow.domain.model.value_objects import Money
from orderflow.domain.port.order_number_allocator import OrderNumberAllocator
from orderflow.domain.port.payment_gateway import PaymentGateway
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.repository.order_repository import OrderRepository
from orderflow.domain.service.access_policy import AccessPolicy, OrderAction
from orderflow.domain.service.availability_guard import AvailabilityGuard
from orderflow.domain.service.payment_orchestrator import PaymentOrchestrator
from orderflow.domain.service.pricing_calculator import PricingCalculator
from orderflow.domain.service.stock_service import StockService

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_payment_method(raw: str) -> PaymentMethod:
    try:
        return PaymentMethod(raw)
    except ValueError:
        raise ValidationError("Valid payment method is required") from None


class PlaceOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogRepository,
        payment_gateway: PaymentGateway,
        notifier: NotificationPublisher,
        order_numbers: OrderNumberAllocator,
        locks: KeyedLock,
        pricing: PricingCalculator | None = None,
        estimates: DeliveryEstimates = DEFAULT_ESTIMATES,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._catalog = catalog
        self._payments = PaymentOrchestrator(payment_gateway)
        self._notifier = notifier
        self._order_numbers = order_numbers
        self._locks = locks
        self._pricing = pricing or PricingCalculator()
        self._estimates = estimates
        self._clock = clock

    def handle(self, actor: Actor, request: PlaceOrderRequest) -> OrderDTO:
        """Place a new order.

        Steps:
        1. Check the restaurant and every requested item can be sold now.
        2. Snapshot prices into line items and quote the order.
        3. Build the ``pending`` Order aggregate.
        4. Claim stock atomically, then persist.
        5. Charge (unless cash on delivery); roll back on decline.
        6. Publish ``new-order``.
        """
        AccessPolicy(self._catalog).check(actor, OrderAction.PLACE)
        now = self._clock()
        guard = AvailabilityGuard(self._catalog)

        restaurant = guard.check_restaurant(request.restaurant_id)
        menu = guard.check_items(
            restaurant,
            [(spec.menu_item_id, spec.quantity) for spec in request.items],
            now,
        )

        line_items = [
            self._pricing.build_line_item(
                menu[spec.menu_item_id],
                spec.quantity,
                list(spec.customizations),
                list(spec.add_ons),
                spec.special_instructions,
            )
            for spec in request.items
        ]
        guard.check_minimum(restaurant, self._pricing.subtotal(line_items))
        pricing = self._pricing.quote(
            line_items, restaurant.delivery_fee, tip=Money.of(request.tip)
        )

        order = Order.place(
            order_id=uuid.uuid4().hex,
            order_number=self._order_numbers.next_number(now),
            customer_id=actor.id,
            restaurant_id=restaurant.id,
            items=line_items,
            pricing=pricing,
            payment_method=parse_payment_method(request.payment_method),
            delivery_address=DeliveryAddress(
                street=request.delivery_address.street,
                city=request.delivery_address.city,
                state=request.delivery_address.state,
                zip_code=request.delivery_address.zip_code,
                landmark=request.delivery_address.landmark,
                instructions=request.delivery_address.instructions,
            ),
            contact_phone=request.contact_phone,
            special_requests=request.special_requests,
            scheduled_for=self._check_schedule(request.scheduled_for, now),
            now=now,
            estimates=self._estimates,
        )

        stock = StockService(self._catalog)
        # Held from before the order is stored: no transition may land on it
        # while its payment is outstanding.
        with self._locks.hold(order.id):
            stock.claim_for_lines(order.items)
            try:
                self._order_repo.add(order)
            except Exception:
                stock.restore_for_order(order)
                raise

            try:
                self._payments.settle(order, now, request.payment_details)
                if not order.payment.is_cash_on_delivery:
                    self._order_repo.save(order)
            except PaymentError:
                self._roll_back(order, stock)
                logger.warning("Order %s rolled back after payment failure", order.order_number)
                raise
            except Exception:
                self._roll_back(order, stock)
                logger.exception("Order %s rolled back after unexpected error", order.order_number)
                raise

        logger.info(
            "Order %s placed at restaurant %s for %s",
            order.order_number,
            restaurant.id,
            order.pricing.total,
        )
        self._notifier.notify(order.placed_event())
        return to_order_dto(order)

    def _roll_back(self, order: Order, stock: StockService) -> None:
        self._order_repo.delete(order.id)
        stock.restore_for_order(order)

    @staticmethod
    def _check_schedule(scheduled_for: datetime | None, now: datetime) -> datetime | None:
        if scheduled_for is None:
            return None
        if scheduled_for.tzinfo is None:
            scheduled_for = scheduled_for.replace(tzinfo=now.tzinfo)
        if scheduled_for <= now:
            raise ValidationError("Scheduled time must be in the future")
        return scheduled_for
