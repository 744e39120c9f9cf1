"""Integration tests for the CancelOrder use case."""

import pytest

from orderflow.application.dto import OrderItemSpec
from orderflow.domain.exceptions import AuthorizationError, EntityNotFoundError, ValidationError
from orderflow.domain.model.order import OrderStatus, PaymentStatus
from tests.builders import ADMIN, CUSTOMER, OTHER_CUSTOMER, OWNER, World, place_request


def _placed(world: World, items=None, method="cash_on_delivery") -> str:
    return world.place().handle(CUSTOMER, place_request(items, method=method)).id


class TestCancelOrder:

    def test_pending_cash_order_cancelled_without_refund(self):
        world = World()
        order_id = _placed(world, [OrderItemSpec("m3", 2)])

        dto = world.cancel().handle(CUSTOMER, order_id, "changed my mind")

        assert dto.status == "cancelled"
        assert dto.refund_amount == "$13.88"
        assert not dto.refund_issued
        assert world.catalog.stock_of("m3") == 5

        order = world.orders.get_by_id(order_id)
        assert order.payment.status == PaymentStatus.PENDING
        assert order.cancellation_reason == "changed my mind"

    def test_paid_order_cancelled_while_preparing_refunds_80_percent(self):
        world = World()
        order_id = _placed(world, method="card")
        world.walk(order_id, OrderStatus.CONFIRMED, OrderStatus.PREPARING)

        dto = world.cancel().handle(CUSTOMER, order_id, "taking too long")

        # 23.60 x 0.8
        assert dto.refund_amount == "$18.88"
        assert dto.refund_issued
        order = world.orders.get_by_id(order_id)
        assert order.payment.status == PaymentStatus.REFUNDED

    def test_cancellation_is_published_to_restaurant(self):
        world = World()
        order_id = _placed(world)
        world.cancel().handle(CUSTOMER, order_id, "bye")

        topic, payload = world.publisher.messages[-1]
        assert topic == "restaurant-r1"
        assert payload["event"] == "order-cancelled"
        assert payload["reason"] == "bye"
        assert payload["refund_amount"] == "23.60"

    def test_admin_may_cancel(self):
        world = World()
        order_id = _placed(world)
        dto = world.cancel().handle(ADMIN, order_id, "fraud check")
        assert dto.status == "cancelled"
        note = world.orders.get_by_id(order_id).status_history[-1].note
        assert note == "Cancelled by admin: fraud check"


class TestCancelOrderRejections:

    def test_other_customer_rejected(self):
        world = World()
        order_id = _placed(world)
        with pytest.raises(AuthorizationError, match="You can only cancel your own orders"):
            world.cancel().handle(OTHER_CUSTOMER, order_id, "mine now")

    def test_owner_uses_status_update_instead(self):
        world = World()
        order_id = _placed(world)
        with pytest.raises(AuthorizationError):
            world.cancel().handle(OWNER, order_id, "closing early")

    def test_out_for_delivery_cannot_be_cancelled(self):
        world = World()
        order_id = _placed(world, [OrderItemSpec("m3", 2)])
        world.walk(
            order_id,
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.READY_FOR_PICKUP,
            OrderStatus.OUT_FOR_DELIVERY,
        )

        with pytest.raises(ValidationError, match="cannot be cancelled"):
            world.cancel().handle(CUSTOMER, order_id, "too slow")

        order = world.orders.get_by_id(order_id)
        assert order.status == OrderStatus.OUT_FOR_DELIVERY
        assert world.catalog.stock_of("m3") == 3

    def test_missing_reason_rejected(self):
        world = World()
        order_id = _placed(world)
        with pytest.raises(ValidationError, match="reason is required"):
            world.cancel().handle(CUSTOMER, order_id, "")

    def test_missing_order(self):
        world = World()
        with pytest.raises(EntityNotFoundError):
            world.cancel().handle(CUSTOMER, "ghost", "why not")
