"""Unit tests for the Order aggregate: placement, transitions, cancellation, rating."""

from datetime import timedelta

import pytest

from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.order import (
    MAX_LINE_ITEMS,
    DeliveryAddress,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Pricing,
)
from orderflow.domain.model.value_objects import Money, Quantity
from tests.builders import (
    ADDRESS,
    CUSTOMER,
    OWNER,
    PATH_TO_DELIVERED,
    advance,
    make_order,
)
from tests.fakes import FixedClock


class TestPlacement:

    def test_new_order_is_pending_with_one_history_entry(self):
        clock = FixedClock()
        order = make_order(clock=clock)

        assert order.status == OrderStatus.PENDING
        assert len(order.status_history) == 1
        first = order.status_history[0]
        assert first.status == OrderStatus.PENDING
        assert first.note == "Order placed"
        assert first.actor_id == CUSTOMER.id
        assert first.timestamp == clock.now

    def test_initial_estimate_is_45_minutes_out(self):
        clock = FixedClock()
        order = make_order(clock=clock)
        assert order.estimated_delivery_time == clock.now + timedelta(minutes=45)

    def test_pricing_components_add_up(self):
        order = make_order([("10.00", 2)])
        pricing = order.pricing
        assert pricing.subtotal == Money.of("20.00")
        assert pricing.tax == Money.of("1.60")
        assert pricing.total == Money.of("23.60")

    def test_pricing_rejects_inconsistent_total(self):
        with pytest.raises(ValidationError, match="does not match"):
            Pricing(
                subtotal=Money.of("10.00"),
                delivery_fee=Money.of("2.00"),
                tax=Money.of("0.80"),
                tip=Money.zero(),
                total=Money.of("99.00"),
            )

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.place(
                order_id="o1",
                order_number="ORD-1",
                customer_id="cust-1",
                restaurant_id="r1",
                items=[],
                pricing=Pricing.compute(Money.zero(), Money.zero(), Money.zero()),
                payment_method=PaymentMethod.CARD,
                delivery_address=ADDRESS,
                contact_phone="555",
            )

    def test_too_many_lines_rejected(self):
        with pytest.raises(ValidationError, match=f"Maximum {MAX_LINE_ITEMS}"):
            make_order([("1.00", 1)] * (MAX_LINE_ITEMS + 1))

    def test_subtotal_must_match_items(self):
        line = OrderLineItem("m1", "Dish", Money.of("10.00"), Quantity(1))
        with pytest.raises(ValidationError, match="subtotal"):
            Order.place(
                order_id="o1",
                order_number="ORD-1",
                customer_id="cust-1",
                restaurant_id="r1",
                items=[line],
                pricing=Pricing.compute(Money.of("5.00"), Money.zero(), Money.zero()),
                payment_method=PaymentMethod.CARD,
                delivery_address=ADDRESS,
                contact_phone="555",
            )

    def test_address_requires_city(self):
        with pytest.raises(ValidationError, match="City is required"):
            DeliveryAddress("1 Main St", " ", "IL", "62701")


class TestTransitions:

    def test_happy_path_grows_history_by_one_each_step(self):
        order = make_order()
        for expected_len, status in enumerate(PATH_TO_DELIVERED, start=2):
            order.transition_to(status, actor=OWNER)
            assert order.status == status
            assert len(order.status_history) == expected_len
            assert order.status_history[-1].status == status

    def test_skipping_a_step_is_rejected(self):
        order = make_order()
        with pytest.raises(ValidationError, match="Cannot change status from pending to delivered"):
            order.transition_to(OrderStatus.DELIVERED)
        assert order.status == OrderStatus.PENDING
        assert len(order.status_history) == 1

    def test_terminal_states_reject_everything(self):
        order = make_order()
        advance(order, *PATH_TO_DELIVERED)
        for target in OrderStatus:
            assert not order.can_transition_to(target)

    def test_refunded_is_never_a_target(self):
        order = make_order()
        with pytest.raises(ValidationError, match="Cannot change status"):
            order.transition_to(OrderStatus.REFUNDED)

    def test_confirmation_recomputes_estimate(self):
        clock = FixedClock()
        order = make_order(clock=clock)
        later = clock.advance(10)
        order.transition_to(OrderStatus.CONFIRMED, now=later)
        assert order.estimated_delivery_time == later + timedelta(minutes=50)

    def test_pickup_sets_tracking(self):
        clock = FixedClock()
        order = make_order(clock=clock)
        advance(order, *PATH_TO_DELIVERED[:3])
        picked = clock.advance(30)
        order.transition_to(OrderStatus.OUT_FOR_DELIVERY, now=picked)
        assert order.tracking.picked_up_at == picked
        assert order.tracking.estimated_arrival == picked + timedelta(minutes=20)

    def test_delivery_records_time_and_settles_cash(self):
        clock = FixedClock()
        order = make_order(clock=clock)
        advance(order, *PATH_TO_DELIVERED[:4])
        delivered = clock.advance(90)
        order.transition_to(OrderStatus.DELIVERED, now=delivered)
        assert order.actual_delivery_time == delivered
        assert order.payment.status == PaymentStatus.COMPLETED
        assert order.payment.paid_at == delivered

    def test_delivery_delay_never_negative(self):
        clock = FixedClock()
        order = make_order(clock=clock)
        advance(order, *PATH_TO_DELIVERED[:4], now=clock.now)
        order.transition_to(OrderStatus.DELIVERED, now=clock.now + timedelta(minutes=5))
        assert order.delivery_delay == timedelta(0)

    def test_status_event_carries_previous_status(self):
        order = make_order()
        event = order.transition_to(OrderStatus.CONFIRMED, note="on it")
        assert event.previous_status == "pending"
        assert event.status == "confirmed"
        assert event.note == "on it"


class TestCancellation:

    def test_cancel_appends_labelled_note(self):
        order = make_order()
        order.cancel("changed my mind", CUSTOMER)
        assert order.status == OrderStatus.CANCELLED
        assert order.status_history[-1].note == "Cancelled by customer: changed my mind"
        assert order.cancellation_reason == "changed my mind"

    def test_owner_label_is_restaurant(self):
        order = make_order()
        order.cancel("out of buns", OWNER)
        assert order.status_history[-1].note == "Cancelled by restaurant: out of buns"

    def test_transition_to_cancelled_goes_through_cancel(self):
        order = make_order()
        event = order.transition_to(OrderStatus.CANCELLED, note="kitchen fire", actor=OWNER)
        assert order.status == OrderStatus.CANCELLED
        assert event.refund_amount == Money.of("23.60")

    def test_blank_reason_rejected(self):
        order = make_order()
        with pytest.raises(ValidationError, match="reason is required"):
            order.cancel("   ")

    def test_ready_for_pickup_can_still_be_cancelled(self):
        order = make_order()
        advance(order, *PATH_TO_DELIVERED[:3])
        assert order.is_cancellable
        order.cancel("no driver")
        assert order.status == OrderStatus.CANCELLED

    @pytest.mark.parametrize("steps", [4, 5])
    def test_out_for_delivery_and_later_not_cancellable(self, steps):
        order = make_order()
        advance(order, *PATH_TO_DELIVERED[:steps])
        history_len = len(order.status_history)
        with pytest.raises(ValidationError, match="cannot be cancelled"):
            order.cancel("too late")
        assert len(order.status_history) == history_len

    def test_cancel_twice_rejected(self):
        order = make_order()
        order.cancel("first")
        with pytest.raises(ValidationError, match="cannot be cancelled"):
            order.cancel("second")

    def test_unpaid_order_gets_no_refund(self):
        order = make_order()
        event = order.cancel("bye")
        assert not event.refund_issued
        assert order.payment.status == PaymentStatus.PENDING
        assert order.payment.refund_amount.is_zero

    def test_paid_order_is_refunded(self):
        order = make_order(method=PaymentMethod.CARD)
        order.record_payment("txn_1", "stripe")
        event = order.cancel("bye")
        assert event.refund_issued
        assert order.payment.status == PaymentStatus.REFUNDED
        assert order.payment.refund_amount == Money.of("23.60")


class TestRating:

    def _delivered(self) -> Order:
        order = make_order()
        advance(order, *PATH_TO_DELIVERED)
        return order

    def test_rate_delivered_order(self):
        order = self._delivered()
        event = order.rate(5, 4, 5, "great")
        assert order.rating.overall == 5
        assert event.review.service == 5
        assert event.review.packaging == 5
        assert event.review.is_verified_purchase

    def test_missing_comment_gets_placeholder(self):
        order = self._delivered()
        event = order.rate(3, 3, 3)
        assert event.review.comment == "No comment provided"

    def test_undelivered_order_cannot_be_rated(self):
        order = make_order()
        with pytest.raises(ValidationError, match="only rate delivered"):
            order.rate(5, 5, 5)

    def test_second_rating_rejected_and_first_kept(self):
        order = self._delivered()
        order.rate(2, 2, 2, "meh")
        with pytest.raises(ValidationError, match="already been rated"):
            order.rate(5, 5, 5, "actually great")
        assert order.rating.overall == 2
        assert order.rating.review == "meh"

    @pytest.mark.parametrize("scores", [(0, 3, 3), (3, 6, 3), (3, 3, -1)])
    def test_scores_outside_one_to_five_rejected(self, scores):
        order = self._delivered()
        with pytest.raises(ValidationError, match="between 1 and 5"):
            order.rate(*scores)
        assert order.rating is None

    def test_review_over_500_chars_rejected(self):
        order = self._delivered()
        with pytest.raises(ValidationError, match="500 characters"):
            order.rate(4, 4, 4, "x" * 501)


class TestDeliveryAssignment:

    def test_assign_while_preparing(self):
        clock = FixedClock()
        order = make_order(clock=clock)
        advance(order, OrderStatus.CONFIRMED, OrderStatus.PREPARING)
        order.assign_delivery_person("rider-7", clock.now)
        assert order.delivery_person_id == "rider-7"
        assert order.tracking.assigned_at == clock.now

    def test_assign_to_pending_rejected(self):
        order = make_order()
        with pytest.raises(ValidationError, match="Cannot assign"):
            order.assign_delivery_person("rider-7")
