"""Domain service: Payment Orchestrator.

Charges an order through the PaymentGateway port and books the outcome on
the order.  Cash-on-delivery orders never reach the gateway; they stay
``pending`` until the order is delivered.

Compensation (deleting the just-placed order, restoring stock) is the
caller's job, because only the caller knows what it has already done.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from orderflow.domain.exceptions import PaymentError
from orderflow.domain.model.order import Order
from orderflow.domain.port.payment_gateway import PaymentGateway, PaymentResult

logger = logging.getLogger(__name__)


class PaymentOrchestrator:

    def __init__(self, gateway: PaymentGateway) -> None:
        self._gateway = gateway

    def settle(
        self,
        order: Order,
        now: datetime,
        details: dict[str, Any] | None = None,
    ) -> PaymentResult | None:
        """Charge the order's total.  Returns None for cash on delivery.

        Raises PaymentError when the gateway declines; the order's payment
        status is set to ``failed`` first so the caller can log it.
        """
        if order.payment.is_cash_on_delivery:
            logger.info("Order %s is cash on delivery; no charge taken", order.order_number)
            return None

        try:
            result = self._gateway.charge(order.payment.method, order.pricing.total, details)
            if result.status != "completed":
                raise PaymentError(
                    f"Payment not completed (gateway reported {result.status})"
                )
        except PaymentError:
            order.record_payment_failure()
            logger.warning(
                "Payment of %s for order %s failed", order.pricing.total, order.order_number
            )
            raise

        order.record_payment(result.transaction_id, result.gateway, now)
        logger.info(
            "Order %s paid via %s (txn %s)",
            order.order_number,
            result.gateway,
            result.transaction_id,
        )
        return result
