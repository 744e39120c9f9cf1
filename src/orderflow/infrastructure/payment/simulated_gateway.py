"""Stand-in payment gateway.

Approves a configurable share of charges after an optional delay, the way
a sandbox gateway would.  Cards settle through ``stripe``; UPI and
wallets through ``razorpay``.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any

from orderflow.domain.exceptions import PaymentError
from orderflow.domain.model.order import PaymentMethod
from orderflow.domain.model.value_objects import Money
from orderflow.domain.port.payment_gateway import PaymentGateway, PaymentResult

logger = logging.getLogger(__name__)


class SimulatedPaymentGateway(PaymentGateway):

    def __init__(
        self,
        success_rate: float = 0.9,
        latency_seconds: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        self._success_rate = success_rate
        self._latency = latency_seconds
        self._rng = rng or random.Random()

    def charge(
        self,
        method: PaymentMethod,
        amount: Money,
        details: dict[str, Any] | None = None,
    ) -> PaymentResult:
        if method == PaymentMethod.CASH_ON_DELIVERY:
            raise PaymentError("Cash on delivery cannot be charged through a gateway")

        logger.info("Processing %s payment of %s", method.value, amount)
        if self._latency:
            time.sleep(self._latency)

        if self._rng.random() >= self._success_rate:
            raise PaymentError("Payment processing failed. Please try again.")

        suffix = "".join(self._rng.choices("abcdefghijklmnopqrstuvwxyz0123456789", k=9))
        return PaymentResult(
            transaction_id=f"txn_{int(time.time() * 1000)}_{suffix}",
            gateway="stripe" if method == PaymentMethod.CARD else "razorpay",
            status="completed",
        )
