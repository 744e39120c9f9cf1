"""Port to the external payment gateway."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from orderflow.domain.model.order import PaymentMethod
from orderflow.domain.model.value_objects import Money


@dataclass(frozen=True)
class PaymentResult:
    transaction_id: str
    gateway: str
    status: str = "completed"


class PaymentGateway(ABC):

    @abstractmethod
    def charge(
        self,
        method: PaymentMethod,
        amount: Money,
        details: dict[str, Any] | None = None,
    ) -> PaymentResult:
        """Charge *amount* and return the gateway's receipt.

        Raises PaymentError when the charge is declined or fails.
        """
