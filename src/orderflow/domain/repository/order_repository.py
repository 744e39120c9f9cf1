"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):
    """Persistence port for orders.

    ``save`` is an optimistic-concurrency write: it must reject an order
    whose ``version`` no longer matches the stored one with
    ConcurrentModificationError, and bump ``version`` on success.
    """

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its internal ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Order | None:
        """Return an order by its display number, or None if not found."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a brand-new order."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist changes to an existing order."""

    @abstractmethod
    def delete(self, order_id: str) -> None:
        """Physically remove an order (payment-failure rollback only)."""

    @abstractmethod
    def list_for_customer(
        self,
        customer_id: str,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        """Return a customer's orders, newest first."""

    @abstractmethod
    def list_for_restaurant(
        self,
        restaurant_id: str,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        """Return a restaurant's orders, newest first."""
