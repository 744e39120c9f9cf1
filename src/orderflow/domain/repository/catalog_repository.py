"""Abstract repository for the restaurant/menu catalog.

Defined in the domain layer so the domain never depends on
infrastructure.  The order engine reads restaurants and menu items and
touches nothing but stock counters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.model.catalog import MenuItem, Restaurant


class CatalogRepository(ABC):

    @abstractmethod
    def get_restaurant(self, restaurant_id: str) -> Restaurant | None:
        """Return a restaurant by ID, or None."""

    @abstractmethod
    def get_menu_item(self, item_id: str) -> MenuItem | None:
        """Return a menu item by ID, or None."""

    @abstractmethod
    def list_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        """Return every menu item of a restaurant."""

    @abstractmethod
    def claim_stock(self, item_id: str, quantity: int) -> bool:
        """Atomically decrement remaining stock if enough is left.

        Returns True when the claim succeeded (or the item has unlimited
        stock) and False when fewer than *quantity* units remain.  Must
        never take the counter below zero, even under concurrent callers.
        """

    @abstractmethod
    def restore_stock(self, item_id: str, quantity: int) -> None:
        """Give back previously claimed stock.  No-op for unlimited items."""

    @abstractmethod
    def set_stock(self, item_id: str, quantity: int | None) -> None:
        """Overwrite the remaining stock (None means unlimited)."""

    @abstractmethod
    def save_restaurant(self, restaurant: Restaurant) -> None:
        """Persist a new or updated restaurant."""

    @abstractmethod
    def save_menu_item(self, item: MenuItem) -> None:
        """Persist a new or updated menu item."""
