"""Application service: Set Stock use case."""

from __future__ import annotations

from orderflow.domain.exceptions import EntityNotFoundError, ValidationError
from orderflow.domain.repository.catalog_repository import CatalogRepository


class SetStockHandler:

    def __init__(self, catalog: CatalogRepository) -> None:
        self._catalog = catalog

    def handle(self, item_id: str, quantity: int | None) -> None:
        """Set the remaining stock for a menu item (None for unlimited)."""
        if self._catalog.get_menu_item(item_id) is None:
            raise EntityNotFoundError(f"Menu item not found: '{item_id}'")
        if quantity is not None and quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        self._catalog.set_stock(item_id, quantity)
