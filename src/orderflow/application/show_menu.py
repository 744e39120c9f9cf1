"""Application service: Show Menu use case (query)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from orderflow.domain.exceptions import EntityNotFoundError
from orderflow.domain.repository.catalog_repository import CatalogRepository
from orderflow.domain.service.availability_guard import unavailability_reason


@dataclass(frozen=True)
class MenuLineDTO:
    id: str
    name: str
    price: str
    stock: str  # "unlimited" or a count
    available_now: bool


class ShowMenuHandler:

    def __init__(self, catalog: CatalogRepository) -> None:
        self._catalog = catalog

    def handle(self, restaurant_id: str, now: datetime) -> list[MenuLineDTO]:
        if self._catalog.get_restaurant(restaurant_id) is None:
            raise EntityNotFoundError(f"Restaurant not found: '{restaurant_id}'")
        items = self._catalog.list_menu_items(restaurant_id)
        return [
            MenuLineDTO(
                id=item.id,
                name=item.name,
                price=str(item.price),
                stock=(
                    "unlimited"
                    if item.availability.available_quantity is None
                    else str(item.availability.available_quantity)
                ),
                available_now=unavailability_reason(item, 1, now) is None,
            )
            for item in items
        ]
