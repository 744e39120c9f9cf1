"""Domain service: Availability Guard.

Checks, at placement time, that the restaurant is open for business and
that every requested menu item can actually be sold right now.  Reads the
catalog only; stock is claimed later by the StockService.
"""

from __future__ import annotations

from datetime import datetime

from orderflow.domain.exceptions import EntityNotFoundError, ValidationError
from orderflow.domain.model.catalog import WEEKDAYS, MenuItem, Restaurant
from orderflow.domain.model.value_objects import Money
from orderflow.domain.repository.catalog_repository import CatalogRepository


def unavailability_reason(item: MenuItem, quantity: int, now: datetime) -> str | None:
    """Why *item* cannot be sold in *quantity* at *now*, or None if it can."""
    availability = item.availability
    if not availability.is_available or not item.is_active:
        return f"{item.name} is currently not available"

    remaining = availability.available_quantity
    if remaining is not None and remaining < quantity:
        return f"Only {remaining} {item.name} available"

    today = WEEKDAYS[now.weekday()]
    if availability.available_days and today not in availability.available_days:
        return f"{item.name} is not available on {today}"

    if not availability.available_hours.contains(now.strftime("%H:%M")):
        hours = availability.available_hours
        return f"{item.name} is only available between {hours.start} and {hours.end}"

    return None


class AvailabilityGuard:

    def __init__(self, catalog: CatalogRepository) -> None:
        self._catalog = catalog

    def check_restaurant(self, restaurant_id: str) -> Restaurant:
        restaurant = self._catalog.get_restaurant(restaurant_id)
        if restaurant is None or not restaurant.is_active:
            raise EntityNotFoundError("Restaurant not found or not available")
        return restaurant

    def check_items(
        self,
        restaurant: Restaurant,
        requests: list[tuple[str, int]],
        now: datetime,
    ) -> dict[str, MenuItem]:
        """Validate (menu item ID, quantity) pairs and return the items by ID.

        Quantities for the same item are summed before the stock check, so
        two lines of the same dish cannot together exceed what is left.
        """
        if not requests:
            raise ValidationError("At least one item is required")

        # Phase 1: every item must exist, belong here and be active
        items: dict[str, MenuItem] = {}
        totals: dict[str, int] = {}
        for item_id, quantity in requests:
            if not isinstance(quantity, int) or quantity < 1:
                raise ValidationError("Quantity must be at least 1")
            if item_id not in items:
                item = self._catalog.get_menu_item(item_id)
                if item is None or item.restaurant_id != restaurant.id or not item.is_active:
                    raise ValidationError("Some menu items are not available")
                items[item_id] = item
            totals[item_id] = totals.get(item_id, 0) + quantity

        # Phase 2: each one must be sellable right now
        for item_id, quantity in totals.items():
            reason = unavailability_reason(items[item_id], quantity, now)
            if reason is not None:
                raise ValidationError(reason)

        return items

    @staticmethod
    def check_minimum(restaurant: Restaurant, subtotal: Money) -> None:
        if subtotal < restaurant.minimum_order:
            raise ValidationError(
                f"Minimum order amount is {restaurant.minimum_order}"
            )
