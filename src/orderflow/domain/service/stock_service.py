"""Domain service: Stock claims.

Coordinates the cross-aggregate operation of taking menu-item stock for an
order and giving it back.  Each per-item claim is an atomic conditional
decrement inside the catalog repository, so two concurrent orders can
never both take the last unit.

Claims for an order are all-or-nothing: if a later item cannot be
claimed, the items already claimed are restored before the error
propagates.
"""

from __future__ import annotations

import logging

from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.order import Order, OrderLineItem
from orderflow.domain.repository.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)


def _quantities_by_item(lines: list[OrderLineItem]) -> dict[str, tuple[str, int]]:
    totals: dict[str, tuple[str, int]] = {}
    for line in lines:
        name, qty = totals.get(line.menu_item_id, (line.name, 0))
        totals[line.menu_item_id] = (name, qty + line.quantity.value)
    return totals


class StockService:

    def __init__(self, catalog: CatalogRepository) -> None:
        self._catalog = catalog

    def claim_for_lines(self, lines: list[OrderLineItem]) -> None:
        """Claim stock for every line, or for none of them."""
        claimed: list[tuple[str, int]] = []
        for item_id, (name, qty) in _quantities_by_item(lines).items():
            if not self._catalog.claim_stock(item_id, qty):
                self._restore(claimed)
                raise ValidationError(f"Insufficient stock for {name}")
            claimed.append((item_id, qty))

    def restore_for_order(self, order: Order) -> None:
        """Give back stock taken by *order* (cancellation or rollback)."""
        self._restore(
            [(item_id, qty) for item_id, (_, qty) in _quantities_by_item(order.items).items()]
        )

    def _restore(self, claimed: list[tuple[str, int]]) -> None:
        for item_id, qty in claimed:
            if self._catalog.get_menu_item(item_id) is None:
                logger.warning("Menu item %s vanished; %d units not restored", item_id, qty)
                continue
            self._catalog.restore_stock(item_id, qty)
