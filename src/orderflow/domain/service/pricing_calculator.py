"""Domain service: Pricing Calculator.

Pure functions of a frozen menu snapshot and the customer's selections.
Nothing here reads or writes persistent state.

Selections are resolved strictly against the menu item's own tables: a
customization group, option or add-on the item does not offer is rejected
rather than silently priced at zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.catalog import MenuItem
from orderflow.domain.model.order import (
    OrderLineItem,
    Pricing,
    SelectedAddOn,
    SelectedCustomization,
)
from orderflow.domain.model.value_objects import Money, Quantity

DEFAULT_TAX_RATE = Decimal("0.08")


@dataclass(frozen=True)
class CustomizationChoice:
    """Input: the option picked for one customization group."""

    group: str
    option: str


@dataclass(frozen=True)
class AddOnChoice:
    """Input: an add-on and how many of it per unit."""

    name: str
    quantity: int = 1


class PricingCalculator:

    def __init__(self, tax_rate: Decimal = DEFAULT_TAX_RATE) -> None:
        if tax_rate < Decimal("0"):
            raise ValidationError("Tax rate cannot be negative")
        self._tax_rate = tax_rate

    @property
    def tax_rate(self) -> Decimal:
        return self._tax_rate

    # --- Line level -----------------------------------------------------------

    def resolve_customizations(
        self,
        menu_item: MenuItem,
        choices: list[CustomizationChoice],
    ) -> tuple[SelectedCustomization, ...]:
        selected: list[SelectedCustomization] = []
        chosen_groups: set[str] = set()
        for choice in choices:
            group = menu_item.find_customization(choice.group)
            if group is None:
                raise ValidationError(
                    f"{menu_item.name} has no customization '{choice.group}'"
                )
            option = group.find_option(choice.option)
            if option is None:
                raise ValidationError(
                    f"'{choice.option}' is not an option for {choice.group} "
                    f"on {menu_item.name}"
                )
            selected.append(SelectedCustomization(group.name, option.name, option.price))
            chosen_groups.add(group.name)

        for group in menu_item.customizations:
            if group.required and group.name not in chosen_groups:
                raise ValidationError(
                    f"{menu_item.name} requires a choice for {group.name}"
                )
        return tuple(selected)

    def resolve_add_ons(
        self,
        menu_item: MenuItem,
        choices: list[AddOnChoice],
    ) -> tuple[SelectedAddOn, ...]:
        selected: list[SelectedAddOn] = []
        for choice in choices:
            add_on = menu_item.find_add_on(choice.name)
            if add_on is None:
                raise ValidationError(
                    f"{menu_item.name} has no add-on '{choice.name}'"
                )
            selected.append(SelectedAddOn(add_on.name, add_on.price, Quantity(choice.quantity)))
        return tuple(selected)

    def unit_price(
        self,
        menu_item: MenuItem,
        customizations: tuple[SelectedCustomization, ...],
        add_ons: tuple[SelectedAddOn, ...],
    ) -> Money:
        """Base price + chosen option prices + add-on price x add-on quantity."""
        price = menu_item.price
        for customization in customizations:
            price = price + customization.price
        for add_on in add_ons:
            price = price + add_on.total
        return price

    def build_line_item(
        self,
        menu_item: MenuItem,
        quantity: int,
        customizations: list[CustomizationChoice] | None = None,
        add_ons: list[AddOnChoice] | None = None,
        special_instructions: str = "",
    ) -> OrderLineItem:
        """Snapshot a menu item into a priced order line."""
        selected_customizations = self.resolve_customizations(menu_item, customizations or [])
        selected_add_ons = self.resolve_add_ons(menu_item, add_ons or [])
        return OrderLineItem(
            menu_item_id=menu_item.id,
            name=menu_item.name,
            unit_price=self.unit_price(menu_item, selected_customizations, selected_add_ons),
            quantity=Quantity(quantity),
            customizations=selected_customizations,
            add_ons=selected_add_ons,
            special_instructions=special_instructions or "",
        )

    # --- Order level ----------------------------------------------------------

    @staticmethod
    def subtotal(items: list[OrderLineItem]) -> Money:
        result = Money.zero()
        for item in items:
            result = result + item.item_total
        return result

    def tax(self, subtotal: Money) -> Money:
        return subtotal.scale(self._tax_rate)

    def quote(
        self,
        items: list[OrderLineItem],
        delivery_fee: Money,
        tip: Money | None = None,
        discount: Money | None = None,
    ) -> Pricing:
        subtotal = self.subtotal(items)
        return Pricing.compute(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            tax=self.tax(subtotal),
            tip=tip,
            discount=discount,
        )
