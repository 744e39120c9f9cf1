"""Unit tests for the PricingCalculator domain service."""

from decimal import Decimal

import pytest

from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.catalog import CustomizationGroup, CustomizationOption
from orderflow.domain.model.value_objects import Money
from orderflow.domain.service.pricing_calculator import (
    AddOnChoice,
    CustomizationChoice,
    PricingCalculator,
)
from tests.builders import make_item


class TestLinePricing:

    def test_unit_price_includes_options_and_add_ons(self):
        calc = PricingCalculator()
        line = calc.build_line_item(
            make_item(price="10.00"),
            quantity=2,
            customizations=[CustomizationChoice("Size", "Large")],
            add_ons=[AddOnChoice("Cheese", 3)],
        )
        # 10 + 2 + 3 x 1
        assert line.unit_price == Money.of("15.00")
        assert line.item_total == Money.of("30.00")

    def test_line_snapshots_name_and_selections(self):
        line = PricingCalculator().build_line_item(
            make_item(name="Burger"),
            quantity=1,
            customizations=[CustomizationChoice("Size", "Regular")],
            special_instructions="no onions",
        )
        assert line.name == "Burger"
        assert line.customizations[0].option == "Regular"
        assert line.customizations[0].price.is_zero
        assert line.special_instructions == "no onions"

    def test_unknown_group_rejected(self):
        with pytest.raises(ValidationError, match="no customization 'Spice'"):
            PricingCalculator().build_line_item(
                make_item(), 1, customizations=[CustomizationChoice("Spice", "Hot")]
            )

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError, match="'Huge' is not an option"):
            PricingCalculator().build_line_item(
                make_item(), 1, customizations=[CustomizationChoice("Size", "Huge")]
            )

    def test_unknown_add_on_rejected(self):
        with pytest.raises(ValidationError, match="no add-on 'Truffle'"):
            PricingCalculator().build_line_item(make_item(), 1, add_ons=[AddOnChoice("Truffle")])

    def test_required_group_must_be_chosen(self):
        item = make_item()
        item.customizations.append(
            CustomizationGroup(
                name="Bun",
                options=(CustomizationOption("Brioche", Money.of("0.50")),),
                required=True,
            )
        )
        with pytest.raises(ValidationError, match="requires a choice for Bun"):
            PricingCalculator().build_line_item(item, 1)

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            PricingCalculator().build_line_item(make_item(), 0)


class TestQuote:

    def test_quote_with_tax_fee_and_tip(self):
        calc = PricingCalculator()
        line = calc.build_line_item(
            make_item(price="10.00"),
            2,
            customizations=[CustomizationChoice("Size", "Large")],
            add_ons=[AddOnChoice("Cheese", 3)],
        )
        pricing = calc.quote([line], delivery_fee=Money.of("2.99"), tip=Money.of("3.00"))

        assert pricing.subtotal == Money.of("30.00")
        assert pricing.tax == Money.of("2.40")
        assert pricing.total == Money.of("38.39")

    def test_custom_tax_rate(self):
        calc = PricingCalculator(Decimal("0.10"))
        assert calc.tax(Money.of("19.99")) == Money.of("2.00")

    def test_negative_tax_rate_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            PricingCalculator(Decimal("-0.01"))

    def test_subtotal_sums_lines(self):
        calc = PricingCalculator()
        lines = [
            calc.build_line_item(make_item("m1", price="4.25"), 2),
            calc.build_line_item(make_item("m2", price="1.50"), 1),
        ]
        assert PricingCalculator.subtotal(lines) == Money.of("10.00")
