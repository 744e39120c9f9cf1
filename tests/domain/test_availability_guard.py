"""Unit tests for the AvailabilityGuard domain service."""

from datetime import datetime, timezone

import pytest

from orderflow.domain.exceptions import EntityNotFoundError, ValidationError
from orderflow.domain.model.catalog import MenuItemStatus, RestaurantStatus
from orderflow.domain.model.value_objects import Money
from orderflow.domain.service.availability_guard import (
    AvailabilityGuard,
    unavailability_reason,
)
from tests.builders import make_item, make_restaurant
from tests.fakes import FakeCatalogRepository, FixedClock

NOW = FixedClock()()  # Wednesday 12:00


def _guard(*items, restaurants=None):
    catalog = FakeCatalogRepository(
        restaurants=restaurants or [make_restaurant(), make_restaurant("r2", owner_id="o2")],
        items=list(items),
    )
    return AvailabilityGuard(catalog)


class TestRestaurantCheck:

    def test_active_restaurant_returned(self):
        assert _guard().check_restaurant("r1").id == "r1"

    def test_missing_restaurant_rejected(self):
        with pytest.raises(EntityNotFoundError, match="Restaurant not found or not available"):
            _guard().check_restaurant("nope")

    def test_closed_restaurant_rejected(self):
        guard = _guard(
            restaurants=[make_restaurant(status=RestaurantStatus.TEMPORARILY_CLOSED)]
        )
        with pytest.raises(EntityNotFoundError, match="not available"):
            guard.check_restaurant("r1")


class TestItemChecks:

    def test_items_returned_by_id(self):
        guard = _guard(make_item("m1"), make_item("m2", name="Fries"))
        items = guard.check_items(make_restaurant(), [("m1", 1), ("m2", 3)], NOW)
        assert set(items) == {"m1", "m2"}

    def test_item_from_another_restaurant_rejected(self):
        guard = _guard(make_item("m9", restaurant_id="r2"))
        with pytest.raises(ValidationError, match="Some menu items are not available"):
            guard.check_items(make_restaurant(), [("m9", 1)], NOW)

    def test_unknown_item_rejected(self):
        with pytest.raises(ValidationError, match="Some menu items are not available"):
            _guard().check_items(make_restaurant(), [("ghost", 1)], NOW)

    def test_inactive_item_rejected(self):
        guard = _guard(make_item(status=MenuItemStatus.INACTIVE))
        with pytest.raises(ValidationError, match="Some menu items are not available"):
            guard.check_items(make_restaurant(), [("m1", 1)], NOW)

    def test_empty_request_rejected(self):
        with pytest.raises(ValidationError, match="At least one item"):
            _guard().check_items(make_restaurant(), [], NOW)

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            _guard(make_item()).check_items(make_restaurant(), [("m1", 0)], NOW)

    def test_quantities_of_repeated_item_are_summed(self):
        guard = _guard(make_item(stock=3))
        with pytest.raises(ValidationError, match="Only 3 Burger available"):
            guard.check_items(make_restaurant(), [("m1", 2), ("m1", 2)], NOW)


class TestUnavailabilityReason:

    def test_sellable_item(self):
        assert unavailability_reason(make_item(), 1, NOW) is None

    def test_switched_off(self):
        reason = unavailability_reason(make_item(is_available=False), 1, NOW)
        assert reason == "Burger is currently not available"

    def test_wrong_day(self):
        reason = unavailability_reason(make_item(days=["monday", "friday"]), 1, NOW)
        assert reason == "Burger is not available on wednesday"

    def test_outside_hours(self):
        reason = unavailability_reason(make_item(hours=("18:00", "22:00")), 1, NOW)
        assert reason == "Burger is only available between 18:00 and 22:00"

    def test_overnight_window(self):
        item = make_item(hours=("22:00", "02:00"))
        late = datetime(2026, 10, 14, 1, 30, tzinfo=timezone.utc)
        assert unavailability_reason(item, 1, late) is None
        assert unavailability_reason(item, 1, NOW) is not None

    def test_exact_stock_is_enough(self):
        assert unavailability_reason(make_item(stock=2), 2, NOW) is None


class TestMinimumOrder:

    def test_below_minimum_rejected(self):
        with pytest.raises(ValidationError, match=r"Minimum order amount is \$10.00"):
            AvailabilityGuard.check_minimum(make_restaurant(), Money.of("9.99"))

    def test_exact_minimum_accepted(self):
        AvailabilityGuard.check_minimum(make_restaurant(), Money.of("10.00"))
