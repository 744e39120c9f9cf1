"""Catalog aggregates: restaurants and their menu items.

The catalog belongs to another subsystem; the order engine only reads it
(plus claims and restores stock).  Orders copy what they need out of these
objects at placement time and never look back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from orderflow.domain.exceptions import ValidationError
from orderflow.domain.model.value_objects import Money, TimeWindow

WEEKDAYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


class RestaurantStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TEMPORARILY_CLOSED = "temporarily_closed"
    PENDING_APPROVAL = "pending_approval"


class MenuItemStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"


@dataclass
class Restaurant:
    id: str
    name: str
    owner_id: str
    delivery_fee: Money
    minimum_order: Money
    status: RestaurantStatus = RestaurantStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == RestaurantStatus.ACTIVE


@dataclass(frozen=True)
class CustomizationOption:
    name: str
    price: Money


@dataclass(frozen=True)
class CustomizationGroup:
    """A named choice on a menu item, e.g. "Size" with Small/Large options."""

    name: str
    options: tuple[CustomizationOption, ...]
    required: bool = False

    def find_option(self, name: str) -> CustomizationOption | None:
        for option in self.options:
            if option.name == name:
                return option
        return None


@dataclass(frozen=True)
class AddOn:
    name: str
    price: Money


@dataclass
class Availability:
    is_available: bool = True
    available_quantity: int | None = None  # None means unlimited
    available_days: list[str] = field(default_factory=list)
    available_hours: TimeWindow = field(default_factory=TimeWindow)

    def __post_init__(self) -> None:
        for day in self.available_days:
            if day not in WEEKDAYS:
                raise ValidationError(f"Unknown weekday {day!r}")


@dataclass
class MenuItem:
    """A dish on a restaurant's menu."""

    id: str
    restaurant_id: str
    name: str
    price: Money
    status: MenuItemStatus = MenuItemStatus.ACTIVE
    availability: Availability = field(default_factory=Availability)
    customizations: list[CustomizationGroup] = field(default_factory=list)
    add_ons: list[AddOn] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == MenuItemStatus.ACTIVE

    def find_customization(self, name: str) -> CustomizationGroup | None:
        for group in self.customizations:
            if group.name == name:
                return group
        return None

    def find_add_on(self, name: str) -> AddOn | None:
        for add_on in self.add_ons:
            if add_on.name == name:
                return add_on
        return None
