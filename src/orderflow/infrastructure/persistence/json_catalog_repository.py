"""JSON-file-backed implementation of CatalogRepository.

The whole catalog lives in one file shaped as
``{"restaurants": [...], "menu_items": [...]}``.  Stock claims are
read-check-write under the repository lock, which makes them atomic for
every caller sharing this repository instance.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path

from orderflow.domain.exceptions import EntityNotFoundError, ValidationError
from orderflow.domain.model.catalog import (
    AddOn,
    Availability,
    CustomizationGroup,
    CustomizationOption,
    MenuItem,
    MenuItemStatus,
    Restaurant,
    RestaurantStatus,
)
from orderflow.domain.model.value_objects import Money, TimeWindow
from orderflow.domain.repository.catalog_repository import CatalogRepository


class JsonCatalogRepository(CatalogRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.RLock()
        self._ensure_file()

    # --- CatalogRepository interface ------------------------------------------

    def get_restaurant(self, restaurant_id: str) -> Restaurant | None:
        for raw in self._load_raw()["restaurants"]:
            if raw["id"] == restaurant_id:
                return restaurant_from_raw(raw)
        return None

    def get_menu_item(self, item_id: str) -> MenuItem | None:
        for raw in self._load_raw()["menu_items"]:
            if raw["id"] == item_id:
                return menu_item_from_raw(raw)
        return None

    def list_menu_items(self, restaurant_id: str) -> list[MenuItem]:
        return [
            menu_item_from_raw(raw)
            for raw in self._load_raw()["menu_items"]
            if raw["restaurant_id"] == restaurant_id
        ]

    def claim_stock(self, item_id: str, quantity: int) -> bool:
        if quantity <= 0:
            raise ValidationError("Claim quantity must be positive")
        with self._lock:
            catalog = self._load_raw()
            raw = self._find_item(catalog, item_id)
            availability = raw.setdefault("availability", {})
            remaining = availability.get("available_quantity")
            if remaining is None:
                return True
            if remaining < quantity:
                return False
            availability["available_quantity"] = remaining - quantity
            self._persist_raw(catalog)
            return True

    def restore_stock(self, item_id: str, quantity: int) -> None:
        with self._lock:
            catalog = self._load_raw()
            raw = self._find_item(catalog, item_id)
            availability = raw.setdefault("availability", {})
            remaining = availability.get("available_quantity")
            if remaining is None:
                return
            availability["available_quantity"] = remaining + quantity
            self._persist_raw(catalog)

    def set_stock(self, item_id: str, quantity: int | None) -> None:
        with self._lock:
            catalog = self._load_raw()
            raw = self._find_item(catalog, item_id)
            raw.setdefault("availability", {})["available_quantity"] = quantity
            self._persist_raw(catalog)

    def save_restaurant(self, restaurant: Restaurant) -> None:
        with self._lock:
            catalog = self._load_raw()
            self._upsert(catalog["restaurants"], restaurant_to_raw(restaurant))
            self._persist_raw(catalog)

    def save_menu_item(self, item: MenuItem) -> None:
        with self._lock:
            catalog = self._load_raw()
            self._upsert(catalog["menu_items"], menu_item_to_raw(item))
            self._persist_raw(catalog)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _find_item(catalog: dict, item_id: str) -> dict:
        for raw in catalog["menu_items"]:
            if raw["id"] == item_id:
                return raw
        raise EntityNotFoundError(f"Menu item not found: '{item_id}'")

    @staticmethod
    def _upsert(records: list[dict], record: dict) -> None:
        for i, raw in enumerate(records):
            if raw["id"] == record["id"]:
                records[i] = record
                return
        records.append(record)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, catalog: dict) -> None:
        self._file_path.write_text(
            json.dumps(catalog, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist_raw({"restaurants": [], "menu_items": []})


# --- Serialization ------------------------------------------------------------


def restaurant_from_raw(raw: dict) -> Restaurant:
    return Restaurant(
        id=raw["id"],
        name=raw["name"],
        owner_id=raw["owner_id"],
        delivery_fee=Money.of(raw.get("delivery_fee", "0")),
        minimum_order=Money.of(raw.get("minimum_order", "0")),
        status=RestaurantStatus(raw.get("status", "active")),
    )


def restaurant_to_raw(restaurant: Restaurant) -> dict:
    return {
        "id": restaurant.id,
        "name": restaurant.name,
        "owner_id": restaurant.owner_id,
        "delivery_fee": str(restaurant.delivery_fee.amount),
        "minimum_order": str(restaurant.minimum_order.amount),
        "status": restaurant.status.value,
    }


def menu_item_from_raw(raw: dict) -> MenuItem:
    availability = raw.get("availability") or {}
    hours = availability.get("available_hours") or {}
    return MenuItem(
        id=raw["id"],
        restaurant_id=raw["restaurant_id"],
        name=raw["name"],
        price=Money.of(raw["price"]),
        status=MenuItemStatus(raw.get("status", "active")),
        availability=Availability(
            is_available=availability.get("is_available", True),
            available_quantity=availability.get("available_quantity"),
            available_days=list(availability.get("available_days", [])),
            available_hours=TimeWindow(
                hours.get("start", "00:00"), hours.get("end", "23:59")
            ),
        ),
        customizations=[
            CustomizationGroup(
                name=group["name"],
                options=tuple(
                    CustomizationOption(option["name"], Money.of(option.get("price", "0")))
                    for option in group.get("options", [])
                ),
                required=group.get("required", False),
            )
            for group in raw.get("customizations", [])
        ],
        add_ons=[
            AddOn(add_on["name"], Money.of(add_on["price"]))
            for add_on in raw.get("add_ons", [])
        ],
    )


def menu_item_to_raw(item: MenuItem) -> dict:
    availability = item.availability
    return {
        "id": item.id,
        "restaurant_id": item.restaurant_id,
        "name": item.name,
        "price": str(item.price.amount),
        "status": item.status.value,
        "availability": {
            "is_available": availability.is_available,
            "available_quantity": availability.available_quantity,
            "available_days": list(availability.available_days),
            "available_hours": {
                "start": availability.available_hours.start,
                "end": availability.available_hours.end,
            },
        },
        "customizations": [
            {
                "name": group.name,
                "required": group.required,
                "options": [
                    {"name": option.name, "price": str(option.price.amount)}
                    for option in group.options
                ],
            }
            for group in item.customizations
        ],
        "add_ons": [
            {"name": add_on.name, "price": str(add_on.price.amount)}
            for add_on in item.add_ons
        ],
    }


def parse_catalog(raw: dict) -> tuple[list[Restaurant], list[MenuItem]]:
    """Parse a catalog document (same shape as the storage file)."""
    try:
        restaurants = [restaurant_from_raw(r) for r in raw.get("restaurants", [])]
        items = [menu_item_from_raw(m) for m in raw.get("menu_items", [])]
    except (KeyError, ValueError) as exc:
        raise ValidationError(f"Malformed catalog: {exc}") from exc
    return restaurants, items
