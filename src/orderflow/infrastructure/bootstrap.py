"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  Collaborators are
process-wide singletons so that locks and file guards are shared by every
handler built here.
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from orderflow.application.cancel_order import CancelOrderHandler
from orderflow.application.locking import KeyedLock
from orderflow.application.notifications import NotificationPublisher
from orderflow.application.place_order import PlaceOrderHandler
from orderflow.application.rate_order import RateOrderHandler
from orderflow.application.update_order_status import UpdateOrderStatusHandler
from orderflow.domain.service.pricing_calculator import PricingCalculator
from orderflow.infrastructure.config import get_settings
from orderflow.infrastructure.notification.outbox_publisher import JsonlOutboxPublisher
from orderflow.infrastructure.payment.simulated_gateway import SimulatedPaymentGateway
from orderflow.infrastructure.persistence.json_catalog_repository import (
    JsonCatalogRepository,
)
from orderflow.infrastructure.persistence.json_order_number_allocator import (
    JsonOrderNumberAllocator,
)
from orderflow.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from orderflow.infrastructure.persistence.json_review_repository import (
    JsonReviewRepository,
)


@lru_cache
def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(get_settings().data_dir / "orders.json")


@lru_cache
def catalog_repository() -> JsonCatalogRepository:
    return JsonCatalogRepository(get_settings().data_dir / "catalog.json")


@lru_cache
def review_repository() -> JsonReviewRepository:
    return JsonReviewRepository(get_settings().data_dir / "reviews.json")


@lru_cache
def event_publisher() -> JsonlOutboxPublisher:
    return JsonlOutboxPublisher(get_settings().data_dir / "events.jsonl")


@lru_cache
def order_number_allocator() -> JsonOrderNumberAllocator:
    settings = get_settings()
    return JsonOrderNumberAllocator(
        settings.data_dir / "sequence.json", settings.order_number_prefix
    )


@lru_cache
def payment_gateway() -> SimulatedPaymentGateway:
    settings = get_settings()
    return SimulatedPaymentGateway(
        success_rate=settings.payment_success_rate,
        latency_seconds=settings.payment_latency_seconds,
    )


@lru_cache
def order_locks() -> KeyedLock:
    return KeyedLock()


def notifier() -> NotificationPublisher:
    return NotificationPublisher(event_publisher())


def clock() -> datetime:
    """Current time in the restaurants' configured timezone."""
    return datetime.now(ZoneInfo(get_settings().timezone))


def reset() -> None:
    """Forget every cached singleton (settings included)."""
    for factory in (
        get_settings,
        order_repository,
        catalog_repository,
        review_repository,
        event_publisher,
        order_number_allocator,
        payment_gateway,
        order_locks,
    ):
        factory.cache_clear()


# --- Handlers -----------------------------------------------------------------


def place_order_handler() -> PlaceOrderHandler:
    settings = get_settings()
    return PlaceOrderHandler(
        order_repo=order_repository(),
        catalog=catalog_repository(),
        payment_gateway=payment_gateway(),
        notifier=notifier(),
        order_numbers=order_number_allocator(),
        locks=order_locks(),
        pricing=PricingCalculator(settings.tax_rate),
        estimates=settings.delivery_estimates(),
        clock=clock,
    )


def update_order_status_handler() -> UpdateOrderStatusHandler:
    return UpdateOrderStatusHandler(
        order_repo=order_repository(),
        catalog=catalog_repository(),
        notifier=notifier(),
        locks=order_locks(),
        estimates=get_settings().delivery_estimates(),
        clock=clock,
    )


def cancel_order_handler() -> CancelOrderHandler:
    return CancelOrderHandler(
        order_repo=order_repository(),
        catalog=catalog_repository(),
        notifier=notifier(),
        locks=order_locks(),
        clock=clock,
    )


def rate_order_handler() -> RateOrderHandler:
    return RateOrderHandler(
        order_repo=order_repository(),
        catalog=catalog_repository(),
        review_repo=review_repository(),
        notifier=notifier(),
        locks=order_locks(),
        clock=clock,
    )
