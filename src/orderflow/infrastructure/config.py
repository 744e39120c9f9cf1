"""Application configuration.

Values come from environment variables prefixed ``ORDERFLOW_`` (or a
``.env`` file in the working directory).  ``get_settings()`` caches the
result for the life of the process.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from orderflow.domain.model.order import DeliveryEstimates


class Settings(BaseSettings):
    """Engine settings merged from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="ORDERFLOW_", env_file=".env", extra="ignore"
    )

    data_dir: Path = Path("data")
    tax_rate: Decimal = Decimal("0.08")
    preparation_minutes: int = Field(30, ge=0)
    delivery_minutes: int = Field(20, ge=0)
    initial_estimate_minutes: int = Field(45, ge=0)
    payment_success_rate: float = Field(0.9, ge=0.0, le=1.0)
    payment_latency_seconds: float = Field(0.0, ge=0.0)
    order_number_prefix: str = "ORD"
    timezone: str = "UTC"
    log_level: str = "INFO"

    def delivery_estimates(self) -> DeliveryEstimates:
        return DeliveryEstimates(
            preparation=timedelta(minutes=self.preparation_minutes),
            delivery=timedelta(minutes=self.delivery_minutes),
            initial=timedelta(minutes=self.initial_estimate_minutes),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
