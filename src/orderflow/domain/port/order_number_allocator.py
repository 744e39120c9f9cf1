"""Port for allocating human-facing order numbers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class OrderNumberAllocator(ABC):

    @abstractmethod
    def next_number(self, now: datetime) -> str:
        """Return a fresh, never-reused order number."""
