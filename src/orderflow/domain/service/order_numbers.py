"""In-process order number allocator.

Order numbers are display identifiers only; internal IDs are UUIDs.  The
sequence part never repeats within one allocator, whatever the date.
"""

from __future__ import annotations

import threading
from datetime import datetime

from orderflow.domain.port.order_number_allocator import OrderNumberAllocator


def format_order_number(prefix: str, now: datetime, sequence: int) -> str:
    return f"{prefix}-{now:%Y%m%d}-{sequence:06d}"


class SequentialOrderNumberAllocator(OrderNumberAllocator):

    def __init__(self, prefix: str = "ORD", start: int = 1) -> None:
        self._prefix = prefix
        self._next = start
        self._lock = threading.Lock()

    def next_number(self, now: datetime) -> str:
        with self._lock:
            sequence = self._next
            self._next += 1
        return format_order_number(self._prefix, now, sequence)
