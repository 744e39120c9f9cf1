"""Order number allocator whose sequence survives restarts."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path

from orderflow.domain.port.order_number_allocator import OrderNumberAllocator
from orderflow.domain.service.order_numbers import format_order_number


class JsonOrderNumberAllocator(OrderNumberAllocator):

    def __init__(self, file_path: Path, prefix: str = "ORD") -> None:
        self._file_path = file_path
        self._prefix = prefix
        self._lock = threading.Lock()
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._write(0)

    def next_number(self, now: datetime) -> str:
        with self._lock:
            sequence = self._read() + 1
            self._write(sequence)
        return format_order_number(self._prefix, now, sequence)

    def _read(self) -> int:
        return json.loads(self._file_path.read_text(encoding="utf-8"))["last"]

    def _write(self, value: int) -> None:
        self._file_path.write_text(json.dumps({"last": value}) + "\n", encoding="utf-8")
