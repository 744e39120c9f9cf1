"""Event publisher that appends to a JSON-lines outbox file.

A relay (websocket server, push service) tails the outbox and fans the
events out to subscribers; the engine only needs the append to succeed.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from orderflow.domain.port.event_publisher import EventPublisher

logger = logging.getLogger(__name__)


class JsonlOutboxPublisher(EventPublisher):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        line = json.dumps({
            "topic": topic,
            "published_at": datetime.now(timezone.utc).isoformat(),
            "payload": payload,
        })
        with self._lock:
            with self._file_path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        logger.debug("Outbox <- %s %s", topic, payload.get("event"))

    def read_all(self) -> list[dict[str, Any]]:
        if not self._file_path.exists():
            return []
        with self._file_path.open(encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
