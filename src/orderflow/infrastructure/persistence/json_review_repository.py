"""JSON-file-backed implementation of ReviewRepository."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path

from orderflow.domain.model.events import ReviewRecord
from orderflow.domain.repository.review_repository import ReviewRepository


class JsonReviewRepository(ReviewRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    def add(self, review: ReviewRecord) -> None:
        with self._lock:
            records = self._load_raw()
            records.append(self._to_raw(review))
            self._persist_raw(records)

    def list_for_restaurant(self, restaurant_id: str) -> list[ReviewRecord]:
        return [
            self._to_domain(raw)
            for raw in self._load_raw()
            if raw["restaurant_id"] == restaurant_id
        ]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(review: ReviewRecord) -> dict:
        return {
            "order_id": review.order_id,
            "customer_id": review.customer_id,
            "restaurant_id": review.restaurant_id,
            "rating": {
                "overall": review.overall,
                "food": review.food,
                "delivery": review.delivery,
                "service": review.service,
                "packaging": review.packaging,
            },
            "comment": review.comment,
            "is_verified_purchase": review.is_verified_purchase,
            "created_at": review.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> ReviewRecord:
        rating = raw["rating"]
        return ReviewRecord(
            order_id=raw["order_id"],
            customer_id=raw["customer_id"],
            restaurant_id=raw["restaurant_id"],
            overall=rating["overall"],
            food=rating["food"],
            delivery=rating["delivery"],
            service=rating["service"],
            packaging=rating["packaging"],
            comment=raw["comment"],
            is_verified_purchase=raw["is_verified_purchase"],
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, records: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(records, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
