"""Abstract sink for reviews derived from rated orders."""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderflow.domain.model.events import ReviewRecord


class ReviewRepository(ABC):

    @abstractmethod
    def add(self, review: ReviewRecord) -> None:
        """Hand a verified-purchase review to the review subsystem."""

    @abstractmethod
    def list_for_restaurant(self, restaurant_id: str) -> list[ReviewRecord]:
        """Return every review recorded for a restaurant."""
