"""Who is asking: the caller identity handed to every use case."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ActorRole(Enum):
    CUSTOMER = "customer"
    RESTAURANT_OWNER = "restaurant_owner"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    id: str
    role: ActorRole = ActorRole.CUSTOMER

    @property
    def label(self) -> str:
        """Short role name used in status-history notes."""
        if self.role == ActorRole.RESTAURANT_OWNER:
            return "restaurant"
        return self.role.value
