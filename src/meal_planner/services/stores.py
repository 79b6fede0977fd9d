"""Store listing and proximity search."""

import math
from dataclasses import dataclass
from typing import Protocol

from meal_planner.domain.stores import Store
from meal_planner.errors import ValidationError

KM_PER_DEGREE = 111.0
DEFAULT_RADIUS_KM = 5.0


class StoreRepository(Protocol):
    """Persistence interface for stores."""

    def list_stores(self) -> list[Store]:
        """Return all stores."""


@dataclass
class StoreService:
    """Application service for store lookups."""

    repository: StoreRepository

    def list_stores(self) -> list[Store]:
        """Return all stores."""
        return self.repository.list_stores()

    def nearby(
        self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM
    ) -> list[Store]:
        """Return stores within ``radius_km`` of a point, nearest first."""
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise ValidationError("Invalid coordinates")
        if not math.isfinite(radius_km) or radius_km < 0:
            raise ValidationError("radius must be a non-negative number")
        matches = [
            (distance_km(store, lat, lng), store)
            for store in self.repository.list_stores()
        ]
        return [
            store
            for distance, store in sorted(matches, key=lambda match: match[0])
            if distance <= radius_km
        ]


def distance_km(store: Store, lat: float, lng: float) -> float:
    """Flat approximation treating one degree as 111 km on both axes."""
    return math.hypot(store.latitude - lat, store.longitude - lng) * KM_PER_DEGREE
