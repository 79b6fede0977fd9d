"""Store domain models."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Store:
    """Grocery store location."""

    id: UUID
    name: str
    address: str
    latitude: float
    longitude: float
    rating: float | None = None
    review_count: int | None = None
    image_url: str | None = None
