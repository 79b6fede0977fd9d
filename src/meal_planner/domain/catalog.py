"""Food catalog models."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class FoodItem:
    """Catalog entry with nutrition given per reference quantity."""

    id: UUID
    name: str
    category: str
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    price_per_unit: float
    unit: str
    quantity: float
