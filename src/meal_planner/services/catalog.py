"""Services for the shared food catalog."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_planner.domain.catalog import FoodItem


class CatalogRepository(Protocol):
    """Persistence interface for catalog food items."""

    def list_food_items(self, category: str | None = None) -> list[FoodItem]:
        """Return catalog items in storage order, optionally by category."""

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a catalog item by id, if present."""

    def find_food_item_by_name(self, name: str) -> FoodItem | None:
        """Return an item whose name matches case-insensitively, if present."""

    def create_food_item(self, payload: dict[str, object]) -> FoodItem:
        """Create a catalog item and return it."""


@dataclass
class CatalogService:
    """Application service for catalog operations."""

    repository: CatalogRepository

    def list_items(self, category: str | None = None) -> list[FoodItem]:
        """Return the catalog, optionally narrowed to one category."""
        return self.repository.list_food_items(category)

    def get_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a catalog item by id."""
        return self.repository.get_food_item(food_item_id)

    def create_item(self, payload: dict[str, object]) -> FoodItem:
        """Create a catalog item."""
        return self.repository.create_food_item(payload)

    def upsert_by_name(self, payload: dict[str, object]) -> FoodItem:
        """Return the item with the payload's name, creating it when missing."""
        name = str(payload.get("name") or "").strip()
        existing = self.repository.find_food_item_by_name(name)
        if existing is not None:
            return existing
        return self.repository.create_food_item({**payload, "name": name})
