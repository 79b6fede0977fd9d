"""Grocery list models."""

from dataclasses import dataclass
from uuid import UUID

from meal_planner.domain.catalog import FoodItem


@dataclass(frozen=True)
class GroceryItem:
    """A row of a user's grocery list."""

    id: UUID
    user_id: UUID
    food_item_id: UUID
    quantity: float
    purchased: bool
    meal_plan_id: UUID | None = None


@dataclass(frozen=True)
class GroceryItemDetail:
    """Grocery row joined with its catalog entry."""

    item: GroceryItem
    food_item: FoodItem

    @property
    def cost(self) -> float:
        return self.food_item.price_per_unit * self.item.quantity


@dataclass(frozen=True)
class GroceryTotals:
    """Counters shown above the grocery list."""

    total_count: int
    purchased_count: int
    total_cost: float
