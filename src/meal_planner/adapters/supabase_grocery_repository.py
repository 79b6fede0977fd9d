"""Supabase-backed grocery list repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_planner.domain.grocery import GroceryItem
from meal_planner.services.grocery import GroceryRepository


@dataclass
class SupabaseGroceryRepository(GroceryRepository):
    """Supabase implementation for grocery list rows."""

    client: Client

    def find_item(
        self, user_id: UUID, food_item_id: UUID, meal_plan_id: UUID | None
    ) -> GroceryItem | None:
        """Return the row for (user, food item, plan), if present."""
        query = (
            self.client.table("grocery_items")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("food_item_id", str(food_item_id))
        )
        if meal_plan_id is None:
            query = query.is_("meal_plan_id", "null")
        else:
            query = query.eq("meal_plan_id", str(meal_plan_id))
        response = query.limit(1).execute()
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def create_item(
        self,
        user_id: UUID,
        food_item_id: UUID,
        quantity: float,
        meal_plan_id: UUID | None,
    ) -> GroceryItem:
        """Insert an unpurchased row and return it."""
        response = (
            self.client.table("grocery_items")
            .insert(
                {
                    "user_id": str(user_id),
                    "food_item_id": str(food_item_id),
                    "meal_plan_id": str(meal_plan_id) if meal_plan_id else None,
                    "quantity": quantity,
                    "purchased": False,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create grocery item")
        return _parse_item(response.data[0])

    def get_item(self, item_id: UUID) -> GroceryItem | None:
        """Return a row by id, if present."""
        response = (
            self.client.table("grocery_items")
            .select("*")
            .eq("id", str(item_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def update_item(self, item_id: UUID, payload: dict[str, object]) -> GroceryItem:
        """Update a row and return it."""
        response = (
            self.client.table("grocery_items")
            .update(payload)
            .eq("id", str(item_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update grocery item")
        return _parse_item(response.data[0])

    def list_items(self, user_id: UUID) -> list[GroceryItem]:
        """Return all rows of a user in insertion order."""
        response = (
            self.client.table("grocery_items")
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at")
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]


def _parse_item(row: dict[str, object]) -> GroceryItem:
    meal_plan_id = row.get("meal_plan_id")
    return GroceryItem(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        food_item_id=UUID(str(row["food_item_id"])),
        quantity=float(row["quantity"]),
        purchased=bool(row.get("purchased", False)),
        meal_plan_id=UUID(str(meal_plan_id)) if meal_plan_id else None,
    )
