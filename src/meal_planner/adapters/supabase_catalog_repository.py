"""Supabase-backed food catalog repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_planner.domain.catalog import FoodItem
from meal_planner.services.catalog import CatalogRepository


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Supabase implementation of the shared food catalog."""

    client: Client

    def list_food_items(self, category: str | None = None) -> list[FoodItem]:
        """Return catalog items ordered by creation."""
        query = self.client.table("food_items").select("*")
        if category:
            query = query.eq("category", category)
        response = query.order("created_at").execute()
        return [_parse_food_item(row) for row in response.data or []]

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a catalog item by id, if present."""
        response = (
            self.client.table("food_items")
            .select("*")
            .eq("id", str(food_item_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food_item(response.data[0])

    def find_food_item_by_name(self, name: str) -> FoodItem | None:
        """Return an item whose name matches case-insensitively."""
        response = (
            self.client.table("food_items")
            .select("*")
            .ilike("name", _escape_like(name))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food_item(response.data[0])

    def create_food_item(self, payload: dict[str, object]) -> FoodItem:
        """Create a catalog item and return it."""
        response = self.client.table("food_items").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create food item")
        return _parse_food_item(response.data[0])


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_food_item(row: dict[str, object]) -> FoodItem:
    return FoodItem(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        category=str(row.get("category") or "other"),
        calories=float(row.get("calories") or 0),
        protein_g=float(row.get("protein_g") or 0),
        fat_g=float(row.get("fat_g") or 0),
        carbs_g=float(row.get("carbs_g") or 0),
        price_per_unit=float(row.get("price_per_unit") or 0),
        unit=str(row.get("unit") or "serving"),
        quantity=float(row.get("quantity") or 1),
    )
