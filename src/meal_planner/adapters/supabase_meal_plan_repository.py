"""Supabase-backed meal plan repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_planner.domain.meals import IngredientRef, Meal, MealPlan
from meal_planner.domain.profile import NutritionTarget
from meal_planner.services.meal_plans import MealPlanRepository


@dataclass
class SupabaseMealPlanRepository(MealPlanRepository):
    """Supabase implementation for plans and meals."""

    client: Client

    def create_meal_plan(
        self,
        user_id: UUID,
        days: int,
        target: NutritionTarget,
        total_cost: float,
    ) -> MealPlan:
        """Create a plan row and return it."""
        response = (
            self.client.table("meal_plans")
            .insert(
                {
                    "user_id": str(user_id),
                    "days": days,
                    "calories": target.calories,
                    "protein_g": target.protein_g,
                    "fat_g": target.fat_g,
                    "carbs_g": target.carbs_g,
                    "budget": target.budget,
                    "total_cost": total_cost,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal plan")
        return _parse_plan(response.data[0])

    def create_meals(
        self, meal_plan_id: UUID, user_id: UUID, meals: list[Meal]
    ) -> list[Meal]:
        """Insert all meals of a plan in one request."""
        if not meals:
            return []
        rows = [_meal_row(meal_plan_id, user_id, meal) for meal in meals]
        response = self.client.table("meals").insert(rows).execute()
        if not response.data:
            raise RuntimeError("Failed to create meals")
        return [_parse_meal(row) for row in response.data]

    def get_latest_plan(self, user_id: UUID) -> MealPlan | None:
        """Return the most recently created plan of a user."""
        response = (
            self.client.table("meal_plans")
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_plan(response.data[0])

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id, if present."""
        response = (
            self.client.table("meals")
            .select("*")
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def list_meals(self, meal_plan_id: UUID, day: int | None = None) -> list[Meal]:
        """Return a plan's meals ordered by day."""
        query = (
            self.client.table("meals")
            .select("*")
            .eq("meal_plan_id", str(meal_plan_id))
        )
        if day is not None:
            query = query.eq("day", day)
        response = query.order("day").order("created_at").execute()
        return [_parse_meal(row) for row in response.data or []]


def _meal_row(meal_plan_id: UUID, user_id: UUID, meal: Meal) -> dict[str, object]:
    return {
        "meal_plan_id": str(meal_plan_id),
        "user_id": str(user_id),
        "day": meal.day,
        "type": meal.type,
        "name": meal.name,
        "calories": meal.calories,
        "protein_g": meal.protein_g,
        "fat_g": meal.fat_g,
        "carbs_g": meal.carbs_g,
        "price": meal.price,
        "recipe": meal.recipe,
        "image_url": meal.image_url,
        "ingredients": [
            {
                "food_item_id": str(ingredient.food_item_id),
                "quantity": ingredient.quantity,
                "unit": ingredient.unit,
                "name": ingredient.name,
            }
            for ingredient in meal.ingredients
        ],
    }


def _parse_plan(row: dict[str, object]) -> MealPlan:
    return MealPlan(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        days=int(row["days"]),
        target=NutritionTarget(
            calories=int(row["calories"]),
            protein_g=int(row["protein_g"]),
            fat_g=int(row["fat_g"]),
            carbs_g=int(row["carbs_g"]),
            budget=float(row["budget"]),
        ),
        total_cost=float(row["total_cost"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )


def _parse_meal(row: dict[str, object]) -> Meal:
    ingredients = row.get("ingredients") or []
    return Meal(
        id=UUID(str(row["id"])),
        meal_plan_id=UUID(str(row["meal_plan_id"])),
        type=row["type"],
        day=int(row["day"]),
        name=str(row["name"]),
        calories=float(row["calories"]),
        protein_g=float(row["protein_g"]),
        fat_g=float(row["fat_g"]),
        carbs_g=float(row["carbs_g"]),
        price=float(row["price"]),
        recipe=row.get("recipe"),
        image_url=row.get("image_url"),
        ingredients=[
            IngredientRef(
                food_item_id=UUID(str(entry["food_item_id"])),
                quantity=float(entry["quantity"]),
                unit=str(entry.get("unit") or ""),
                name=str(entry.get("name") or ""),
            )
            for entry in ingredients
        ],
    )
