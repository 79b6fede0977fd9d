"""Domain models for meals and meal plans."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from uuid import UUID

from meal_planner.domain.catalog import FoodItem
from meal_planner.domain.profile import NutritionTarget

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


@dataclass(frozen=True)
class IngredientRef:
    """Reference to a catalog item with the amount used in a meal."""

    food_item_id: UUID
    quantity: float
    unit: str
    name: str = ""


@dataclass(frozen=True)
class MacroTotals:
    """Summed macros and price of a set of ingredients."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    price: float


@dataclass(frozen=True)
class Meal:
    """A single meal slot of a plan day."""

    type: MealType
    day: int
    name: str
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    price: float
    ingredients: list[IngredientRef]
    recipe: str | None = None
    image_url: str | None = None
    id: UUID | None = None
    meal_plan_id: UUID | None = None


@dataclass(frozen=True)
class MealPlan:
    """A generated multi-day plan."""

    id: UUID
    user_id: UUID
    days: int
    target: NutritionTarget
    total_cost: float
    created_at: datetime
    meals: list[Meal] = field(default_factory=list)


def ingredient_totals(
    items: list[tuple[FoodItem, float]],
) -> MacroTotals:
    """Sum macros and price for (item, quantity) pairs.

    Macros scale by ``quantity / item.quantity``; price is
    ``price_per_unit * quantity``.
    """
    calories = protein = fat = carbs = price = 0.0
    for item, quantity in items:
        factor = quantity / item.quantity if item.quantity > 0 else 0.0
        calories += item.calories * factor
        protein += item.protein_g * factor
        fat += item.fat_g * factor
        carbs += item.carbs_g * factor
        price += item.price_per_unit * quantity
    return MacroTotals(
        calories=calories,
        protein_g=protein,
        fat_g=fat,
        carbs_g=carbs,
        price=price,
    )


def build_meal(  # noqa: PLR0913
    *,
    meal_type: MealType,
    day: int,
    name: str,
    items: list[tuple[FoodItem, float]],
    recipe: str | None = None,
    image_url: str | None = None,
) -> Meal:
    """Create a meal whose totals are derived from its ingredients."""
    totals = ingredient_totals(items)
    return Meal(
        type=meal_type,
        day=day,
        name=name,
        calories=totals.calories,
        protein_g=totals.protein_g,
        fat_g=totals.fat_g,
        carbs_g=totals.carbs_g,
        price=totals.price,
        ingredients=[
            IngredientRef(
                food_item_id=item.id,
                quantity=quantity,
                unit=item.unit,
                name=item.name,
            )
            for item, quantity in items
        ],
        recipe=recipe,
        image_url=image_url,
    )
