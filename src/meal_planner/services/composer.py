"""Meal composition from the local catalog or the remote recipe service.

Two strategies share the ``MealSource`` interface. ``MealComposer`` races the
remote one against a timer and falls back to the local catalog only when the
remote side times out; every other remote error is surfaced.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import httpx
from pydantic import ValidationError as PayloadValidationError

from meal_planner.adapters.spoonacular_client import SpoonacularClient
from meal_planner.domain.catalog import FoodItem
from meal_planner.domain.meals import Meal, MealType, build_meal
from meal_planner.domain.profile import NutritionTarget
from meal_planner.domain.recipes import (
    DayPlan,
    IngredientNutrition,
    RecipeInfo,
    nutrient_amount,
)
from meal_planner.errors import (
    DataUnavailable,
    UpstreamFailure,
    UpstreamTimeout,
    ValidationError,
)
from meal_planner.services.catalog import CatalogService

_MAIN_SLOTS: tuple[MealType, ...] = ("breakfast", "lunch", "dinner")
UPPER_BOUND = 1.1
EARLY_STOP = 0.9
MAX_INGREDIENTS = 3

_logger = logging.getLogger(__name__)


class MealSource(Protocol):
    """A strategy that turns a daily target into a plan's meals."""

    async def compose(
        self,
        target: NutritionTarget,
        catalog: list[FoodItem],
        *,
        slot_count: int,
        days: int,
        diet: str | None,
    ) -> list[Meal]:
        """Return the meals for every day of one plan."""


def slot_types(slot_count: int) -> list[MealType]:
    """Breakfast, lunch and dinner first; any further slot is a snack."""
    return [
        _MAIN_SLOTS[index] if index < len(_MAIN_SLOTS) else "snack"
        for index in range(slot_count)
    ]


def select_slot_items(
    catalog: list[FoodItem], used: set[UUID], slot_calories: float
) -> list[FoodItem]:
    """Greedily pick unused items in catalog order for one slot.

    Items are accepted while the running calorie sum stays within 110% of the
    slot target; selection stops once it reaches 90%. Accepted items are added
    to ``used``. When nothing fits, the first unused item is taken so the slot
    is not left empty.
    """
    upper = slot_calories * UPPER_BOUND
    lower = slot_calories * EARLY_STOP
    selected: list[FoodItem] = []
    running = 0.0
    for item in catalog:
        if item.id in used:
            continue
        if running + item.calories <= upper:
            selected.append(item)
            used.add(item.id)
            running += item.calories
            if running >= lower:
                break
    if not selected:
        fallback = next((item for item in catalog if item.id not in used), None)
        if fallback is not None:
            selected.append(fallback)
            used.add(fallback.id)
    return selected


@dataclass
class LocalCatalogStrategy(MealSource):
    """Deterministic composition from the catalog order."""

    max_ingredients: int = MAX_INGREDIENTS

    async def compose(
        self,
        target: NutritionTarget,
        catalog: list[FoodItem],
        *,
        slot_count: int,
        days: int = 1,
        diet: str | None = None,
    ) -> list[Meal]:
        """Compose a whole plan; ``diet`` is not applied locally."""
        return self.compose_plan(target, catalog, slot_count=slot_count, days=days)

    def compose_plan(
        self,
        target: NutritionTarget,
        catalog: list[FoodItem],
        *,
        slot_count: int,
        days: int,
    ) -> list[Meal]:
        """Synchronous body of ``compose``.

        Each catalog item is used at most once across all days. Once the
        catalog runs out, the remaining slots (and days) are left without
        meals.
        """
        if not catalog:
            raise DataUnavailable("no data available: the food catalog is empty")
        used: set[UUID] = set()
        meals: list[Meal] = []
        for day in range(1, days + 1):
            meals.extend(
                self.compose_day(target, catalog, used, slot_count=slot_count, day=day)
            )
        return meals

    def compose_day(
        self,
        target: NutritionTarget,
        catalog: list[FoodItem],
        used: set[UUID],
        *,
        slot_count: int,
        day: int,
    ) -> list[Meal]:
        slot_calories = target.calories / slot_count
        meals: list[Meal] = []
        for meal_type in slot_types(slot_count):
            # Truncation happens after selection; dropped items stay used.
            selected = select_slot_items(catalog, used, slot_calories)[
                : self.max_ingredients
            ]
            if not selected:
                _logger.warning(
                    "Catalog exhausted before %s on day %s", meal_type, day
                )
                continue
            meals.append(
                build_meal(
                    meal_type=meal_type,
                    day=day,
                    name=", ".join(item.name for item in selected),
                    items=[(item, item.quantity) for item in selected],
                )
            )
        return meals


@dataclass
class RemoteRecipeStrategy(MealSource):
    """Composition backed by the recipe service's meal planner.

    One day plan is requested per plan day. Ingredients missing from the
    catalog are created on the fly, so this strategy writes to the catalog as
    a side effect. Those writes run in a worker thread: if the composer's
    timer fires while they are in progress, the thread still finishes its
    upserts while the local fallback runs.
    """

    client: SpoonacularClient
    catalog_service: CatalogService

    async def compose(
        self,
        target: NutritionTarget,
        catalog: list[FoodItem],
        *,
        slot_count: int,
        days: int = 1,
        diet: str | None = None,
    ) -> list[Meal]:
        """Fetch a day plan per day and its recipes, then map them to meals."""
        try:
            daily_recipes = await asyncio.gather(
                *(
                    self._fetch_day(target, slot_count, diet)
                    for _ in range(days)
                )
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout("recipe service timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise UpstreamFailure(
                f"recipe service returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamFailure(f"recipe service unavailable: {exc}") from exc
        except PayloadValidationError as exc:
            raise UpstreamFailure("recipe service returned an invalid payload") from exc
        if not all(daily_recipes):
            raise UpstreamFailure("recipe service returned no meals")

        index = {item.name.lower(): item for item in catalog}
        meals: list[Meal] = []
        for day, recipes in enumerate(daily_recipes, start=1):
            for meal_type, recipe in zip(
                slot_types(slot_count), recipes, strict=False
            ):
                items = await asyncio.to_thread(
                    self._resolve_ingredients, recipe, index
                )
                if not items:
                    _logger.warning("Recipe %s has no usable ingredients", recipe.id)
                    continue
                meals.append(
                    build_meal(
                        meal_type=meal_type,
                        day=day,
                        name=recipe.title,
                        items=items,
                        recipe=recipe.instructions,
                        image_url=recipe.image,
                    )
                )
        return meals

    async def _fetch_day(
        self, target: NutritionTarget, slot_count: int, diet: str | None
    ) -> list[RecipeInfo]:
        plan = DayPlan.model_validate(
            await self.client.generate_meal_plan(target.calories, diet)
        )
        raw_recipes = await asyncio.gather(
            *(self.client.get_recipe(meal.id) for meal in plan.meals[:slot_count])
        )
        return [RecipeInfo.model_validate(raw) for raw in raw_recipes]

    def _resolve_ingredients(
        self, recipe: RecipeInfo, index: dict[str, FoodItem]
    ) -> list[tuple[FoodItem, float]]:
        items: list[tuple[FoodItem, float]] = []
        for quantity, payload in ingredient_payloads(recipe):
            item = index.get(str(payload["name"]).lower())
            if item is None:
                item = self.catalog_service.upsert_by_name(payload)
                index[item.name.lower()] = item
            items.append((item, serving_quantity(item, quantity, str(payload["unit"]))))
        return items


@dataclass
class MealComposer:
    """Remote-first composer with a timed local fallback."""

    local: LocalCatalogStrategy
    remote: MealSource | None = None
    timeout_seconds: float = 10.0

    async def compose(
        self,
        target: NutritionTarget,
        catalog: list[FoodItem],
        meal_slot_count: int = 3,
        *,
        days: int = 1,
        diet: str | None = None,
    ) -> list[Meal]:
        """Compose the meals of a ``days``-long plan for the daily target."""
        if meal_slot_count < 1:
            raise ValidationError("meal slot count must be at least 1")
        if days < 1:
            raise ValidationError("days must be at least 1")
        if self.remote is not None:
            try:
                return await asyncio.wait_for(
                    self.remote.compose(
                        target,
                        catalog,
                        slot_count=meal_slot_count,
                        days=days,
                        diet=diet,
                    ),
                    timeout=self.timeout_seconds,
                )
            except (TimeoutError, UpstreamTimeout):
                _logger.warning(
                    "Recipe service timed out after %ss; using local catalog",
                    self.timeout_seconds,
                )
        return await self.local.compose(
            target, catalog, slot_count=meal_slot_count, days=days, diet=diet
        )


def ingredient_payloads(recipe: RecipeInfo) -> list[tuple[float, dict[str, object]]]:
    """Map named ingredient lines to (per-serving quantity, catalog payload).

    The recipe's per-serving price is split evenly across its ingredients.
    """
    servings = max(recipe.servings, 1)
    lines = [line for line in recipe.extended_ingredients if line.name.strip()]
    if not lines:
        return []
    cost_share = recipe.price_per_serving / len(lines)
    nutrition = recipe.nutrition.ingredients if recipe.nutrition else []
    payloads: list[tuple[float, dict[str, object]]] = []
    for line in lines:
        quantity = line.amount / servings
        payloads.append(
            (
                quantity,
                _catalog_payload(
                    line.name,
                    line.aisle,
                    line.unit,
                    quantity,
                    cost_share,
                    _find_nutrition(nutrition, line.name),
                ),
            )
        )
    return payloads


def serving_quantity(item: FoodItem, quantity: float, unit: str) -> float:
    """Use the recipe amount when units agree, else the item's reference."""
    if quantity <= 0 or item.unit.lower() != unit.lower():
        return item.quantity
    return quantity


def _find_nutrition(
    entries: list[IngredientNutrition], name: str
) -> IngredientNutrition | None:
    wanted = name.strip().lower()
    return next((entry for entry in entries if entry.name.lower() == wanted), None)


def _catalog_payload(  # noqa: PLR0913
    name: str,
    aisle: str | None,
    unit: str,
    quantity: float,
    cost: float,
    nutrition: IngredientNutrition | None,
) -> dict[str, object]:
    reference = quantity if quantity > 0 else 1.0
    nutrients = nutrition.nutrients if nutrition else []
    return {
        "name": name.strip(),
        "category": (aisle or "other").split(";")[0].strip().lower() or "other",
        "calories": nutrient_amount(nutrients, "Calories"),
        "protein_g": nutrient_amount(nutrients, "Protein"),
        "fat_g": nutrient_amount(nutrients, "Fat"),
        "carbs_g": nutrient_amount(nutrients, "Carbohydrates"),
        "price_per_unit": cost / reference,
        "unit": unit or "serving",
        "quantity": reference,
    }
