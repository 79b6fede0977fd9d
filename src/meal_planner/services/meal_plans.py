"""Meal plan generation and retrieval."""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from meal_planner.domain.grocery import GroceryItem
from meal_planner.domain.meals import Meal, MealPlan
from meal_planner.domain.profile import NutritionTarget, Profile
from meal_planner.errors import MealPlannerError, NotFoundError, ValidationError
from meal_planner.services.catalog import CatalogService
from meal_planner.services.composer import MealComposer
from meal_planner.services.grocery import GroceryAggregator
from meal_planner.services.profile import evaluate

MAX_PLAN_DAYS = 14

_logger = logging.getLogger(__name__)


class MealPlanRepository(Protocol):
    """Persistence interface for plans and their meals."""

    def create_meal_plan(
        self,
        user_id: UUID,
        days: int,
        target: NutritionTarget,
        total_cost: float,
    ) -> MealPlan:
        """Create a plan row and return it without meals."""

    def create_meals(
        self, meal_plan_id: UUID, user_id: UUID, meals: list[Meal]
    ) -> list[Meal]:
        """Persist meals for a plan and return them with ids."""

    def get_latest_plan(self, user_id: UUID) -> MealPlan | None:
        """Return the most recently created plan of a user."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""

    def list_meals(self, meal_plan_id: UUID, day: int | None = None) -> list[Meal]:
        """Return a plan's meals, optionally for one day."""


@dataclass
class MealPlanService:
    """Builds plans from profiles and keeps the grocery list in sync."""

    repository: MealPlanRepository
    catalog_service: CatalogService
    composer: MealComposer
    grocery: GroceryAggregator
    meal_slot_count: int = 3

    async def generate(
        self,
        user_id: UUID,
        profile: Profile,
        days: int = 3,
        diet: str | None = None,
    ) -> MealPlan:
        """Compose every day, then persist the plan and its grocery rows.

        All days come from one composer call, so no catalog item repeats
        anywhere in the plan. Nothing is written until composition succeeds,
        so a failed generation leaves the previous plan and grocery list
        untouched.
        """
        if not 1 <= days <= MAX_PLAN_DAYS:
            raise ValidationError(f"days must be between 1 and {MAX_PLAN_DAYS}")
        target = evaluate(profile)
        catalog = await asyncio.to_thread(self.catalog_service.list_items)

        try:
            composed = await self.composer.compose(
                target, catalog, self.meal_slot_count, days=days, diet=diet
            )
        except MealPlannerError as exc:
            _logger.warning(
                "Meal plan generation failed for user %s: %s", user_id, exc
            )
            raise type(exc)(f"failed to generate meal plan: {exc.message}") from exc

        total_cost = sum(meal.price for meal in composed)
        if total_cost / days > target.budget:
            _logger.warning(
                "Plan for user %s exceeds budget: %.2f per day > %.2f",
                user_id,
                total_cost / days,
                target.budget,
            )
        plan = self.repository.create_meal_plan(user_id, days, target, total_cost)
        meals = self.repository.create_meals(plan.id, user_id, composed)
        await self.grocery.add_ingredients(
            user_id,
            plan.id,
            [ingredient for meal in meals for ingredient in meal.ingredients],
        )
        _logger.info(
            "Generated plan %s for user %s: days=%s meals=%s",
            plan.id,
            user_id,
            days,
            len(meals),
        )
        return replace(plan, meals=meals)

    def latest_plan(self, user_id: UUID) -> MealPlan:
        """Return the newest plan with its meals."""
        plan = self.repository.get_latest_plan(user_id)
        if plan is None:
            raise NotFoundError("Meal plan not found")
        return replace(plan, meals=self.repository.list_meals(plan.id))

    def meals_for_day(self, user_id: UUID, day: int) -> list[Meal]:
        """Return the meals of one day of the newest plan."""
        plan = self.repository.get_latest_plan(user_id)
        if plan is None:
            return []
        return self.repository.list_meals(plan.id, day)

    async def add_meal_to_grocery_list(
        self, user_id: UUID, meal_id: UUID
    ) -> list[GroceryItem]:
        """Add every ingredient of a meal to the user's grocery list."""
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            raise NotFoundError("Meal not found")
        return await self.grocery.add_ingredients(
            user_id, meal.meal_plan_id, meal.ingredients
        )
