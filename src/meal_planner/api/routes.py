"""HTTP API consumed by the Mini App."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Query, Request, status

from meal_planner.api.schemas import (
    AddMealToGroceryRequest,
    BatchGroceryRequest,
    BatchGroceryUpdateRequest,
    CreateFoodItemRequest,
    CreateGroceryItemRequest,
    CreateUserRequest,
    GenerateMealPlanRequest,
    ImportRecipeRequest,
    UpdateGroceryItemRequest,
)
from meal_planner.domain.profile import Profile
from meal_planner.errors import NotFoundError, ValidationError
from meal_planner.services.grocery import filter_details, group_by_category, totals
from meal_planner.services.profile import evaluate, macro_percentages
from meal_planner.services.stores import DEFAULT_RADIUS_KM

if TYPE_CHECKING:
    from meal_planner.containers import AppContainer
    from meal_planner.domain.catalog import FoodItem
    from meal_planner.domain.grocery import GroceryItem, GroceryItemDetail
    from meal_planner.domain.meals import Meal, MealPlan
    from meal_planner.domain.models import UserRecord
    from meal_planner.domain.stores import Store

router = APIRouter(prefix="/api", tags=["api"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


# Users


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(body: CreateUserRequest, request: Request) -> dict[str, object]:
    """Create the user for a Telegram id, or return the existing one."""
    user = _container(request).user_service.ensure_user(body.telegram_user_id)
    return _user_out(user)


@router.get("/users/telegram/{telegram_id}")
async def get_user_by_telegram_id(
    telegram_id: int, request: Request
) -> dict[str, object]:
    """Return the user registered for a Telegram id."""
    return _user_out(_container(request).user_service.get_by_telegram_id(telegram_id))


@router.get("/users/{user_id}")
async def get_user(user_id: UUID, request: Request) -> dict[str, object]:
    """Return a user with the targets derived from their profile."""
    return _user_out(_container(request).user_service.get_user(user_id))


@router.patch("/users/{user_id}")
async def update_profile(
    user_id: UUID, profile: Profile, request: Request
) -> dict[str, object]:
    """Replace the user's profile and return the new targets."""
    return _user_out(_container(request).user_service.update_profile(user_id, profile))


# Food catalog


@router.get("/food-items")
async def list_food_items(
    request: Request, category: str | None = None
) -> list[dict[str, object]]:
    """Return the catalog, optionally narrowed to a category."""
    items = _container(request).catalog_service.list_items(category)
    return [_food_item_out(item) for item in items]


@router.get("/food-items/{food_item_id}")
async def get_food_item(food_item_id: UUID, request: Request) -> dict[str, object]:
    """Return a single catalog item."""
    item = _container(request).catalog_service.get_item(food_item_id)
    if item is None:
        raise NotFoundError("Food item not found")
    return _food_item_out(item)


@router.post("/food-items", status_code=status.HTTP_201_CREATED)
async def create_food_item(
    body: CreateFoodItemRequest, request: Request
) -> dict[str, object]:
    """Add an item to the shared catalog."""
    item = _container(request).catalog_service.create_item(body.model_dump())
    return _food_item_out(item)


# Meal plans and meals


@router.post("/meal-plans/generate", status_code=status.HTTP_201_CREATED)
async def generate_meal_plan(
    body: GenerateMealPlanRequest, request: Request
) -> dict[str, object]:
    """Generate a plan from the submitted or stored profile.

    A submitted profile replaces the stored one once generation succeeds,
    so a failed request changes nothing.
    """
    container = _container(request)
    user = container.user_service.get_user(body.user_id)
    profile = body.profile or user.profile
    if profile is None:
        raise ValidationError("profile is required to generate a meal plan")
    plan = await container.meal_plan_service.generate(
        user.id,
        profile,
        days=body.days or container.settings.default_plan_days,
        diet=body.diet,
    )
    if body.profile is not None:
        container.user_service.update_profile(user.id, body.profile)
    return _plan_out(plan)


@router.get("/meal-plans/user/{user_id}")
async def get_latest_meal_plan(user_id: UUID, request: Request) -> dict[str, object]:
    """Return the user's newest plan with its meals."""
    return _plan_out(_container(request).meal_plan_service.latest_plan(user_id))


@router.get("/meals/user/{user_id}/day/{day}")
async def get_meals_for_day(
    user_id: UUID, day: int, request: Request
) -> list[dict[str, object]]:
    """Return one day of the user's newest plan."""
    meals = _container(request).meal_plan_service.meals_for_day(user_id, day)
    return [_meal_out(meal) for meal in meals]


@router.post("/meals/{meal_id}/grocery", status_code=status.HTTP_201_CREATED)
async def add_meal_to_grocery_list(
    meal_id: UUID, body: AddMealToGroceryRequest, request: Request
) -> dict[str, object]:
    """Add a meal's ingredients to the user's grocery list."""
    items = await _container(request).meal_plan_service.add_meal_to_grocery_list(
        body.user_id, meal_id
    )
    return {"items": [_grocery_item_out(item) for item in items]}


# Grocery list


@router.get("/grocery-items/user/{user_id}")
async def list_grocery_items(
    user_id: UUID,
    request: Request,
    search: str | None = None,
    category: str | None = None,
) -> dict[str, object]:
    """Return the grocery list grouped by category.

    Totals always cover the whole list; filters only narrow the items.
    """
    details = _container(request).grocery_aggregator.list_details(user_id)
    filtered = filter_details(details, search=search, category=category)
    summary = totals(details)
    return {
        "totals": {
            "total_count": summary.total_count,
            "purchased_count": summary.purchased_count,
            "total_cost": round(summary.total_cost, 2),
        },
        "categories": sorted({detail.food_item.category for detail in details}),
        "groups": [
            {
                "category": category_name,
                "items": [_grocery_detail_out(detail) for detail in group],
            }
            for category_name, group in group_by_category(filtered).items()
        ],
    }


@router.post("/grocery-items", status_code=status.HTTP_201_CREATED)
async def create_grocery_item(
    body: CreateGroceryItemRequest, request: Request
) -> dict[str, object]:
    """Add a single item, merging with an existing row."""
    item = _container(request).grocery_aggregator.add_item(
        body.user_id, body.food_item_id, body.quantity, body.meal_plan_id
    )
    return _grocery_item_out(item)


@router.post("/grocery-items/batch", status_code=status.HTTP_201_CREATED)
async def add_grocery_items(
    body: BatchGroceryRequest, request: Request
) -> dict[str, object]:
    """Add many items at once; invalid entries are skipped."""
    items = await _container(request).grocery_aggregator.add_ingredients(
        body.user_id, body.meal_plan_id, body.items
    )
    return {"items": [_grocery_item_out(item) for item in items]}


@router.patch("/grocery-items/batch")
async def update_grocery_items(
    body: BatchGroceryUpdateRequest, request: Request
) -> dict[str, object]:
    """Apply many updates at once; invalid entries are skipped."""
    items = await _container(request).grocery_aggregator.update_items(body.items)
    return {"items": [_grocery_item_out(item) for item in items]}


@router.patch("/grocery-items/{item_id}")
async def update_grocery_item(
    item_id: UUID, body: UpdateGroceryItemRequest, request: Request
) -> dict[str, object]:
    """Toggle the purchased flag and/or change the quantity."""
    item = _container(request).grocery_aggregator.update_item(
        item_id, purchased=body.purchased, quantity=body.quantity
    )
    return _grocery_item_out(item)


# Stores


@router.get("/stores")
async def list_stores(request: Request) -> list[dict[str, object]]:
    """Return all stores."""
    stores = _container(request).store_service.list_stores()
    return [_store_out(store) for store in stores]


@router.get("/stores/nearby")
async def nearby_stores(
    request: Request,
    lat: float,
    lng: float,
    radius: float = DEFAULT_RADIUS_KM,
) -> list[dict[str, object]]:
    """Return stores within ``radius`` km of a point."""
    stores = _container(request).store_service.nearby(lat, lng, radius)
    return [_store_out(store) for store in stores]


# Recipes and products


@router.get("/recipes/search")
async def search_recipes(
    request: Request,
    query: str = "",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=24, ge=1, le=100, alias="pageSize"),
) -> dict[str, object]:
    """Search recipes by free text."""
    return await _container(request).recipe_service.search(query, page, page_size)


@router.get("/recipes/by-ingredients")
async def search_recipes_by_ingredients(
    request: Request, ingredients: str = ""
) -> list[dict[str, object]]:
    """Find recipes for a comma-separated ingredient list."""
    return await _container(request).recipe_service.search_by_ingredients(
        ingredients.split(",")
    )


@router.get("/recipes/{recipe_id}")
async def get_recipe(recipe_id: int, request: Request) -> dict[str, object]:
    """Return recipe details."""
    recipe = await _container(request).recipe_service.get_recipe(recipe_id)
    return recipe.model_dump(by_alias=True)


@router.post("/recipes/{recipe_id}/import", status_code=status.HTTP_201_CREATED)
async def import_recipe(
    recipe_id: int, request: Request, body: ImportRecipeRequest | None = None
) -> dict[str, object]:
    """Add a recipe's ingredients to the catalog and optionally the list."""
    user_id = body.user_id if body else None
    imported = await _container(request).recipe_service.import_recipe(
        recipe_id, user_id
    )
    return {
        "recipe_id": imported.recipe.id,
        "title": imported.recipe.title,
        "food_items": [_food_item_out(item) for item in imported.food_items],
        "grocery_items": [_grocery_item_out(item) for item in imported.grocery_items],
    }


@router.get("/products/search")
async def search_products(
    request: Request,
    query: str = "",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
) -> list[dict[str, object]]:
    """Search grocery products."""
    return await _container(request).recipe_service.search_products(
        query, page, page_size
    )


@router.get("/products/{product_id}")
async def get_product(product_id: int, request: Request) -> dict[str, object]:
    """Return grocery product details."""
    return await _container(request).recipe_service.get_product(product_id)


def _user_out(user: UserRecord) -> dict[str, object]:
    body: dict[str, object] = {
        "id": str(user.id),
        "telegram_user_id": user.telegram_user_id,
        "profile": None,
        "target": None,
    }
    if user.profile is not None:
        target = evaluate(user.profile)
        body["profile"] = user.profile.model_dump()
        body["target"] = {
            **asdict(target),
            "macro_percentages": macro_percentages(target),
        }
    return body


def _food_item_out(item: FoodItem) -> dict[str, object]:
    return {**asdict(item), "id": str(item.id)}


def _meal_out(meal: Meal) -> dict[str, object]:
    return {
        "id": str(meal.id) if meal.id else None,
        "meal_plan_id": str(meal.meal_plan_id) if meal.meal_plan_id else None,
        "type": meal.type,
        "day": meal.day,
        "name": meal.name,
        "calories": round(meal.calories),
        "protein_g": round(meal.protein_g, 1),
        "fat_g": round(meal.fat_g, 1),
        "carbs_g": round(meal.carbs_g, 1),
        "price": round(meal.price, 2),
        "recipe": meal.recipe,
        "image_url": meal.image_url,
        "ingredients": [
            {
                "food_item_id": str(ingredient.food_item_id),
                "name": ingredient.name,
                "quantity": round(ingredient.quantity, 2),
                "unit": ingredient.unit,
            }
            for ingredient in meal.ingredients
        ],
    }


def _plan_out(plan: MealPlan) -> dict[str, object]:
    return {
        "id": str(plan.id),
        "user_id": str(plan.user_id),
        "days": plan.days,
        "target": asdict(plan.target),
        "total_cost": round(plan.total_cost, 2),
        "created_at": plan.created_at.isoformat(),
        "meals": [_meal_out(meal) for meal in plan.meals],
    }


def _grocery_item_out(item: GroceryItem) -> dict[str, object]:
    return {
        "id": str(item.id),
        "user_id": str(item.user_id),
        "food_item_id": str(item.food_item_id),
        "meal_plan_id": str(item.meal_plan_id) if item.meal_plan_id else None,
        "quantity": round(item.quantity, 2),
        "purchased": item.purchased,
    }


def _grocery_detail_out(detail: GroceryItemDetail) -> dict[str, object]:
    return {
        **_grocery_item_out(detail.item),
        "food_item": _food_item_out(detail.food_item),
        "cost": round(detail.cost, 2),
    }


def _store_out(store: Store) -> dict[str, object]:
    return {**asdict(store), "id": str(store.id)}
