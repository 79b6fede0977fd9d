"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from meal_planner.adapters.spoonacular_client import SpoonacularClient
from meal_planner.adapters.telegram_client import TelegramClient
from meal_planner.config import Settings
from meal_planner.containers import AppContainer
from meal_planner.domain.catalog import FoodItem
from meal_planner.domain.grocery import GroceryItem
from meal_planner.domain.meals import Meal, MealPlan
from meal_planner.domain.models import UserRecord
from meal_planner.domain.profile import NutritionTarget, Profile
from meal_planner.domain.stores import Store
from meal_planner.services.cache import TtlCache
from meal_planner.services.catalog import CatalogRepository, CatalogService
from meal_planner.services.commands import (
    HelpCommandHandler,
    OpenAppPromptHandler,
    StartCommandHandler,
    WebAppDataHandler,
)
from meal_planner.services.composer import LocalCatalogStrategy, MealComposer
from meal_planner.services.grocery import GroceryAggregator, GroceryRepository
from meal_planner.services.meal_plans import MealPlanRepository, MealPlanService
from meal_planner.services.recipes import RecipeService
from meal_planner.services.stores import StoreRepository, StoreService
from meal_planner.services.users import UserRepository, UserService


def make_food_item(  # noqa: PLR0913
    name: str,
    calories: float,
    *,
    category: str = "produce",
    protein_g: float = 5.0,
    fat_g: float = 2.0,
    carbs_g: float = 10.0,
    price_per_unit: float = 0.5,
    unit: str = "g",
    quantity: float = 100.0,
) -> FoodItem:
    return FoodItem(
        id=uuid4(),
        name=name,
        category=category,
        calories=calories,
        protein_g=protein_g,
        fat_g=fat_g,
        carbs_g=carbs_g,
        price_per_unit=price_per_unit,
        unit=unit,
        quantity=quantity,
    )


def stock_catalog(repository: "InMemoryCatalogRepository", count: int) -> None:
    """Append 800 kcal meal kits; each one fills a 2628 kcal plan's slot alone."""
    repository.items.extend(
        make_food_item(f"Meal kit {index}", 800, category="prepared")
        for index in range(1, count + 1)
    )


def sample_profile(**overrides: object) -> Profile:
    values: dict[str, object] = {
        "age": 30,
        "gender": "male",
        "weight": 70,
        "height": 175,
        "activity": "moderate",
        "goal": "maintain",
        "budget": 500,
    }
    values.update(overrides)
    return Profile.model_validate(values)


def sample_recipe(
    recipe_id: int = 101,
    title: str = "Oat porridge",
    ingredients: tuple[tuple[str, str, float, str, float], ...] = (
        ("rolled oats", "Cereal", 80.0, "g", 300.0),
        ("milk", "Milk, Eggs, Other Dairy", 200.0, "ml", 120.0),
    ),
    servings: int = 1,
    price_per_serving: float = 2.0,
) -> dict[str, object]:
    """Recipe information payload; ingredients are (name, aisle, amount, unit, kcal)."""
    return {
        "id": recipe_id,
        "title": title,
        "image": f"https://img.example/{recipe_id}.jpg",
        "servings": servings,
        "pricePerServing": price_per_serving,
        "instructions": "Cook everything together.",
        "dishTypes": ["breakfast"],
        "extendedIngredients": [
            {"id": index, "name": name, "aisle": aisle, "amount": amount, "unit": unit}
            for index, (name, aisle, amount, unit, _) in enumerate(ingredients)
        ],
        "nutrition": {
            "nutrients": [{"name": "Calories", "amount": 420, "unit": "kcal"}],
            "ingredients": [
                {
                    "name": name,
                    "amount": amount,
                    "unit": unit,
                    "nutrients": [
                        {"name": "Calories", "amount": kcal, "unit": "kcal"},
                        {"name": "Protein", "amount": kcal / 20, "unit": "g"},
                        {"name": "Fat", "amount": kcal / 50, "unit": "g"},
                        {"name": "Carbohydrates", "amount": kcal / 8, "unit": "g"},
                    ],
                }
                for name, _, amount, unit, kcal in ingredients
            ],
        },
    }


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)
    touched: list[UUID] = field(default_factory=list)

    def get_by_id(self, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)

    def get_by_telegram_id(self, telegram_user_id: int) -> UserRecord | None:
        for user in self.users.values():
            if user.telegram_user_id == telegram_user_id:
                return user
        return None

    def create_user(self, telegram_user_id: int) -> UserRecord:
        user = UserRecord(id=uuid4(), telegram_user_id=telegram_user_id)
        self.users[user.id] = user
        return user

    def update_profile(self, user_id: UUID, profile: Profile) -> UserRecord | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        updated = replace(user, profile=profile)
        self.users[user_id] = updated
        return updated

    def touch_last_active(self, user_id: UUID) -> None:
        self.touched.append(user_id)


@dataclass
class InMemoryCatalogRepository(CatalogRepository):
    """In-memory catalog preserving insertion order."""

    items: list[FoodItem] = field(default_factory=list)
    created: list[dict[str, object]] = field(default_factory=list)

    def list_food_items(self, category: str | None = None) -> list[FoodItem]:
        return [item for item in self.items if category in {None, item.category}]

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        return next((item for item in self.items if item.id == food_item_id), None)

    def find_food_item_by_name(self, name: str) -> FoodItem | None:
        wanted = name.lower()
        return next((item for item in self.items if item.name.lower() == wanted), None)

    def create_food_item(self, payload: dict[str, object]) -> FoodItem:
        self.created.append(payload)
        item = FoodItem(
            id=uuid4(),
            name=str(payload["name"]),
            category=str(payload.get("category", "other")),
            calories=float(payload.get("calories", 0.0)),
            protein_g=float(payload.get("protein_g", 0.0)),
            fat_g=float(payload.get("fat_g", 0.0)),
            carbs_g=float(payload.get("carbs_g", 0.0)),
            price_per_unit=float(payload.get("price_per_unit", 0.0)),
            unit=str(payload.get("unit", "serving")),
            quantity=float(payload.get("quantity", 1.0)),
        )
        self.items.append(item)
        return item


@dataclass
class InMemoryGroceryRepository(GroceryRepository):
    """In-memory grocery rows keyed by id."""

    items: dict[UUID, GroceryItem] = field(default_factory=dict)
    fail_for: set[UUID] = field(default_factory=set)

    def find_item(
        self, user_id: UUID, food_item_id: UUID, meal_plan_id: UUID | None
    ) -> GroceryItem | None:
        for item in self.items.values():
            if (
                item.user_id == user_id
                and item.food_item_id == food_item_id
                and item.meal_plan_id == meal_plan_id
            ):
                return item
        return None

    def create_item(
        self,
        user_id: UUID,
        food_item_id: UUID,
        quantity: float,
        meal_plan_id: UUID | None,
    ) -> GroceryItem:
        if food_item_id in self.fail_for:
            raise RuntimeError("Failed to create grocery item")
        item = GroceryItem(
            id=uuid4(),
            user_id=user_id,
            food_item_id=food_item_id,
            quantity=quantity,
            purchased=False,
            meal_plan_id=meal_plan_id,
        )
        self.items[item.id] = item
        return item

    def get_item(self, item_id: UUID) -> GroceryItem | None:
        return self.items.get(item_id)

    def update_item(self, item_id: UUID, payload: dict[str, object]) -> GroceryItem:
        if item_id not in self.items:
            raise RuntimeError("Failed to update grocery item")
        updated = replace(self.items[item_id], **payload)
        self.items[item_id] = updated
        return updated

    def list_items(self, user_id: UUID) -> list[GroceryItem]:
        return [item for item in self.items.values() if item.user_id == user_id]


@dataclass
class InMemoryMealPlanRepository(MealPlanRepository):
    """In-memory plans and meals."""

    plans: list[MealPlan] = field(default_factory=list)
    meals: list[Meal] = field(default_factory=list)

    def create_meal_plan(
        self,
        user_id: UUID,
        days: int,
        target: NutritionTarget,
        total_cost: float,
    ) -> MealPlan:
        created_at = datetime(2024, 1, 1, tzinfo=UTC) + timedelta(
            minutes=len(self.plans)
        )
        plan = MealPlan(
            id=uuid4(),
            user_id=user_id,
            days=days,
            target=target,
            total_cost=total_cost,
            created_at=created_at,
        )
        self.plans.append(plan)
        return plan

    def create_meals(
        self, meal_plan_id: UUID, user_id: UUID, meals: list[Meal]
    ) -> list[Meal]:
        stored = [
            replace(meal, id=uuid4(), meal_plan_id=meal_plan_id) for meal in meals
        ]
        self.meals.extend(stored)
        return stored

    def get_latest_plan(self, user_id: UUID) -> MealPlan | None:
        plans = [plan for plan in self.plans if plan.user_id == user_id]
        return max(plans, key=lambda plan: plan.created_at, default=None)

    def get_meal(self, meal_id: UUID) -> Meal | None:
        return next((meal for meal in self.meals if meal.id == meal_id), None)

    def list_meals(self, meal_plan_id: UUID, day: int | None = None) -> list[Meal]:
        return [
            meal
            for meal in self.meals
            if meal.meal_plan_id == meal_plan_id and day in {None, meal.day}
        ]


@dataclass
class InMemoryStoreRepository(StoreRepository):
    """In-memory store list."""

    stores: list[Store] = field(default_factory=list)

    def list_stores(self) -> list[Store]:
        return list(self.stores)


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    markups: list[dict | None] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None

    async def send_message(
        self, chat_id: int, text: str, reply_markup: dict | None = None
    ) -> None:
        self.messages.append((chat_id, text))
        self.markups.append(reply_markup)

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button


@dataclass
class FakeSpoonacularClient(SpoonacularClient):
    """Fake recipe client serving canned payloads."""

    day_plan: dict[str, object] = field(
        default_factory=lambda: {
            "meals": [{"id": 101, "title": "Oat porridge", "servings": 1}],
            "nutrients": {
                "calories": 420,
                "protein": 21,
                "fat": 8,
                "carbohydrates": 52,
            },
        }
    )
    recipes: dict[int, dict[str, object]] = field(
        default_factory=lambda: {101: sample_recipe()}
    )
    delay_seconds: float = 0.0
    error: Exception | None = None
    calls: list[str] = field(default_factory=list)

    async def generate_meal_plan(
        self, target_calories: int, diet: str | None = None
    ) -> dict[str, object]:
        self.calls.append(f"generate_meal_plan:{target_calories}")
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.day_plan

    async def get_recipe(self, recipe_id: int) -> dict[str, object]:
        self.calls.append(f"get_recipe:{recipe_id}")
        if self.error is not None:
            raise self.error
        return self.recipes[recipe_id]

    async def search_recipes(
        self, query: str, page: int = 1, page_size: int = 24
    ) -> dict[str, object]:
        self.calls.append(f"search_recipes:{query}")
        if self.error is not None:
            raise self.error
        return {"results": [{"id": 101, "title": "Oat porridge"}], "totalResults": 1}

    async def search_by_ingredients(
        self, ingredients: list[str], number: int = 5
    ) -> list[dict[str, object]]:
        self.calls.append(f"search_by_ingredients:{','.join(ingredients)}")
        return [{"id": 101, "title": "Oat porridge", "usedIngredientCount": 2}]

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 10
    ) -> list[dict[str, object]]:
        self.calls.append(f"search_products:{query}")
        return [{"id": 7, "title": "Whole milk"}]

    async def get_product(self, product_id: int) -> dict[str, object]:
        self.calls.append(f"get_product:{product_id}")
        return {"id": product_id, "title": "Whole milk", "price": 1.2}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        web_app_url="https://planner.example",
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def catalog_repository() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository(
        items=[
            make_food_item("Oatmeal", 350, category="grains"),
            make_food_item("Banana", 90, category="produce"),
            make_food_item(
                "Chicken breast", 165, category="meat", price_per_unit=1.5
            ),
            make_food_item("Rice", 130, category="grains"),
            make_food_item("Broccoli", 35, category="produce"),
            make_food_item("Eggs", 155, category="dairy"),
            make_food_item("Salmon", 210, category="fish", price_per_unit=2.5),
            make_food_item("Potatoes", 80, category="produce"),
            make_food_item("Yogurt", 60, category="dairy"),
            make_food_item("Lentils", 115, category="grains"),
        ]
    )


@pytest.fixture
def grocery_repository() -> InMemoryGroceryRepository:
    return InMemoryGroceryRepository()


@pytest.fixture
def meal_plan_repository() -> InMemoryMealPlanRepository:
    return InMemoryMealPlanRepository()


@pytest.fixture
def store_repository() -> InMemoryStoreRepository:
    return InMemoryStoreRepository(
        stores=[
            Store(
                id=uuid4(),
                name="Corner Market",
                address="1 Main St",
                latitude=55.751,
                longitude=37.618,
                rating=4.5,
                review_count=12,
            ),
            Store(
                id=uuid4(),
                name="Far Away Foods",
                address="99 Remote Rd",
                latitude=56.5,
                longitude=38.5,
            ),
        ]
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def spoonacular_client() -> FakeSpoonacularClient:
    return FakeSpoonacularClient()


@pytest.fixture
def grocery_aggregator(
    grocery_repository: InMemoryGroceryRepository,
    catalog_repository: InMemoryCatalogRepository,
) -> GroceryAggregator:
    return GroceryAggregator(grocery_repository, catalog_repository)


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    user_repository: InMemoryUserRepository,
    catalog_repository: InMemoryCatalogRepository,
    meal_plan_repository: InMemoryMealPlanRepository,
    store_repository: InMemoryStoreRepository,
    grocery_aggregator: GroceryAggregator,
    telegram_client: FakeTelegramClient,
    spoonacular_client: FakeSpoonacularClient,
) -> AppContainer:
    user_service = UserService(user_repository)
    catalog_service = CatalogService(catalog_repository)
    meal_plan_service = MealPlanService(
        repository=meal_plan_repository,
        catalog_service=catalog_service,
        composer=MealComposer(local=LocalCatalogStrategy()),
        grocery=grocery_aggregator,
    )
    recipe_service = RecipeService(
        client=spoonacular_client,
        cache=TtlCache(),
        catalog_service=catalog_service,
        grocery=grocery_aggregator,
        retry_delay_seconds=0,
    )
    web_app_url = settings.web_app_url

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        user_service=user_service,
        catalog_service=catalog_service,
        grocery_aggregator=grocery_aggregator,
        meal_plan_service=meal_plan_service,
        recipe_service=recipe_service,
        store_service=StoreService(store_repository),
        start_command_handler=StartCommandHandler(
            user_service, telegram_client, web_app_url
        ),
        help_command_handler=HelpCommandHandler(telegram_client),
        open_app_prompt_handler=OpenAppPromptHandler(telegram_client, web_app_url),
        web_app_data_handler=WebAppDataHandler(
            user_service, telegram_client, web_app_url
        ),
        close_resources=close_resources,
    )
