"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_planner.adapters.spoonacular_client import HttpxSpoonacularClient
from meal_planner.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from meal_planner.adapters.supabase_grocery_repository import (
    SupabaseGroceryRepository,
)
from meal_planner.adapters.supabase_meal_plan_repository import (
    SupabaseMealPlanRepository,
)
from meal_planner.adapters.supabase_store_repository import SupabaseStoreRepository
from meal_planner.adapters.supabase_user_repository import SupabaseUserRepository
from meal_planner.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from meal_planner.config import Settings
from meal_planner.services.cache import TtlCache
from meal_planner.services.catalog import CatalogService
from meal_planner.services.commands import (
    HelpCommandHandler,
    OpenAppPromptHandler,
    StartCommandHandler,
    WebAppDataHandler,
)
from meal_planner.services.composer import (
    LocalCatalogStrategy,
    MealComposer,
    RemoteRecipeStrategy,
)
from meal_planner.services.grocery import GroceryAggregator
from meal_planner.services.meal_plans import MealPlanService
from meal_planner.services.recipes import RecipeService
from meal_planner.services.stores import StoreService
from meal_planner.services.users import UserService


@dataclass
class AppContainer:  # noqa: PLR0902
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    user_service: UserService
    catalog_service: CatalogService
    grocery_aggregator: GroceryAggregator
    meal_plan_service: MealPlanService
    recipe_service: RecipeService
    store_service: StoreService
    start_command_handler: StartCommandHandler
    help_command_handler: HelpCommandHandler
    open_app_prompt_handler: OpenAppPromptHandler
    web_app_data_handler: WebAppDataHandler
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    Without a Spoonacular API key the composer only uses the local catalog
    and recipe endpoints report the service as unconfigured.
    """
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)
    catalog_repository = SupabaseCatalogRepository(supabase_client)
    meal_plan_repository = SupabaseMealPlanRepository(supabase_client)
    grocery_repository = SupabaseGroceryRepository(supabase_client)
    store_repository = SupabaseStoreRepository(supabase_client)

    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    spoonacular_client = None
    if resolved_settings.spoonacular_api_key:
        spoonacular_client = HttpxSpoonacularClient.create(
            api_key=resolved_settings.spoonacular_api_key,
            base_url=resolved_settings.spoonacular_base_url,
        )

    user_service = UserService(user_repository)
    catalog_service = CatalogService(catalog_repository)
    grocery_aggregator = GroceryAggregator(grocery_repository, catalog_repository)
    remote = (
        RemoteRecipeStrategy(spoonacular_client, catalog_service)
        if spoonacular_client is not None
        else None
    )
    composer = MealComposer(
        local=LocalCatalogStrategy(),
        remote=remote,
        timeout_seconds=resolved_settings.remote_timeout_seconds,
    )
    meal_plan_service = MealPlanService(
        repository=meal_plan_repository,
        catalog_service=catalog_service,
        composer=composer,
        grocery=grocery_aggregator,
    )
    recipe_service = RecipeService(
        client=spoonacular_client,
        cache=TtlCache(),
        catalog_service=catalog_service,
        grocery=grocery_aggregator,
    )
    store_service = StoreService(store_repository)
    web_app_url = resolved_settings.web_app_url

    async def close_resources() -> None:
        await telegram_client.close()
        if spoonacular_client is not None:
            await spoonacular_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        user_service=user_service,
        catalog_service=catalog_service,
        grocery_aggregator=grocery_aggregator,
        meal_plan_service=meal_plan_service,
        recipe_service=recipe_service,
        store_service=store_service,
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
