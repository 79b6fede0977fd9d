"""Recipe and grocery product lookups backed by Spoonacular."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

import httpx
from pydantic import ValidationError as PayloadValidationError

from meal_planner.adapters.spoonacular_client import SpoonacularClient
from meal_planner.domain.catalog import FoodItem
from meal_planner.domain.grocery import GroceryItem
from meal_planner.domain.meals import IngredientRef
from meal_planner.domain.recipes import RecipeInfo
from meal_planner.errors import UpstreamFailure, UpstreamTimeout, ValidationError
from meal_planner.services.cache import Cache
from meal_planner.services.catalog import CatalogService
from meal_planner.services.composer import ingredient_payloads, serving_quantity
from meal_planner.services.grocery import GroceryAggregator

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass(frozen=True)
class ImportedRecipe:
    """Result of importing a recipe's ingredients."""

    recipe: RecipeInfo
    food_items: list[FoodItem]
    grocery_items: list[GroceryItem]


@dataclass
class RecipeService:
    """Cached recipe service access with a short retry."""

    client: SpoonacularClient | None
    cache: Cache
    catalog_service: CatalogService
    grocery: GroceryAggregator
    search_ttl_seconds: int = 3600
    recipe_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(
        self, query: str, page: int = 1, page_size: int = 24
    ) -> dict[str, object]:
        """Search recipes by free text."""
        query = query.strip()
        if not query:
            raise ValidationError("Query parameter is required")
        client = self._require_client()
        return await self._cached(
            f"recipes:search:{query.lower()}:{page}:{page_size}",
            lambda: client.search_recipes(query, page=page, page_size=page_size),
            ttl_seconds=self.search_ttl_seconds,
            action="search",
        )

    async def get_recipe(self, recipe_id: int) -> RecipeInfo:
        """Return recipe details with ingredients and nutrition."""
        client = self._require_client()
        payload = await self._cached(
            f"recipes:info:{recipe_id}",
            lambda: client.get_recipe(recipe_id),
            ttl_seconds=self.recipe_ttl_seconds,
            action=f"get_recipe:{recipe_id}",
        )
        try:
            return RecipeInfo.model_validate(payload)
        except PayloadValidationError as exc:
            raise UpstreamFailure("recipe service returned an invalid payload") from exc

    async def search_by_ingredients(
        self, ingredients: list[str], number: int = 5
    ) -> list[dict[str, object]]:
        """Find recipes that use the given ingredients."""
        names = [name.strip() for name in ingredients if name.strip()]
        if not names:
            raise ValidationError("Ingredients parameter is required")
        client = self._require_client()
        key = ",".join(sorted(name.lower() for name in names))
        return await self._cached(
            f"recipes:by-ingredients:{key}:{number}",
            lambda: client.search_by_ingredients(names, number=number),
            ttl_seconds=self.search_ttl_seconds,
            action="search_by_ingredients",
        )

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 10
    ) -> list[dict[str, object]]:
        """Search grocery products."""
        query = query.strip()
        if not query:
            raise ValidationError("Query parameter is required")
        client = self._require_client()
        return await self._cached(
            f"products:search:{query.lower()}:{page}:{page_size}",
            lambda: client.search_products(query, page=page, page_size=page_size),
            ttl_seconds=self.search_ttl_seconds,
            action="search_products",
        )

    async def get_product(self, product_id: int) -> dict[str, object]:
        """Return grocery product details."""
        client = self._require_client()
        return await self._cached(
            f"products:info:{product_id}",
            lambda: client.get_product(product_id),
            ttl_seconds=self.recipe_ttl_seconds,
            action=f"get_product:{product_id}",
        )

    async def import_recipe(
        self, recipe_id: int, user_id: UUID | None = None
    ) -> ImportedRecipe:
        """Upsert a recipe's ingredients into the catalog.

        With a ``user_id`` the per-serving amounts are also added to that
        user's manual grocery list. Ingredients that fail to upsert are
        logged and left out.
        """
        recipe = await self.get_recipe(recipe_id)
        payloads = ingredient_payloads(recipe)
        if not payloads:
            raise ValidationError("recipe has no ingredients to import")
        results = await asyncio.gather(
            *(
                asyncio.to_thread(self.catalog_service.upsert_by_name, payload)
                for _, payload in payloads
            ),
            return_exceptions=True,
        )
        food_items: list[FoodItem] = []
        refs: list[IngredientRef] = []
        for (quantity, payload), result in zip(payloads, results, strict=True):
            if isinstance(result, Exception):
                _logger.warning(
                    "Failed to import ingredient %s of recipe %s: %s",
                    payload["name"],
                    recipe_id,
                    result,
                )
                continue
            if isinstance(result, BaseException):
                raise result
            food_items.append(result)
            refs.append(
                IngredientRef(
                    food_item_id=result.id,
                    quantity=serving_quantity(result, quantity, str(payload["unit"])),
                    unit=result.unit,
                    name=result.name,
                )
            )
        grocery_items: list[GroceryItem] = []
        if user_id is not None and refs:
            grocery_items = await self.grocery.add_ingredients(user_id, None, refs)
        _logger.info(
            "Imported recipe %s: ingredients=%s grocery_items=%s",
            recipe_id,
            len(food_items),
            len(grocery_items),
        )
        return ImportedRecipe(
            recipe=recipe, food_items=food_items, grocery_items=grocery_items
        )

    def _require_client(self) -> SpoonacularClient:
        if self.client is None:
            raise UpstreamFailure("recipe service is not configured")
        return self.client

    async def _cached(
        self,
        key: str,
        func: "Callable[[], Awaitable]",
        *,
        ttl_seconds: int,
        action: str,
    ) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        payload = await self._call_with_retry(func, action=action)
        self.cache.set(key, payload, ttl_seconds=ttl_seconds)
        return payload

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable]", *, action: str
    ) -> Any:
        """Call the recipe service with a short retry on HTTP errors.

        Client errors (4xx) are not retried.
        """
        attempt = 0
        while True:
            try:
                return await func()
            except httpx.HTTPError as exc:
                attempt += 1
                status_code = _status_code_from_exception(exc)
                _logger.warning(
                    "Recipe service %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    status_code,
                    exc,
                )
                if attempt > self.retry_attempts or status_code.startswith("4"):
                    raise _upstream_error(exc) from exc
                await asyncio.sleep(self.retry_delay_seconds)


def _upstream_error(exc: httpx.HTTPError) -> UpstreamFailure | UpstreamTimeout:
    if isinstance(exc, httpx.TimeoutException):
        return UpstreamTimeout("recipe service timed out")
    if isinstance(exc, httpx.HTTPStatusError):
        return UpstreamFailure(
            f"recipe service returned HTTP {exc.response.status_code}"
        )
    return UpstreamFailure(f"recipe service unavailable: {exc}")


def _status_code_from_exception(exc: httpx.HTTPError) -> str:
    """Extract the HTTP status code from an exception, if available."""
    if isinstance(exc, httpx.HTTPStatusError):
        return str(exc.response.status_code)
    return "n/a"
