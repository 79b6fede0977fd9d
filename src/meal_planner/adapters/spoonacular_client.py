"""Spoonacular recipe API client."""

from dataclasses import dataclass
from typing import Any, Protocol

import httpx


class SpoonacularClient(Protocol):
    """Interface for Spoonacular API interactions."""

    async def generate_meal_plan(
        self, target_calories: int, diet: str | None = None
    ) -> dict[str, object]:
        """Generate a single-day meal plan and return raw API data."""

    async def get_recipe(self, recipe_id: int) -> dict[str, object]:
        """Fetch recipe information including ingredients and nutrition."""

    async def search_recipes(
        self, query: str, page: int = 1, page_size: int = 24
    ) -> dict[str, object]:
        """Search recipes by free text."""

    async def search_by_ingredients(
        self, ingredients: list[str], number: int = 5
    ) -> list[dict[str, object]]:
        """Find recipes that use the given ingredients."""

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 10
    ) -> list[dict[str, object]]:
        """Search grocery products."""

    async def get_product(self, product_id: int) -> dict[str, object]:
        """Fetch grocery product information."""


@dataclass
class HttpxSpoonacularClient(SpoonacularClient):
    """HTTPX-backed Spoonacular client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxSpoonacularClient":
        """Create a client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def generate_meal_plan(
        self, target_calories: int, diet: str | None = None
    ) -> dict[str, object]:
        """Generate a day plan for the calorie target."""
        params: dict[str, str] = {
            "targetCalories": str(target_calories),
            "timeFrame": "day",
        }
        if diet:
            params["diet"] = diet
        return await self._get("/mealplanner/generate", params)

    async def get_recipe(self, recipe_id: int) -> dict[str, object]:
        """Fetch recipe information with nutrition."""
        return await self._get(
            f"/recipes/{recipe_id}/information", {"includeNutrition": "true"}
        )

    async def search_recipes(
        self, query: str, page: int = 1, page_size: int = 24
    ) -> dict[str, object]:
        """Search recipes with ingredient and instruction details."""
        return await self._get(
            "/recipes/complexSearch",
            {
                "query": query,
                "offset": str((page - 1) * page_size),
                "number": str(page_size),
                "addRecipeInformation": "true",
                "fillIngredients": "true",
                "instructionsRequired": "true",
            },
        )

    async def search_by_ingredients(
        self, ingredients: list[str], number: int = 5
    ) -> list[dict[str, object]]:
        """Find recipes ranked by used ingredients."""
        return await self._get(
            "/recipes/findByIngredients",
            {
                "ingredients": ",".join(ingredients),
                "number": str(number),
                "ranking": "1",
                "ignorePantry": "true",
            },
        )

    async def search_products(
        self, query: str, page: int = 1, page_size: int = 10
    ) -> list[dict[str, object]]:
        """Search grocery products and return the product list."""
        payload = await self._get(
            "/food/products/search",
            {
                "query": query,
                "offset": str((page - 1) * page_size),
                "number": str(page_size),
            },
        )
        return payload.get("products", [])

    async def get_product(self, product_id: int) -> dict[str, object]:
        """Fetch a grocery product by id."""
        return await self._get(f"/food/products/{product_id}", {})

    async def _get(self, path: str, params: dict[str, str]) -> Any:
        response = await self.http_client.get(
            f"{self.base_url}{path}",
            params={"apiKey": self.api_key, **params},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
