"""Request bodies accepted by the HTTP API."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from meal_planner.domain.profile import Profile


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateUserRequest(_Request):
    telegram_user_id: int = Field(alias="telegramId")


class GenerateMealPlanRequest(_Request):
    user_id: UUID = Field(alias="userId")
    profile: Profile | None = None
    days: int | None = Field(default=None, ge=1, le=14)
    diet: str | None = None


class CreateFoodItemRequest(_Request):
    name: str = Field(min_length=1)
    category: str = "other"
    calories: float = Field(ge=0)
    protein_g: float = Field(default=0, ge=0, alias="protein")
    fat_g: float = Field(default=0, ge=0, alias="fat")
    carbs_g: float = Field(default=0, ge=0, alias="carbs")
    price_per_unit: float = Field(ge=0, alias="pricePerUnit")
    unit: str = "serving"
    quantity: float = Field(default=1, gt=0)


class CreateGroceryItemRequest(_Request):
    """Body for a single manual grocery addition.

    Values are validated by the aggregator so that batch and single adds
    share the same rules.
    """

    user_id: UUID = Field(alias="userId")
    food_item_id: Any = Field(default=None, alias="foodItemId")
    quantity: Any = None
    meal_plan_id: UUID | None = Field(default=None, alias="mealPlanId")


class BatchGroceryRequest(_Request):
    user_id: UUID = Field(alias="userId")
    meal_plan_id: UUID | None = Field(default=None, alias="mealPlanId")
    items: list[Any]


class UpdateGroceryItemRequest(_Request):
    purchased: bool | None = None
    quantity: Any = None


class BatchGroceryUpdateRequest(_Request):
    items: list[Any]


class AddMealToGroceryRequest(_Request):
    user_id: UUID = Field(alias="userId")


class ImportRecipeRequest(_Request):
    user_id: UUID | None = Field(default=None, alias="userId")
