"""Models for recipe service payloads."""

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Nutrient(_Payload):
    """Single nutrient amount."""

    name: str
    amount: float = 0.0
    unit: str = ""


class IngredientNutrition(_Payload):
    """Nutrition of one recipe ingredient, per serving.

    With ``includeNutrition`` the recipe service reports amounts for one
    serving. They pair with the per-serving reference quantity of a new
    catalog item.
    """

    name: str
    amount: float = 0.0
    unit: str = ""
    nutrients: list[Nutrient] = Field(default_factory=list)


class RecipeNutrition(_Payload):
    """Nutrition block attached to recipe information."""

    nutrients: list[Nutrient] = Field(default_factory=list)
    ingredients: list[IngredientNutrition] = Field(default_factory=list)


class ExtendedIngredient(_Payload):
    """Ingredient line of a recipe."""

    id: int | None = None
    name: str
    aisle: str | None = None
    amount: float = 0.0
    unit: str = ""


class RecipeInfo(_Payload):
    """Recipe details returned by the information endpoint."""

    id: int
    title: str
    image: str | None = None
    servings: int = Field(default=1, ge=0)
    price_per_serving: float = Field(default=0.0, alias="pricePerServing")
    instructions: str | None = None
    dish_types: list[str] = Field(default_factory=list, alias="dishTypes")
    extended_ingredients: list[ExtendedIngredient] = Field(
        default_factory=list, alias="extendedIngredients"
    )
    nutrition: RecipeNutrition | None = None


class PlannedMeal(_Payload):
    """Meal entry of a generated day plan."""

    id: int
    title: str
    servings: int = 1
    image_type: str | None = Field(default=None, alias="imageType")
    source_url: str | None = Field(default=None, alias="sourceUrl")


class DayPlanNutrients(_Payload):
    """Totals of a generated day plan."""

    calories: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbohydrates: float = 0.0


class DayPlan(_Payload):
    """Generated single-day meal plan."""

    meals: list[PlannedMeal] = Field(default_factory=list)
    nutrients: DayPlanNutrients = Field(default_factory=DayPlanNutrients)


def nutrient_amount(nutrients: list[Nutrient], name: str) -> float:
    """Return the amount of a named nutrient, or zero."""
    for nutrient in nutrients:
        if nutrient.name.lower() == name.lower():
            return nutrient.amount
    return 0.0
