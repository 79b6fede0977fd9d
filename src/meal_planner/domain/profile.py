"""Profile and nutrition target models."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Gender = Literal["male", "female", "other"]
ActivityLevel = Literal["sedentary", "light", "moderate", "high", "extreme"]
Goal = Literal["lose", "maintain", "gain"]


class Profile(BaseModel):
    """Physiological profile submitted from the Mini App.

    The Mini App sends ``weight``, ``height`` and ``budget``; both those names
    and the unit-suffixed field names are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    age: int = Field(ge=1, le=120)
    gender: Gender
    weight_kg: float = Field(gt=0, alias="weight")
    height_cm: float = Field(gt=0, alias="height")
    activity: ActivityLevel
    goal: Goal
    daily_budget: float = Field(gt=0, alias="budget")


@dataclass(frozen=True)
class EnergyBalance:
    """Unrounded intermediate values of a profile evaluation."""

    bmr: float
    tdee: float
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float


@dataclass(frozen=True)
class NutritionTarget:
    """Daily calorie and macro targets with the food budget."""

    calories: int
    protein_g: int
    fat_g: int
    carbs_g: int
    budget: float
