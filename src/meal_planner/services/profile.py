"""Energy and macro targets derived from a user profile."""

import logging

from meal_planner.domain.profile import EnergyBalance, NutritionTarget, Profile

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "high": 1.725,
    "extreme": 1.9,
}

GOAL_FACTORS: dict[str, float] = {
    "lose": 0.8,
    "maintain": 1.0,
    "gain": 1.15,
}

PROTEIN_G_PER_KG = 2.0
FAT_CALORIE_SHARE = 0.3
KCAL_PER_G_PROTEIN = 4.0
KCAL_PER_G_FAT = 9.0
KCAL_PER_G_CARBS = 4.0

_logger = logging.getLogger(__name__)


def basal_metabolic_rate(profile: Profile) -> float:
    """Harris-Benedict BMR; non-male profiles use the female equation."""
    if profile.gender == "male":
        return (
            88.362
            + 13.397 * profile.weight_kg
            + 4.799 * profile.height_cm
            - 5.677 * profile.age
        )
    return (
        447.593
        + 9.247 * profile.weight_kg
        + 3.098 * profile.height_cm
        - 4.330 * profile.age
    )


def compute_energy_balance(profile: Profile) -> EnergyBalance:
    """Run the full calculation without rounding.

    Carbs are the remainder after protein and fat and may be negative for
    very low calorie targets combined with a high body weight.
    """
    bmr = basal_metabolic_rate(profile)
    tdee = bmr * ACTIVITY_MULTIPLIERS[profile.activity]
    calories = tdee * GOAL_FACTORS[profile.goal]
    protein_g = profile.weight_kg * PROTEIN_G_PER_KG
    fat_g = (calories * FAT_CALORIE_SHARE) / KCAL_PER_G_FAT
    carbs_g = (
        calories - protein_g * KCAL_PER_G_PROTEIN - fat_g * KCAL_PER_G_FAT
    ) / KCAL_PER_G_CARBS
    return EnergyBalance(
        bmr=bmr,
        tdee=tdee,
        calories=calories,
        protein_g=protein_g,
        fat_g=fat_g,
        carbs_g=carbs_g,
    )


def evaluate(profile: Profile) -> NutritionTarget:
    """Return rounded daily targets for a validated profile."""
    balance = compute_energy_balance(profile)
    carbs_g = balance.carbs_g
    if carbs_g < 0:
        _logger.warning(
            "Negative carb remainder clamped to 0: calories=%.1f protein=%.1f",
            balance.calories,
            balance.protein_g,
        )
        carbs_g = 0.0
    return NutritionTarget(
        calories=round(balance.calories),
        protein_g=round(balance.protein_g),
        fat_g=round(balance.fat_g),
        carbs_g=round(carbs_g),
        budget=profile.daily_budget,
    )


def macro_percentages(target: NutritionTarget) -> dict[str, int]:
    """Share of macro calories per macro, in whole percent."""
    protein_kcal = target.protein_g * KCAL_PER_G_PROTEIN
    fat_kcal = target.fat_g * KCAL_PER_G_FAT
    carbs_kcal = target.carbs_g * KCAL_PER_G_CARBS
    total = protein_kcal + fat_kcal + carbs_kcal
    if total <= 0:
        return {"protein": 0, "fat": 0, "carbs": 0}
    return {
        "protein": round(protein_kcal / total * 100),
        "fat": round(fat_kcal / total * 100),
        "carbs": round(carbs_kcal / total * 100),
    }
