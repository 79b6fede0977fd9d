"""Tests for profile evaluation."""

import pytest
from pydantic import ValidationError

from meal_planner.domain.profile import NutritionTarget
from meal_planner.services.profile import (
    basal_metabolic_rate,
    compute_energy_balance,
    evaluate,
    macro_percentages,
)
from tests.conftest import sample_profile


def test_reference_profile_energy_balance() -> None:
    balance = compute_energy_balance(sample_profile())

    assert balance.bmr == pytest.approx(
        88.362 + 13.397 * 70 + 4.799 * 175 - 5.677 * 30
    )
    assert balance.bmr == pytest.approx(1695.667, abs=0.01)
    assert balance.tdee == pytest.approx(balance.bmr * 1.55)
    assert balance.calories == pytest.approx(balance.tdee)
    assert balance.protein_g == pytest.approx(140)
    assert balance.fat_g == pytest.approx(balance.calories * 0.3 / 9)
    assert balance.carbs_g == pytest.approx(319.95, abs=0.01)


def test_reference_profile_rounded_target() -> None:
    target = evaluate(sample_profile())

    assert target == NutritionTarget(
        calories=2628, protein_g=140, fat_g=88, carbs_g=320, budget=500
    )


def test_carbs_are_the_calorie_remainder() -> None:
    balance = compute_energy_balance(sample_profile(weight=95, goal="lose"))

    assert balance.carbs_g == (
        balance.calories - balance.protein_g * 4 - balance.fat_g * 9
    ) / 4


def test_goal_orders_calories() -> None:
    lose = evaluate(sample_profile(goal="lose")).calories
    maintain = evaluate(sample_profile(goal="maintain")).calories
    gain = evaluate(sample_profile(goal="gain")).calories

    assert lose < maintain < gain


@pytest.mark.parametrize("gender", ["female", "other"])
def test_non_male_profiles_use_female_equation(gender: str) -> None:
    profile = sample_profile(gender=gender, weight=60, height=165, age=25)

    assert basal_metabolic_rate(profile) == pytest.approx(
        447.593 + 9.247 * 60 + 3.098 * 165 - 4.330 * 25
    )


def test_activity_raises_tdee() -> None:
    sedentary = compute_energy_balance(sample_profile(activity="sedentary"))
    extreme = compute_energy_balance(sample_profile(activity="extreme"))

    assert sedentary.tdee == pytest.approx(sedentary.bmr * 1.2)
    assert extreme.tdee == pytest.approx(extreme.bmr * 1.9)


def test_negative_carbs_are_clamped_in_target() -> None:
    profile = sample_profile(
        gender="female",
        age=90,
        weight=200,
        height=150,
        activity="sedentary",
        goal="lose",
    )

    balance = compute_energy_balance(profile)
    target = evaluate(profile)

    assert balance.carbs_g < 0
    assert target.carbs_g == 0
    assert target.protein_g == 400


@pytest.mark.parametrize(
    "overrides",
    [
        {"age": 0},
        {"age": 121},
        {"weight": 0},
        {"height": -1},
        {"budget": 0},
        {"activity": "couch"},
        {"goal": "bulk"},
    ],
)
def test_invalid_profiles_are_rejected(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        sample_profile(**overrides)


def test_profile_accepts_field_names() -> None:
    profile = sample_profile()
    same = type(profile).model_validate(profile.model_dump())

    assert same == profile


def test_macro_percentages_sum_to_about_100() -> None:
    shares = macro_percentages(evaluate(sample_profile()))

    assert set(shares) == {"protein", "fat", "carbs"}
    assert abs(sum(shares.values()) - 100) <= 1


def test_macro_percentages_zero_target() -> None:
    target = NutritionTarget(calories=0, protein_g=0, fat_g=0, carbs_g=0, budget=1)

    assert macro_percentages(target) == {"protein": 0, "fat": 0, "carbs": 0}
