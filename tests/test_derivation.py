"""Tests for daily derivations."""

import pytest

from nutri_ledger.domain.errors import ValidationFailure
from nutri_ledger.domain.meals import NutrientAmount
from nutri_ledger.domain.profile import DailyGoals
from nutri_ledger.services.derivation import (
    MacroKeywords,
    calorie_density,
    estimate_activity_calories,
    find_macro_amount,
    goal_progress,
    macro_percentage,
    net_calories,
    nutrient_totals,
    round_half_up,
    summarize_day,
)
from tests.conftest import make_activity, make_meal


def test_calorie_density_by_name() -> None:
    assert calorie_density("Gorduras totais") == 9
    assert calorie_density("Total fat") == 9
    assert calorie_density("Alcohol") == 7
    assert calorie_density("Proteínas") == 4
    assert calorie_density("Fibra") == 4


def test_macro_percentage_uses_density() -> None:
    fat = NutrientAmount("Gorduras", 10, "g")
    protein = NutrientAmount("Proteínas", 25, "g")

    assert macro_percentage(fat, 300) == 30
    assert macro_percentage(protein, 400) == 25


def test_macro_percentage_zero_calories() -> None:
    assert macro_percentage(NutrientAmount("Proteínas", 25, "g"), 0) == 0


def test_find_macro_amount_case_insensitive() -> None:
    macros = (NutrientAmount("PROTEÍNA", 12, "g"), NutrientAmount("Carbo", 3, "g"))

    assert find_macro_amount(macros, ("prote",)) == 12
    assert find_macro_amount(macros, ("gord",)) == 0


def test_custom_keyword_table() -> None:
    keywords = MacroKeywords(protein=("eiweiss",), carbs=("kohlenhydrat",), fat=("fett",))
    meal = make_meal(
        macros=(NutrientAmount("Eiweiss", 30, "g"), NutrientAmount("Fett", 5, "g"))
    )

    totals = nutrient_totals([meal], keywords)

    assert totals.protein == 30
    assert totals.fat == 5
    assert totals.carbs == 0


def test_nutrient_totals_sums_meals() -> None:
    meals = [make_meal("m1"), make_meal("m2", calories=250)]

    totals = nutrient_totals(meals)

    assert totals.calories == 650
    assert totals.protein == 40
    assert totals.carbs == 100
    assert totals.fat == 20


def test_net_calories_can_be_negative() -> None:
    assert net_calories(300, 500) == -200


def test_goal_progress_not_clamped() -> None:
    assert goal_progress(150, 100) == 150
    assert goal_progress(10, 0) == 0


def test_estimate_activity_calories() -> None:
    assert estimate_activity_calories(6.0, 70, 30) == 210
    assert estimate_activity_calories(1.0, 75, 1) == 1


def test_estimate_activity_calories_requires_weight_and_duration() -> None:
    with pytest.raises(ValidationFailure):
        estimate_activity_calories(6.0, 0, 30)
    with pytest.raises(ValidationFailure):
        estimate_activity_calories(6.0, 70, 0)


def test_round_half_up() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_summarize_day_metric_order_and_values() -> None:
    goals = DailyGoals(calories=2000, protein=100, carbs=250, fat=60, burned_calories=400)
    summary = summarize_day([make_meal()], [make_activity()], goals)

    assert [metric.key for metric in summary.metrics] == [
        "burned",
        "net_calories",
        "protein",
        "carbs",
        "fat",
    ]
    assert summary.burned == 210
    assert summary.net_calories == 190
    burned = summary.metrics[0]
    assert burned.percentage == pytest.approx(52.5)


def test_summarize_day_over_goal_keeps_percentage() -> None:
    goals = DailyGoals(protein=10)
    summary = summarize_day([make_meal()], [], goals)
    protein = summary.metrics[2]

    assert protein.percentage == 200
    assert protein.is_over_goal
    assert protein.fill == 100


def test_summarize_day_burned_goal_fallback() -> None:
    summary = summarize_day([], [make_activity()], DailyGoals(burned_calories=0))

    assert summary.metrics[0].goal == 500
    assert summary.metrics[0].percentage == pytest.approx(42.0)


def test_summarize_day_negative_net_fill() -> None:
    summary = summarize_day([], [make_activity()], DailyGoals())
    net = summary.metrics[1]

    assert net.current == -210
    assert net.fill == 0
