"""Pure derivations from logged entries to daily aggregates.

Nutrient names are free-text labels produced by the analysis model, so every
classification goes through a small table of keyword fragments matched by
case-insensitive substring. Swapping the table changes the matching policy
without touching callers.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from nutri_ledger.domain.activities import ActivityEntry
from nutri_ledger.domain.errors import ValidationFailure
from nutri_ledger.domain.meals import MealEntry, NutrientAmount
from nutri_ledger.domain.profile import DailyGoals
from nutri_ledger.domain.summary import DailySummary, NutrientTotals, ProgressMetric

FAT_KCAL_PER_GRAM = 9
ALCOHOL_KCAL_PER_GRAM = 7
DEFAULT_KCAL_PER_GRAM = 4
FALLBACK_BURNED_GOAL = 500


@dataclass(frozen=True)
class MacroKeywords:
    """Keyword fragments identifying macro categories in nutrient names."""

    protein: tuple[str, ...] = ("prote",)
    carbs: tuple[str, ...] = ("carbo",)
    fat: tuple[str, ...] = ("gord", "fat", "lipid")
    alcohol: tuple[str, ...] = ("alco",)


DEFAULT_KEYWORDS = MacroKeywords()


def matches_any(name: str, fragments: Iterable[str]) -> bool:
    """Return True when the name contains any fragment, ignoring case."""
    lowered = name.casefold()
    return any(fragment.casefold() in lowered for fragment in fragments)


def calorie_density(name: str, keywords: MacroKeywords = DEFAULT_KEYWORDS) -> int:
    """Return kcal per gram for a nutrient name (fat 9, alcohol 7, else 4)."""
    if matches_any(name, keywords.fat):
        return FAT_KCAL_PER_GRAM
    if matches_any(name, keywords.alcohol):
        return ALCOHOL_KCAL_PER_GRAM
    return DEFAULT_KCAL_PER_GRAM


def macro_percentage(
    nutrient: NutrientAmount,
    meal_calories: float,
    keywords: MacroKeywords = DEFAULT_KEYWORDS,
) -> int:
    """Return the share of a meal's calories contributed by one macro.

    Values across a meal need not sum to 100 since total calories are edited
    independently of macro grams.
    """
    if meal_calories <= 0:
        return 0
    macro_calories = nutrient.amount * calorie_density(nutrient.name, keywords)
    return round_half_up(macro_calories / meal_calories * 100)


def find_macro(
    macros: Iterable[NutrientAmount], fragments: Iterable[str]
) -> NutrientAmount | None:
    """Return the first macro whose name matches the fragments."""
    fragments = tuple(fragments)
    for macro in macros:
        if matches_any(macro.name, fragments):
            return macro
    return None


def find_macro_amount(
    macros: Iterable[NutrientAmount], fragments: Iterable[str]
) -> float:
    """Return the amount of the first matching macro; 0 when none matches."""
    macro = find_macro(macros, fragments)
    return macro.amount if macro is not None else 0.0


def nutrient_totals(
    meals: Iterable[MealEntry], keywords: MacroKeywords = DEFAULT_KEYWORDS
) -> NutrientTotals:
    """Sum calories and protein/carbs/fat grams across meals."""
    calories = protein = carbs = fat = 0.0
    for meal in meals:
        calories += meal.calories
        protein += find_macro_amount(meal.macros, keywords.protein)
        carbs += find_macro_amount(meal.macros, keywords.carbs)
        fat += find_macro_amount(meal.macros, keywords.fat)
    return NutrientTotals(calories=calories, protein=protein, carbs=carbs, fat=fat)


def calories_burned(activities: Iterable[ActivityEntry]) -> int:
    """Sum calories burned across activities."""
    return sum(activity.calories_burned for activity in activities)


def net_calories(consumed: float, burned: float) -> float:
    """Return consumed minus burned. May be negative."""
    return consumed - burned


def goal_progress(current: float, goal: float) -> float:
    """Return progress towards a goal in percent, unclamped; 0 without a goal."""
    if goal <= 0:
        return 0.0
    return current / goal * 100


def estimate_activity_calories(
    met_value: float, weight_kg: float, duration_minutes: float
) -> int:
    """Estimate kcal burned as MET x weight (kg) x duration (hours)."""
    if weight_kg <= 0:
        raise ValidationFailure("Profile weight is required to estimate calories.")
    if duration_minutes <= 0:
        raise ValidationFailure("Activity duration is required.")
    return round_half_up(met_value * weight_kg * (duration_minutes / 60))


def summarize_day(
    meals: Iterable[MealEntry],
    activities: Iterable[ActivityEntry],
    goals: DailyGoals,
    keywords: MacroKeywords = DEFAULT_KEYWORDS,
) -> DailySummary:
    """Build the daily summary in the fixed metric order."""
    consumed = nutrient_totals(meals, keywords)
    burned = calories_burned(activities)
    net = net_calories(consumed.calories, burned)
    burned_goal = goals.burned_calories or FALLBACK_BURNED_GOAL
    metrics = (
        _metric("burned", "Burned", burned, burned_goal, "kcal"),
        _metric("net_calories", "Net calories", net, goals.calories, "kcal"),
        _metric("protein", "Protein", consumed.protein, goals.protein, "g"),
        _metric("carbs", "Carbs", consumed.carbs, goals.carbs, "g"),
        _metric("fat", "Fat", consumed.fat, goals.fat, "g"),
    )
    return DailySummary(
        consumed=consumed, burned=burned, net_calories=net, metrics=metrics
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (0.5 -> 1)."""
    return int(math.floor(value + 0.5))


def _metric(
    key: str, label: str, current: float, goal: float, unit: str
) -> ProgressMetric:
    return ProgressMetric(
        key=key,
        label=label,
        current=current,
        goal=goal,
        unit=unit,
        percentage=goal_progress(current, goal),
    )
