"""Tests for share links and their resolution."""

from nutri_ledger.domain.errors import ErrorKind
from nutri_ledger.domain.meals import NutrientAmount
from nutri_ledger.services.sharing import (
    NOT_FOUND_MESSAGE,
    ViewMode,
    build_share_link,
    extract_share_reference,
    resolve_share_reference,
    share_summary_text,
    strip_share_reference,
)
from tests.conftest import make_meal


def test_build_share_link_keeps_other_params() -> None:
    link = build_share_link("https://ledger.example/app?lang=pt&mealId=old#top", "m1")

    assert link == "https://ledger.example/app?lang=pt&mealId=m1"


def test_extract_share_reference() -> None:
    assert extract_share_reference("https://x.test/?mealId=m1") == "m1"
    assert extract_share_reference("https://x.test/?mealId=") is None
    assert extract_share_reference("https://x.test/") is None


def test_resolve_found_meal_enters_shared_mode() -> None:
    meals = [make_meal("m1")]

    resolution = resolve_share_reference("https://x.test/?mealId=m1", meals)

    assert resolution.mode is ViewMode.SHARED
    assert resolution.read_only
    assert resolution.meal == meals[0]


def test_resolve_unknown_meal_reports_not_found() -> None:
    resolution = resolve_share_reference("https://x.test/?mealId=m9", [make_meal("m1")])

    assert resolution.mode is ViewMode.NOT_FOUND
    assert resolution.meal is None
    assert resolution.error is not None
    assert resolution.error.kind is ErrorKind.SHARE_REFERENCE_NOT_FOUND
    assert resolution.error.message == NOT_FOUND_MESSAGE


def test_resolve_without_reference_is_normal() -> None:
    resolution = resolve_share_reference("https://x.test/", [make_meal("m1")])

    assert resolution.mode is ViewMode.NORMAL
    assert not resolution.read_only


def test_leave_strips_reference() -> None:
    resolution = resolve_share_reference(
        "https://x.test/app?lang=pt&mealId=m1", [make_meal("m1")]
    )

    left = resolution.leave()

    assert left.mode is ViewMode.NORMAL
    assert left.address == "https://x.test/app?lang=pt"
    assert strip_share_reference("https://x.test/?mealId=m1") == "https://x.test/"


def test_share_summary_text() -> None:
    meal = make_meal("m1", macros=(NutrientAmount("Proteínas", 20, "g"),))

    text = share_summary_text(meal, "https://x.test/?mealId=m1")

    assert "Meal: Lunch" in text
    assert "- Arroz: 150g (60%)" in text
    assert "Calories: 400 kcal" in text
    assert "Protein: 20.0g" in text
    assert "Fat: N/A" in text
    assert text.endswith("Full details: https://x.test/?mealId=m1")
