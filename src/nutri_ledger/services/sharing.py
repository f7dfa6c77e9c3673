"""Share links for single meals and their resolution at startup."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from nutri_ledger.domain.errors import Err, ErrorKind
from nutri_ledger.domain.meals import MealEntry
from nutri_ledger.services.derivation import DEFAULT_KEYWORDS, find_macro

SHARE_PARAM = "mealId"
NOT_FOUND_MESSAGE = "Meal not found or link expired."


class ViewMode(Enum):
    """Which view the application should present."""

    NORMAL = "normal"
    SHARED = "shared"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ShareResolution:
    """Outcome of resolving the address the application was opened with."""

    mode: ViewMode
    address: str
    meal_id: str | None = None
    meal: MealEntry | None = None
    error: Err | None = None

    @property
    def read_only(self) -> bool:
        return self.mode is ViewMode.SHARED

    def leave(self) -> "ShareResolution":
        """Return to normal mode with the share reference removed."""
        return ShareResolution(
            mode=ViewMode.NORMAL, address=strip_share_reference(self.address)
        )


def build_share_link(base_url: str, meal_id: str) -> str:
    """Return ``base_url`` carrying ``mealId=<meal_id>`` as its reference."""
    parts = urlsplit(base_url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key != SHARE_PARAM
    ]
    query.append((SHARE_PARAM, meal_id))
    return urlunsplit(parts._replace(query=urlencode(query), fragment=""))


def extract_share_reference(url: str) -> str | None:
    """Return the meal id referenced by a URL; empty values count as absent."""
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == SHARE_PARAM:
            return value.strip() or None
    return None


def strip_share_reference(url: str) -> str:
    """Remove the share reference from a URL, keeping other parameters."""
    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key != SHARE_PARAM
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


def resolve_share_reference(url: str, meals: Iterable[MealEntry]) -> ShareResolution:
    """Resolve the startup address against the loaded meal log."""
    meal_id = extract_share_reference(url)
    if meal_id is None:
        return ShareResolution(mode=ViewMode.NORMAL, address=url)
    for meal in meals:
        if meal.id == meal_id:
            return ShareResolution(
                mode=ViewMode.SHARED, address=url, meal_id=meal_id, meal=meal
            )
    return ShareResolution(
        mode=ViewMode.NOT_FOUND,
        address=url,
        meal_id=meal_id,
        error=Err(ErrorKind.SHARE_REFERENCE_NOT_FOUND, NOT_FOUND_MESSAGE),
    )


def share_summary_text(meal: MealEntry, link: str) -> str:
    """Return the plain-text message sent along with a share link."""
    ingredients = "\n".join(
        f"- {item.name}: {_format_amount(item.amount)}{item.unit}"
        + (f" ({_format_amount(item.percentage)}%)" if item.percentage else "")
        for item in meal.ingredients
    )
    return (
        "Check out my meal analysed by Nutri Ledger:\n\n"
        f"Meal: {meal.title}\n"
        f"Description: {meal.description}\n\n"
        f"Ingredients:\n{ingredients}\n\n"
        f"Calories: {meal.calories:.0f} kcal\n"
        f"Protein: {_macro_grams(meal, DEFAULT_KEYWORDS.protein)}\n"
        f"Carbs: {_macro_grams(meal, DEFAULT_KEYWORDS.carbs)}\n"
        f"Fat: {_macro_grams(meal, DEFAULT_KEYWORDS.fat)}\n\n"
        f"Full details: {link}"
    )


def _macro_grams(meal: MealEntry, fragments: tuple[str, ...]) -> str:
    macro = find_macro(meal.macros, fragments)
    if macro is None:
        return "N/A"
    return f"{macro.amount:.1f}g"


def _format_amount(value: float) -> str:
    return f"{value:g}"
