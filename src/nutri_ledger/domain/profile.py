"""User profile and daily goal models."""

from dataclasses import dataclass

from nutri_ledger.domain.meals import coerce_non_negative


@dataclass(frozen=True)
class UserProfile:
    """Body measurements used for calorie-burn estimates."""

    weight_kg: float = 0.0
    height_cm: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight_kg", coerce_non_negative(self.weight_kg))
        object.__setattr__(self, "height_cm", coerce_non_negative(self.height_cm))

    def to_record(self) -> dict[str, object]:
        return {"weight": self.weight_kg, "height": self.height_cm}

    @classmethod
    def from_record(cls, record: dict[str, object]) -> "UserProfile":
        return cls(weight_kg=record.get("weight"), height_cm=record.get("height"))


@dataclass(frozen=True)
class DailyGoals:
    """Daily targets in kcal and grams."""

    calories: float = 2000
    protein: float = 120
    carbs: float = 250
    fat: float = 60
    burned_calories: float = 400

    def __post_init__(self) -> None:
        for name in ("calories", "protein", "carbs", "fat", "burned_calories"):
            object.__setattr__(self, name, coerce_non_negative(getattr(self, name)))

    def to_record(self) -> dict[str, object]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "burnedCalories": self.burned_calories,
        }

    @classmethod
    def from_record(cls, record: dict[str, object]) -> "DailyGoals":
        defaults = cls()
        return cls(
            calories=record.get("calories", defaults.calories),
            protein=record.get("protein", defaults.protein),
            carbs=record.get("carbs", defaults.carbs),
            fat=record.get("fat", defaults.fat),
            burned_calories=record.get("burnedCalories", defaults.burned_calories),
        )
