"""Derived daily aggregates. Never persisted."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutrientTotals:
    """Summed calories and macro grams for a set of meals."""

    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class ProgressMetric:
    """A tracked metric compared against its goal."""

    key: str
    label: str
    current: float
    goal: float
    unit: str
    percentage: float

    @property
    def is_over_goal(self) -> bool:
        return self.percentage > 100

    @property
    def fill(self) -> float:
        """Visual fill of a progress bar, clamped to [0, 100]."""
        return min(max(self.percentage, 0.0), 100.0)


@dataclass(frozen=True)
class DailySummary:
    """Daily progress against goals."""

    consumed: NutrientTotals
    burned: int
    net_calories: float
    metrics: tuple[ProgressMetric, ...]
