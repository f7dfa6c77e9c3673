"""Domain models for logged meals."""

import math
from dataclasses import dataclass, field, replace


def coerce_number(value: object) -> float:
    """Coerce editing-surface input to a finite float, falling back to 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def coerce_non_negative(value: object) -> float:
    """Coerce to a finite float and clamp negatives to 0."""
    return max(coerce_number(value), 0.0)


@dataclass(frozen=True)
class NutrientAmount:
    """One macro- or micro-nutrient quantity with a free-text name."""

    name: str
    amount: float
    unit: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name))
        object.__setattr__(self, "amount", coerce_non_negative(self.amount))
        object.__setattr__(self, "unit", str(self.unit))

    def to_record(self) -> dict[str, object]:
        return {"name": self.name, "amount": self.amount, "unit": self.unit}

    @classmethod
    def from_record(cls, record: dict[str, object]) -> "NutrientAmount":
        return cls(
            name=str(record["name"]),
            amount=record.get("amount"),
            unit=str(record.get("unit") or ""),
        )


@dataclass(frozen=True)
class IngredientEntry:
    """One identified food component of a meal.

    ``percentage`` is the estimated share of the dish and is informational;
    percentages across a meal are not expected to sum to 100.
    """

    name: str
    amount: float
    unit: str
    percentage: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name))
        object.__setattr__(self, "amount", coerce_non_negative(self.amount))
        object.__setattr__(self, "unit", str(self.unit))
        if self.percentage is not None:
            percentage = min(coerce_non_negative(self.percentage), 100.0)
            object.__setattr__(self, "percentage", percentage)

    def to_record(self) -> dict[str, object]:
        record: dict[str, object] = {
            "name": self.name,
            "amount": self.amount,
            "unit": self.unit,
        }
        if self.percentage is not None:
            record["percentage"] = self.percentage
        return record

    @classmethod
    def from_record(cls, record: dict[str, object]) -> "IngredientEntry":
        return cls(
            name=str(record["name"]),
            amount=record.get("amount"),
            unit=str(record.get("unit") or ""),
            percentage=record.get("percentage"),
        )


@dataclass(frozen=True)
class MealEntry:
    """A logged meal.

    ``id``, ``timestamp`` and ``image_reference`` are fixed at creation; every
    other field is user-editable. ``calories`` is edited independently of the
    macro grams and is never recomputed from them.
    """

    id: str
    timestamp: str
    image_reference: str
    title: str
    description: str
    calories: float
    macros: tuple[NutrientAmount, ...] = field(default_factory=tuple)
    micros: tuple[NutrientAmount, ...] = field(default_factory=tuple)
    ingredients: tuple[IngredientEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "calories", coerce_non_negative(self.calories))
        object.__setattr__(self, "macros", tuple(self.macros))
        object.__setattr__(self, "micros", tuple(self.micros))
        object.__setattr__(self, "ingredients", tuple(self.ingredients))

    def with_identity_of(self, original: "MealEntry") -> "MealEntry":
        """Return this entry carrying the immutable fields of ``original``."""
        return replace(
            self,
            id=original.id,
            timestamp=original.timestamp,
            image_reference=original.image_reference,
        )

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "imageSrc": self.image_reference,
            "title": self.title,
            "description": self.description,
            "calories": self.calories,
            "macros": [macro.to_record() for macro in self.macros],
            "micros": [micro.to_record() for micro in self.micros],
            "ingredients": [item.to_record() for item in self.ingredients],
        }

    @classmethod
    def from_record(cls, record: dict[str, object]) -> "MealEntry":
        entry_id = record["id"]
        if not isinstance(entry_id, str) or not entry_id:
            raise ValueError("Meal record has no id")
        return cls(
            id=entry_id,
            timestamp=str(record.get("timestamp") or ""),
            image_reference=str(record.get("imageSrc") or ""),
            title=str(record.get("title") or ""),
            description=str(record.get("description") or ""),
            calories=record.get("calories"),
            macros=tuple(
                NutrientAmount.from_record(item) for item in record.get("macros") or []
            ),
            micros=tuple(
                NutrientAmount.from_record(item) for item in record.get("micros") or []
            ),
            ingredients=tuple(
                IngredientEntry.from_record(item)
                for item in record.get("ingredients") or []
            ),
        )
