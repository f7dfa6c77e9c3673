"""Pydantic models for request payloads."""

from pydantic import BaseModel, Field

from nutri_ledger.domain.meals import IngredientEntry, NutrientAmount

# Numeric fields accept whatever an editing surface sends; the domain coerces
# malformed values to 0.
NumberInput = float | str | None


class NutrientPayload(BaseModel):
    """Macro or micro nutrient in an edit request."""

    name: str
    amount: NumberInput = None
    unit: str = ""

    def to_domain(self) -> NutrientAmount:
        return NutrientAmount(name=self.name, amount=self.amount, unit=self.unit)


class IngredientPayload(BaseModel):
    """Ingredient in an edit request."""

    name: str
    amount: NumberInput = None
    unit: str = ""
    percentage: NumberInput = None

    def to_domain(self) -> IngredientEntry:
        return IngredientEntry(
            name=self.name,
            amount=self.amount,
            unit=self.unit,
            percentage=self.percentage,
        )


class MealUpdate(BaseModel):
    """Editable fields of a meal."""

    title: str = ""
    description: str = ""
    calories: NumberInput = None
    macros: list[NutrientPayload] = Field(default_factory=list)
    micros: list[NutrientPayload] = Field(default_factory=list)
    ingredients: list[IngredientPayload] = Field(default_factory=list)


class ActivityCreate(BaseModel):
    """New activity as entered by the user."""

    name: str = ""
    duration_minutes: NumberInput = None
    intensity: str = "Moderate"


class GoalsUpdate(BaseModel):
    """Daily goals. Omitted fields keep their current value."""

    calories: NumberInput = None
    protein: NumberInput = None
    carbs: NumberInput = None
    fat: NumberInput = None
    burned_calories: NumberInput = None


class ProfileUpdate(BaseModel):
    """Body measurements. Omitted fields keep their current value."""

    weight_kg: NumberInput = None
    height_cm: NumberInput = None
