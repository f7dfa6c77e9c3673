"""Models for image-analysis and MET lookup results."""

from pydantic import BaseModel, Field

from nutri_ledger.domain.meals import IngredientEntry, NutrientAmount


class AnalyzedNutrient(BaseModel):
    """Nutrient quantity as returned by the analysis model."""

    name: str
    amount: float = Field(ge=0.0)
    unit: str

    def to_domain(self) -> NutrientAmount:
        return NutrientAmount(name=self.name, amount=self.amount, unit=self.unit)


class AnalyzedIngredient(BaseModel):
    """Ingredient as returned by the analysis model."""

    name: str
    amount: float = Field(ge=0.0)
    unit: str
    percentage: float | None = Field(default=None, ge=0.0, le=100.0)

    def to_domain(self) -> IngredientEntry:
        return IngredientEntry(
            name=self.name,
            amount=self.amount,
            unit=self.unit,
            percentage=self.percentage,
        )


class MealAnalysis(BaseModel):
    """Structured output for meal photo analysis."""

    title: str
    description: str
    calories: float = Field(ge=0.0)
    macros: list[AnalyzedNutrient]
    micros: list[AnalyzedNutrient]
    ingredients: list[AnalyzedIngredient]


class MetEstimate(BaseModel):
    """Structured output for a metabolic-equivalent lookup."""

    met: float
