"""Meal photo analysis and MET lookup through a structured-output LLM."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutri_ledger.domain.activities import Intensity
from nutri_ledger.domain.analysis import MealAnalysis, MetEstimate
from nutri_ledger.domain.errors import Err, ErrorKind, Ok, Result

ANALYSIS_FAILURE_MESSAGE = (
    "Could not analyze the meal photo. The AI model was unable to process "
    "the request."
)
FALLBACK_MET = 1.0

_NUTRIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "amount": {"type": "number", "minimum": 0},
        "unit": {"type": "string"},
    },
    "required": ["name", "amount", "unit"],
    "additionalProperties": False,
}

MEAL_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "calories": {"type": "number", "minimum": 0},
        "macros": {"type": "array", "items": _NUTRIENT_SCHEMA},
        "micros": {"type": "array", "items": _NUTRIENT_SCHEMA},
        "ingredients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "amount": {"type": "number", "minimum": 0},
                    "unit": {"type": "string"},
                    "percentage": {
                        "anyOf": [
                            {"type": "number", "minimum": 0, "maximum": 100},
                            {"type": "null"},
                        ]
                    },
                },
                "required": ["name", "amount", "unit", "percentage"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["title", "description", "calories", "macros", "micros", "ingredients"],
    "additionalProperties": False,
}

MET_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"met": {"type": "number"}},
    "required": ["met"],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


class VisionClient(Protocol):
    """Interface for structured-output LLM calls, optionally with an image."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return structured data matching the schema."""


@dataclass
class MealAnalysisService:
    """Turns a meal photo into a validated nutrition estimate."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool
    language: str = "Brazilian Portuguese"

    async def analyze(
        self, image_bytes: bytes, mime_type: str | None = None
    ) -> Result[MealAnalysis]:
        """Analyze a photo. Failures come back as an analysis-failure error."""
        data_url = to_data_url(image_bytes, mime_type)
        try:
            raw = await self.client.extract(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=_meal_prompt(self.language),
                schema=MEAL_ANALYSIS_SCHEMA,
                schema_name="meal_analysis",
                image_data_url=data_url,
            )
            return Ok(MealAnalysis.model_validate(raw))
        except ValidationError as exc:
            _logger.exception("Meal analysis returned an unusable payload")
            failure: Exception = exc
        except Exception as exc:
            _logger.exception("Meal analysis request failed")
            failure = exc
        return Err(
            ErrorKind.ANALYSIS_FAILURE,
            ANALYSIS_FAILURE_MESSAGE,
            detail=f"{type(failure).__name__}: {failure}",
        )


@dataclass
class MetLookupService:
    """Looks up the metabolic equivalent of an activity."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def lookup(self, activity_name: str, intensity: Intensity) -> float:
        """Return the MET value, or 1.0 (resting) when the lookup fails."""
        prompt = (
            "Identify the MET (Metabolic Equivalent of Task) value for the "
            f'physical activity "{activity_name}" performed at '
            f'"{intensity.value}" intensity. Use the Compendium of Physical '
            "Activities as reference. If the exact activity is not listed, use "
            "the closest one."
        )
        try:
            raw = await self.client.extract(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=MET_SCHEMA,
                schema_name="met_estimate",
            )
            met = MetEstimate.model_validate(raw).met
        except Exception:
            _logger.exception("MET lookup failed for %s", activity_name)
            return FALLBACK_MET
        if met <= 0:
            _logger.warning("MET lookup returned %s for %s", met, activity_name)
            return FALLBACK_MET
        return met


def _meal_prompt(language: str) -> str:
    return (
        "Analyze the food in this image. Identify the components of the meal "
        "and estimate portion sizes. For calories, macronutrients and "
        "micronutrients use the Brazilian Food Composition Table (TACO - "
        "NEPA/UNICAMP) as the primary reference, scaled to the estimated "
        f"quantities. Write the title, description and nutrient names in "
        f"{language}. Macro amounts are in grams; micro amounts in mg or mcg. "
        "For each ingredient give its estimated amount, unit and the "
        "approximate percentage of the dish it represents."
    )


def to_data_url(image_bytes: bytes, mime_type: str | None = None) -> str:
    """Convert bytes to a base64 data URL for image input and storage."""
    if mime_type and mime_type.startswith("image/"):
        resolved = mime_type
    else:
        resolved = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{resolved};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
