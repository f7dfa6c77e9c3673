"""Meal capture: photo analysis followed by a ledger entry."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from nutri_ledger.domain.analysis import MealAnalysis
from nutri_ledger.domain.errors import Err, Ok, Result
from nutri_ledger.domain.meals import MealEntry
from nutri_ledger.services.analysis import MealAnalysisService, to_data_url
from nutri_ledger.services.identifiers import new_entry_id
from nutri_ledger.services.ledger import Committed, LedgerStore

MEAL_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class MealCaptureService:
    """Analyzes a photo and records the resulting meal.

    ``busy`` is True while an analysis request is pending and is cleared on
    both success and failure.
    """

    analysis_service: MealAnalysisService
    store: LedgerStore
    new_id: Callable[[], str] = new_entry_id
    now: Callable[[], datetime] = datetime.now
    busy: bool = field(default=False, init=False)

    async def capture(
        self, image_bytes: bytes, mime_type: str | None = None
    ) -> Result[Committed[MealEntry]]:
        """Analyze a photo and prepend the meal. Failures leave the ledger as is."""
        self.busy = True
        try:
            outcome = await self.analysis_service.analyze(image_bytes, mime_type)
            if isinstance(outcome, Err):
                return outcome
            entry = build_meal_entry(
                outcome.value,
                entry_id=self.new_id(),
                timestamp=self.now().strftime(MEAL_TIMESTAMP_FORMAT),
                image_reference=to_data_url(image_bytes, mime_type),
            )
            return Ok(self.store.add_meal(entry))
        finally:
            self.busy = False


def build_meal_entry(
    analysis: MealAnalysis, *, entry_id: str, timestamp: str, image_reference: str
) -> MealEntry:
    """Create a meal entry from an analysis result."""
    return MealEntry(
        id=entry_id,
        timestamp=timestamp,
        image_reference=image_reference,
        title=analysis.title,
        description=analysis.description,
        calories=analysis.calories,
        macros=tuple(item.to_domain() for item in analysis.macros),
        micros=tuple(item.to_domain() for item in analysis.micros),
        ingredients=tuple(item.to_domain() for item in analysis.ingredients),
    )
