"""Activity logging: validation, MET lookup and calorie estimate."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from nutri_ledger.domain.activities import ActivityEntry, Intensity
from nutri_ledger.domain.errors import Err, Ok, Result, ValidationFailure
from nutri_ledger.domain.meals import coerce_number
from nutri_ledger.services.analysis import MetLookupService
from nutri_ledger.services.derivation import estimate_activity_calories
from nutri_ledger.services.identifiers import new_entry_id
from nutri_ledger.services.ledger import Committed, LedgerStore

ACTIVITY_TIMESTAMP_FORMAT = "%H:%M"
MISSING_INPUT_MESSAGE = "Please fill in your weight, the activity name and its duration."


@dataclass
class ActivityLogService:
    """Records activities using the profile weight and a looked-up MET value."""

    met_service: MetLookupService
    store: LedgerStore
    new_id: Callable[[], str] = new_entry_id
    now: Callable[[], datetime] = datetime.now
    busy: bool = field(default=False, init=False)

    async def log_activity(
        self,
        name: str,
        duration_minutes: object,
        intensity: Intensity | str = Intensity.MODERATE,
    ) -> Result[Committed[ActivityEntry]]:
        """Validate, estimate calories and prepend the activity.

        Missing weight, name or duration fails before any lookup and creates
        no entry.
        """
        weight = self.store.profile.weight_kg
        duration = coerce_number(duration_minutes)
        cleaned_name = (name or "").strip()
        if weight <= 0 or not cleaned_name or duration <= 0:
            return Err.from_exception(ValidationFailure(MISSING_INPUT_MESSAGE))
        try:
            level = Intensity.parse(intensity)
        except ValueError as exc:
            return Err.from_exception(ValidationFailure(str(exc)))

        self.busy = True
        try:
            met = await self.met_service.lookup(cleaned_name, level)
            entry = ActivityEntry(
                id=self.new_id(),
                name=cleaned_name,
                duration_minutes=duration,
                intensity=level,
                met_value=met,
                calories_burned=estimate_activity_calories(met, weight, duration),
                timestamp=self.now().strftime(ACTIVITY_TIMESTAMP_FORMAT),
            )
            return Ok(self.store.add_activity(entry))
        finally:
            self.busy = False
