"""Domain models for logged physical activities."""

from dataclasses import dataclass
from enum import Enum

from nutri_ledger.domain.meals import coerce_non_negative

_LEGACY_LABELS = {
    "leve": "Light",
    "moderado": "Moderate",
    "vigoroso": "Vigorous",
}


class Intensity(Enum):
    """Self-reported activity intensity."""

    LIGHT = "Light"
    MODERATE = "Moderate"
    VIGOROUS = "Vigorous"

    @classmethod
    def parse(cls, label: "str | Intensity") -> "Intensity":
        """Parse an intensity label, accepting any casing and legacy labels."""
        if isinstance(label, Intensity):
            return label
        cleaned = str(label).strip().lower()
        cleaned = _LEGACY_LABELS.get(cleaned, cleaned)
        for member in cls:
            if member.value.lower() == cleaned.lower():
                return member
        raise ValueError(f"Unknown intensity: {label!r}")


@dataclass(frozen=True)
class ActivityEntry:
    """A logged activity. Activities are never edited, only added or removed."""

    id: str
    name: str
    duration_minutes: float
    intensity: Intensity
    met_value: float
    calories_burned: int
    timestamp: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "duration_minutes", coerce_non_negative(self.duration_minutes)
        )
        object.__setattr__(self, "intensity", Intensity.parse(self.intensity))
        object.__setattr__(self, "met_value", coerce_non_negative(self.met_value))
        object.__setattr__(
            self, "calories_burned", int(round(coerce_non_negative(self.calories_burned)))
        )

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "durationMinutes": self.duration_minutes,
            "intensity": self.intensity.value,
            "metValue": self.met_value,
            "caloriesBurned": self.calories_burned,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_record(cls, record: dict[str, object]) -> "ActivityEntry":
        entry_id = record["id"]
        if not isinstance(entry_id, str | int) or entry_id == "":
            raise ValueError("Activity record has no id")
        entry = cls(
            id=str(entry_id),
            name=str(record.get("name") or ""),
            duration_minutes=record.get("durationMinutes"),
            intensity=Intensity.parse(str(record.get("intensity") or "")),
            met_value=record.get("metValue"),
            calories_burned=record.get("caloriesBurned"),
            timestamp=str(record.get("timestamp") or ""),
        )
        if entry.duration_minutes <= 0 or entry.met_value <= 0:
            raise ValueError("Activity record needs a positive duration and MET")
        return entry
