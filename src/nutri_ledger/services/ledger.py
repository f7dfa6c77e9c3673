"""Authoritative in-memory ledger with per-key durable persistence."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from nutri_ledger.domain.activities import ActivityEntry
from nutri_ledger.domain.errors import (
    CapacityExceeded,
    Err,
    ErrorKind,
    MalformedStoredRecord,
)
from nutri_ledger.domain.meals import MealEntry
from nutri_ledger.domain.profile import DailyGoals, UserProfile

GOALS_KEY = "nutri_ledger.goals"
PROFILE_KEY = "nutri_ledger.profile"
MEALS_KEY = "nutri_ledger.meals"
ACTIVITIES_KEY = "nutri_ledger.activities"

# Keys used by the browser version of the app; read when the current key is absent.
LEGACY_KEYS = {
    GOALS_KEY: "nutriVisionGoals",
    PROFILE_KEY: "nutriVisionProfile",
    MEALS_KEY: "nutriVisionLog",
    ACTIVITIES_KEY: "nutriVisionActivities",
}

SCHEMA_VERSION = 1
CAPACITY_WARNING = "Local storage is full. Meals may not be saved."
STORAGE_WARNING = "Could not save changes. They are kept until the app closes."

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class LedgerStorage(Protocol):
    """Durable key-value storage for serialized ledger records."""

    def read(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def write(self, key: str, value: str) -> None:
        """Store a value, raising CapacityExceeded when over quota."""


@dataclass(frozen=True)
class Committed(Generic[T]):
    """Outcome of a ledger mutation.

    The in-memory change always stands; ``warning`` is set when it could not
    be persisted.
    """

    value: T
    warning: Err | None = None


@dataclass(frozen=True)
class LedgerSnapshot:
    """Read-only view of the ledger at a point in time."""

    meals: tuple[MealEntry, ...]
    activities: tuple[ActivityEntry, ...]
    goals: DailyGoals
    profile: UserProfile

    def to_dict(self) -> dict[str, object]:
        return {
            "meals": [meal.to_record() for meal in self.meals],
            "activities": [activity.to_record() for activity in self.activities],
            "goals": self.goals.to_record(),
            "profile": self.profile.to_record(),
        }


@dataclass
class LedgerStore:
    """Owns meals, activities, goals and profile.

    Mutations are applied to memory first and then persisted under the key
    they touch. A failed write never rolls back the in-memory change.
    """

    storage: LedgerStorage
    warning: str | None = field(default=None, init=False)
    _meals: list[MealEntry] = field(default_factory=list, init=False)
    _activities: list[ActivityEntry] = field(default_factory=list, init=False)
    _goals: DailyGoals = field(default_factory=DailyGoals, init=False)
    _profile: UserProfile = field(default_factory=UserProfile, init=False)

    @property
    def meals(self) -> tuple[MealEntry, ...]:
        return tuple(self._meals)

    @property
    def activities(self) -> tuple[ActivityEntry, ...]:
        return tuple(self._activities)

    @property
    def goals(self) -> DailyGoals:
        return self._goals

    @property
    def profile(self) -> UserProfile:
        return self._profile

    def snapshot(self) -> LedgerSnapshot:
        """Return an immutable snapshot of the current state."""
        return LedgerSnapshot(
            meals=self.meals,
            activities=self.activities,
            goals=self._goals,
            profile=self._profile,
        )

    def get_meal(self, meal_id: str) -> MealEntry | None:
        """Return the meal with the given id, if present."""
        for meal in self._meals:
            if meal.id == meal_id:
                return meal
        return None

    def load(self) -> list[str]:
        """Load every key from storage and return the keys that were reset."""
        recovered: list[str] = []
        self._goals = self._load_key(GOALS_KEY, _parse_goals, DailyGoals, recovered)
        self._profile = self._load_key(
            PROFILE_KEY, _parse_profile, UserProfile, recovered
        )
        self._meals = self._load_key(MEALS_KEY, _parse_meals, list, recovered)
        self._activities = self._load_key(
            ACTIVITIES_KEY, _parse_activities, list, recovered
        )
        return recovered

    def add_meal(self, entry: MealEntry) -> Committed[MealEntry]:
        """Prepend a meal and persist the meal log."""
        self._meals.insert(0, entry)
        return Committed(entry, self._persist_meals())

    def update_meal(self, entry: MealEntry) -> Committed[MealEntry | None]:
        """Replace the meal with the same id in place. No-op if absent."""
        for index, current in enumerate(self._meals):
            if current.id == entry.id:
                updated = entry.with_identity_of(current)
                self._meals[index] = updated
                return Committed(updated, self._persist_meals())
        return Committed(None)

    def delete_meal(self, meal_id: str) -> Committed[bool]:
        """Remove a meal by id. No-op if absent."""
        remaining = [meal for meal in self._meals if meal.id != meal_id]
        if len(remaining) == len(self._meals):
            return Committed(False)
        self._meals = remaining
        return Committed(True, self._persist_meals())

    def add_activity(self, entry: ActivityEntry) -> Committed[ActivityEntry]:
        """Prepend an activity and persist the activity log."""
        self._activities.insert(0, entry)
        return Committed(entry, self._persist_activities())

    def delete_activity(self, activity_id: str) -> Committed[bool]:
        """Remove an activity by id. No-op if absent."""
        remaining = [item for item in self._activities if item.id != activity_id]
        if len(remaining) == len(self._activities):
            return Committed(False)
        self._activities = remaining
        return Committed(True, self._persist_activities())

    def set_goals(self, goals: DailyGoals) -> Committed[DailyGoals]:
        """Replace the daily goals."""
        self._goals = goals
        return Committed(goals, self._persist(GOALS_KEY, goals.to_record()))

    def set_profile(self, profile: UserProfile) -> Committed[UserProfile]:
        """Replace the user profile."""
        self._profile = profile
        return Committed(profile, self._persist(PROFILE_KEY, profile.to_record()))

    def clear_warning(self) -> None:
        """Dismiss the last storage warning."""
        self.warning = None

    def _persist_meals(self) -> Err | None:
        return self._persist(MEALS_KEY, [meal.to_record() for meal in self._meals])

    def _persist_activities(self) -> Err | None:
        return self._persist(
            ACTIVITIES_KEY, [activity.to_record() for activity in self._activities]
        )

    def _persist(self, key: str, data: object) -> Err | None:
        try:
            self.storage.write(key, encode_record(data))
        except CapacityExceeded as exc:
            _logger.warning("Storage quota exceeded writing %s: %s", key, exc)
            self.warning = CAPACITY_WARNING
            return Err(ErrorKind.CAPACITY_EXCEEDED, CAPACITY_WARNING)
        except OSError as exc:
            _logger.exception("Failed to persist %s", key)
            self.warning = STORAGE_WARNING
            return Err(
                ErrorKind.STORAGE_UNAVAILABLE,
                STORAGE_WARNING,
                detail=f"{type(exc).__name__}: {exc}",
            )
        return None

    def _load_key(
        self,
        key: str,
        parse: Callable[[object], T],
        default: Callable[[], T],
        recovered: list[str],
    ) -> T:
        try:
            raw = self.storage.read(key)
            if raw is None and key in LEGACY_KEYS:
                raw = self.storage.read(LEGACY_KEYS[key])
            if raw is None:
                return default()
            return parse(decode_record(raw))
        except (
            MalformedStoredRecord,
            ValueError,
            TypeError,
            KeyError,
            AttributeError,
            RecursionError,
        ):
            _logger.warning("Discarding malformed stored record %s", key, exc_info=True)
            recovered.append(key)
            return default()


def encode_record(data: object) -> str:
    """Serialize data inside a versioned envelope."""
    return json.dumps(
        {"schemaVersion": SCHEMA_VERSION, "data": data}, ensure_ascii=False
    )


def decode_record(raw: str) -> object:
    """Parse a stored value, migrating unversioned records."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedStoredRecord(f"Invalid JSON: {exc}") from exc
    except RecursionError as exc:
        raise MalformedStoredRecord("Record is nested too deeply") from exc
    if isinstance(payload, dict) and "schemaVersion" in payload:
        version = payload["schemaVersion"]
        if not isinstance(version, int) or version > SCHEMA_VERSION or version < 1:
            raise MalformedStoredRecord(f"Unsupported schema version: {version!r}")
        if "data" not in payload:
            raise MalformedStoredRecord("Envelope without data")
        return payload["data"]
    return _migrate_unversioned(payload)


def _migrate_unversioned(payload: object) -> object:
    # Unversioned records share the version 1 field layout.
    return payload


def _parse_goals(data: object) -> DailyGoals:
    if not isinstance(data, dict):
        raise MalformedStoredRecord("Goals record must be an object")
    return DailyGoals.from_record(data)


def _parse_profile(data: object) -> UserProfile:
    if not isinstance(data, dict):
        raise MalformedStoredRecord("Profile record must be an object")
    return UserProfile.from_record(data)


def _parse_meals(data: object) -> list[MealEntry]:
    if not isinstance(data, list):
        raise MalformedStoredRecord("Meal log must be a list")
    return [MealEntry.from_record(item) for item in data]


def _parse_activities(data: object) -> list[ActivityEntry]:
    if not isinstance(data, list):
        raise MalformedStoredRecord("Activity log must be a list")
    return [ActivityEntry.from_record(item) for item in data]
