"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutri_ledger.config import Settings
from nutri_ledger.containers import AppContainer, build_container
from nutri_ledger.domain.activities import ActivityEntry, Intensity
from nutri_ledger.domain.errors import CapacityExceeded
from nutri_ledger.domain.meals import IngredientEntry, MealEntry, NutrientAmount
from nutri_ledger.services.analysis import VisionClient
from nutri_ledger.services.ledger import LedgerStorage, LedgerStore

MEAL_PAYLOAD: dict[str, object] = {
    "title": "Arroz com feijão",
    "description": "Rice, beans and grilled chicken",
    "calories": 650,
    "macros": [
        {"name": "Proteínas", "amount": 35, "unit": "g"},
        {"name": "Carboidratos", "amount": 80, "unit": "g"},
        {"name": "Gorduras", "amount": 20, "unit": "g"},
    ],
    "micros": [{"name": "Ferro", "amount": 4.2, "unit": "mg"}],
    "ingredients": [
        {"name": "Arroz", "amount": 150, "unit": "g", "percentage": 40},
        {"name": "Feijão", "amount": 100, "unit": "g", "percentage": None},
    ],
}


@dataclass
class InMemoryStorage(LedgerStorage):
    """In-memory ledger storage with an optional byte quota."""

    values: dict[str, str] = field(default_factory=dict)
    quota_bytes: int = 0
    writes: list[str] = field(default_factory=list)

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        if self.quota_bytes:
            used = sum(len(v) for k, v in self.values.items() if k != key)
            if used + len(value) > self.quota_bytes:
                raise CapacityExceeded(f"Quota exceeded writing {key}")
        self.writes.append(key)
        self.values[key] = value


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning fixed payloads by schema name."""

    meal_payload: dict[str, object] = field(default_factory=lambda: dict(MEAL_PAYLOAD))
    met: float = 6.0
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "schema_name": schema_name,
                "image_data_url": image_data_url,
            }
        )
        if self.error is not None:
            raise self.error
        if schema_name == "met_estimate":
            return {"met": self.met}
        return self.meal_payload


def make_meal(meal_id: str = "m1", **overrides: object) -> MealEntry:
    values: dict[str, object] = {
        "id": meal_id,
        "timestamp": "2026-10-18 12:30:00",
        "image_reference": "data:image/jpeg;base64,ZmFrZQ==",
        "title": "Lunch",
        "description": "Rice and beans",
        "calories": 400,
        "macros": (
            NutrientAmount("Proteínas", 20, "g"),
            NutrientAmount("Carboidratos", 50, "g"),
            NutrientAmount("Gorduras", 10, "g"),
        ),
        "micros": (NutrientAmount("Ferro", 3, "mg"),),
        "ingredients": (IngredientEntry("Arroz", 150, "g", 60),),
    }
    values.update(overrides)
    return MealEntry(**values)  # type: ignore[arg-type]


def make_activity(activity_id: str = "a1", **overrides: object) -> ActivityEntry:
    values: dict[str, object] = {
        "id": activity_id,
        "name": "Running",
        "duration_minutes": 30,
        "intensity": Intensity.MODERATE,
        "met_value": 6.0,
        "calories_burned": 210,
        "timestamp": "07:15",
    }
    values.update(overrides)
    return ActivityEntry(**values)  # type: ignore[arg-type]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        storage_dir=".nutri_ledger_test",
        share_base_url="https://ledger.example/app",
        environment="test",
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage: InMemoryStorage) -> LedgerStore:
    return LedgerStore(storage)


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def container(
    settings: Settings, storage: InMemoryStorage, vision_client: FakeVisionClient
) -> AppContainer:
    return build_container(settings, storage=storage, vision_client=vision_client)
