"""Tests for meal capture."""

import asyncio
from datetime import datetime

from nutri_ledger.domain.errors import Err, ErrorKind, Ok
from nutri_ledger.services.analysis import MealAnalysisService
from nutri_ledger.services.capture import MealCaptureService
from nutri_ledger.services.ledger import LedgerStore
from tests.conftest import FakeVisionClient, InMemoryStorage


def _capture_service(
    client: FakeVisionClient, store: LedgerStore
) -> MealCaptureService:
    analysis = MealAnalysisService(
        client=client, model="gpt-5.2", reasoning_effort=None, store=False
    )
    return MealCaptureService(
        analysis,
        store,
        new_id=lambda: "meal-1",
        now=lambda: datetime(2026, 10, 18, 12, 5, 9),
    )


def test_capture_adds_meal(store: LedgerStore) -> None:
    service = _capture_service(FakeVisionClient(), store)

    result = asyncio.run(service.capture(b"\xff\xd8\xffdata", "image/jpeg"))

    assert isinstance(result, Ok)
    entry = result.value.value
    assert entry.id == "meal-1"
    assert entry.timestamp == "2026-10-18 12:05:09"
    assert entry.image_reference.startswith("data:image/jpeg;base64,")
    assert entry.calories == 650
    assert [macro.name for macro in entry.macros] == [
        "Proteínas",
        "Carboidratos",
        "Gorduras",
    ]
    assert store.meals == (entry,)
    assert not service.busy


def test_capture_failure_leaves_ledger_untouched(
    store: LedgerStore, storage: InMemoryStorage
) -> None:
    service = _capture_service(FakeVisionClient(error=RuntimeError("offline")), store)

    result = asyncio.run(service.capture(b"image"))

    assert isinstance(result, Err)
    assert result.kind is ErrorKind.ANALYSIS_FAILURE
    assert store.meals == ()
    assert storage.writes == []
    assert not service.busy


def test_capture_busy_while_pending(store: LedgerStore) -> None:
    observed: list[bool] = []
    client = FakeVisionClient()
    service = _capture_service(client, store)
    original_extract = client.extract

    async def extract(**kwargs):  # type: ignore[no-untyped-def]
        observed.append(service.busy)
        return await original_extract(**kwargs)

    client.extract = extract  # type: ignore[method-assign]

    asyncio.run(service.capture(b"image"))

    assert observed == [True]
    assert not service.busy


def test_capture_over_quota_keeps_entry_with_warning() -> None:
    store = LedgerStore(InMemoryStorage(quota_bytes=100))
    service = _capture_service(FakeVisionClient(), store)

    result = asyncio.run(service.capture(b"image"))

    assert isinstance(result, Ok)
    assert result.value.warning is not None
    assert result.value.warning.kind is ErrorKind.CAPACITY_EXCEEDED
    assert len(store.meals) == 1
