"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutri_ledger.adapters.json_file_storage import JsonFileStorage
from nutri_ledger.adapters.openai_vision_client import OpenAIVisionClient
from nutri_ledger.config import Settings
from nutri_ledger.services.activities import ActivityLogService
from nutri_ledger.services.analysis import (
    MealAnalysisService,
    MetLookupService,
    VisionClient,
)
from nutri_ledger.services.capture import MealCaptureService
from nutri_ledger.services.export import ExportProjector
from nutri_ledger.services.ledger import LedgerStorage, LedgerStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: LedgerStore
    analysis_service: MealAnalysisService
    met_service: MetLookupService
    capture_service: MealCaptureService
    activity_service: ActivityLogService
    export_projector: ExportProjector
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None,
    *,
    storage: LedgerStorage | None = None,
    vision_client: VisionClient | None = None,
) -> AppContainer:
    """Create the default dependency container.

    ``storage`` and ``vision_client`` replace the file and OpenAI adapters
    when given.
    """
    resolved_settings = settings or Settings()
    resolved_storage = storage or JsonFileStorage.create(
        resolved_settings.storage_dir, resolved_settings.storage_quota_bytes
    )
    openai_client: OpenAIVisionClient | None = None
    if vision_client is None:
        openai_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
        vision_client = openai_client
    store = LedgerStore(resolved_storage)
    analysis_service = MealAnalysisService(
        client=vision_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        language=resolved_settings.analysis_language,
    )
    met_service = MetLookupService(
        client=vision_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        analysis_service=analysis_service,
        met_service=met_service,
        capture_service=MealCaptureService(analysis_service, store),
        activity_service=ActivityLogService(met_service, store),
        export_projector=ExportProjector(),
        close_resources=close_resources,
    )
