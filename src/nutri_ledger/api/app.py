"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import date

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from nutri_ledger.api.models import (
    ActivityCreate,
    GoalsUpdate,
    MealUpdate,
    ProfileUpdate,
)
from nutri_ledger.app_logging import configure_logging
from nutri_ledger.containers import AppContainer
from nutri_ledger.domain.errors import Err, ErrorKind
from nutri_ledger.domain.meals import MealEntry
from nutri_ledger.services.derivation import summarize_day
from nutri_ledger.services.ledger import Committed
from nutri_ledger.services.sharing import (
    ViewMode,
    build_share_link,
    resolve_share_reference,
    share_summary_text,
)

_ERROR_STATUS = {
    ErrorKind.ANALYSIS_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.VALIDATION_FAILURE: 422,
    ErrorKind.SHARE_REFERENCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}
_MEAL_NOT_FOUND = "Meal not found."


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        recovered = app.state.container.store.load()
        if recovered:
            logger.warning("Reset malformed stored records: %s", ", ".join(recovered))
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/ledger")
    async def ledger(request: Request) -> dict[str, object]:
        """Return the whole ledger plus pending-work and storage state."""
        state_container: AppContainer = request.app.state.container
        return {
            **state_container.store.snapshot().to_dict(),
            "warning": state_container.store.warning,
            "busy": {
                "meal_capture": state_container.capture_service.busy,
                "activity": state_container.activity_service.busy,
            },
        }

    @app.delete("/ledger/warning", status_code=status.HTTP_204_NO_CONTENT)
    async def dismiss_warning(request: Request) -> None:
        """Dismiss the storage warning banner."""
        request.app.state.container.store.clear_warning()

    @app.get("/summary")
    async def summary(request: Request) -> dict[str, object]:
        """Return today's totals and goal progress."""
        store = request.app.state.container.store
        daily = summarize_day(store.meals, store.activities, store.goals)
        return {
            "consumed": {
                "calories": daily.consumed.calories,
                "protein": daily.consumed.protein,
                "carbs": daily.consumed.carbs,
                "fat": daily.consumed.fat,
            },
            "burned": daily.burned,
            "net_calories": daily.net_calories,
            "metrics": [
                {
                    "key": metric.key,
                    "label": metric.label,
                    "current": metric.current,
                    "goal": metric.goal,
                    "unit": metric.unit,
                    "percentage": metric.percentage,
                    "fill": metric.fill,
                    "over_goal": metric.is_over_goal,
                }
                for metric in daily.metrics
            ],
        }

    @app.post("/meals", status_code=status.HTTP_201_CREATED, response_model=None)
    async def capture_meal(request: Request) -> dict[str, object] | JSONResponse:
        """Analyze the uploaded photo and log the meal."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Empty image body."
            )
        outcome = await state_container.capture_service.capture(
            image_bytes, request.headers.get("content-type")
        )
        if isinstance(outcome, Err):
            return _error_response(state_container, outcome)
        return _committed_payload("meal", outcome.value.value.to_record(), outcome.value)

    @app.get("/meals/{meal_id}")
    async def get_meal(meal_id: str, request: Request) -> dict[str, object]:
        """Return one meal."""
        return _require_meal(request.app.state.container, meal_id).to_record()

    @app.put("/meals/{meal_id}")
    async def update_meal(
        meal_id: str, payload: MealUpdate, request: Request
    ) -> dict[str, object]:
        """Replace the editable fields of a meal."""
        state_container: AppContainer = request.app.state.container
        current = _require_meal(state_container, meal_id)
        edited = replace(
            current,
            title=payload.title,
            description=payload.description,
            calories=payload.calories,
            macros=tuple(item.to_domain() for item in payload.macros),
            micros=tuple(item.to_domain() for item in payload.micros),
            ingredients=tuple(item.to_domain() for item in payload.ingredients),
        )
        committed = state_container.store.update_meal(edited)
        if committed.value is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail=_MEAL_NOT_FOUND)
        return _committed_payload("meal", committed.value.to_record(), committed)

    @app.delete("/meals/{meal_id}")
    async def delete_meal(meal_id: str, request: Request) -> dict[str, object]:
        """Remove a meal. Unknown ids are ignored."""
        committed = request.app.state.container.store.delete_meal(meal_id)
        return _committed_payload("deleted", committed.value, committed)

    @app.get("/meals/{meal_id}/share")
    async def share_meal(meal_id: str, request: Request) -> dict[str, str]:
        """Return the share link and message for a meal."""
        state_container: AppContainer = request.app.state.container
        meal = _require_meal(state_container, meal_id)
        link = build_share_link(state_container.settings.share_base_url, meal.id)
        return {"link": link, "text": share_summary_text(meal, link)}

    @app.post(
        "/activities", status_code=status.HTTP_201_CREATED, response_model=None
    )
    async def log_activity(
        payload: ActivityCreate, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Estimate and log an activity."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.activity_service.log_activity(
            payload.name, payload.duration_minutes, payload.intensity
        )
        if isinstance(outcome, Err):
            return _error_response(state_container, outcome)
        return _committed_payload(
            "activity", outcome.value.value.to_record(), outcome.value
        )

    @app.delete("/activities/{activity_id}")
    async def delete_activity(activity_id: str, request: Request) -> dict[str, object]:
        """Remove an activity. Unknown ids are ignored."""
        committed = request.app.state.container.store.delete_activity(activity_id)
        return _committed_payload("deleted", committed.value, committed)

    @app.get("/goals")
    async def get_goals(request: Request) -> dict[str, object]:
        """Return the daily goals."""
        return request.app.state.container.store.goals.to_record()

    @app.put("/goals")
    async def put_goals(payload: GoalsUpdate, request: Request) -> dict[str, object]:
        """Replace the daily goals; omitted fields keep their value."""
        store = request.app.state.container.store
        goals = replace(store.goals, **payload.model_dump(exclude_unset=True))
        committed = store.set_goals(goals)
        return _committed_payload("goals", committed.value.to_record(), committed)

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the user profile."""
        return request.app.state.container.store.profile.to_record()

    @app.put("/profile")
    async def put_profile(
        payload: ProfileUpdate, request: Request
    ) -> dict[str, object]:
        """Replace the user profile; omitted fields keep their value."""
        store = request.app.state.container.store
        profile = replace(store.profile, **payload.model_dump(exclude_unset=True))
        committed = store.set_profile(profile)
        return _committed_payload("profile", committed.value.to_record(), committed)

    @app.get("/export")
    async def export(request: Request, day: date | None = None) -> dict[str, object]:
        """Return the report sections for an external renderer."""
        state_container: AppContainer = request.app.state.container
        report = state_container.export_projector.project(
            state_container.store.snapshot(), day or date.today()
        )
        return report.to_dict()

    @app.get("/shared", response_model=None)
    async def shared(request: Request) -> dict[str, object] | JSONResponse:
        """Resolve the address a shared link opened."""
        state_container: AppContainer = request.app.state.container
        resolution = resolve_share_reference(
            str(request.url), state_container.store.meals
        )
        body: dict[str, object] = {
            "mode": resolution.mode.value,
            "read_only": resolution.read_only,
            "meal": resolution.meal.to_record() if resolution.meal else None,
            "leave_address": resolution.leave().address,
        }
        if resolution.mode is ViewMode.NOT_FOUND and resolution.error is not None:
            body["error"] = resolution.error.kind.value
            body["message"] = resolution.error.message
            return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=body)
        return body

    return app


def _require_meal(state_container: AppContainer, meal_id: str) -> MealEntry:
    meal = state_container.store.get_meal(meal_id)
    if meal is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=_MEAL_NOT_FOUND)
    return meal


def _committed_payload(
    name: str, value: object, committed: Committed[object]
) -> dict[str, object]:
    """Return the mutation result with any storage warning."""
    warning = committed.warning.message if committed.warning else None
    return {name: value, "warning": warning}


def _error_response(state_container: AppContainer, error: Err) -> JSONResponse:
    """Map a failed outcome to a JSON error with local debug info."""
    message = error.message
    if state_container.settings.is_local and error.detail:
        message = f"{message} (debug: {error.detail})"
    return JSONResponse(
        status_code=_ERROR_STATUS.get(error.kind, status.HTTP_400_BAD_REQUEST),
        content={"error": error.kind.value, "message": message},
    )
